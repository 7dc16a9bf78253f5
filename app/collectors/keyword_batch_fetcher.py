"""
키워드 배치 수집기

큐레이션된 장소명 목록을 관광 API 키워드 검색으로 조회합니다.
고정 폭 청크를 순차 처리하고, 청크 내부는 세마포어로 제한된 동시 호출로 실행합니다.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional

from app.collectors.tour_api_client import TourAPIClient
from app.core.error_handling import RetryConfig
from app.core.logger import PipelineLogger
from app.models import PlaceRecord, Provenance
from config.constants import TourService
from config.settings import KeywordBatchConfig, get_keyword_batch_config


@dataclass
class KeywordBatchStats:
    """배치 수집 카운터"""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    empty: int = 0
    total_attempts: int = 0
    records_collected: int = 0
    failed_keywords: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.attempted == 0:
            return 0.0
        return self.succeeded / self.attempted * 100


@dataclass
class KeywordBatchResult:
    records: List[PlaceRecord]
    stats: KeywordBatchStats


def chunked(values: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class KeywordBatchFetcher:
    """키워드 배치 수집기"""

    def __init__(
        self,
        client: TourAPIClient,
        config: Optional[KeywordBatchConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.config = config or get_keyword_batch_config()
        self.logger = logging.getLogger(__name__)
        self.pipeline_logger = PipelineLogger("pipeline.keyword_batch")
        self.retry_config = RetryConfig(
            max_attempts=self.config.max_attempts,
            base_delay=self.config.retry_delay,
            max_delay=self.config.max_retry_delay,
        )
        self._sleep = sleep

    async def fetch_all(
        self,
        keywords: List[str],
        area_code: Optional[str],
        service: TourService = TourService.PET,
    ) -> KeywordBatchResult:
        """모든 키워드 조회 - 일부 실패는 결과에서 빠지는 것 외에 영향 없음"""
        unique_keywords = list(dict.fromkeys(k.strip() for k in keywords if k and k.strip()))
        stats = KeywordBatchStats()
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrency))
        chunks = list(chunked(unique_keywords, max(1, self.config.batch_size)))
        records: List[PlaceRecord] = []

        self.logger.info(
            f"키워드 배치 수집 시작: {len(unique_keywords)}개 키워드, {len(chunks)}개 청크"
        )

        for index, chunk in enumerate(chunks, 1):
            results = await asyncio.gather(
                *(
                    self._fetch_keyword(keyword, area_code, service, semaphore, stats)
                    for keyword in chunk
                )
            )
            # gather는 입력 순서를 보존하므로 결과는 키워드 순서를 따른다
            for keyword_records in results:
                records.extend(keyword_records)

            self.pipeline_logger.log_batch_progress(
                index, len(chunks), stats.succeeded, stats.failed
            )
            if index < len(chunks):
                await self._sleep(self.config.chunk_pause)

        stats.records_collected = len(records)
        self.logger.info(
            f"키워드 배치 수집 완료: {stats.succeeded}/{stats.attempted} 성공 "
            f"({stats.success_rate:.1f}%), 실패 {stats.failed}, 수집 {len(records)}건"
        )
        if stats.failed_keywords:
            self.logger.warning(f"실패 키워드: {', '.join(stats.failed_keywords)}")

        return KeywordBatchResult(records=records, stats=stats)

    async def _fetch_keyword(
        self,
        keyword: str,
        area_code: Optional[str],
        service: TourService,
        semaphore: asyncio.Semaphore,
        stats: KeywordBatchStats,
    ) -> List[PlaceRecord]:
        stats.attempted += 1
        last_error = None

        for attempt in range(1, self.retry_config.max_attempts + 1):
            stats.total_attempts += 1
            try:
                async with semaphore:
                    result = await self.client.search_keyword(
                        service,
                        keyword,
                        area_code=area_code,
                        num_of_rows=self.config.rows_per_keyword,
                    )
            except Exception as e:
                result = None
                last_error = str(e)
                self.logger.error(f"키워드 '{keyword}' 조회 중 예외 (시도 {attempt}): {e}")
            else:
                if result.success:
                    break
                last_error = result.error

            if attempt < self.retry_config.max_attempts:
                await self._sleep(self.retry_config.calculate_delay(attempt))
        else:
            stats.failed += 1
            stats.failed_keywords.append(keyword)
            self.logger.warning(
                f"키워드 '{keyword}' {self.retry_config.max_attempts}회 시도 모두 실패: {last_error}"
            )
            return []

        stats.succeeded += 1
        records = result.records(
            provenance=Provenance.KEYWORD_SEARCH, source_keyword=keyword
        )[: self.config.items_per_keyword]
        if not records:
            stats.empty += 1
            self.logger.debug(f"키워드 '{keyword}' 검색 결과 없음")
        return records
