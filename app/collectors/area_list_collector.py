"""
지역 기반 목록 페이징 수집기

반려동물 동반여행 서비스의 지역 목록을 여러 페이지에 걸쳐 수집합니다.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from app.collectors.tour_api_client import TourAPIClient
from app.models import PlaceRecord, Provenance
from config.constants import TourService
from config.settings import AreaListConfig, get_area_list_config


@dataclass
class AreaListResult:
    """지역 목록 수집 결과"""

    records: List[PlaceRecord] = field(default_factory=list)
    pages_fetched: int = 0
    success: bool = False
    error: Optional[str] = None


class AreaListCollector:
    """지역 기반 목록 페이징 수집기"""

    def __init__(
        self,
        client: TourAPIClient,
        config: Optional[AreaListConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.config = config or get_area_list_config()
        self.logger = logging.getLogger(__name__)
        self._sleep = sleep

    async def collect(
        self,
        area_code: str,
        service: TourService = TourService.PET,
        sigungu_code: Optional[str] = None,
    ) -> AreaListResult:
        """첫 페이지 실패는 소스 실패, 이후 페이지 실패는 수집분 유지"""
        result = AreaListResult()
        rows = self.config.rows_per_page

        for page_no in range(1, self.config.max_pages + 1):
            if page_no > 1:
                await self._sleep(self.config.page_pause)

            self.logger.info(f"📄 지역 목록 페이지 {page_no} 수집 중 (지역: {area_code})")
            page = await self.client.list_by_area(
                service, area_code, num_of_rows=rows, page_no=page_no, sigungu_code=sigungu_code
            )

            if not page.success:
                self.logger.warning(f"❌ 페이지 {page_no} 수집 실패: {page.error}")
                if page_no == 1:
                    result.error = page.error
                    return result
                break

            result.success = True
            result.pages_fetched = page_no
            records = page.records(provenance=Provenance.AREA_LIST)
            result.records.extend(records)

            if page.truncated:
                # 잘린 응답은 짧아도 마지막 페이지로 보지 않는다
                self.logger.warning(
                    f"⚠️ 페이지 {page_no} 응답이 잘림 ({len(page.items)}건만 사용), 다음 페이지 계속"
                )
                continue

            if len(page.items) < rows:
                self.logger.info(f"🏁 마지막 페이지 도달: {page_no}")
                break

        self.logger.info(
            f"지역 목록 수집 완료: {result.pages_fetched}페이지, {len(result.records)}건"
        )
        return result
