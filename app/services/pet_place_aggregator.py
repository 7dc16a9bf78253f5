"""
반려동물 장소 통합 조회 서비스

요청 모드에 따라 단일 API 호출 또는 전체 수집 파이프라인(지역 목록 + 키워드 배치
+ 병합 + 캐시)을 실행하고, 항상 출처별 상태 태그가 붙은 응답 봉투를 반환합니다.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from app.collectors.area_list_collector import AreaListCollector
from app.collectors.keyword_batch_fetcher import KeywordBatchFetcher
from app.collectors.tour_api_client import QueryResult, TourAPIClient
from app.core.logger import PipelineLogger
from app.core.place_cache import PlaceCache, build_cache_key, create_place_cache
from app.models import Provenance, records_to_dicts
from app.processors.place_merger import PlaceMerger
from app.services.supplemental_places import SupplementalDataset, get_supplemental_dataset
from config.constants import DEFAULT_REGION, PET_FRIENDLY_KEYWORDS, TourService
from config.settings import get_cache_config


class SourceStatus(str, Enum):
    """출처별 처리 상태"""

    SUCCESS = "success"
    FAILED = "failed"
    NOT_REQUESTED = "not_requested"


class TourMode(str, Enum):
    """조회 모드"""

    GENERAL = "general"
    PET = "pet"


BULK_CACHE_MODE = "pet_all"


@dataclass
class AggregationRequest:
    """통합 조회 요청"""

    region: str = DEFAULT_REGION
    rows_per_page: str = "10"
    page_no: str = "1"
    keyword: str = ""
    mode: TourMode = TourMode.GENERAL
    load_all_keywords: bool = False
    sigungu_code: Optional[str] = None

    @property
    def keyword_override(self) -> Optional[str]:
        keyword = (self.keyword or "").strip()
        return keyword or None

    def to_params(self) -> Dict[str, Any]:
        params = {
            "region": self.region,
            "rowsPerPage": self.rows_per_page,
            "pageNo": self.page_no,
            "keyword": self.keyword,
            "mode": self.mode.value,
            "loadAllKeywords": self.load_all_keywords,
        }
        if self.sigungu_code:
            params["sigunguCode"] = self.sigungu_code
        return params


@dataclass
class AggregationResult:
    """통합 조회 응답 봉투"""

    request: AggregationRequest
    tourism_status: SourceStatus = SourceStatus.NOT_REQUESTED
    pet_tourism_status: SourceStatus = SourceStatus.NOT_REQUESTED
    tourism_data: Optional[Dict[str, Any]] = None
    pet_tourism_data: Optional[Dict[str, Any]] = None
    additional_pet_places: List[Dict[str, Any]] = field(default_factory=list)
    cache_hit: bool = False
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tourismData": self.tourism_data,
            "petTourismData": self.pet_tourism_data,
            "additionalPetPlaces": self.additional_pet_places,
            "requestParams": self.request.to_params(),
            "timestamp": self.timestamp,
            "status": {
                "tourism": self.tourism_status.value,
                "petTourism": self.pet_tourism_status.value,
            },
        }


@dataclass
class MatchRateReport:
    """큐레이션 키워드 대비 지역 목록 일치율"""

    region: str
    success: bool
    total_keywords: int = 0
    area_titles: int = 0
    exact_matches: List[str] = field(default_factory=list)
    partial_matches: List[Dict[str, str]] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def match_rate(self) -> float:
        if not self.total_keywords:
            return 0.0
        matched = len(self.exact_matches) + len(self.partial_matches)
        return round(matched / self.total_keywords * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "success": self.success,
            "totalKeywords": self.total_keywords,
            "areaTitles": self.area_titles,
            "exactMatches": self.exact_matches,
            "partialMatches": self.partial_matches,
            "unmatched": self.unmatched,
            "matchRate": self.match_rate,
            "error": self.error,
        }


def build_items_envelope(
    items: List[Dict[str, Any]],
    total_count: Optional[int] = None,
    num_of_rows: Optional[int] = None,
    page_no: Optional[int] = 1,
    result_code: str = "0000",
) -> Dict[str, Any]:
    """관광 API 응답과 같은 모양의 response.header/body 구조"""
    return {
        "response": {
            "header": {"resultCode": result_code or "0000", "resultMsg": "OK"},
            "body": {
                "totalCount": len(items) if total_count is None else total_count,
                "numOfRows": len(items) if num_of_rows is None else num_of_rows,
                "pageNo": page_no,
                "items": {"item": items},
            },
        }
    }


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class _BulkOutcome:
    """캐시 계산 함수가 남기는 실패 정보"""

    def __init__(self):
        self.error: Optional[str] = None
        self.standalone: List[Dict[str, Any]] = []


class PetPlaceAggregator:
    """반려동물 장소 통합 조회 서비스"""

    def __init__(
        self,
        client: TourAPIClient,
        cache: PlaceCache,
        supplemental: SupplementalDataset,
        fetcher: Optional[KeywordBatchFetcher] = None,
        merger: Optional[PlaceMerger] = None,
        area_collector: Optional[AreaListCollector] = None,
        keywords: Optional[List[str]] = None,
        cache_prefix: str = "pet_places",
    ):
        self.client = client
        self.cache = cache
        self.supplemental = supplemental
        self.fetcher = fetcher or KeywordBatchFetcher(client)
        self.merger = merger or PlaceMerger()
        self.area_collector = area_collector or AreaListCollector(client)
        self.keywords = list(keywords) if keywords is not None else list(PET_FRIENDLY_KEYWORDS)
        self.cache_prefix = cache_prefix
        self.logger = logging.getLogger(__name__)
        self.pipeline_logger = PipelineLogger("pipeline.aggregator")

    async def aggregate(self, request: AggregationRequest) -> AggregationResult:
        """요청 처리 - 어떤 경우에도 예외 대신 상태 태그로 실패를 알린다"""
        result = AggregationResult(request=request)
        try:
            if request.mode == TourMode.GENERAL:
                await self._run_single(request, TourService.GENERAL, result)
            elif request.load_all_keywords:
                await self._run_pet_bulk(request, result)
            else:
                await self._run_single(request, TourService.PET, result)
        except Exception as e:
            self.logger.exception(f"통합 조회 처리 중 예상치 못한 오류: {e}")
            self._mark_failed(result, request.mode, f"통합 조회 오류: {e}")
        return result

    def _mark_failed(self, result: AggregationResult, mode: TourMode, message: str) -> None:
        if mode == TourMode.GENERAL:
            result.tourism_status = SourceStatus.FAILED
            result.tourism_data = {"error": message}
        else:
            result.pet_tourism_status = SourceStatus.FAILED
            result.pet_tourism_data = {"error": message}

    async def _single_call(
        self, request: AggregationRequest, service: TourService
    ) -> QueryResult:
        rows = _to_int(request.rows_per_page, 10)
        page = _to_int(request.page_no, 1)
        keyword = request.keyword_override
        if keyword:
            return await self.client.search_keyword(
                service,
                keyword,
                area_code=request.region,
                num_of_rows=rows,
                page_no=page,
                sigungu_code=request.sigungu_code,
            )
        return await self.client.list_by_area(
            service,
            request.region,
            num_of_rows=rows,
            page_no=page,
            sigungu_code=request.sigungu_code,
        )

    async def _run_single(
        self, request: AggregationRequest, service: TourService, result: AggregationResult
    ) -> None:
        """단일 호출 모드 (일반 / 반려동물 단건)"""
        query = await self._single_call(request, service)
        if not query.success:
            label = "General Tourism" if service == TourService.GENERAL else "Pet Tourism"
            self._mark_failed(result, request.mode, f"{label} API 실패: {query.error}")
            return

        envelope = build_items_envelope(
            query.items,
            total_count=query.total_count,
            num_of_rows=query.num_of_rows,
            page_no=query.page_no,
            result_code=query.result_code,
        )
        if service == TourService.GENERAL:
            result.tourism_status = SourceStatus.SUCCESS
            result.tourism_data = envelope
        else:
            result.pet_tourism_status = SourceStatus.SUCCESS
            result.pet_tourism_data = envelope

    async def _run_pet_bulk(self, request: AggregationRequest, result: AggregationResult) -> None:
        """전체 키워드 모드 - 캐시 우선, 미스 시 전체 파이프라인"""
        key = build_cache_key(request.region, BULK_CACHE_MODE, self.cache_prefix)
        outcome = _BulkOutcome()

        async def compute() -> Optional[List[Dict[str, Any]]]:
            return await self._collect_and_merge(request, outcome)

        places, hit = await self.cache.get_or_compute(key, compute)
        result.cache_hit = hit

        if places is None:
            result.pet_tourism_status = SourceStatus.FAILED
            result.pet_tourism_data = {"error": outcome.error or "반려동물 장소 수집 실패"}
            result.additional_pet_places = outcome.standalone
            return

        result.pet_tourism_status = SourceStatus.SUCCESS
        result.pet_tourism_data = build_items_envelope(places)
        result.additional_pet_places = [
            place for place in places if place.get("provenance") == Provenance.SUPPLEMENTAL.value
        ]

    async def _collect_and_merge(
        self, request: AggregationRequest, outcome: _BulkOutcome
    ) -> Optional[List[Dict[str, Any]]]:
        """지역 목록 → 키워드 배치 → 병합, 두 소스 모두 비면 None"""
        pipeline = "pet_places_bulk"
        start_time = time.time()
        self.pipeline_logger.log_pipeline_start(pipeline, request.region)

        area = await self.area_collector.collect(
            request.region, TourService.PET, sigungu_code=request.sigungu_code
        )
        batch = await self.fetcher.fetch_all(self.keywords, request.region, TourService.PET)

        merged = self.merger.merge(area.records, batch.records, self.supplemental)
        places = records_to_dicts(merged.places)

        if not area.records and not batch.records:
            outcome.error = (
                f"지역 목록({area.error or '결과 없음'})과 키워드 배치"
                f"({batch.stats.failed}/{batch.stats.attempted} 실패) 모두 데이터 없음"
            )
            outcome.standalone = places
            self.pipeline_logger.log_pipeline_failure(
                pipeline, outcome.error, time.time() - start_time
            )
            return None

        self.pipeline_logger.log_pipeline_complete(
            pipeline, len(places), time.time() - start_time
        )
        return places

    async def compute_match_rate(self, region: str = DEFAULT_REGION) -> MatchRateReport:
        """큐레이션 키워드가 지역 목록 제목과 얼마나 일치하는지 계산"""
        area = await self.area_collector.collect(region, TourService.PET)
        if not area.success:
            return MatchRateReport(region=region, success=False, error=area.error)

        titles = {record.title for record in area.records}
        report = MatchRateReport(
            region=region,
            success=True,
            total_keywords=len(self.keywords),
            area_titles=len(titles),
        )
        for keyword in self.keywords:
            if keyword in titles:
                report.exact_matches.append(keyword)
                continue
            partial = next(
                (title for title in sorted(titles) if keyword in title or title in keyword),
                None,
            )
            if partial:
                report.partial_matches.append({"keyword": keyword, "title": partial})
            else:
                report.unmatched.append(keyword)

        self.logger.info(
            f"일치율 - 지역 {region}: 정확 {len(report.exact_matches)}, "
            f"부분 {len(report.partial_matches)}, 미일치 {len(report.unmatched)} "
            f"({report.match_rate}%)"
        )
        return report


def create_aggregator(client: Optional[TourAPIClient] = None) -> PetPlaceAggregator:
    """환경 설정 기반 기본 구성"""
    cache_config = get_cache_config()
    return PetPlaceAggregator(
        client=client or TourAPIClient(),
        cache=create_place_cache(cache_config),
        supplemental=get_supplemental_dataset(),
        cache_prefix=cache_config.key_prefix,
    )
