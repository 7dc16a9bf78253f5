"""
관광 통합 조회 API 라우터
"""

from fastapi import APIRouter, Depends, Query
import logging

from app.api.schemas import CombinedTourRequest, CombinedTourResponse, MatchRateResponse
from app.services.pet_place_aggregator import PetPlaceAggregator, create_aggregator
from config.constants import DEFAULT_REGION

logger = logging.getLogger(__name__)
router = APIRouter()

# 통합 조회 서비스 인스턴스 (서버 시작 시 설정)
aggregator: PetPlaceAggregator = None


def get_aggregator() -> PetPlaceAggregator:
    global aggregator
    if aggregator is None:
        aggregator = create_aggregator()
        logger.info("PetPlaceAggregator 초기화")
    return aggregator


@router.post("/combined", response_model=CombinedTourResponse)
async def combined_tour(
    request: CombinedTourRequest,
    service: PetPlaceAggregator = Depends(get_aggregator),
):
    """일반/반려동물 관광 정보 통합 조회

    실패는 HTTP 오류가 아닌 status 태그로 전달됩니다.
    """
    result = await service.aggregate(request.to_domain())
    logger.info(
        f"통합 조회 응답 - 모드: {request.mode.value}, "
        f"tourism: {result.tourism_status.value}, petTourism: {result.pet_tourism_status.value}"
    )
    return result.to_dict()


@router.get("/pet/match-rate", response_model=MatchRateResponse)
async def pet_match_rate(
    region: str = Query(DEFAULT_REGION, alias="areaCode"),
    service: PetPlaceAggregator = Depends(get_aggregator),
):
    """큐레이션 키워드와 지역 목록의 일치율"""
    report = await service.compute_match_rate(region)
    return report.to_dict()
