"""
통합 조회 API Pydantic 스키마
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.services.pet_place_aggregator import AggregationRequest, TourMode
from config.constants import DEFAULT_REGION


# Request 스키마
class CombinedTourRequest(BaseModel):
    """통합 조회 요청 (기존 클라이언트 필드명도 허용)"""

    model_config = ConfigDict(populate_by_name=True)

    region: str = Field(
        default=DEFAULT_REGION, validation_alias=AliasChoices("region", "areaCode")
    )
    rows_per_page: str = Field(
        default="10", validation_alias=AliasChoices("rowsPerPage", "numOfRows")
    )
    page_no: str = Field(default="1", validation_alias=AliasChoices("pageNo"))
    keyword: str = ""
    mode: TourMode = Field(
        default=TourMode.GENERAL, validation_alias=AliasChoices("mode", "activeTab")
    )
    load_all_keywords: bool = Field(
        default=False,
        validation_alias=AliasChoices("loadAllKeywords", "loadAllPetKeywords"),
    )
    sigungu_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("sigunguCode")
    )

    @field_validator("region", "rows_per_page", "page_no", "keyword", mode="before")
    @classmethod
    def coerce_to_string(cls, value: Any) -> Any:
        """숫자로 보낸 값도 문자열로 받는다"""
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("sigungu_code", mode="before")
    @classmethod
    def coerce_sigungu(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value)

    def to_domain(self) -> AggregationRequest:
        return AggregationRequest(
            region=self.region or DEFAULT_REGION,
            rows_per_page=self.rows_per_page or "10",
            page_no=self.page_no or "1",
            keyword=self.keyword,
            mode=self.mode,
            load_all_keywords=self.load_all_keywords,
            sigungu_code=self.sigungu_code,
        )


# Response 스키마
class SourceStatusInfo(BaseModel):
    """출처별 상태"""
    tourism: str
    petTourism: str


class CombinedTourResponse(BaseModel):
    """통합 조회 응답"""
    tourismData: Optional[Dict[str, Any]] = None
    petTourismData: Optional[Dict[str, Any]] = None
    additionalPetPlaces: List[Dict[str, Any]] = Field(default_factory=list)
    requestParams: Dict[str, Any]
    timestamp: str
    status: SourceStatusInfo


class MatchRateResponse(BaseModel):
    """키워드 일치율 보고서"""
    region: str
    success: bool
    totalKeywords: int
    areaTitles: int
    exactMatches: List[str]
    partialMatches: List[Dict[str, str]]
    unmatched: List[str]
    matchRate: float
    error: Optional[str] = None
