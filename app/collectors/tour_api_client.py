"""
관광 API 클라이언트

한국관광공사 국문/반려동물 관광정보 서비스에 대한 단일 논리 호출을 담당합니다.
HTTPS 전송 실패 시 같은 URL의 HTTP 버전으로 한 번만 다시 시도합니다.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp

from app.collectors.xml_decoder import (
    DecodeFailure,
    DecodeFailureKind,
    DecodedResponse,
    ResponseDecoder,
    TolerantXMLDecoder,
)
from app.core.error_handling import (
    APIError,
    ConfigurationError,
    ErrorCodes,
    PetTourError,
    ResponseParseError,
    ServiceResponseError,
    TransportError,
    sanitize_parameters,
)
from app.core.logger import PipelineLogger
from app.models import PlaceRecord, Provenance
from config.constants import TOUR_ENDPOINTS, EndpointKind, TourService
from config.settings import TourAPIConfig, get_tour_api_config


class QueryErrorKind(Enum):
    """호출 실패 유형"""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    SERVICE = "service"
    PARSE = "parse"
    CONFIGURATION = "configuration"


@dataclass
class RawResponse:
    """전송 계층 응답"""

    status: int
    text: str
    url: str
    used_fallback: bool = False


@dataclass
class QueryResult:
    """관광 API 호출 결과"""

    success: bool
    items: List[Dict[str, str]] = field(default_factory=list)
    total_count: Optional[int] = None
    page_no: Optional[int] = None
    num_of_rows: Optional[int] = None
    result_code: str = ""
    error: Optional[str] = None
    error_kind: Optional[QueryErrorKind] = None
    status_code: Optional[int] = None
    used_fallback: bool = False
    duration_ms: Optional[int] = None
    truncated: bool = False

    @classmethod
    def failure(
        cls, kind: QueryErrorKind, message: str, status_code: Optional[int] = None
    ) -> "QueryResult":
        return cls(success=False, error=message, error_kind=kind, status_code=status_code)

    def records(
        self,
        provenance: Optional[Provenance] = None,
        source_keyword: Optional[str] = None,
    ) -> List[PlaceRecord]:
        """제목이 있는 항목만 레코드로 변환"""
        records = [
            PlaceRecord.from_item(item, provenance, source_keyword)
            for item in self.items
        ]
        return [record for record in records if record.has_title]


TRANSPORT_EXCEPTIONS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


def _transport_error_code(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return ErrorCodes.NETWORK_TIMEOUT
    return ErrorCodes.NETWORK_CONNECTION_FAILED


class TourAPIClient:
    """관광 API 비동기 클라이언트"""

    def __init__(
        self,
        config: Optional[TourAPIConfig] = None,
        session: Optional[Any] = None,
        decoder: Optional[ResponseDecoder] = None,
    ):
        self.config = config or get_tour_api_config()
        self.logger = logging.getLogger(__name__)
        self.pipeline_logger = PipelineLogger("pipeline.api")
        self.decoder = decoder or TolerantXMLDecoder()
        self.session = session
        self._owns_session = session is None

        self.headers = {
            "Accept": "application/xml, text/xml, */*",
            "Accept-Language": "ko-KR,ko;q=0.9,en;q=0.8",
            "User-Agent": self.config.user_agent,
            "Cache-Control": "no-cache",
        }

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        await self.close()

    async def open(self) -> None:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers=self.headers,
            )
            self._owns_session = True

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    def _base_url(self, service: TourService) -> str:
        if service == TourService.PET:
            return self.config.pet_base_url.rstrip("/")
        return self.config.general_base_url.rstrip("/")

    def build_url(self, service: TourService, kind: EndpointKind) -> str:
        return f"{self._base_url(service)}/{TOUR_ENDPOINTS[(service, kind)]}"

    def build_params(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """고정 클라이언트 식별 파라미터 + 요청 파라미터"""
        service_key = self.config.normalized_service_key
        if not service_key:
            raise ConfigurationError(
                "관광 API 서비스 키가 설정되지 않았습니다.",
                config_key="KOREA_TOUR_API_KEY",
            )

        query = {
            "serviceKey": service_key,
            "MobileOS": self.config.mobile_os,
            "MobileApp": self.config.mobile_app,
            "_type": "xml",
        }
        for key, value in (params or {}).items():
            if value is None or value == "":
                continue
            query[key] = str(value)
        return query

    async def _get(self, url: str, query: Dict[str, str]) -> RawResponse:
        if self.session is None:
            await self.open()
        async with self.session.get(url, params=query, headers=self.headers) as response:
            # 잘못된 UTF-8 바이트는 대체 문자로 바꿔 디코더에 넘긴다
            text = await response.text(errors="replace")
            return RawResponse(status=response.status, text=text, url=url)

    async def fetch_once(
        self, service: TourService, kind: EndpointKind, params: Optional[Dict[str, Any]] = None
    ) -> RawResponse:
        """단일 호출 - 전송 실패 시 HTTP로 한 번 재시도, 둘 다 실패하면 TransportError"""
        url = self.build_url(service, kind)
        query = self.build_params(params)

        try:
            return await self._get(url, query)
        except TRANSPORT_EXCEPTIONS as e:
            if not url.startswith("https://"):
                raise TransportError(
                    f"관광 API 전송 실패: {e}",
                    url=url,
                    timeout=self.config.timeout,
                    error_code=_transport_error_code(e),
                    cause=e,
                ) from e

            fallback_url = "http://" + url[len("https://"):]
            self.logger.warning(f"HTTPS 호출 실패, HTTP로 재시도: {fallback_url} ({e})")

        try:
            raw = await self._get(fallback_url, query)
        except TRANSPORT_EXCEPTIONS as e:
            raise TransportError(
                f"관광 API 전송 실패 (HTTPS/HTTP): {e}",
                url=fallback_url,
                timeout=self.config.timeout,
                error_code=_transport_error_code(e),
                cause=e,
            ) from e
        raw.used_fallback = True
        return raw

    def _decode_checked(self, raw: RawResponse, endpoint: str) -> DecodedResponse:
        """HTTP 상태, 내장 서비스 오류, 결과 코드를 검사한 해석 결과"""
        if raw.status != 200:
            raise APIError(
                f"HTTP 오류: {raw.status} - {raw.text[:200]}",
                status_code=raw.status,
                endpoint=endpoint,
            )

        decoded = self.decoder.decode(raw.text)
        if isinstance(decoded, DecodeFailure):
            if decoded.kind == DecodeFailureKind.SERVICE_ERROR:
                raise ServiceResponseError(
                    f"관광 API 서비스 오류: {decoded.message}", endpoint=endpoint
                )
            raise ResponseParseError(
                f"관광 API 응답 해석 실패: {decoded.message}", preview=decoded.preview
            )

        if not decoded.header.is_success:
            raise ServiceResponseError(
                f"관광 API 오류 ({decoded.header.result_code}): {decoded.header.result_msg}",
                result_code=decoded.header.result_code,
                endpoint=endpoint,
            )
        return decoded

    def _log_error_detail(
        self, error: PetTourError, endpoint: str, params: Optional[Dict[str, Any]]
    ) -> None:
        """오류 상세 (민감 파라미터는 가림)"""
        error.context.operation = endpoint
        error.context.parameters = dict(params or {})
        self.logger.debug(f"오류 상세: {error.to_dict()}")

    async def query(
        self,
        service: TourService,
        kind: EndpointKind,
        params: Optional[Dict[str, Any]] = None,
    ) -> QueryResult:
        """호출 + 해석 + 오류 분류 (예외를 던지지 않음)"""
        endpoint = TOUR_ENDPOINTS[(service, kind)]
        start_time = time.time()

        try:
            raw = await self.fetch_once(service, kind, params)
            decoded = self._decode_checked(raw, endpoint)
        except ConfigurationError as e:
            self.logger.error(e.message)
            self._log_error_detail(e, endpoint, params)
            return QueryResult.failure(QueryErrorKind.CONFIGURATION, e.message)
        except TransportError as e:
            self.logger.warning(f"{endpoint} 전송 실패: {e.message}")
            self._log_error_detail(e, endpoint, params)
            return QueryResult.failure(QueryErrorKind.TRANSPORT, e.message)
        except ServiceResponseError as e:
            self.logger.warning(
                f"{endpoint} 서비스 오류: {e.message} - {sanitize_parameters(params)}"
            )
            self._log_error_detail(e, endpoint, params)
            return QueryResult.failure(QueryErrorKind.SERVICE, e.message, 200)
        except ResponseParseError as e:
            self.logger.warning(f"{endpoint} 응답 해석 실패: {e.message}")
            self._log_error_detail(e, endpoint, params)
            return QueryResult.failure(QueryErrorKind.PARSE, e.message, 200)
        except APIError as e:
            self.logger.warning(f"{endpoint} {e.message}")
            self._log_error_detail(e, endpoint, params)
            return QueryResult.failure(QueryErrorKind.HTTP_STATUS, e.message, e.status_code)

        duration = time.time() - start_time
        self.pipeline_logger.log_api_call(endpoint, raw.status, duration)

        body = decoded.body
        return QueryResult(
            success=True,
            items=body.items,
            total_count=body.total_count,
            page_no=body.page_no,
            num_of_rows=body.num_of_rows,
            result_code=decoded.header.result_code,
            status_code=raw.status,
            used_fallback=raw.used_fallback,
            duration_ms=int(duration * 1000),
            truncated=body.truncated,
        )

    async def list_by_area(
        self,
        service: TourService,
        area_code: Optional[str],
        num_of_rows: int = 10,
        page_no: int = 1,
        sigungu_code: Optional[str] = None,
    ) -> QueryResult:
        """지역 기반 목록 조회"""
        params = {
            "areaCode": area_code,
            "sigunguCode": sigungu_code,
            "numOfRows": num_of_rows,
            "pageNo": page_no,
        }
        return await self.query(service, EndpointKind.AREA_LIST, params)

    async def search_keyword(
        self,
        service: TourService,
        keyword: str,
        area_code: Optional[str] = None,
        num_of_rows: int = 10,
        page_no: int = 1,
        sigungu_code: Optional[str] = None,
    ) -> QueryResult:
        """키워드 검색"""
        params = {
            "keyword": keyword.strip(),
            "areaCode": area_code,
            "sigunguCode": sigungu_code,
            "numOfRows": num_of_rows,
            "pageNo": page_no,
        }
        return await self.query(service, EndpointKind.KEYWORD_SEARCH, params)
