"""
공통 테스트 픽스처

네트워크에 접근하지 않도록 aiohttp 세션과 관광 API 클라이언트의 가짜 구현을 제공합니다.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from app.collectors.tour_api_client import QueryErrorKind, QueryResult
from config.settings import TourAPIConfig


def build_tour_xml(
    items: List[Dict[str, str]],
    result_code: str = "0000",
    result_msg: str = "OK",
    total_count: Optional[int] = None,
    page_no: int = 1,
) -> str:
    """관광 API 형식의 XML 응답 본문"""
    item_xml = "".join(
        "<item>" + "".join(f"<{k}>{v}</{k}>" for k, v in item.items()) + "</item>"
        for item in items
    )
    total = len(items) if total_count is None else total_count
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        "<response>"
        f"<header><resultCode>{result_code}</resultCode><resultMsg>{result_msg}</resultMsg></header>"
        f"<body><items>{item_xml}</items>"
        f"<numOfRows>{len(items)}</numOfRows><pageNo>{page_no}</pageNo>"
        f"<totalCount>{total}</totalCount></body>"
        "</response>"
    )


class FakeResponse:
    """aiohttp 응답 대역"""

    def __init__(self, status: int = 200, text: str = "", body: Optional[bytes] = None):
        self.status = status
        self._body = text.encode("utf-8") if body is None else body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        # aiohttp와 같이 기본은 엄격한 디코딩
        return self._body.decode(encoding, errors=errors)


class FakeSession:
    """URL 접두어별로 응답 또는 예외를 돌려주는 세션 대역"""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": dict(params or {})})
        outcome = self.responses.pop(0) if self.responses else FakeResponse(200, "")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True


class FakeTourClient:
    """TourAPIClient 대역 - 키워드/지역별 결과를 미리 지정"""

    def __init__(
        self,
        keyword_results: Optional[Dict[str, Any]] = None,
        area_pages: Optional[List[QueryResult]] = None,
        default_items: Optional[List[Dict[str, str]]] = None,
    ):
        self.keyword_results = keyword_results or {}
        self.area_pages = list(area_pages or [])
        self.default_items = default_items
        self.keyword_calls: List[str] = []
        self.area_calls: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search_keyword(self, service, keyword, area_code=None, num_of_rows=10,
                             page_no=1, sigungu_code=None):
        self.keyword_calls.append(keyword)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            outcome = self.keyword_results.get(keyword)
            if isinstance(outcome, list):
                # 시도마다 다른 결과
                outcome = outcome.pop(0) if outcome else None
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome is None:
                items = self.default_items
                if items is None:
                    items = [{"contentid": f"kw-{keyword}", "title": keyword}]
                return QueryResult(success=True, items=list(items))
            return outcome
        finally:
            self.in_flight -= 1

    async def list_by_area(self, service, area_code, num_of_rows=10, page_no=1,
                           sigungu_code=None):
        self.area_calls.append(
            {"service": service, "area_code": area_code, "num_of_rows": num_of_rows,
             "page_no": page_no, "sigungu_code": sigungu_code}
        )
        if self.area_pages:
            return self.area_pages.pop(0)
        return QueryResult(success=True, items=[])


def failed_query(message: str = "연결 실패") -> QueryResult:
    return QueryResult.failure(QueryErrorKind.TRANSPORT, message)


class RecordingSleep:
    """asyncio.sleep 대역 - 요청된 지연만 기록"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def tour_xml():
    return build_tour_xml


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session_factory():
    return FakeSession


@pytest.fixture
def fake_tour_client_factory():
    return FakeTourClient


@pytest.fixture
def failed_query_factory():
    return failed_query


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def api_config():
    return TourAPIConfig(service_key="test%2Bkey%3D%3D")
