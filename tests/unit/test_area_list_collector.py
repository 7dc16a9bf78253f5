"""
지역 목록 페이징 수집기 단위 테스트
"""

import pytest

from app.collectors.area_list_collector import AreaListCollector
from app.collectors.tour_api_client import QueryResult
from config.settings import AreaListConfig


def page(start: int, count: int) -> QueryResult:
    items = [{"contentid": f"A{i}", "title": f"장소 {i}"} for i in range(start, start + count)]
    return QueryResult(success=True, items=items)


@pytest.fixture
def config():
    return AreaListConfig(rows_per_page=3, max_pages=5, page_pause=0.3)


@pytest.mark.asyncio
async def test_collects_until_short_page(fake_tour_client_factory, recording_sleep, config):
    client = fake_tour_client_factory(area_pages=[page(0, 3), page(3, 3), page(6, 1)])
    collector = AreaListCollector(client, config, sleep=recording_sleep)

    result = await collector.collect("6", sigungu_code="16")

    assert result.success
    assert result.pages_fetched == 3
    assert [r.contentid for r in result.records] == [f"A{i}" for i in range(7)]
    assert [call["page_no"] for call in client.area_calls] == [1, 2, 3]
    assert client.area_calls[0]["sigungu_code"] == "16"
    assert recording_sleep.delays == [0.3, 0.3]


@pytest.mark.asyncio
async def test_stops_at_max_pages(fake_tour_client_factory, recording_sleep, config):
    client = fake_tour_client_factory(area_pages=[page(i * 3, 3) for i in range(10)])
    collector = AreaListCollector(client, config, sleep=recording_sleep)

    result = await collector.collect("6")

    assert result.pages_fetched == 5
    assert len(result.records) == 15


@pytest.mark.asyncio
async def test_first_page_failure_fails_source(
    fake_tour_client_factory, failed_query_factory, recording_sleep, config
):
    client = fake_tour_client_factory(area_pages=[failed_query_factory("timeout")])
    collector = AreaListCollector(client, config, sleep=recording_sleep)

    result = await collector.collect("6")

    assert not result.success
    assert result.records == []
    assert result.error == "timeout"


@pytest.mark.asyncio
async def test_later_page_failure_keeps_collected(
    fake_tour_client_factory, failed_query_factory, recording_sleep, config
):
    client = fake_tour_client_factory(area_pages=[page(0, 3), failed_query_factory()])
    collector = AreaListCollector(client, config, sleep=recording_sleep)

    result = await collector.collect("6")

    assert result.success
    assert result.pages_fetched == 1
    assert len(result.records) == 3


@pytest.mark.asyncio
async def test_truncated_page_does_not_end_paging(fake_tour_client_factory, recording_sleep, config):
    """잘린 첫 페이지 뒤에도 다음 페이지를 계속 수집"""
    truncated = page(0, 1)
    truncated.truncated = True
    client = fake_tour_client_factory(area_pages=[truncated, page(3, 3), page(6, 1)])
    collector = AreaListCollector(client, config, sleep=recording_sleep)

    result = await collector.collect("6")

    assert result.success
    assert result.pages_fetched == 3
    assert [call["page_no"] for call in client.area_calls] == [1, 2, 3]
    assert [r.contentid for r in result.records] == ["A0", "A3", "A4", "A5", "A6"]
