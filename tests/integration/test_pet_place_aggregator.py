"""
반려동물 장소 통합 조회 서비스 통합 테스트

수집기, 병합 엔진, 캐시를 실제 구현으로 묶고 관광 API 클라이언트만 대역으로 바꿉니다.
"""

import pytest

from app.collectors.area_list_collector import AreaListCollector
from app.collectors.keyword_batch_fetcher import KeywordBatchFetcher
from app.collectors.tour_api_client import QueryResult
from app.core.place_cache import InMemoryPlaceCache
from app.models import SupplementalRecord
from app.processors.place_merger import PlaceMerger
from app.services.pet_place_aggregator import (
    AggregationRequest,
    PetPlaceAggregator,
    SourceStatus,
    TourMode,
)
from app.services.supplemental_places import SupplementalDataset
from config.settings import AreaListConfig, KeywordBatchConfig, MergeConfig

pytestmark = pytest.mark.integration


class ExplodingMerger(PlaceMerger):
    def merge(self, *args, **kwargs):
        raise RuntimeError("병합 실패")


@pytest.fixture
def dataset():
    return SupplementalDataset(
        [
            SupplementalRecord(title="오르디", addr1="부산 해운대구", location_gubun="카페"),
            SupplementalRecord(title="카페 헤이든", addr1="부산 기장군", location_gubun="카페"),
        ]
    )


@pytest.fixture
def build_aggregator(recording_sleep, dataset):
    def _build(client, keywords=("오르디", "광안리"), merger=None, cache=None):
        return PetPlaceAggregator(
            client=client,
            cache=cache or InMemoryPlaceCache(ttl_seconds=86400, max_places=150),
            supplemental=dataset,
            fetcher=KeywordBatchFetcher(client, KeywordBatchConfig(), sleep=recording_sleep),
            merger=merger or PlaceMerger(MergeConfig(max_places=100, min_places=90)),
            area_collector=AreaListCollector(
                client, AreaListConfig(rows_per_page=100, max_pages=5), sleep=recording_sleep
            ),
            keywords=list(keywords),
        )

    return _build


def area_page(*titles):
    return QueryResult(
        success=True,
        items=[{"contentid": f"AREA-{i}", "title": t} for i, t in enumerate(titles)],
    )


class TestPetPlaceAggregator:
    """통합 조회 서비스 테스트"""

    @pytest.mark.asyncio
    async def test_general_mode_area_list(self, fake_tour_client_factory, build_aggregator):
        client = fake_tour_client_factory(area_pages=[area_page("경복궁")])
        aggregator = build_aggregator(client)

        result = await aggregator.aggregate(AggregationRequest(region="1", mode=TourMode.GENERAL))
        data = result.to_dict()

        assert data["status"] == {"tourism": "success", "petTourism": "not_requested"}
        assert data["petTourismData"] is None
        items = data["tourismData"]["response"]["body"]["items"]["item"]
        assert items[0]["title"] == "경복궁"
        assert client.keyword_calls == []
        assert data["requestParams"]["region"] == "1"

    @pytest.mark.asyncio
    async def test_general_mode_keyword_override(self, fake_tour_client_factory, build_aggregator):
        client = fake_tour_client_factory()
        aggregator = build_aggregator(client)

        result = await aggregator.aggregate(
            AggregationRequest(keyword=" 해운대 ", mode=TourMode.GENERAL)
        )

        assert result.tourism_status == SourceStatus.SUCCESS
        assert client.keyword_calls == ["해운대"]
        assert client.area_calls == []

    @pytest.mark.asyncio
    async def test_single_call_failure_is_tagged(
        self, fake_tour_client_factory, failed_query_factory, build_aggregator
    ):
        client = fake_tour_client_factory(area_pages=[failed_query_factory("timeout")])
        aggregator = build_aggregator(client)

        result = await aggregator.aggregate(AggregationRequest(mode=TourMode.PET))
        data = result.to_dict()

        assert data["status"] == {"tourism": "not_requested", "petTourism": "failed"}
        assert "timeout" in data["petTourismData"]["error"]

    @pytest.mark.asyncio
    async def test_pet_single_call_does_not_use_batch(self, fake_tour_client_factory, build_aggregator):
        client = fake_tour_client_factory(area_pages=[area_page("광안리 해변")])
        aggregator = build_aggregator(client)

        result = await aggregator.aggregate(
            AggregationRequest(mode=TourMode.PET, rows_per_page="20", page_no="2")
        )

        assert result.pet_tourism_status == SourceStatus.SUCCESS
        assert result.additional_pet_places == []
        assert client.area_calls[0]["num_of_rows"] == 20
        assert client.area_calls[0]["page_no"] == 2
        assert client.keyword_calls == []

    @pytest.mark.asyncio
    async def test_bulk_mode_merges_and_caches(self, fake_tour_client_factory, build_aggregator):
        client = fake_tour_client_factory(
            area_pages=[area_page("광안리 해변", "해운대 해수욕장")],
            keyword_results={
                "오르디": QueryResult(success=True, items=[{"contentid": "A1", "title": "오르디"}]),
            },
        )
        aggregator = build_aggregator(client)
        request = AggregationRequest(region="6", mode=TourMode.PET, load_all_keywords=True)

        first = await aggregator.aggregate(request)
        data = first.to_dict()

        assert data["status"]["petTourism"] == "success"
        assert not first.cache_hit
        items = data["petTourismData"]["response"]["body"]["items"]["item"]
        by_title = {item["title"]: item for item in items}
        assert by_title["오르디"]["contentid"] == "A1"
        assert by_title["오르디"]["locationGubun"] == "카페"
        assert [p["title"] for p in data["additionalPetPlaces"]] == ["카페 헤이든"]
        assert data["petTourismData"]["response"]["body"]["totalCount"] == len(items)

        calls_after_first = len(client.keyword_calls)
        second = await aggregator.aggregate(
            AggregationRequest(region="6", mode=TourMode.PET, load_all_keywords=True, rows_per_page="5")
        )

        assert second.cache_hit
        assert len(client.keyword_calls) == calls_after_first
        assert second.pet_tourism_data == first.pet_tourism_data

    @pytest.mark.asyncio
    async def test_bulk_mode_total_failure_is_not_cached(
        self, fake_tour_client_factory, failed_query_factory, build_aggregator
    ):
        client = fake_tour_client_factory(
            area_pages=[failed_query_factory("area down")],
            keyword_results={k: failed_query_factory() for k in ("오르디", "광안리")},
        )
        cache = InMemoryPlaceCache(ttl_seconds=86400, max_places=150)
        aggregator = build_aggregator(client, cache=cache)

        result = await aggregator.aggregate(
            AggregationRequest(mode=TourMode.PET, load_all_keywords=True)
        )

        assert result.pet_tourism_status == SourceStatus.FAILED
        assert "error" in result.pet_tourism_data
        assert {p["title"] for p in result.additional_pet_places} == {"오르디", "카페 헤이든"}
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_bulk_mode_partial_source_success(
        self, fake_tour_client_factory, failed_query_factory, build_aggregator
    ):
        """지역 목록이 실패해도 키워드 결과가 있으면 성공"""
        client = fake_tour_client_factory(area_pages=[failed_query_factory("area down")])
        aggregator = build_aggregator(client)

        result = await aggregator.aggregate(
            AggregationRequest(mode=TourMode.PET, load_all_keywords=True)
        )

        assert result.pet_tourism_status == SourceStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failed_status(
        self, fake_tour_client_factory, build_aggregator
    ):
        client = fake_tour_client_factory()
        aggregator = build_aggregator(client, merger=ExplodingMerger(MergeConfig()))

        result = await aggregator.aggregate(
            AggregationRequest(mode=TourMode.PET, load_all_keywords=True)
        )

        assert result.pet_tourism_status == SourceStatus.FAILED
        assert "병합 실패" in result.pet_tourism_data["error"]

    @pytest.mark.asyncio
    async def test_match_rate(self, fake_tour_client_factory, build_aggregator):
        client = fake_tour_client_factory(area_pages=[area_page("오르디", "광안리 해변")])
        aggregator = build_aggregator(client, keywords=["오르디", "광안리", "없는 장소"])

        report = await aggregator.compute_match_rate("6")
        data = report.to_dict()

        assert data["exactMatches"] == ["오르디"]
        assert data["partialMatches"] == [{"keyword": "광안리", "title": "광안리 해변"}]
        assert data["unmatched"] == ["없는 장소"]
        assert data["matchRate"] == 66.7

    @pytest.mark.asyncio
    async def test_match_rate_area_failure(
        self, fake_tour_client_factory, failed_query_factory, build_aggregator
    ):
        client = fake_tour_client_factory(area_pages=[failed_query_factory("down")])
        aggregator = build_aggregator(client)

        report = await aggregator.compute_match_rate("6")

        assert not report.success
        assert report.error == "down"
