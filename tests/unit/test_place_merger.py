"""
장소 병합/중복 제거 엔진 단위 테스트
"""

import pytest

from app.models import PlaceRecord, Provenance, SupplementalRecord
from app.processors.place_merger import PlaceMerger
from app.services.supplemental_places import SupplementalDataset
from config.settings import MergeConfig


def place(contentid="", title="", mapx="", mapy="", **kwargs) -> PlaceRecord:
    return PlaceRecord(contentid=contentid, title=title, mapx=mapx, mapy=mapy, **kwargs)


def synthetic(count: int, prefix: str = "P") -> list:
    return [place(f"{prefix}{i}", f"{prefix} 장소 {i}") for i in range(count)]


@pytest.fixture
def merger():
    return PlaceMerger(MergeConfig(max_places=100, min_places=90))


@pytest.fixture
def dataset():
    return SupplementalDataset(
        [
            SupplementalRecord(title="오르디", addr1="부산 해운대구", location_gubun="카페",
                               mbti=("ENFP", "ESFP"), holiday="월요일"),
            SupplementalRecord(title="해운대해수욕장", addr1="부산 해운대구 우동",
                               location_gubun="해수욕장", mbti="all"),
            SupplementalRecord(title="카페 헤이든", addr1="부산 기장군", location_gubun="카페"),
        ]
    )


class TestPlaceMerger:
    """병합 엔진 테스트"""

    def test_example_enrichment(self, merger, dataset):
        """키워드 검색 결과에 보조 분류 정보가 붙는다"""
        keyword_records = [place("A1", "오르디", source_keyword="오르디")]

        result = merger.merge([], keyword_records, dataset)

        ordi = [p for p in result.places if p.title == "오르디"]
        assert len(ordi) == 1
        assert ordi[0].contentid == "A1"
        assert ordi[0].location_gubun == "카페"
        assert ordi[0].mbti == ("ENFP", "ESFP")
        assert ordi[0].provenance == Provenance.KEYWORD_SEARCH
        assert ordi[0].to_dict()["locationGubun"] == "카페"

    def test_area_list_wins_over_keyword_search(self, merger):
        area = [place("A1", "오르디 (지역목록)")]
        keyword = [place("A1", "오르디 (키워드)"), place("B2", "광안리")]

        result = merger.merge(area, keyword)

        titles = [p.title for p in result.places]
        assert titles == ["오르디 (지역목록)", "광안리"]
        assert result.places[0].provenance == Provenance.AREA_LIST
        assert result.stats.duplicates_dropped == 1

    def test_precedence_independent_of_argument_contents_order(self, merger):
        """키워드 결과가 먼저 도착해도 지역 목록 레코드가 남는다"""
        keyword = [place("A1", "키워드판")]
        area = [place("A1", "지역판")]

        result = merger.merge(area, keyword)

        assert [p.title for p in result.places] == ["지역판"]

    def test_first_wins_within_same_source(self, merger):
        keyword = [place("A1", "첫번째"), place("A1", "두번째")]

        result = merger.merge([], keyword)

        assert [p.title for p in result.places] == ["첫번째"]

    def test_fallback_identity_without_contentid(self, merger):
        keyword = [
            place("", "무명 카페", "129.1", "35.1"),
            place("", "무명 카페", "129.1", "35.1"),
            place("", "무명 카페", "129.2", "35.1"),
        ]

        result = merger.merge([], keyword)

        assert len(result.places) == 2

    def test_untitled_records_are_dropped(self, merger):
        result = merger.merge([place("A1", ""), place("A2", "   ")], [place("B1", "광안리")])

        assert [p.contentid for p in result.places] == ["B1"]
        assert result.stats.untitled_dropped == 2

    def test_supplemental_completeness(self, merger, dataset):
        result = merger.merge(synthetic(20), [place("A1", "오르디")], dataset)

        titles = {p.title for p in result.places}
        for title in dataset.titles:
            assert title in titles
        appended = {p.title for p in result.appended_supplemental}
        assert appended == {"해운대해수욕장", "카페 헤이든"}
        assert all(p.provenance == Provenance.SUPPLEMENTAL for p in result.appended_supplemental)

    def test_clamps_to_upper_bound(self, merger):
        result = merger.merge(synthetic(150), [])

        assert len(result.places) == 100
        assert result.stats.truncated == 50
        assert [p.contentid for p in result.places] == [f"P{i}" for i in range(100)]

    def test_truncation_keeps_supplemental_places(self, merger, dataset):
        result = merger.merge(synthetic(150), [], dataset)

        assert len(result.places) == 100
        titles = {p.title for p in result.places}
        assert set(dataset.titles) <= titles

    def test_below_lower_bound_is_not_padded(self, merger):
        result = merger.merge(synthetic(50), [])

        assert len(result.places) == 50
        assert result.stats.below_lower_bound

    def test_empty_inputs(self, merger, dataset):
        result = merger.merge([], [], dataset)

        assert len(result.places) == len(dataset)
        assert all(p.provenance == Provenance.SUPPLEMENTAL for p in result.places)

        assert merger.merge([], []).places == []

    def test_idempotent(self, merger, dataset):
        area = synthetic(60, "A")
        keyword = synthetic(40, "K") + [place("A3", "중복"), place("A1", "오르디")]

        first = [p.to_dict() for p in merger.merge(area, keyword, dataset).places]
        second = [p.to_dict() for p in merger.merge(area, keyword, dataset).places]

        assert first == second

    def test_inputs_are_not_mutated(self, merger, dataset):
        keyword = [place("A1", "오르디")]

        merger.merge([], keyword, dataset)

        assert keyword[0].provenance is None
        assert keyword[0].location_gubun is None
