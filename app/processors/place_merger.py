"""
장소 병합/중복 제거 엔진

지역 목록, 키워드 배치, 보조 데이터셋을 하나의 정규화된 장소 목록으로 합칩니다.

우선순위 규칙: 같은 CompositeIdentity를 가진 레코드가 여러 출처에서 오면
Provenance.precedence가 낮은 출처(area_list < keyword_search)가 남습니다.
같은 출처 안에서는 먼저 도착한 레코드가 남습니다.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from app.models import CompositeIdentity, PlaceRecord, Provenance
from app.services.supplemental_places import SupplementalDataset
from config.settings import MergeConfig, get_merge_config


@dataclass
class MergeStats:
    """병합 단계별 카운터"""

    area_input: int = 0
    keyword_input: int = 0
    untitled_dropped: int = 0
    duplicates_dropped: int = 0
    enriched: int = 0
    supplemental_appended: int = 0
    truncated: int = 0
    below_lower_bound: bool = False


@dataclass
class MergeResult:
    places: List[PlaceRecord]
    appended_supplemental: List[PlaceRecord] = field(default_factory=list)
    stats: MergeStats = field(default_factory=MergeStats)


class PlaceMerger:
    """장소 병합/중복 제거 엔진"""

    def __init__(self, config: Optional[MergeConfig] = None):
        self.config = config or get_merge_config()
        self.logger = logging.getLogger(__name__)

    def merge(
        self,
        area_records: Sequence[PlaceRecord],
        keyword_records: Sequence[PlaceRecord],
        supplemental: Optional[SupplementalDataset] = None,
    ) -> MergeResult:
        """세 출처 병합 - 입력이 비어 있어도 예외 없이 동작"""
        stats = MergeStats(
            area_input=len(area_records or []),
            keyword_input=len(keyword_records or []),
        )
        supplemental = supplemental or SupplementalDataset([])

        # 1. 출처 태깅
        tagged = self._tag(area_records, Provenance.AREA_LIST) + self._tag(
            keyword_records, Provenance.KEYWORD_SEARCH
        )
        titled = [record for record in tagged if record.has_title]
        stats.untitled_dropped = len(tagged) - len(titled)

        # 2. 중복 제거
        unique = self._deduplicate(titled, stats)

        # 3. 보조 데이터 부착
        enriched = self._enrich(unique, supplemental, stats)

        # 4. 누락된 보조 장소 단독 추가
        appended = self._append_missing_supplemental(enriched, supplemental)
        stats.supplemental_appended = len(appended)

        # 5. 결과 건수 범위 적용
        places = self._enforce_count_band(enriched + appended, stats)

        self.logger.info(
            f"병합 완료: 지역 {stats.area_input}건 + 키워드 {stats.keyword_input}건 → {len(places)}건 "
            f"(중복 {stats.duplicates_dropped}, 제목 없음 {stats.untitled_dropped}, "
            f"보조 부착 {stats.enriched}, 보조 추가 {stats.supplemental_appended}, "
            f"절삭 {stats.truncated})"
        )
        return MergeResult(
            places=places,
            appended_supplemental=[p for p in places if p.provenance == Provenance.SUPPLEMENTAL],
            stats=stats,
        )

    def _tag(
        self, records: Optional[Sequence[PlaceRecord]], provenance: Provenance
    ) -> List[PlaceRecord]:
        return [record.with_provenance(provenance) for record in (records or [])]

    def _deduplicate(
        self, records: List[PlaceRecord], stats: MergeStats
    ) -> List[PlaceRecord]:
        # sorted는 안정 정렬이므로 같은 출처 안의 도착 순서가 유지된다
        ordered = sorted(records, key=lambda r: r.provenance.precedence)
        seen: Set[CompositeIdentity] = set()
        unique = []
        for record in ordered:
            identity = record.identity
            if identity in seen:
                stats.duplicates_dropped += 1
                continue
            seen.add(identity)
            unique.append(record)
        return unique

    def _enrich(
        self,
        records: List[PlaceRecord],
        supplemental: SupplementalDataset,
        stats: MergeStats,
    ) -> List[PlaceRecord]:
        enriched = []
        for record in records:
            match = supplemental.lookup(record.title)
            if match is None:
                enriched.append(record)
                continue
            enriched.append(record.enriched_with(match))
            stats.enriched += 1
        return enriched

    def _append_missing_supplemental(
        self, records: List[PlaceRecord], supplemental: SupplementalDataset
    ) -> List[PlaceRecord]:
        present_titles = {record.title for record in records}
        appended_ids: Set[CompositeIdentity] = set()
        appended = []
        for entry in supplemental.records:
            if entry.title in present_titles or entry.identity in appended_ids:
                continue
            appended_ids.add(entry.identity)
            appended.append(entry.to_place_record())
        return appended

    def _enforce_count_band(
        self, places: List[PlaceRecord], stats: MergeStats
    ) -> List[PlaceRecord]:
        max_places = self.config.max_places
        if len(places) > max_places:
            # 보조 데이터가 붙은 레코드를 먼저 남기고 나머지는 뒤에서부터 제외
            budget = max(0, max_places - sum(1 for p in places if p.supplemental))
            kept = []
            for place in places:
                if place.supplemental:
                    kept.append(place)
                elif budget > 0:
                    kept.append(place)
                    budget -= 1
            kept = kept[:max_places]
            stats.truncated = len(places) - len(kept)
            self.logger.warning(
                f"병합 결과 {len(places)}건이 상한 {max_places}건을 초과하여 {stats.truncated}건 절삭"
            )
            return kept

        if len(places) < self.config.min_places:
            stats.below_lower_bound = True
            self.logger.warning(
                f"병합 결과 {len(places)}건이 기대 하한 {self.config.min_places}건 미만 (상위 API 불안정 가능)"
            )
        return places
