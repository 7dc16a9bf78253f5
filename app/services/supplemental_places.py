"""
보조 반려동물 장소 데이터셋

관광 API에 없는 분류 정보(장소 구분, 멍BTI, 휴무일)를 담은 번들 데이터를
프로세스 시작 시 한 번 읽어 제목 기준 색인으로 제공합니다.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from app.models import SupplementalRecord

DEFAULT_DATASET_PATH = Path(__file__).resolve().parent.parent / "data" / "supplemental_pet_places.json"

logger = logging.getLogger(__name__)


class SupplementalDataset:
    """읽기 전용 보조 데이터셋"""

    def __init__(self, records: Iterable[SupplementalRecord]):
        self._records: List[SupplementalRecord] = []
        self._by_title: Dict[str, SupplementalRecord] = {}

        for record in records:
            if not record.title:
                logger.warning("제목 없는 보조 데이터 항목을 건너뜁니다")
                continue
            if record.title in self._by_title:
                logger.warning(f"중복된 보조 데이터 제목: {record.title} (첫 항목 사용)")
                continue
            self._by_title[record.title] = record
            self._records.append(record)

    @classmethod
    def from_file(cls, path: Path = DEFAULT_DATASET_PATH) -> "SupplementalDataset":
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        dataset = cls(SupplementalRecord.from_dict(entry) for entry in raw)
        logger.info(f"보조 데이터셋 로드 완료: {len(dataset)}건 ({path})")
        return dataset

    @property
    def records(self) -> List[SupplementalRecord]:
        return list(self._records)

    @property
    def titles(self) -> List[str]:
        return [record.title for record in self._records]

    def lookup(self, title: str) -> Optional[SupplementalRecord]:
        return self._by_title.get(title)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, title: object) -> bool:
        return title in self._by_title


# 싱글톤 인스턴스
_supplemental_dataset = None


def get_supplemental_dataset() -> SupplementalDataset:
    """보조 데이터셋 인스턴스 반환"""
    global _supplemental_dataset
    if _supplemental_dataset is None:
        _supplemental_dataset = SupplementalDataset.from_file()
    return _supplemental_dataset
