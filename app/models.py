"""
장소 데이터 모델

관광 API 응답 항목, 보조 데이터셋 항목, 중복 판정 키를 정의합니다.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Provenance(str, Enum):
    """레코드 출처"""

    AREA_LIST = "area_list"
    KEYWORD_SEARCH = "keyword_search"
    SUPPLEMENTAL = "supplemental"

    @property
    def precedence(self) -> int:
        """동일 장소 충돌 시 우선순위 (작을수록 우선)"""
        return _PRECEDENCE[self]


_PRECEDENCE = {
    Provenance.AREA_LIST: 0,
    Provenance.KEYWORD_SEARCH: 1,
    Provenance.SUPPLEMENTAL: 2,
}

# 관광 API 항목 중 모델이 직접 다루는 필드
KNOWN_FIELDS = (
    "contentid",
    "contenttypeid",
    "title",
    "addr1",
    "addr2",
    "zipcode",
    "mapx",
    "mapy",
    "mlevel",
    "tel",
    "areacode",
    "sigungucode",
    "cat1",
    "cat2",
    "cat3",
    "firstimage",
    "firstimage2",
    "createdtime",
    "modifiedtime",
)

MbtiValue = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class CompositeIdentity:
    """장소 중복 판정 키

    contentid가 있으면 그것만 사용하고, 없으면 (title, mapx, mapy)로 대체합니다.
    보조 데이터셋에서 단독으로 추가되는 장소는 (title, addr1)을 사용합니다.
    """

    kind: str
    parts: Tuple[str, ...]

    @classmethod
    def of(cls, record: "PlaceRecord") -> "CompositeIdentity":
        if record.contentid:
            return cls("id", (record.contentid,))
        return cls("title_xy", (record.title, record.mapx, record.mapy))

    @classmethod
    def of_title_address(cls, title: str, address: str) -> "CompositeIdentity":
        return cls("title_addr", (title, address))


@dataclass(frozen=True)
class PlaceRecord:
    """관광 API 장소 레코드"""

    contentid: str = ""
    title: str = ""
    addr1: str = ""
    addr2: str = ""
    mapx: str = ""
    mapy: str = ""
    tel: str = ""
    contenttypeid: str = ""
    areacode: str = ""
    sigungucode: str = ""
    cat1: str = ""
    cat2: str = ""
    cat3: str = ""
    zipcode: str = ""
    mlevel: str = ""
    firstimage: str = ""
    firstimage2: str = ""
    createdtime: str = ""
    modifiedtime: str = ""
    extra: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    source_keyword: Optional[str] = None
    provenance: Optional[Provenance] = None

    # 보조 데이터셋 분류 필드
    location_gubun: Optional[str] = None
    mbti: Optional[MbtiValue] = None
    holiday: Optional[str] = None
    supplemental: bool = False

    @classmethod
    def from_item(
        cls,
        item: Dict[str, Any],
        provenance: Optional[Provenance] = None,
        source_keyword: Optional[str] = None,
    ) -> "PlaceRecord":
        """API 응답 항목(필드→값 사전)으로부터 레코드 생성"""
        known = {}
        extra = {}
        for key, value in (item or {}).items():
            text = "" if value is None else str(value).strip()
            if key in KNOWN_FIELDS:
                known[key] = text
            else:
                extra[key] = text
        return cls(
            **known,
            extra=extra,
            provenance=provenance,
            source_keyword=source_keyword,
        )

    @property
    def identity(self) -> CompositeIdentity:
        return CompositeIdentity.of(self)

    @property
    def has_title(self) -> bool:
        return bool(self.title and self.title.strip())

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(경도, 위도) - 파싱 실패나 0 좌표는 위치 없음으로 취급"""
        try:
            x = float(self.mapx)
            y = float(self.mapy)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        if x == 0 or y == 0:
            return None
        return x, y

    def with_provenance(self, provenance: Provenance) -> "PlaceRecord":
        return replace(self, provenance=provenance)

    def enriched_with(self, supplemental: "SupplementalRecord") -> "PlaceRecord":
        """보조 데이터셋 분류 필드를 붙인 사본"""
        return replace(
            self,
            location_gubun=supplemental.location_gubun,
            mbti=supplemental.mbti,
            holiday=supplemental.holiday,
            supplemental=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        """응답용 사전 (관광 API 필드명 유지)"""
        data: Dict[str, Any] = {name: getattr(self, name) for name in KNOWN_FIELDS}
        for key, value in self.extra.items():
            data.setdefault(key, value)
        if self.source_keyword is not None:
            data["sourceKeyword"] = self.source_keyword
        data["provenance"] = self.provenance.value if self.provenance else None
        data["locationGubun"] = self.location_gubun
        data["mbti"] = list(self.mbti) if isinstance(self.mbti, tuple) else self.mbti
        data["holiday"] = self.holiday
        return data


@dataclass(frozen=True)
class SupplementalRecord:
    """번들 보조 데이터셋 항목 (제목 기준)"""

    title: str
    addr1: str = ""
    mapx: str = ""
    mapy: str = ""
    tel: str = ""
    location_gubun: Optional[str] = None
    mbti: Optional[MbtiValue] = None
    holiday: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SupplementalRecord":
        mbti = data.get("mbti")
        if isinstance(mbti, list):
            mbti = tuple(str(value) for value in mbti)
        return cls(
            title=str(data.get("title", "")).strip(),
            addr1=str(data.get("addr1", "") or "").strip(),
            mapx=str(data.get("mapx", "") or "").strip(),
            mapy=str(data.get("mapy", "") or "").strip(),
            tel=str(data.get("tel", "") or "").strip(),
            location_gubun=data.get("locationGubun"),
            mbti=mbti,
            holiday=data.get("holiday"),
        )

    @property
    def identity(self) -> CompositeIdentity:
        return CompositeIdentity.of_title_address(self.title, self.addr1)

    def to_place_record(self) -> PlaceRecord:
        """업스트림에 없는 경우 단독으로 추가할 레코드"""
        return PlaceRecord(
            title=self.title,
            addr1=self.addr1,
            mapx=self.mapx,
            mapy=self.mapy,
            tel=self.tel,
            provenance=Provenance.SUPPLEMENTAL,
            location_gubun=self.location_gubun,
            mbti=self.mbti,
            holiday=self.holiday,
            supplemental=True,
        )


def records_to_dicts(records: List[PlaceRecord]) -> List[Dict[str, Any]]:
    return [record.to_dict() for record in records]
