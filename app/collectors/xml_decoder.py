"""
관광 API XML 응답 디코더

스키마가 일정하지 않은 관광 API 응답을 정규식 기반으로 관대하게 해석합니다.
예외를 던지지 않고 성공(DecodedResponse) 또는 실패(DecodeFailure) 값을 돌려줍니다.
"""

import html
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from config.constants import SERVICE_ERROR_MARKERS, SUCCESS_RESULT_CODES


class DecodeFailureKind(Enum):
    """디코딩 실패 유형"""

    SERVICE_ERROR = "service_error"  # HTTP 200 + 서비스 오류 본문
    PARSE_ERROR = "parse_error"  # 해석 불가


@dataclass
class ResponseHeader:
    result_code: str = ""
    result_msg: str = ""

    @property
    def is_success(self) -> bool:
        # 헤더가 없는 응답은 오류 표식이 없는 한 정상으로 본다
        return not self.result_code or self.result_code in SUCCESS_RESULT_CODES


@dataclass
class ResponseBody:
    items: List[Dict[str, str]] = field(default_factory=list)
    total_count: Optional[int] = None
    num_of_rows: Optional[int] = None
    page_no: Optional[int] = None
    truncated: bool = False


@dataclass
class DecodedResponse:
    """정상 해석 결과"""

    header: ResponseHeader
    body: ResponseBody
    error: bool = False


@dataclass
class DecodeFailure:
    """해석 실패 또는 서비스 오류"""

    kind: DecodeFailureKind
    message: str
    preview: str = ""
    error: bool = True


DecodeResult = Union[DecodedResponse, DecodeFailure]


class ResponseDecoder(ABC):
    """응답 디코더 인터페이스"""

    @abstractmethod
    def decode(self, text: Union[str, bytes, None]) -> DecodeResult:
        raise NotImplementedError


_ITEM_PATTERN = re.compile(r"<item\b[^>]*>(.*?)</item\s*>", re.DOTALL)
_FIELD_PATTERN = re.compile(
    r"<([A-Za-z_][\w.\-]*)\b[^>/]*(?:/>|>(.*?)</\1\s*>)", re.DOTALL
)
_CDATA_PATTERN = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)


def _tag_value(text: str, tag: str) -> Optional[str]:
    match = re.search(rf"<{tag}\b[^>]*>(.*?)</{tag}\s*>", text, re.DOTALL)
    if not match:
        return None
    return _clean_value(match.group(1))


def _clean_value(raw: Optional[str]) -> str:
    if raw is None:
        return ""
    value = _CDATA_PATTERN.sub(lambda m: m.group(1), raw)
    return html.unescape(value).strip()


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class TolerantXMLDecoder(ResponseDecoder):
    """정규식 기반 관대한 XML 디코더"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def decode(self, text: Union[str, bytes, None]) -> DecodeResult:
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        # BOM은 strip()으로 제거되지 않는다
        text = (text or "").strip().lstrip("\ufeff").strip()

        if not text:
            return DecodeFailure(DecodeFailureKind.PARSE_ERROR, "빈 응답")

        preview = text[:200]

        if any(marker in text for marker in SERVICE_ERROR_MARKERS):
            return DecodeFailure(
                DecodeFailureKind.SERVICE_ERROR,
                self._service_error_message(text),
                preview,
            )

        if not text.startswith("<"):
            return DecodeFailure(
                DecodeFailureKind.PARSE_ERROR, "XML 형식이 아닌 응답", preview
            )

        has_response = "<response" in text
        items = [self._parse_item(block) for block in _ITEM_PATTERN.findall(text)]
        if not has_response and not items:
            return DecodeFailure(
                DecodeFailureKind.PARSE_ERROR, "인식할 수 없는 XML 구조", preview
            )

        header = ResponseHeader(
            result_code=_tag_value(text, "resultCode") or "",
            result_msg=_tag_value(text, "resultMsg") or "",
        )
        truncated = has_response and "</response>" not in text
        if truncated:
            self.logger.warning(f"잘린 XML 응답 - 완전한 항목 {len(items)}건만 사용")

        body = ResponseBody(
            items=items,
            total_count=_to_int(_tag_value(text, "totalCount")),
            num_of_rows=_to_int(_tag_value(text, "numOfRows")),
            page_no=_to_int(_tag_value(text, "pageNo")),
            truncated=truncated,
        )
        return DecodedResponse(header=header, body=body)

    def _parse_item(self, block: str) -> Dict[str, str]:
        """<item> 내부의 평평한 필드 추출 (알 수 없는 태그도 보존)"""
        fields: Dict[str, str] = {}
        for match in _FIELD_PATTERN.finditer(block):
            name, raw = match.group(1), match.group(2)
            fields.setdefault(name, _clean_value(raw))
        return fields

    def _service_error_message(self, text: str) -> str:
        parts = [
            value
            for value in (
                _tag_value(text, "errMsg"),
                _tag_value(text, "returnAuthMsg"),
                _tag_value(text, "resultMsg"),
            )
            if value
        ]
        reason_code = _tag_value(text, "returnReasonCode")
        message = ": ".join(dict.fromkeys(parts)) or "Unknown API error"
        if reason_code:
            message += f" (코드: {reason_code})"
        return message
