"""
통합 오류 처리 프레임워크

프로젝트 전체에서 일관된 오류 분류와 로깅용 컨텍스트를 제공합니다.
"""

import sys
import traceback
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


class ErrorSeverity(Enum):
    """오류 심각도 수준"""

    CRITICAL = "critical"  # 서비스 중단 수준
    HIGH = "high"  # 주요 기능 영향
    MEDIUM = "medium"  # 일부 기능 영향
    LOW = "low"  # 경미한 문제


class ErrorCategory(Enum):
    """오류 카테고리"""

    API_ERROR = "api"  # 상위 API 의미 오류
    NETWORK_ERROR = "network"  # 전송 계층 오류
    PARSE_ERROR = "parse"  # 응답 해석 오류
    CONFIGURATION_ERROR = "config"  # 설정 관련
    SYSTEM_ERROR = "system"  # 기타


SENSITIVE_KEYS = {
    "api_key",
    "apikey",
    "password",
    "token",
    "secret",
    "auth",
    "servicekey",
}


def mask_value(value: Any) -> str:
    """민감한 값을 앞뒤 세 글자만 남기고 가림"""
    if isinstance(value, str) and len(value) > 6:
        return f"{value[:3]}***{value[-3:]}"
    return "***"


def sanitize_parameters(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """로그 출력용으로 민감 정보 제거"""
    sanitized = {}
    for key, value in (params or {}).items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            sanitized[key] = mask_value(value)
        else:
            sanitized[key] = value
    return sanitized


@dataclass
class ErrorContext:
    """오류 컨텍스트 정보"""

    error_id: str = ""
    operation: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (JSON 직렬화용)"""
        return {
            "error_id": self.error_id,
            "operation": self.operation,
            "parameters": sanitize_parameters(self.parameters),
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }


class PetTourError(Exception):
    """프로젝트 기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: str = "PT_UNKNOWN",
        category: ErrorCategory = ErrorCategory.SYSTEM_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause

        if not self.context.error_id:
            self.context.error_id = self._generate_error_id()

    def _generate_error_id(self) -> str:
        """고유 오류 ID 생성"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{self.error_code}_{timestamp}_{id(self) % 10000:04d}"

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            "error_id": self.context.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if sys.exc_info()[0] else None,
        }


# ========== 특화된 예외 클래스들 ==========


class APIError(PetTourError):
    """API 관련 오류"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: str = "",
        **kwargs,
    ):
        kwargs.setdefault("error_code", f"PT_API_{status_code or 'ERROR'}")
        kwargs.setdefault("category", ErrorCategory.API_ERROR)
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint
        self.context.metadata.update({"status_code": status_code, "endpoint": endpoint})


class ServiceResponseError(APIError):
    """HTTP 200 응답 안에 포함된 서비스 오류"""

    def __init__(self, message: str, result_code: str = "", **kwargs):
        kwargs.setdefault("error_code", ErrorCodes.API_SERVICE_ERROR)
        super().__init__(message, status_code=200, **kwargs)
        self.result_code = result_code
        self.context.metadata.update({"result_code": result_code})


class TransportError(PetTourError):
    """DNS/연결/타임아웃 등 전송 계층 오류"""

    def __init__(
        self, message: str, url: str = "", timeout: Optional[float] = None, **kwargs
    ):
        kwargs.setdefault("error_code", ErrorCodes.NETWORK_CONNECTION_FAILED)
        super().__init__(message, category=ErrorCategory.NETWORK_ERROR, **kwargs)
        self.url = url
        self.timeout = timeout
        self.context.metadata.update({"url": url, "timeout": timeout})


class ResponseParseError(PetTourError):
    """XML 응답 해석 실패"""

    def __init__(self, message: str, preview: str = "", **kwargs):
        super().__init__(
            message,
            error_code=ErrorCodes.API_RESPONSE_INVALID,
            category=ErrorCategory.PARSE_ERROR,
            **kwargs,
        )
        self.preview = preview[:200]
        self.context.metadata.update({"preview": self.preview})


class ConfigurationError(PetTourError):
    """설정 관련 오류"""

    def __init__(self, message: str, config_key: str = "", **kwargs):
        super().__init__(
            message,
            error_code=ErrorCodes.CONFIG_REQUIRED_MISSING,
            category=ErrorCategory.CONFIGURATION_ERROR,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.config_key = config_key
        self.context.metadata.update({"config_key": config_key})


# ========== 오류 처리 유틸리티 ==========


class RetryConfig:
    """재시도 설정"""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 2.0,
        exponential_base: float = 2.0,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def calculate_delay(self, attempt: int) -> float:
        """재시도 지연 시간 계산 (지수 백오프)"""
        delay = self.base_delay * (self.exponential_base ** (attempt - 1))
        return min(delay, self.max_delay)


# ========== 오류 코드 상수 ==========


class ErrorCodes:
    """표준 오류 코드"""

    API_SERVICE_ERROR = "PT_API_002"
    API_RESPONSE_INVALID = "PT_API_003"

    NETWORK_TIMEOUT = "PT_NET_001"
    NETWORK_CONNECTION_FAILED = "PT_NET_002"

    CONFIG_REQUIRED_MISSING = "PT_CFG_001"
