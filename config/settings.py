"""
애플리케이션 설정 관리 모듈

환경 변수와 설정 값들을 중앙에서 관리합니다.
"""

import os
from dataclasses import dataclass
from urllib.parse import unquote

from dotenv import load_dotenv

# 환경 변수 로드
load_dotenv()


@dataclass
class TourAPIConfig:
    """관광 API 설정"""

    service_key: str
    general_base_url: str = "https://apis.data.go.kr/B551011/KorService2"
    pet_base_url: str = "https://apis.data.go.kr/B551011/KorPetTourService"
    mobile_os: str = "ETC"
    mobile_app: str = "PetTravelApp"
    timeout: float = 10.0
    user_agent: str = "PetTravelApp/1.0"

    @property
    def normalized_service_key(self) -> str:
        """URL 인코딩된 상태로 발급된 키를 한 번 디코딩한 값"""
        key = (self.service_key or "").strip()
        try:
            return unquote(key)
        except (TypeError, ValueError):
            return key


@dataclass
class KeywordBatchConfig:
    """키워드 배치 수집 설정"""

    batch_size: int = 10
    max_concurrency: int = 10
    max_attempts: int = 3
    retry_delay: float = 0.5
    max_retry_delay: float = 2.0
    chunk_pause: float = 0.3
    items_per_keyword: int = 3
    rows_per_keyword: int = 5


@dataclass
class AreaListConfig:
    """지역 기반 목록 페이징 설정"""

    rows_per_page: int = 100
    max_pages: int = 5
    page_pause: float = 0.3


@dataclass
class MergeConfig:
    """병합 결과 건수 범위"""

    max_places: int = 100
    min_places: int = 90


@dataclass
class CacheConfig:
    """캐시 설정"""

    backend: str = "memory"
    ttl_seconds: int = 86400  # 24시간
    max_places: int = 150
    key_prefix: str = "pet_places"
    redis_url: str = "redis://localhost:6379/0"


@dataclass
class LoggingConfig:
    """로깅 설정"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_prefix: str = "pet_tour_aggregator"
    log_dir: str = "logs"
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5


def get_tour_api_config() -> TourAPIConfig:
    """관광 API 설정 조회"""
    return TourAPIConfig(
        service_key=os.getenv("KOREA_TOUR_API_KEY", os.getenv("KTO_API_KEY", "")),
        general_base_url=os.getenv(
            "TOUR_API_GENERAL_BASE_URL", "https://apis.data.go.kr/B551011/KorService2"
        ),
        pet_base_url=os.getenv(
            "TOUR_API_PET_BASE_URL",
            "https://apis.data.go.kr/B551011/KorPetTourService",
        ),
        mobile_os=os.getenv("TOUR_API_MOBILE_OS", "ETC"),
        mobile_app=os.getenv("TOUR_API_MOBILE_APP", "PetTravelApp"),
        timeout=float(os.getenv("TOUR_API_TIMEOUT", "10")),
        user_agent=os.getenv("TOUR_API_USER_AGENT", "PetTravelApp/1.0"),
    )


def get_keyword_batch_config() -> KeywordBatchConfig:
    """키워드 배치 설정 조회"""
    return KeywordBatchConfig(
        batch_size=int(os.getenv("KEYWORD_BATCH_SIZE", "10")),
        max_concurrency=int(os.getenv("KEYWORD_MAX_CONCURRENCY", "10")),
        max_attempts=int(os.getenv("KEYWORD_MAX_ATTEMPTS", "3")),
        retry_delay=float(os.getenv("KEYWORD_RETRY_DELAY", "0.5")),
        max_retry_delay=float(os.getenv("KEYWORD_MAX_RETRY_DELAY", "2.0")),
        chunk_pause=float(os.getenv("KEYWORD_CHUNK_PAUSE", "0.3")),
        items_per_keyword=int(os.getenv("KEYWORD_ITEMS_PER_KEYWORD", "3")),
        rows_per_keyword=int(os.getenv("KEYWORD_ROWS_PER_KEYWORD", "5")),
    )


def get_area_list_config() -> AreaListConfig:
    """지역 목록 페이징 설정 조회"""
    return AreaListConfig(
        rows_per_page=int(os.getenv("AREA_LIST_ROWS_PER_PAGE", "100")),
        max_pages=int(os.getenv("AREA_LIST_MAX_PAGES", "5")),
        page_pause=float(os.getenv("AREA_LIST_PAGE_PAUSE", "0.3")),
    )


def get_merge_config() -> MergeConfig:
    """병합 설정 조회"""
    return MergeConfig(
        max_places=int(os.getenv("MERGE_MAX_PLACES", "100")),
        min_places=int(os.getenv("MERGE_MIN_PLACES", "90")),
    )


def get_cache_config() -> CacheConfig:
    """캐시 설정 조회"""
    return CacheConfig(
        backend=os.getenv("CACHE_BACKEND", "memory").lower(),
        ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", "86400")),
        max_places=int(os.getenv("CACHE_MAX_PLACES", "150")),
        key_prefix=os.getenv("CACHE_KEY_PREFIX", "pet_places"),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
    )


def get_logging_config() -> LoggingConfig:
    """로깅 설정 조회"""
    return LoggingConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format=os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
        file_prefix=os.getenv("LOG_FILE_PREFIX", "pet_tour_aggregator"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        max_bytes=int(os.getenv("LOG_MAX_BYTES", "10485760")),
        backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
    )
