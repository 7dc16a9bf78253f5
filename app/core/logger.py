"""
로깅 설정 및 관리 모듈

애플리케이션 전체의 로깅을 중앙에서 관리합니다.
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Optional

from config.settings import LoggingConfig, get_logging_config


_configured = False


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """콘솔 + 회전 파일 핸들러 설정 (프로세스당 한 번)"""
    global _configured
    if _configured:
        return

    config = config or get_logging_config()
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = logging.Formatter(config.format)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    # 콘솔 핸들러
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_dir = Path(config.log_dir)
    log_dir.mkdir(exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")

    # 파일 핸들러 (일반 로그)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / f"{config.file_prefix}_{today}.log",
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # 에러 로그 파일 핸들러
    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / f"{config.file_prefix}_error_{today}.log",
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)

    _configured = True


class PipelineLogger:
    """수집 파이프라인 단계별 로그 출력기"""

    def __init__(self, name: str = "pipeline"):
        self.logger = logging.getLogger(name)

    def log_pipeline_start(self, pipeline: str, region: str) -> None:
        """파이프라인 시작 로그"""
        self.logger.info(f"파이프라인 시작 - {pipeline}, 지역: {region}")

    def log_pipeline_complete(
        self, pipeline: str, record_count: int, duration: float
    ) -> None:
        """파이프라인 완료 로그"""
        self.logger.info(
            f"파이프라인 완료 - {pipeline}, 결과: {record_count}건, 소요시간: {duration:.2f}초"
        )

    def log_pipeline_failure(
        self, pipeline: str, error_message: str, duration: float
    ) -> None:
        """파이프라인 실패 로그"""
        self.logger.error(
            f"파이프라인 실패 - {pipeline}, 오류: {error_message}, 소요시간: {duration:.2f}초"
        )

    def log_api_call(
        self,
        endpoint: str,
        status_code: Optional[int] = None,
        duration: Optional[float] = None,
    ) -> None:
        """API 호출 로그"""
        message = f"API 호출 - {endpoint}"
        if status_code:
            message += f", 상태코드: {status_code}"
        if duration:
            message += f", 응답시간: {duration:.3f}초"
        self.logger.debug(message)

    def log_batch_progress(
        self, chunk_index: int, chunk_total: int, succeeded: int, failed: int
    ) -> None:
        """키워드 배치 진행 로그"""
        self.logger.info(
            f"키워드 배치 {chunk_index}/{chunk_total} 완료 - 누적 성공: {succeeded}, 실패: {failed}"
        )

    def log_cache_event(self, event: str, key: str, detail: str = "") -> None:
        """캐시 hit/miss/skip 로그"""
        message = f"캐시 {event} - {key}"
        if detail:
            message += f" ({detail})"
        self.logger.info(message)
