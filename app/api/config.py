"""
통합 조회 API 서버 설정
"""

import os
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """API 설정"""

    # 기본 설정
    SERVICE_NAME: str = "pet-tour-aggregator"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # 서버 설정
    HOST: str = os.getenv("TOUR_API_SERVER_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("TOUR_API_SERVER_PORT", "8000"))

    # CORS - 모든 오리진 허용
    CORS_ORIGINS: List[str] = ["*"]

    # 로그 설정
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # 추가 환경 변수 무시

settings = Settings()
