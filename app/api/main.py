"""
Pet Tour Aggregator API Server

일반 관광 정보와 반려동물 동반 장소를 통합 조회하는 REST API 서버
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from app.api.routers import tour
from app.api.config import settings
from app.collectors.tour_api_client import TourAPIClient
from app.core.logger import setup_logging
from app.services.pet_place_aggregator import create_aggregator
import uvicorn
import logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    setup_logging()
    logger.info(f"🚀 Pet Tour Aggregator API 시작 - Port: {settings.PORT}")
    logger.info(f"환경: {settings.ENVIRONMENT}")

    client = TourAPIClient()
    await client.open()
    tour.aggregator = create_aggregator(client)

    yield

    # 종료 시
    logger.info("Pet Tour Aggregator API 종료")
    await client.close()
    tour.aggregator = None


# FastAPI 앱 생성
app = FastAPI(
    title="Pet Tour Aggregator API",
    description="일반/반려동물 관광 정보 통합 조회 API",
    version=settings.VERSION,
    lifespan=lifespan,
)

# CORS 설정 - 모든 오리진 허용
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    max_age=3600,
)

# 라우터 등록
app.include_router(tour.router, prefix="/api/tour", tags=["tour"])


@app.get("/")
async def root():
    return {
        "message": "Pet Tour Aggregator API",
        "version": settings.VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
    }


if __name__ == "__main__":
    uvicorn.run(
        "app.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
