"""
장소 결과 캐시

조회 형태(지역 + 모드)를 키로 하는 시간 제한 캐시입니다.
파이프라인은 PlaceCache 인터페이스에만 의존하므로 메모리/Redis 구현을 바꿔 끼울 수 있습니다.
"""

import asyncio
import copy
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.logger import PipelineLogger
from config.settings import CacheConfig, get_cache_config

Payload = List[Dict[str, Any]]


def build_cache_key(region: str, mode: str, prefix: str = "pet_places") -> str:
    """페이지 파라미터와 무관한 캐시 키"""
    return f"{prefix}:{region or 'all'}:{mode}"


@dataclass
class CacheEntry:
    key: str
    payload: Payload
    created_at: float


class PlaceCache(ABC):
    """캐시 인터페이스"""

    def __init__(self, ttl_seconds: int, max_places: int):
        self.ttl_seconds = ttl_seconds
        self.max_places = max_places
        self.logger = logging.getLogger(__name__)
        self.pipeline_logger = PipelineLogger("pipeline.cache")
        self._key_locks: Dict[str, asyncio.Lock] = {}

    @abstractmethod
    async def get(self, key: str) -> Optional[Payload]:
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, payload: Payload) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError

    def _is_oversized(self, key: str, payload: Payload) -> bool:
        if len(payload) > self.max_places:
            self.pipeline_logger.log_cache_event(
                "저장 생략",
                key,
                f"{len(payload)}건 > 최대 {self.max_places}건, 중복 제거 이상 가능성",
            )
            return True
        return False

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock
        return lock

    async def get_or_compute(
        self, key: str, factory: Callable[[], Awaitable[Optional[Payload]]]
    ) -> Tuple[Optional[Payload], bool]:
        """(payload, 캐시 적중 여부) - 같은 키의 동시 재계산은 한 번만 수행"""
        cached = await self.get(key)
        if cached is not None:
            self.pipeline_logger.log_cache_event("히트", key)
            return cached, True

        async with self._lock_for(key):
            # 대기 중 다른 요청이 채웠을 수 있다
            cached = await self.get(key)
            if cached is not None:
                self.pipeline_logger.log_cache_event("히트", key, "동시 계산 대기 후")
                return cached, True

            self.pipeline_logger.log_cache_event("미스", key)
            payload = await factory()
            if payload is not None:
                await self.put(key, payload)
            return payload, False


class InMemoryPlaceCache(PlaceCache):
    """프로세스 메모리 캐시 (재시작 시 소멸)"""

    def __init__(
        self,
        ttl_seconds: int = 86400,
        max_places: int = 150,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(ttl_seconds, max_places)
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[Payload]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at >= self.ttl_seconds:
            self._entries.pop(key, None)
            self.pipeline_logger.log_cache_event("만료", key)
            return None
        return copy.deepcopy(entry.payload)

    async def put(self, key: str, payload: Payload) -> bool:
        if self._is_oversized(key, payload):
            return False
        self._entries[key] = CacheEntry(key, copy.deepcopy(payload), self._clock())
        self.pipeline_logger.log_cache_event("저장", key, f"{len(payload)}건")
        return True

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisPlaceCache(PlaceCache):
    """Redis 캐시 - 연결 오류 시 캐시 없이 계속 동작"""

    def __init__(
        self,
        client: "redis.Redis",
        ttl_seconds: int = 86400,
        max_places: int = 150,
    ):
        super().__init__(ttl_seconds, max_places)
        self.client = client

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int, max_places: int) -> "RedisPlaceCache":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
            health_check_interval=30,
        )
        return cls(client, ttl_seconds, max_places)

    async def get(self, key: str) -> Optional[Payload]:
        try:
            value = await self.client.get(key)
        except RedisError as e:
            self.logger.warning(f"캐시 조회 실패 [{key}]: {e}")
            return None
        if value is None:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError) as e:
            self.logger.warning(f"캐시 값 해석 실패 [{key}]: {e}")
            await self.delete(key)
            return None

    async def put(self, key: str, payload: Payload) -> bool:
        if self._is_oversized(key, payload):
            return False
        try:
            await self.client.setex(
                key, self.ttl_seconds, json.dumps(payload, ensure_ascii=False)
            )
        except RedisError as e:
            self.logger.error(f"캐시 저장 실패 [{key}]: {e}")
            return False
        self.pipeline_logger.log_cache_event("저장", key, f"{len(payload)}건")
        return True

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            self.logger.error(f"캐시 삭제 실패 [{key}]: {e}")


def create_place_cache(config: Optional[CacheConfig] = None) -> PlaceCache:
    """설정에 따른 캐시 구현 생성"""
    config = config or get_cache_config()
    if config.backend == "redis":
        return RedisPlaceCache.from_url(config.redis_url, config.ttl_seconds, config.max_places)
    return InMemoryPlaceCache(config.ttl_seconds, config.max_places)
