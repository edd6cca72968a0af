"""인메모리 TTL 캐시 모듈."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """캐시 항목."""

    value: Any
    expires_at: float


class TTLCache:
    """항목별 만료 시간을 가지는 인메모리 캐시.

    만료는 읽는 시점에 검사한다. 만료된 항목은 없는 항목과 똑같이 취급되고
    그 자리에서 삭제된다. 값으로 None은 저장할 수 없다 (None이 miss를 뜻함).

    get/set은 await 지점이 없으므로 이벤트 루프 안에서 원자적이다.
    get_or_load는 키별 잠금으로 같은 키의 적재만 직렬화하고, 서로 다른
    키는 서로를 기다리지 않는다. 적재가 끝나고 기다리는 요청이 없으면
    그 키의 잠금은 삭제된다.
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            default_ttl: 기본 유효 시간 (초)
            clock: 현재 시각을 돌려주는 함수. 테스트에서 교체한다.
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: dict[Hashable, CacheEntry] = {}
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: Hashable) -> Any | None:
        """유효한 값을 반환한다. 없거나 만료되었으면 None."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._store[key]
            logger.debug(f"Cache entry expired: {key}")
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: float | None = None) -> None:
        """값을 저장한다. 같은 키의 기존 항목은 덮어쓴다."""
        if value is None:
            raise ValueError("cannot cache None")
        ttl = self.default_ttl if ttl is None else ttl
        self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    async def get_or_load(
        self,
        key: Hashable,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """캐시에 값이 있으면 반환하고, 없으면 loader로 가져와 저장한다.

        같은 키로 동시에 들어온 요청은 먼저 온 요청의 적재가 끝날 때까지
        기다린 뒤 캐시를 다시 확인한다. loader가 예외를 던지면 아무것도
        저장하지 않고 그대로 전파한다.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                cached = self.get(key)
                if cached is not None:
                    return cached
                value = await loader()
                self.set(key, value, ttl)
                return value
        finally:
            # 기다리는 요청이 없으면 잠금을 버린다
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def clear(self) -> None:
        """모든 항목을 삭제한다."""
        self._store.clear()
