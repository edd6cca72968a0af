"""캐시 저장소 모듈."""

from gh_info.storage.memory import CacheEntry, TTLCache

__all__ = ["CacheEntry", "TTLCache"]
