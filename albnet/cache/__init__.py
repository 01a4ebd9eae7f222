"""
albnet/cache - 리소스 해석 결과 캐시

사용법:
    from albnet.cache import TTLCache

    cache = TTLCache()
    vpcs = cache.namespace("EC2.GetVPC", ttl=3600)
"""

from .ttl import CacheEntry, CacheNamespace, TTLCache

__all__ = [
    "CacheEntry",
    "CacheNamespace",
    "TTLCache",
]
