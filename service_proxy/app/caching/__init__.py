"""
Proxy caching package.

Holds the upstream bearer token between requests. The external store is an
optimisation only; every failure path degrades to acquiring a fresh token.
"""

from .stores import RedisTokenStore, TokenStore
from .token_cache import CACHE_KEY, FALLBACK_TTL_SECONDS, TokenCacheManager

__all__ = [
    "CACHE_KEY",
    "FALLBACK_TTL_SECONDS",
    "RedisTokenStore",
    "TokenCacheManager",
    "TokenStore",
]
