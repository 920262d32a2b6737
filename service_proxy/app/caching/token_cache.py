"""
Token cache manager for the upstream bearer token.
"""

import asyncio
from typing import TYPE_CHECKING, Optional, Sequence

from shared.logging import get_logger
from shared.errors import AuthAcquisitionError
from ..domain.tokens import AccessToken
from .stores import TokenStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.identity_client import IdentityClient
    from shared.metrics import MetricsCollector


CACHE_KEY = "bc_access_token"
FALLBACK_TTL_SECONDS = 3300


class TokenCacheManager:
    """
    Get-or-refresh access to the upstream bearer token.

    Reads go to the external store first and trust its TTL; there is no local
    expiry check on a hit. A miss, a disabled store, or any store failure
    falls through to a client-credential acquisition. Concurrent misses in
    this process share one in-flight acquisition.
    """

    def __init__(
        self,
        identity_client: "IdentityClient",
        scopes: Sequence[str],
        store: Optional[TokenStore] = None,
        *,
        metrics: Optional["MetricsCollector"] = None,
        cache_key: str = CACHE_KEY,
        fallback_ttl: int = FALLBACK_TTL_SECONDS,
    ):
        self.identity_client = identity_client
        self.scopes = list(scopes)
        self.store = store
        self.metrics = metrics
        self.cache_key = cache_key
        self.fallback_ttl = fallback_ttl
        self.logger = get_logger("proxy.token_cache")
        self._inflight: Optional["asyncio.Future[str]"] = None

    async def get_token(self) -> str:
        """Return a bearer token, acquiring and caching a new one when needed."""
        cached = await self._read_cached()
        if cached is not None:
            return cached

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._acquire_and_store())
            self._inflight.add_done_callback(self._clear_inflight)
        return await asyncio.shield(self._inflight)

    async def invalidate(self) -> None:
        """Drop the cached token so the next call re-acquires."""
        if self.store is None:
            return
        try:
            await self.store.delete(self.cache_key)
            self.logger.info("Cached token invalidated", cache_key=self.cache_key)
        except Exception as exc:
            self.logger.warning("Failed to invalidate cached token", error=str(exc))

    async def _read_cached(self) -> Optional[str]:
        if self.store is None:
            self.logger.debug("Token cache disabled")
            self._count("token_cache_misses_total")
            return None

        try:
            raw = await self.store.get(self.cache_key)
        except Exception as exc:
            self.logger.warning("Token cache read error", error=str(exc))
            self._count("token_cache_misses_total")
            return None

        if not raw:
            self.logger.info("Token cache miss", cache_key=self.cache_key)
            self._count("token_cache_misses_total")
            return None

        try:
            token = AccessToken.deserialize(raw)
        except (TypeError, ValueError) as exc:
            self.logger.warning("Discarding malformed cached token", error=str(exc))
            self._count("token_cache_misses_total")
            return None

        self.logger.info("Retrieved token from cache", cache_key=self.cache_key)
        self._count("token_cache_hits_total")
        return token.value

    async def _acquire_and_store(self) -> str:
        self.logger.info("Acquiring new token from identity provider")
        try:
            token = await self.identity_client.acquire_token(self.scopes)
        except AuthAcquisitionError as exc:
            self.logger.error("Failed to acquire token", error=exc.message, details=exc.details)
            self._count("token_acquisitions_total", status="failure")
            raise

        self._count("token_acquisitions_total", status="success")
        self.logger.info("Successfully acquired new token", expires_at=token.expires_at)

        if self.store is not None:
            await self._write_cached(token)
        return token.value

    async def _write_cached(self, token: AccessToken) -> None:
        ttl = token.cache_ttl(self.fallback_ttl)
        if ttl <= 0:
            self.logger.warning("Acquired token already expired, not caching")
            return

        try:
            await self.store.set(self.cache_key, token.serialize(), ttl)
            self.logger.info("Token cached", cache_key=self.cache_key, ttl=ttl)
        except Exception as exc:
            self.logger.warning("Failed to cache token", error=str(exc))

    def _clear_inflight(self, future: "asyncio.Future[str]") -> None:
        if self._inflight is future:
            self._inflight = None
        if not future.cancelled():
            # Mark the outcome as retrieved when every waiter has gone away
            future.exception()

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, **labels)
