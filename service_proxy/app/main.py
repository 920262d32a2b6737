"""
Business Central proxy service for the Academy for Excellence backend.
"""

from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ProxyConfig, get_proxy_config
from shared.errors import (
    UPSTREAM_ERROR_MESSAGE,
    AuthAcquisitionError,
    ErrorResponse,
    UpstreamError,
)
from .adapters.business_central_client import BusinessCentralClient
from .adapters.identity_client import IdentityClient
from .caching.stores import RedisTokenStore, TokenStore
from .caching.token_cache import TokenCacheManager
from .domain.upstream import (
    API_PREFIX,
    UpstreamLocation,
    ascii_target,
    clean_string,
    should_forward_body,
    strip_prefix,
)


PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


class ProxyService(BaseService):
    """Authenticated reverse proxy in front of Business Central."""

    def __init__(
        self,
        config: Optional[ProxyConfig] = None,
        *,
        token_store: Optional[TokenStore] = None,
        identity_client: Optional[IdentityClient] = None,
        upstream_client: Optional[BusinessCentralClient] = None,
    ):
        config = config or get_proxy_config()
        super().__init__("proxy", config)

        if token_store is None and config.cache_enabled:
            token_store = RedisTokenStore(config.redis_url.strip())
        self.token_store = token_store

        self.identity_client = identity_client or IdentityClient(
            config.authority_host,
            config.authority_tenant,
            config.client_id,
            config.client_secret,
            timeout=config.request_timeout,
        )
        self.upstream_client = upstream_client or BusinessCentralClient(
            UpstreamLocation.from_config(config),
            timeout=config.request_timeout,
        )
        self.token_cache = TokenCacheManager(
            self.identity_client,
            scopes=[clean_string(config.scope)],
            store=self.token_store,
            metrics=self.metrics,
        )

        if self.token_store is None:
            self.logger.warning("Token cache disabled, every request acquires a token")

        self._setup_proxy_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.proxy_service = self

    async def on_startup(self):
        if hasattr(self.token_store, "start"):
            await self.token_store.start()

    async def on_shutdown(self):
        self.logger.info("Shutting down proxy")
        if hasattr(self.token_store, "stop"):
            await self.token_store.stop()

    def _setup_proxy_routes(self):
        """Set up the catch-all /api route."""

        @self.app.api_route(f"{API_PREFIX}/{{endpoint:path}}", methods=PROXY_METHODS)
        async def proxy_to_business_central(endpoint: str, request: Request):
            """Forward any /api/* call to Business Central."""
            return await self.forward(request)

    async def forward(self, request: Request) -> Response:
        """Relay one inbound request upstream and map the outcome to a response."""
        method = request.method
        endpoint = clean_string(strip_prefix(self._raw_path(request), API_PREFIX))
        query_string = ascii_target(request.scope.get("query_string", b""))
        query = clean_string(f"?{query_string}" if query_string else "")

        body = await request.body() if should_forward_body(method) else None

        try:
            token = await self.token_cache.get_token()
            with self.metrics.time_operation("upstream_request_duration_seconds", method=method):
                upstream = await self.upstream_client.forward(
                    method,
                    endpoint,
                    query,
                    token,
                    body=body,
                    content_type=request.headers.get("content-type"),
                )
        except AuthAcquisitionError as exc:
            self.logger.error("Error in Business Central proxy", error=exc.message)
            self.metrics.record_error(exc.code)
            return self._error_response(500, exc.message)
        except UpstreamError as exc:
            status_code = exc.upstream_status or 500
            self.metrics.increment_counter(
                "upstream_requests_total", method=method, status_code=str(status_code)
            )
            if exc.upstream_status == 401:
                await self.token_cache.invalidate()
            self.logger.error(
                "Error in Business Central proxy",
                status_code=status_code,
                details=exc.body if exc.body is not None else exc.message
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(status_code=status_code, content=exc.to_response().model_dump())

        self.metrics.increment_counter(
            "upstream_requests_total", method=method, status_code=str(upstream.status_code)
        )
        status_code = 200 if self.config.flatten_success_status else upstream.status_code
        return Response(
            content=upstream.content,
            status_code=status_code,
            media_type=upstream.headers.get("content-type"),
        )

    def _raw_path(self, request: Request) -> str:
        """Inbound path with its original percent-encoding."""
        raw_path = request.scope.get("raw_path")
        if raw_path:
            return ascii_target(raw_path.split(b"?", 1)[0])
        return request.url.path

    def _error_response(self, status_code: int, details: Any) -> JSONResponse:
        envelope = ErrorResponse(error=UPSTREAM_ERROR_MESSAGE, details=details)
        return JSONResponse(status_code=status_code, content=envelope.model_dump())

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check proxy dependencies."""
        dependencies = {}
        if self.token_store is None:
            dependencies["token_cache"] = "disabled"
        elif hasattr(self.token_store, "health_check"):
            dependencies["token_cache"] = "ok" if await self.token_store.health_check() else "error"
        else:
            dependencies["token_cache"] = "ok"
        return dependencies


def create_app(config: Optional[ProxyConfig] = None, **collaborators):
    """Create FastAPI application."""
    service = ProxyService(config, **collaborators)
    return service.app


if __name__ == "__main__":
    service = ProxyService()
    service.run()
