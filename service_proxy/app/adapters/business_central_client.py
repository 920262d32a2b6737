"""
Business Central client for the proxy.
"""

from typing import Any, Optional

import httpx

from shared.logging import get_logger
from shared.errors import UpstreamError
from ..domain.upstream import UpstreamLocation, should_forward_body


def decode_body(response: httpx.Response) -> Any:
    """Response body as JSON when it parses, else as text."""
    try:
        return response.json()
    except ValueError:
        return response.text


class BusinessCentralClient:
    """Relays proxied calls to the company-scoped Business Central API."""

    def __init__(self, location: UpstreamLocation, timeout: float = 30.0):
        self.location = location
        self.timeout = timeout
        self.logger = get_logger("proxy.bc_client")

    async def forward(
        self,
        method: str,
        endpoint: str,
        query: str,
        token: str,
        body: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> httpx.Response:
        """
        Send ``method`` to the upstream URL for ``endpoint`` + ``query``.

        ``body`` is dropped unless the method is POST, PUT or PATCH.
        Returns the upstream response on 2xx and raises ``UpstreamError``
        for any other status or a transport failure.
        """
        url = self.location.build_url(endpoint, query)
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        content = None
        if should_forward_body(method) and body is not None:
            content = body
            if content_type:
                headers["Content-Type"] = content_type

        self.logger.info("Calling Business Central", method=method.upper(), url=url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method.upper(), url, headers=headers, content=content)
        except httpx.HTTPError as e:
            self.logger.error("Business Central HTTP error", url=url, error=str(e))
            raise UpstreamError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            body_detail = decode_body(response)
            self.logger.error(
                "Business Central request failed",
                url=url,
                status_code=response.status_code,
                response=body_detail
            )
            raise UpstreamError(
                f"Unexpected status {response.status_code}",
                status_code=response.status_code,
                body=body_detail if body_detail != "" else None
            )

        return response
