"""
Identity provider client for the OAuth2 client-credential grant.
"""

import httpx
from datetime import datetime, timedelta, timezone
from typing import Sequence

from shared.logging import get_logger
from shared.errors import AuthAcquisitionError
from ..domain.tokens import AccessToken
from .business_central_client import decode_body


class IdentityClient:
    """Client for acquiring app-only tokens from the identity provider."""

    def __init__(
        self,
        authority_host: str,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        timeout: float = 30.0,
    ):
        self.authority_host = authority_host.rstrip('/')
        self.tenant_id = tenant_id.strip()
        self.client_id = client_id.strip()
        self.client_secret = client_secret.strip()
        self.timeout = timeout
        self.logger = get_logger("proxy.identity_client")

    @property
    def token_url(self) -> str:
        return f"{self.authority_host}/{self.tenant_id}/oauth2/v2.0/token"

    async def acquire_token(self, scopes: Sequence[str]) -> AccessToken:
        """Exchange client credentials for a bearer token."""
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": " ".join(scopes),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.token_url, data=data)
        except httpx.HTTPError as e:
            self.logger.error("Identity provider HTTP error", error=str(e))
            raise AuthAcquisitionError(
                f"Identity provider unavailable: {e}",
                details={"http_error": str(e)}
            ) from e

        if response.status_code != 200:
            body = decode_body(response)
            self.logger.error(
                "Identity provider rejected token request",
                status_code=response.status_code,
                response=body
            )
            raise AuthAcquisitionError(
                f"Identity provider error: {response.status_code}",
                details={"status_code": response.status_code, "body": body}
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthAcquisitionError(
                "Identity provider returned a non-JSON token response",
                details={"body": response.text}
            ) from e

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise AuthAcquisitionError("Identity provider response has no access_token")

        expires_at = None
        expires_in = payload.get("expires_in")
        if expires_in is not None:
            try:
                expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
            except (TypeError, ValueError):
                self.logger.warning("Ignoring unparseable expires_in", expires_in=expires_in)

        return AccessToken(value=access_token, expires_at=expires_at)
