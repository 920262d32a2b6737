"""
Access token model shared by the identity client and the token cache.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union


@dataclass(frozen=True)
class AccessToken:
    """Bearer token issued by the identity provider."""

    value: str = field(repr=False)
    expires_at: Optional[datetime] = None

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole seconds left before expiry, or None when expiry is unknown."""
        if self.expires_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return int((self.expires_at - now).total_seconds())

    def cache_ttl(self, fallback: int, now: Optional[datetime] = None) -> int:
        """TTL for a cache entry holding this token, never negative."""
        remaining = self.seconds_until_expiry(now)
        if remaining is None:
            return fallback
        return max(remaining, 0)

    def serialize(self) -> str:
        return json.dumps({
            "access_token": self.value,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        })

    @classmethod
    def deserialize(cls, raw: Union[str, bytes]) -> "AccessToken":
        """Rebuild a token from its cached form; raises ValueError when malformed."""
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")

        data = json.loads(raw)
        if not isinstance(data, dict) or not data.get("access_token"):
            raise ValueError("Cached token entry has no access_token")

        return cls(value=data["access_token"], expires_at=parse_expiry(data.get("expires_at")))


def parse_expiry(value: Union[str, int, float, None]) -> Optional[datetime]:
    """
    Read a cached expiry written as an ISO-8601 string (with or without a
    trailing ``Z``) or as epoch seconds. Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Unsupported expires_at value: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"expires_at out of range: {value!r}") from exc
    if not isinstance(value, str):
        raise ValueError(f"Unsupported expires_at value: {value!r}")

    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    expires_at = datetime.fromisoformat(value)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at
