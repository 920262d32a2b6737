"""
Upstream URL construction for the Business Central proxy.
"""

import re
import string
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from shared.config import ProxyConfig


API_PREFIX = "/api"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

_CONTROL_CHARS = re.compile(r"[\r\n\t]")
# Printable ASCII and the control characters clean_string strips pass through as-is
_RAW_SAFE = string.punctuation + " \r\n\t"


def clean_string(value: Optional[str]) -> str:
    """Remove CR, LF and TAB characters and trim surrounding whitespace."""
    if value is None:
        return ""
    return _CONTROL_CHARS.sub("", value).strip()


def ascii_target(raw: bytes) -> str:
    """
    Text form of a raw request path or query. ASCII bytes, including existing
    percent escapes, are kept; any other byte becomes its %XX escape so raw
    UTF-8 reaches upstream as the same bytes.
    """
    return quote(raw, safe=_RAW_SAFE)


def strip_prefix(path: str, prefix: str = API_PREFIX) -> str:
    """Drop a leading ``prefix`` from ``path``, leaving the remainder untouched."""
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def should_forward_body(method: str) -> bool:
    """Only mutating verbs carry a body upstream."""
    return method.upper() in BODY_METHODS


@dataclass(frozen=True)
class UpstreamLocation:
    """Configured coordinates of the company-scoped Business Central API."""

    base_url: str
    tenant_id: str
    environment: str
    api_version: str
    company_id: str
    api_publisher: str = "alletec"
    api_group: str = "learning"

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "UpstreamLocation":
        return cls(
            base_url=clean_string(config.base_url),
            tenant_id=clean_string(config.tenant_id),
            environment=clean_string(config.environment),
            api_version=clean_string(config.api_version),
            company_id=clean_string(config.company_id),
            api_publisher=clean_string(config.api_publisher),
            api_group=clean_string(config.api_group),
        )

    @property
    def company_root(self) -> str:
        return (
            f"{self.base_url}/v2.0/{self.tenant_id}/{self.environment}"
            f"/api/{self.api_publisher}/{self.api_group}/{self.api_version}"
            f"/companies({self.company_id})"
        )

    def build_url(self, endpoint: str, query: str = "") -> str:
        """
        Join the company root with an endpoint path and raw query string.

        ``query`` carries its leading ``?`` when present. Neither part is
        re-encoded; only control characters and surrounding whitespace are
        removed.
        """
        return f"{self.company_root}{clean_string(endpoint)}{clean_string(query)}"
