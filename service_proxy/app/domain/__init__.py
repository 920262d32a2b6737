"""
Domain utilities for the proxy service.

Pure helpers with no I/O: upstream URL construction, inbound input
sanitising, and the access token model shared by adapters and caching.
"""

from .tokens import AccessToken
from .upstream import (
    API_PREFIX,
    UpstreamLocation,
    clean_string,
    should_forward_body,
    strip_prefix,
)

__all__ = [
    "API_PREFIX",
    "AccessToken",
    "UpstreamLocation",
    "clean_string",
    "should_forward_body",
    "strip_prefix",
]
