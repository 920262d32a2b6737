"""
Adapters package for the proxy service.

Contains HTTP client wrappers for external dependencies (identity provider,
Business Central). These adapters encapsulate:

- Base URLs and request shapes
- Timeouts
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .identity_client import IdentityClient
from .business_central_client import BusinessCentralClient, decode_body

__all__ = [
    "BusinessCentralClient",
    "IdentityClient",
    "decode_body",
]
