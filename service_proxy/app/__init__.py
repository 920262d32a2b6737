"""
Business Central proxy service package for the Academy for Excellence backend.

The proxy fronts dashboard requests under ``/api/*``, handling:
- Upstream authentication: OAuth2 client-credential bearer token
- Token caching: optional Redis store with TTL and 401 invalidation
- Relay: same-verb forwarding to the company-scoped Business Central API

Structure:
- app.main: FastAPI app, the /api route, and lifecycle wiring.
- app.adapters: HTTP clients for the identity provider and Business Central.
- app.caching: Token store abstraction and the token cache manager.
- app.domain: Upstream URL construction and access token model.
"""
