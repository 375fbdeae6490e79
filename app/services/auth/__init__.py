"""
Authentication service package.

Supplies the caller's identity to every request. Provides pluggable
authentication with a local password/session-cookie provider.

Usage:
    from app.services.auth.dependencies import get_current_user, get_request_context

    # In routes:
    @router.get("/protected")
    async def protected_route(ctx: RequestContext = Depends(get_request_context)):
        ...
"""
from app.services.auth.base import AuthProvider
from app.services.auth.local_provider import local_auth_provider


def get_auth_provider() -> AuthProvider:
    """Factory function to get the configured auth provider."""
    return local_auth_provider


__all__ = [
    "AuthProvider",
    "get_auth_provider",
    "local_auth_provider",
]
