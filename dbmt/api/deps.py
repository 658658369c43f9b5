"""FastAPI dependencies.

Shared services live on ``app.state`` and are injected with ``Depends()``.
"""

from fastapi import Depends, Request

from ..orchestrator import MigrationOrchestrator
from .auth import TokenAuthenticator, User


async def get_orchestrator(request: Request) -> MigrationOrchestrator:
    """Get the MigrationOrchestrator from app state."""
    return request.app.state.orchestrator


async def get_authenticator(request: Request) -> TokenAuthenticator:
    """Get the TokenAuthenticator from app state."""
    return request.app.state.authenticator


async def require_user(
    request: Request,
    authenticator: TokenAuthenticator = Depends(get_authenticator),
) -> User:
    """Resolve the caller; raises Unauthorized when the token is missing or unknown."""
    return authenticator.authenticate(request)
