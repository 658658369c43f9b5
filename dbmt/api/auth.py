"""Bearer token authentication."""

import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Request

from ..exceptions import Unauthorized

logger = logging.getLogger(__name__)

_USER_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "dbmt:users")


@dataclass(frozen=True)
class User:
    """Identity resolved from a bearer token."""
    id: str


def get_bearer_token(request: Request) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class TokenAuthenticator:
    """
    Resolves bearer tokens to users.

    With configured tokens only those are accepted. Without any, every
    non-empty token is accepted and mapped to a stable user id derived from it.
    """

    def __init__(self, tokens: Optional[Dict[str, str]] = None):
        self.tokens = dict(tokens or {})

    def resolve(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None

        if not self.tokens:
            return User(id=str(uuid.uuid5(_USER_NAMESPACE, token)))

        for known_token, user_id in self.tokens.items():
            if secrets.compare_digest(token, known_token):
                return User(id=user_id)
        return None

    def authenticate(self, request: Request) -> User:
        """Resolve the caller or raise :class:`Unauthorized`."""
        user = self.resolve(get_bearer_token(request))
        if user is None:
            logger.warning(f"Rejected unauthenticated {request.method} {request.url.path}")
            raise Unauthorized()
        return user
