"""Shared authentication utilities for bearer token handling."""

import logging
from typing import Any, Dict

from data.store import Store
from utils.errors import AuthenticationError

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: str) -> str:
    """Extract and validate Bearer token from Authorization header."""
    if not authorization:
        raise AuthenticationError("Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Authorization must be Bearer token")

    access_token = authorization.split(" ", 1)[1].strip()

    if not access_token:
        raise AuthenticationError("Bearer token cannot be empty")

    return access_token


def validate_user_token(store: Store, access_token: str) -> Dict[str, Any]:
    """Resolve a token to a live user session through the auth service."""
    user = store.get_user(access_token)
    if not user:
        logger.warning("Rejected bearer token with no live session")
        raise AuthenticationError("Unauthorized")
    return user
