"""
FastAPI authentication dependencies.

Usage:
    from middleware.auth_dependencies import get_authenticated_user

    @router.get("/endpoint")
    def endpoint(user: dict = Depends(get_authenticated_user)):
        pass
"""

from typing import Any, Dict
from fastapi import Depends, Header

from data.store import Store
from shared_services import get_store
from utils.auth import extract_bearer_token, validate_user_token


def get_current_token(authorization: str = Header(None, alias="Authorization")) -> str:
    """
    Extract the caller's bearer token.

    Raises:
        AuthenticationError: 401 if the header is missing or malformed
    """
    return extract_bearer_token(authorization)


def get_authenticated_user(token: str = Depends(get_current_token),
                           store: Store = Depends(get_store)) -> Dict[str, Any]:
    """
    Validate the token with the auth service and return the user.

    The token is checked before the store is asked for anything else, so a
    caller without a session never reaches a table query.
    """
    return validate_user_token(store, token)
