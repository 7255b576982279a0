"""Rate limiting utilities"""

import hashlib
from fastapi import Request
from slowapi import Limiter

from config import config


def get_user_or_ip_key(request: Request) -> str:
    """Get unique identifier for rate limiting - bearer token if present, otherwise IP"""

    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        if token:
            return f"user_{hashlib.sha256(token.encode()).hexdigest()[:12]}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip_{client_ip}"


# Shared limiter instance - can be imported by route modules and app factory
limiter = Limiter(
    key_func=get_user_or_ip_key,
    default_limits=[config.DEFAULT_RATE_LIMIT],
    enabled=config.RATE_LIMIT_ENABLED,
)
