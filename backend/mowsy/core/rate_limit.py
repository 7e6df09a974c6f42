"""Rate limiting configuration.

Best effort and per process: counters live in memory, so each worker keeps
its own window.
"""

from jose import JWTError, jwt
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from mowsy.core.config import get_settings

settings = get_settings()


def get_rate_limit_key(request: Request) -> str:
    """Key by authenticated user when a valid bearer token is sent, else by client IP."""
    auth_header = request.headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                issuer=settings.jwt_issuer,
            )
        except JWTError:
            payload = None
        if payload and payload.get("user_id") is not None:
            return f"user:{payload['user_id']}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[settings.rate_limit],
    headers_enabled=False,
)
