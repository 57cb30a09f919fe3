"""
Rate Limiting Configuration

Protects the unauthenticated endpoints from abuse:
- Sign-in: brute force attempts against staff passwords
- Public complaint intake: form spam

Usage:
    from tms.utils.rate_limiter import limiter, RateLimits

    @router.post("/my-endpoint")
    @limiter.limit(RateLimits.LOGIN)
    def my_endpoint(request: Request):
        pass

Note: The `request: Request` parameter is REQUIRED for rate-limited endpoints.
Limits are switched off with RATE_LIMIT_ENABLED=false (the test suite does this).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
import logging

from tms.config import settings

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """
    Get the client IP address from the request.
    Handles cases where the app is behind a proxy/load balancer.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


limiter = Limiter(key_func=get_client_ip, enabled=settings.rate_limit_enabled)


class RateLimits:
    """Rate limit configurations for different endpoint types"""

    LOGIN = settings.rate_limit_login
    PUBLIC_COMPLAINT = settings.rate_limit_public_complaint


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.
    Returns a JSON response with details about the rate limit.
    """
    limit_info = str(exc.detail) if hasattr(exc, 'detail') else "Rate limit exceeded"

    client_ip = get_client_ip(request)
    logger.warning(f"Rate limit exceeded for IP {client_ip} on {request.url.path}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "detail": "Too many requests. Please try again later.",
            "limit_info": limit_info,
            "retry_after": "60 seconds"
        },
        headers={
            "Retry-After": "60",
            "X-RateLimit-Limit": limit_info
        }
    )
