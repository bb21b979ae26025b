"""Moving window rate limiting per client address, on top of slowapi."""

import functools

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def client_key(request: Request, *, trust_forwarded_for: bool = False) -> str:
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def rate_limit(max_requests: int, window_seconds: int) -> str:
    """The `limits` notation for `max_requests` per `window_seconds`."""
    if max_requests < 1 or window_seconds < 1:
        raise ValueError("Limit and window must be positive.")
    return f"{max_requests}/{window_seconds} seconds"


def limiter_factory(
    *,
    max_requests: int,
    window_seconds: int,
    trust_forwarded_for: bool = False,
    storage_uri: str = "memory://",
) -> Limiter:
    # Application limits share one budget across every limited route.
    return Limiter(
        key_func=functools.partial(client_key, trust_forwarded_for=trust_forwarded_for),
        application_limits=[rate_limit(max_requests, window_seconds)],
        strategy="moving-window",
        storage_uri=storage_uri,
        headers_enabled=True,
    )


def rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> Response:
    # SlowAPIMiddleware calls this synchronously.
    response = JSONResponse({"error": RATE_LIMIT_MESSAGE}, status_code=429)
    limiter: Limiter = request.app.state.limiter
    return limiter._inject_headers(  # pyright: ignore[reportPrivateUsage]
        response, request.state.view_rate_limit
    )
