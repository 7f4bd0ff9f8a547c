"""Exception handlers and the middleware stack of the DevWars app."""

from fastapi import FastAPI

from devwars.config import Settings
from devwars.middleware.cors import setup_cors
from devwars.middleware.error_handler import setup_error_handlers
from devwars.middleware.logging import setup_logging
from devwars.middleware.rate_limit import RateLimitMiddleware
from devwars.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, install the error handlers and build the stack.

    From the outside in, a request meets CORS, then the request id, then the
    rate limiter. The limiter is left out when ``rate_limit_requests`` is 0.
    """
    setup_logging(settings)
    setup_error_handlers(app)

    # Starlette wraps each added middleware around the previous ones.
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
            exempt_paths=settings.rate_limit_exempt_paths,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
