"""Middleware registration."""

from fastapi import FastAPI

from mindos.config import Settings
from mindos.middleware.cors import setup_cors
from mindos.middleware.error_handler import setup_error_handlers
from mindos.middleware.logging import setup_logging
from mindos.middleware.rate_limit import RateLimitMiddleware
from mindos.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order (last added = outermost),
    so CORS is added last and also wraps 429 responses from the rate limiter.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
