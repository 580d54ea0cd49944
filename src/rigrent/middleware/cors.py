"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rigrent.config import Settings

# Headers browser-based schedulers and the front-end send to the cron endpoint.
_ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Client-Info", "X-Request-Id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured origins; no cookies are involved, so no credentials."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=_ALLOWED_HEADERS,
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
