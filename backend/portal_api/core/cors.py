# portal_api/core/cors.py
from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from portal_api.core.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """
    Allow the portal front-end (and local notebooks/dev servers) to call the
    data endpoints from the browser. Falls back to localhost origins when
    CORS_ORIGINS is not configured.
    """
    default_local = ("http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8080")
    allow_origins = list(settings.cors_origins) if settings.cors_origins else list(default_local)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=settings.cors_allow_origin_regex,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        # clients read resolution warnings from this header
        expose_headers=["X-Portal-Warnings"],
        max_age=600,
    )
