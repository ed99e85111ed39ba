from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from notekeep.core.config import get_settings
from notekeep.routers import repository as repository_router
from notekeep.services.container import build_repository_storage_service
from notekeep.services.repository_storage import RepositoryStorageServiceBase


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers; the API never serves active content."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(storage_service: RepositoryStorageServiceBase | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn; tests pass their own storage service."""
    settings = get_settings()
    app = FastAPI(title="notekeep storage API")

    if settings.app_env != "prod":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["http://localhost:8000", "http://127.0.0.1:8000"],
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.state.settings = settings
    app.state.repository_storage = storage_service or build_repository_storage_service(settings)
    app.include_router(repository_router.router)
    return app
