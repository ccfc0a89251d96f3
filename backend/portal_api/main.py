# portal_api/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal_api.core.config import get_settings
from portal_api.core.cors import setup_cors
from portal_api.db.supabase_client import (
    DBError,
    DBQueryError,
    execute,
    get_supabase_client,
)
from portal_api.schemas.common import APIError, ErrorResponse

logger = logging.getLogger("portal_api")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _error_json(
    *,
    status_code: int,
    code: str,
    message: str,
    detail: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorResponse(error=APIError(code=code, message=message, detail=detail)).model_dump()
    return JSONResponse(status_code=status_code, content=body)


_HTTP_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    501: "NOT_IMPLEMENTED",
}


def _http_code_from_status(status_code: int) -> str:
    if status_code in _HTTP_CODES:
        return _HTTP_CODES[status_code]
    if 500 <= status_code <= 599:
        return "INTERNAL_SERVER_ERROR"
    return "HTTP_ERROR"


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances that JSONResponse cannot serialize
    out = []
    for err in exc.errors():
        e = dict(err)
        if "ctx" in e:
            e["ctx"] = {k: str(v) for k, v in e["ctx"].items()}
        out.append(e)
    return out


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    if settings.check_supabase_on_startup:
        try:
            sb = get_supabase_client()
            execute(sb.table("genetic_profile").select("genetic_profile_id").limit(1))
            logger.info("Supabase startup check: OK")
        except Exception:
            logger.exception("Supabase startup check failed")
            raise

    yield


def create_app() -> FastAPI:
    settings = get_settings()
    _configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        lifespan=lifespan,
    )

    app.state.settings = settings
    setup_cors(app, settings)

    # -------------------------
    # Global exception handlers
    # -------------------------
    @app.exception_handler(DBQueryError)
    async def _handle_db_query(request: Request, exc: DBQueryError):
        logger.error("Database query failed on %s: %s", request.url.path, exc)
        msg = str(exc) if settings.debug else "Database query failed"
        detail = {"debug": str(exc)} if settings.debug else None
        return _error_json(status_code=500, code="DB_ERROR", message=msg, detail=detail)

    @app.exception_handler(DBError)
    async def _handle_db_error(request: Request, exc: DBError):
        msg = str(exc) if settings.debug else "Database error"
        detail = {"debug": str(exc)} if settings.debug else None
        return _error_json(status_code=500, code="DB_ERROR", message=msg, detail=detail)

    @app.exception_handler(ValueError)
    async def _handle_value_error(request: Request, exc: ValueError):
        return _error_json(status_code=400, code="BAD_REQUEST", message=str(exc))

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError):
        return _error_json(
            status_code=422,
            code="VALIDATION_ERROR",
            message="Request validation failed",
            detail={"errors": _jsonable_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException):
        status = int(getattr(exc, "status_code", 500) or 500)
        code = _http_code_from_status(status)

        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(status_code=status, content=exc.detail)

        message = str(exc.detail) if exc.detail is not None else "HTTP error"
        return _error_json(status_code=status, code=code, message=message)

    @app.exception_handler(Exception)
    async def _handle_unknown(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        msg = str(exc) if settings.debug else "Internal server error"
        detail = {"debug": str(exc)} if settings.debug else None
        return _error_json(status_code=500, code="INTERNAL_SERVER_ERROR", message=msg, detail=detail)

    # ---- system routes ----
    @app.get("/healthz", tags=["system"])
    def healthz():
        return {"status": "ok", "env": settings.env}

    @app.get("/", tags=["system"])
    def root():
        return {"service": settings.app_name, "env": settings.env}

    # ---- API Router include ----
    from portal_api.api.router import router as api_router

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()
