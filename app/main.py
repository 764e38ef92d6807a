"""
ProductsCatalog — FastAPI Application Entry Point
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api import auth, products
from app.config import get_settings
from app.core.exceptions import CatalogError
from app.core.gate import AuthorizationGateMiddleware
from app.core.logging import RequestLoggingMiddleware, logger, setup_logging

settings = get_settings()
setup_logging(settings.LOG_LEVEL)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize DB tables on startup."""
    from app.database import init_db

    init_db()
    logger.info(f"{settings.APP_TITLE} {settings.APP_VERSION} started ({settings.ENVIRONMENT})")
    yield


# ─── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    description=(
        "ProductsCatalog — product catalog with user accounts, "
        "token-based authentication, USER/ADMIN roles and a purchase-cart ledger."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ─── Middleware ───────────────────────────────────────────────────────────────
# Last added runs first: request logging → CORS → authorization gate → routes.

app.add_middleware(AuthorizationGateMiddleware)

origins = settings.ALLOWED_ORIGINS if settings.is_production else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=settings.is_production,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


# ─── Exception handlers ───────────────────────────────────────────────────────


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} failed: {exc.error_code}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.http_status_code == 401 else None
    return JSONResponse(
        status_code=exc.http_status_code,
        content=exc.to_dict(),
        headers=headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path}"
    )
    if settings.ENVIRONMENT == "development":
        return JSONResponse(
            status_code=500,
            content={"error_code": "INTERNAL_ERROR", "message": str(exc)},
        )
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred.",
        },
    )


# ─── Health endpoint ──────────────────────────────────────────────────────────


@app.get("/health", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """Returns service health including DB connectivity."""
    db_ok = False

    try:
        from app.database import engine

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as exc:
        logger.warning(f"Health check could not reach the database: {exc}")

    return {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "db_connected": db_ok,
    }


# ─── Routers ──────────────────────────────────────────────────────────────────

app.include_router(auth.router)
app.include_router(products.router)
