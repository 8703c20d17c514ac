# backend/app/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time
import uuid

from app.core.config import settings
from app.core.exceptions import NodeCheckError
from app.core.logging import logger
from app.db.database import init_db, close_db
from app.api.v1.router import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting {settings.PROJECT_NAME} {settings.VERSION}",
        extra={
            "environment": settings.ENVIRONMENT,
            "git_provider": settings.GIT_PROVIDER,
            "registry": settings.registry_base_url,
        },
    )
    await init_db()

    if not settings.GITHUB_TOKEN:
        logger.warning("GITHUB_TOKEN environment variable not set. Repository operations will be rejected.")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await close_db()


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Dependency freshness and vulnerability audit for Node.js repositories.",
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=("/api/docs" if settings.ENVIRONMENT == "development" else None),
    redoc_url=("/api/redoc" if settings.ENVIRONMENT == "development" else None),
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag each request with an id and log how long it took"""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    response.headers["X-Request-ID"] = request_id

    logger.debug(
        f"{request.method} {request.url.path} -> {response.status_code} in {elapsed * 1000:.1f}ms",
        extra={"request_id": request_id},
    )
    return response


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.exception_handler(NodeCheckError)
async def nodecheck_error_handler(request: Request, exc: NodeCheckError):
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc.message}",
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception while handling request",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
