"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cad_api.config import settings
from cad_api.jobs.scheduler import register_jobs, scheduler
from cad_api.routers import communities, invites, users
from cad_api.utils.errors import AppError, InvalidInputError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Run the invite cleanup scheduler while the app is up."""
    started = False
    if settings.enable_scheduler:
        register_jobs()
        scheduler.start()
        started = True
        logger.info("Scheduler started with %d job(s)", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        if started and scheduler.running:
            scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code
        )
    return _error_response(exc)


async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(InvalidInputError(_validation_message(exc)))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


async def time_request(request: Request, call_next):
    """Stamp each response with its processing time and log slow requests."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
    if 0 < settings.slow_request_log_threshold_ms <= elapsed_ms:
        logger.warning("Slow request %s %s %.1fms", request.method, request.url.path, elapsed_ms)
    return response


def create_app() -> FastAPI:
    """Build the API application."""
    application = FastAPI(
        title=settings.app_name,
        description="Police CAD - community, membership and invite code API",
        version=settings.app_version,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.middleware("http")(time_request)

    application.add_exception_handler(AppError, handle_app_error)
    application.add_exception_handler(RequestValidationError, handle_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    application.include_router(communities.router, prefix="/communities", tags=["communities"])
    application.include_router(
        invites.community_router,
        prefix="/communities/{community_id}/invite-codes",
        tags=["invite-codes"],
    )
    application.include_router(invites.router, prefix="/invite-codes", tags=["invite-codes"])
    application.include_router(users.router, prefix="/users", tags=["users"])

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for deploys and uptime probes."""
        return {"status": "ok", "version": settings.app_version}

    return application


app = create_app()
