"""
FastAPI Application

HTTP API and WebSocket server for job application tracking.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from jobtracker.api import applications as applications_api
from jobtracker.api import live as live_api
from jobtracker.db.mongo import close_database
from jobtracker.schemas.applications import HealthResponse
from jobtracker.services.container import config, get_application_service, get_broadcast_hub
from jobtracker.utils.datetime_utils import now_iso
from jobtracker.utils.exceptions import JobTrackerError
from jobtracker.utils.logger import get_logger

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Tracker API",
    description="Job application records with live updates",
    version="1.0.0",
)

# Credentials cannot be combined with a wildcard origin
_allow_all = "*" in config.server.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if _allow_all else config.server.cors_origins,
    allow_credentials=not _allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(JobTrackerError)
async def job_tracker_error_handler(request: Request, exc: JobTrackerError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"[API] {request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.error, "message": exc.message},
    )


@app.on_event("startup")
async def startup_check_store():
    """Refuse to serve without a reachable store; StoreUnavailableError aborts startup."""
    service = get_application_service()
    count = await run_in_threadpool(service.ensure_store)
    logger.info(f"[API] MongoDB ready: {config.mongo.db_name}.{config.mongo.collection} ({count} applications)")


@app.on_event("shutdown")
async def shutdown_release_resources():
    await get_broadcast_hub().close()
    close_database()
    logger.info("[API] Shutdown complete")


@app.get("/health", response_model=HealthResponse)
async def health():
    """Liveness and store check: reports the number of stored applications."""
    try:
        count = await run_in_threadpool(get_application_service().count_applications)
    except Exception as e:
        logger.warning(f"[API] Health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "ERROR", "error": str(e)})
    return HealthResponse(status="OK", timestamp=now_iso(), applications=count)


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics for monitoring."""
    from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(applications_api.router)
app.include_router(live_api.router)
