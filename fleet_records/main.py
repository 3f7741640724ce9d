# fleet_records/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers for the engine's error kinds,
and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from fleet_records.routers import vehicles, reports, documents, notes, maintenance, export, health
from fleet_records.database import RecordStore
from fleet_records.errors import NotFound, ValidationFailed, ConstraintViolation, NoFieldsToUpdate, StorageFailure
from fleet_records.services.attachment_store import AttachmentStore
from fleet_records.config import settings
from fleet_records.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Records API",
    description="Vehicle registry, inspection reports, documents, notes and maintenance schedules.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "details": exc.details},
    )


@app.exception_handler(NoFieldsToUpdate)
async def no_fields_handler(request: Request, exc: NoFieldsToUpdate):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ConstraintViolation)
async def constraint_handler(request: Request, exc: ConstraintViolation):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Storage error"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(vehicles.router,    prefix="/api/v1", tags=["Vehicles"])
app.include_router(reports.router,     prefix="/api/v1", tags=["Reports"])
app.include_router(documents.router,   prefix="/api/v1", tags=["Documents"])
app.include_router(notes.router,       prefix="/api/v1", tags=["Notes"])
app.include_router(maintenance.router, prefix="/api/v1", tags=["Maintenance"])
app.include_router(export.router,      prefix="/api/v1", tags=["Export"])
app.include_router(health.router,      prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Fleet Records backend starting up...")
    # Tests may install their own stores before startup runs
    if not hasattr(app.state, "store"):
        app.state.store = RecordStore(settings.DATABASE_URL)
    if not hasattr(app.state, "attachments"):
        app.state.attachments = AttachmentStore(settings.UPLOAD_DIR)
    app.state.store.create_tables()
    logger.info("Database tables ready")
    logger.info(f"Attachments stored under {app.state.attachments.root}")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Fleet Records backend shutting down...")
    app.state.store.close()
