# app/main.py
"""
FastAPI application entry point.
Builds the per-client session, local cache, remote client and sync engine on
startup, registers domain error handlers, and mounts all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import bookings, health, records, sync, vehicles
from app.database import create_tables
from app.config import settings
from app.services.errors import (
    InvalidCompletion,
    InvalidExtension,
    RemoteUnavailable,
    VehicleUnavailable,
    WriteConflict,
)
from app.services.local_cache import LocalCache
from app.services.remote_store import RemoteStoreClient
from app.services.sync_engine import SyncEngine
from app.session import resolve_session
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Booking Sync API",
    description="Office vehicle booking: request, approve, return. Shared JSON document sync.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (booking pages are served from elsewhere) ──────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Error Handlers ────────────────────────────────────────────────────
@app.exception_handler(VehicleUnavailable)
async def vehicle_unavailable_handler(request: Request, exc: VehicleUnavailable):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "code": "vehicle_unavailable",
                 "hint": "Vehicle was just taken; pick another one."},
    )


@app.exception_handler(WriteConflict)
async def write_conflict_handler(request: Request, exc: WriteConflict):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "code": "write_conflict",
                 "hint": "Data changed on another device and has been reloaded; retry."},
    )


@app.exception_handler(RemoteUnavailable)
async def remote_unavailable_handler(request: Request, exc: RemoteUnavailable):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "code": "remote_unavailable"},
    )


@app.exception_handler(InvalidCompletion)
@app.exception_handler(InvalidExtension)
async def invalid_input_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "code": "invalid_input"},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(bookings.router, prefix="/api/v1", tags=["📝 Bookings"])
app.include_router(records.router,  prefix="/api/v1", tags=["📋 Usage Records"])
app.include_router(vehicles.router, prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(sync.router,     prefix="/api/v1", tags=["🔄 Sync"])
app.include_router(health.router,   prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Fleet sync backend starting up...")
    create_tables()
    logger.info("✅ Local cache ready")

    cache = LocalCache()
    session = resolve_session(cache, settings.NETWORK_ID)
    engine = SyncEngine(session, RemoteStoreClient(), cache)
    app.state.sync_engine = engine
    engine.start()

    logger.info(f"📄 Shared document: {settings.REMOTE_DOCUMENT_URL}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Fleet sync backend shutting down...")
    engine = getattr(app.state, "sync_engine", None)
    if engine is not None:
        await engine.stop()
