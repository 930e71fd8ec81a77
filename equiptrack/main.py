# equiptrack/main.py

import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from equiptrack.core.config import settings
from equiptrack.core.database import init_db, test_connection
from equiptrack.core.exceptions import ServiceError
from equiptrack.core.seeding_logic import seed_all
from equiptrack.services import notification_service

# Routers
from equiptrack.api.endpoints import (
    auth as auth_router,
    departments as departments_router,
    categories as categories_router,
    items as items_router,
    borrow_requests as borrow_requests_router,
    history as history_router,
    users as users_router,
    approvals as approvals_router,
    notifications as notifications_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="EquipTrack Backend",
    version="1.0.0",
    description="Equipment lending: inventory, reservations and borrow lifecycle.",
)


# ------------------------------------------------------------
# SERVICE ERRORS -> HTTP
# ------------------------------------------------------------
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.status_code} "
        f"{type(exc).__name__}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "*"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(departments_router.router)
app.include_router(categories_router.router)
app.include_router(items_router.router)
app.include_router(borrow_requests_router.router)
app.include_router(history_router.router)
app.include_router(users_router.router)
app.include_router(approvals_router.router)
app.include_router(notifications_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP / SHUTDOWN EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting EquipTrack Backend...")

    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        raise

    await init_db()
    logger.success("Database tables ready.")

    try:
        await seed_all()
    except Exception:
        logger.exception("Seeding failed.")

    logger.success("Backend startup completed successfully.")


@app.on_event("shutdown")
async def on_shutdown():
    await notification_service.drain()
    logger.info("Pending notifications flushed, shutting down.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "EquipTrack Backend",
        "version": app.version,
    }
