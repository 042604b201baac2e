"""
FastAPI Application — entry point.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contract_tracker.config import settings
from contract_tracker.database import async_session, close_db, init_db
from contract_tracker.errors import ContractTrackerError
from contract_tracker.routes import router
from contract_tracker.routes.attachments import attachment_router
from contract_tracker.routes.audit_logs import audit_router
from contract_tracker.routes.contracts import field_router, router as contract_router
from contract_tracker.routes.settings import settings_router
from contract_tracker.routes.tags import tag_router
from contract_tracker.services.contract_service import ContractService
from contract_tracker.services.reminders import periodic_reminders
from contract_tracker.services.users import ensure_default_admin

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


async def seed_defaults() -> None:
    """Idempotent startup seed: default admin and the six system fields."""
    async with async_session() as session:
        await ensure_default_admin(session)
        created = await ContractService(session).init_system_fields()
        if created:
            logger.info("✅ System fields initialised (%d new)", created)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hook."""
    logger.info("🚀 Starting Contract Tracker API v%s", VERSION)
    await init_db()
    await seed_defaults()
    logger.info("✅ Database ready")

    reminder_task = asyncio.create_task(
        periodic_reminders(interval=settings.reminder_interval_seconds)
    )

    yield

    # Shutdown
    reminder_task.cancel()
    try:
        await reminder_task
    except asyncio.CancelledError:
        pass
    await close_db()
    logger.info("👋 Shutdown complete")


app = FastAPI(
    title="Contract Tracker API",
    description="Contract lifecycle tracking — expiry reminders, custom fields and audit trail.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ContractTrackerError)
async def contract_tracker_error_handler(request: Request, exc: ContractTrackerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(router, prefix="/api/v1")
app.include_router(contract_router, prefix="/api/v1")
app.include_router(field_router, prefix="/api/v1")
app.include_router(audit_router, prefix="/api/v1")
app.include_router(attachment_router, prefix="/api/v1")
app.include_router(tag_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "Contract Tracker API",
        "version": VERSION,
        "docs": "/docs",
    }
