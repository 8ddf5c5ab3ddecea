"""
Church Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from church_ledger.config import get_settings
from church_ledger.logging_config import setup_logging
from church_ledger.api.health import router as health_router
from church_ledger.api.entries import router as entries_router
from church_ledger.api.funds import router as funds_router
from church_ledger.api.archives import router as archives_router
from church_ledger.api.admin import router as admin_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Congregational ledger with monthly archive and reset",
)

# Register routers
app.include_router(health_router)
app.include_router(entries_router)
app.include_router(funds_router)
app.include_router(archives_router)
app.include_router(admin_router)
