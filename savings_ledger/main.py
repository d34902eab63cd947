"""
Savings Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from savings_ledger.config import get_settings
from savings_ledger.logging_config import setup_logging
from savings_ledger.models import init_db
from savings_ledger.api.health import router as health_router
from savings_ledger.api.auth import router as auth_router
from savings_ledger.api.accounts import router as accounts_router
from savings_ledger.api.transactions import router as transactions_router
from savings_ledger.api.withdrawal_requests import (
    router as withdrawal_requests_router,
)
from savings_ledger.api.notifications import router as notifications_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal savings accounts with PIN-gated deposits and withdrawals",
    lifespan=lifespan,
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(withdrawal_requests_router)
app.include_router(notifications_router)


def main():
    """Serve the API with uvicorn."""
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
