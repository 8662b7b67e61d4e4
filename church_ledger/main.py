"""Church ledger FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from church_ledger.api.errors import register_error_handlers
from church_ledger.api.routes import budget, collections, custom_fields, expenses, forms, webhooks
from church_ledger.config import settings
from church_ledger.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    init_db()
    logger.info("Database tables initialized")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.api_title,
    description="Collections, expenses and budget tracking for a local church",
    version=settings.api_version,
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(collections.router)
app.include_router(expenses.router)
app.include_router(budget.router)
app.include_router(custom_fields.router)
app.include_router(forms.router)
app.include_router(webhooks.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.api_version}


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    from church_ledger.services.logging import setup_server_logging

    load_dotenv()
    setup_server_logging(settings.log_file or None, settings.log_level)
    logger.info(f"Starting {settings.api_title} on {settings.database_url.split('://')[0]}")
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)


if __name__ == "__main__":
    run()
