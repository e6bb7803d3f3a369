"""Main FastAPI application for mq-case-service."""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mq_case_service import __version__
from mq_case_service.api.responses import setup_error_handlers
from mq_case_service.api.routes import (
    cases_router,
    kiosk_managers_router,
    phones_router,
    users_router,
)
from mq_case_service.config import settings
from mq_case_service.infrastructure.database import db_client
from mq_case_service.models import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="MQ Case Service",
    description="Kiosk case intake, queueing and lifecycle management",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_error_handlers(app)

app.include_router(cases_router)
app.include_router(users_router)
app.include_router(kiosk_managers_router)
app.include_router(phones_router)


@app.on_event("startup")
async def startup():
    """Initialize storage on startup."""
    logger.info(f"Starting {settings.service_name} on port {settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Storage: {settings.storage_type}")

    if not settings.uses_sql_storage:
        return

    logger.info(f"Database: {settings.database_url}")
    try:
        await db_client.verify_connection()
        # Alembic owns the schema in deployed environments
        await db_client.create_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


@app.on_event("shutdown")
async def shutdown():
    """Clean up resources on shutdown."""
    logger.info("Shutting down service")
    if settings.uses_sql_storage:
        await db_client.close()


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Returns the health status of the Case Service.

**Response Example**:
```json
{
  "status": "healthy",
  "service": "mq-case-service",
  "version": "1.0.0",
  "database": "sqlite+aiosqlite",
  "storage": "inmemory"
}
```

No database query is made; the connection type is reported only.
    """,
    responses={200: {"description": "Service is healthy and operational"}},
)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=__version__,
        database=settings.database_url.split("://")[0],
        storage=settings.storage_type,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mq_case_service.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
