from fastapi import FastAPI

from datagateway.core.config import settings
from datagateway.core.database import init_db
from datagateway.core.errors import register_error_handlers
from datagateway.core.logging import configure_logging
from datagateway.connectors import get_registry
from datagateway.controllers import (
    auth_controller,
    datasources_controller,
    organizations_controller,
)

configure_logging()

# Create FastAPI app
app = FastAPI(title=settings.APP_TITLE)
register_error_handlers(app)


@app.on_event("startup")
def startup():
    """
    Create metadata tables
    """
    init_db()


# Include routers
app.include_router(auth_controller.router)  # JWT authentication endpoints (public)
app.include_router(organizations_controller.router)
app.include_router(datasources_controller.router)
app.include_router(datasources_controller.legacy_router)  # organizationId from body or query


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Data Source Gateway API",
        "docs": "/docs",
        "engines": get_registry().engines(),
    }
