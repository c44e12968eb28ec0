import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from linkpage_app.config import settings
from linkpage_app.database.connection import engine, Base
from linkpage_app.dependencies import rate_limit
from linkpage_app.exceptions import AppError
from linkpage_app.api.v1 import analytics, auth, links, profiles, redirect

# Import models to ensure they're registered with Base
from linkpage_app import models  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("linkpage")

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Link-in-bio pages with click tracking and analytics",
    debug=settings.debug,
    dependencies=[Depends(rate_limit)],
)

logger.info("Starting %s (%s), rate limit backend: %s",
            settings.app_name, settings.environment, settings.rate_limit_backend)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render service-layer errors as {"detail": ...} with their status code"""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(redirect.router)
app.include_router(links.router)
app.include_router(analytics.router)
