"""
Wildlife Safety Identifier API

FastAPI application that identifies Perth wildlife from a photo and
returns safety guidance and first aid advice.

This is the main entry point for the application.

Usage:
    uvicorn app.main:app --reload
    uvicorn app.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.dependencies import get_identification_service
from app.api.routes import identify_router, health_router
from app.api.routes.health import set_startup_time

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup:
    - Pre-load the classifier so the first request does not pay for it

    Runs on shutdown:
    - Log shutdown
    """
    logger.info("Starting Wildlife Safety Identifier API...")

    set_startup_time()

    # load() never raises; a failed model load leaves the service in fallback mode
    service = app.dependency_overrides.get(
        get_identification_service, get_identification_service
    )()
    await service.load()
    logger.info(f"Classifier state after startup: {service.state.value}")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down Wildlife Safety Identifier API...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
## Wildlife Safety Identifier API

Identify local wildlife from a photo and get safety tips and first aid
advice for encounters with potentially dangerous species.

### API Endpoints

- `POST /api/v1/identify` - Identify the species in a photo
- `GET /api/v1/species` - List catalog species
- `GET /api/v1/species/{id}` - Species safety record
- `GET /api/v1/health` - Health check
- `GET /api/v1/health/ready` - Classifier readiness

### Image Requirements

- Format: JPEG or PNG (base64-encoded)
- Clear view of the animal, centred in the frame

Always call 000 in life-threatening situations.
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
            "details": {"exception": str(exc)} if settings.debug else None
        }
    )


# Include routers
app.include_router(health_router, prefix=settings.api_prefix)
app.include_router(identify_router, prefix=settings.api_prefix)


@app.get("/", tags=["Root"])
async def root():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "documentation": "/docs",
        "health_check": f"{settings.api_prefix}/health",
        "identification_endpoint": f"{settings.api_prefix}/identify"
    }


# Entry point for running with Python
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers
    )
