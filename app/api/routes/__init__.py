# API routes module
from app.api.routes.identify import router as identify_router
from app.api.routes.health import router as health_router

__all__ = ["identify_router", "health_router"]
