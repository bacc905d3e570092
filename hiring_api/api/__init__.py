"""
API module - FastAPI routers and endpoint definitions.

Usage:
    from hiring_api.api import api_router
    app.include_router(api_router, prefix="/api")
"""

from hiring_api.api.routes import api_router

__all__ = ["api_router"]
