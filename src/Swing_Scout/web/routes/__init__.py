"""FastAPI route modules for Swing Scout.

Re-exports all routers so the application factory can import them:
    from Swing_Scout.web.routes import health_router, scan_router, watchlist_router
"""

from Swing_Scout.web.routes.health import router as health_router
from Swing_Scout.web.routes.scan import router as scan_router
from Swing_Scout.web.routes.watchlist import router as watchlist_router

__all__ = [
    "health_router",
    "scan_router",
    "watchlist_router",
]
