"""FastAPI app factory, lifespan resources, and request logging."""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from Swing_Scout import __version__
from Swing_Scout.config import Settings
from Swing_Scout.data.database import Database
from Swing_Scout.logging_config import configure_logging
from Swing_Scout.services.rate_limiter import RateLimiter
from Swing_Scout.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Lifespan startup opens the database and creates the shared rate limiter
    and scan lock on ``app.state``. The Polygon key is only demanded by the
    routes that need the provider, so the watchlist stays readable without it.
    """
    configure_logging()
    resolved = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        db = Database(resolved.db_path)
        await db.connect()
        app.state.database = db
        try:
            yield
        finally:
            await db.close()

    app = FastAPI(title="Swing Scout", version=__version__, lifespan=lifespan)
    app.state.settings = resolved
    app.state.rate_limiter = RateLimiter(
        requests_per_second=resolved.polygon_requests_per_second
    )
    app.state.scan_lock = asyncio.Lock()

    from Swing_Scout.web.routes import health_router, scan_router, watchlist_router

    app.include_router(scan_router)
    app.include_router(watchlist_router)
    app.include_router(health_router)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"ok": False, "error": str(exc), "setting": exc.setting},
        )

    # Request logging middleware
    access_logger = logging.getLogger("Swing_Scout.web.access")

    @app.middleware("http")
    async def log_requests(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        path = request.url.path

        if path == "/api/health":
            access_logger.debug(
                "%s %s %s %.0fms",
                request.method,
                path,
                response.status_code,
                duration_ms,
            )
        else:
            access_logger.info(
                "%s %s %s %.0fms",
                request.method,
                path,
                response.status_code,
                duration_ms,
            )
        return response

    logger.info("Swing Scout web app created")
    return app
