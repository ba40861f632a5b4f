import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from docextract.api.errors import register_exception_handlers
from docextract.api.routes import documents, user_settings
from docextract.config.settings import Settings
from docextract.container import Services, build_services
from docextract.database.connection import close_pool, init_pool
from docextract.logging.logger import Log
from docextract.validation.rate_limiter import RateLimiter

APP_NAME = "docextract"
APP_VERSION = "0.1.0"


async def sweep_rate_limits(limiter: RateLimiter, interval_seconds: float) -> None:
    """Evict expired rate-limit windows every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        evicted = limiter.cleanup()
        if evicted:
            Log.debug(f"Evicted {evicted} expired rate-limit windows")


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the FastAPI application.

    When ``services`` is given the database pool is left alone, so tests can
    inject fakes.
    """
    settings = settings or (services.settings if services else Settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        Log.configure(settings.log_level)
        owns_services = app.state.services is None
        if owns_services:
            init_pool(settings)
            app.state.services = build_services(settings)

        sweeper = asyncio.create_task(
            sweep_rate_limits(
                app.state.services.rate_limiter,
                settings.rate_limit_sweep_interval_seconds,
            )
        )
        Log.info(f"{APP_NAME} {APP_VERSION} started ({settings.app_env})")
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            if owns_services:
                app.state.services.close()
                close_pool()

    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    register_exception_handlers(app)

    app.include_router(documents.router)
    app.include_router(user_settings.router)

    @app.get("/")
    def health() -> dict[str, str]:
        return {"service": APP_NAME, "version": APP_VERSION, "status": "ok"}

    @app.options("/{path:path}", include_in_schema=False)
    def options(path: str) -> Response:
        """Empty 200 for OPTIONS requests that CORSMiddleware does not answer itself."""
        return Response(status_code=200)

    return app


def main() -> None:
    """Entry point: load settings -> serve the API with uvicorn."""
    settings = Settings()
    Log.configure(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
