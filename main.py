from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from shorturl_app.config import Settings, settings
from shorturl_app.api.v1 import urls, redirect
from shorturl_app.logging_config import setup_logging
from shorturl_app.services.exceptions import MissingForwarderBaseUrl
from shorturl_app.storage import StoreBackend, StoreFactory, StoreStrategy


def check_config(config: Settings) -> None:
    """Fail at startup on configuration the service cannot run without"""
    if config.require_forwarder_base_url and not config.forwarder_base_url:
        raise MissingForwarderBaseUrl(
            "Missing forwarder base URL. Set FORWARDER_BASE_URL."
        )


def create_app(
    store: Optional[StoreStrategy] = None,
    config: Settings = settings,
) -> FastAPI:
    """
    Create the FastAPI application.

    When no store is passed in, one is built from settings at startup and
    closed at shutdown. Configuration errors abort startup, so the service
    never accepts traffic without a store.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = setup_logging(
            level=config.log_level,
            log_file=config.log_file,
            json_format=config.log_json,
        )
        logger.info(f"Starting {config.app_name} ({config.environment})")

        check_config(config)
        owns_store = store is None
        app.state.store = store if store is not None else StoreFactory.build(
            StoreBackend(config.store_backend),
            config.connection_string,
            config=config,
        )
        try:
            if not await app.state.store.ping():
                logger.warning("Store did not answer ping at startup")

            yield
        finally:
            logger.info(f"Shutting down {config.app_name}")
            if owns_store:
                await app.state.store.close()

    # Create FastAPI app
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Redirects short, user-chosen paths to destination URLs",
        debug=config.debug,
        lifespan=lifespan,
        # Keep every single-segment path free for short URLs
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )
    app.state.config = config

    @app.get("/")
    def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {config.app_name}",
            "version": config.app_version,
            "docs": "/api/docs",
        }

    ######## Include routers
    app.include_router(urls.router, prefix="/api")
    app.include_router(redirect.router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
