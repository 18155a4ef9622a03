import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.tracing import init_tracing, instrument_fastapi
from .api.router import router as api_router
from .api.errors import register_exception_handlers
from .common.middleware import RequestIDMiddleware, DebugLoggingMiddleware
from .modules.payments.webhooks import ProcessedEvents


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    init_tracing(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.processed_events = ProcessedEvents()

    # Middlewares (order matters: last added = outermost)
    app.add_middleware(DebugLoggingMiddleware, settings=settings)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(GZipMiddleware)
    # Only the deployed frontend may call the API from a browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    instrument_fastapi(app)

    logger.info(
        "App created env=%s prefix=%s cors=%s integrations=%s",
        settings.ENV,
        settings.API_PREFIX,
        settings.cors_origins_list,
        settings.integrations_status(),
    )
    return app
