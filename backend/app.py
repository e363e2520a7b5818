import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.core.config import Settings, configure_logging
from backend.infrastructure import (
    HttpAgentClient,
    HttpDataProcessor,
    LocalDataProcessor,
    configure_agent_client,
    configure_data_processor,
)
from backend.routes import chat, process_data, visualize

log = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="CFO Dashboard Visualization API", version="0.1.0")

    if settings.agent_service_url:
        configure_agent_client(
            HttpAgentClient(settings.agent_service_url, timeout=settings.agent_service_timeout)
        )
        log.info("Forwarding chat turns to %s", settings.agent_service_url)
    else:
        log.warning("AGENT_SERVICE_URL is not set; chat turns will be answered with an error message")

    if settings.data_processor_url:
        configure_data_processor(HttpDataProcessor(settings.data_processor_url))
        log.info("Using remote data processor at %s", settings.data_processor_url)
    else:
        configure_data_processor(LocalDataProcessor())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Id"],
    )

    app.include_router(visualize.router, prefix="/api")
    app.include_router(process_data.router, prefix="/api")
    app.include_router(chat.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "CFO Dashboard Visualization API",
                "docs": "/docs",
                "health": "/api/chat/sessions",
            }
        )

    return app


app = create_app()
