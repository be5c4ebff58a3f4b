"""Offline stand-in for the relay: same route, scripted replies, no upstream."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.exceptions import register_exception_handlers
from src.config.logging import setup_logging
from src.config.settings import Settings, settings
from src.modules.assistant_mock.router import router as mock_router

logger = logging.getLogger(__name__)


def create_mock_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level)

    app = FastAPI(title="Assistant Relay (mock)")
    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(mock_router, prefix="/api", tags=["assistant"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "mock": True}

    return app


app = create_mock_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Mock AI proxy listening on http://localhost:%d/api/assistant", settings.port
    )
    uvicorn.run("src.mock_main:app", host=settings.app_host, port=settings.port)
