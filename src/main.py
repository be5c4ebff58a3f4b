from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.exceptions import install_process_handlers, register_exception_handlers
from src.config.logging import DiagnosticLog, setup_logging
from src.config.settings import Settings, settings
from src.middleware.body_limit import BodySizeLimitMiddleware
from src.modules.relay.models import resolve_provider
from src.modules.relay.router import router as relay_router
from src.modules.relay.service import RelayService


def create_app(
    app_settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level)

    diagnostic_log = DiagnosticLog(app_settings.log_file)
    provider = resolve_provider(app_settings)
    diagnostic_log.write("Starting robust AI proxy")
    diagnostic_log.write(
        "GROQ_API_KEY set?", bool(app_settings.groq_api_key),
        "OPENAI_API_KEY set?", bool(app_settings.openai_api_key),
        "port", app_settings.port,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        restore_process_handlers = install_process_handlers(diagnostic_log)
        diagnostic_log.write(
            f"AI proxy listening on http://localhost:{app_settings.port}/api/assistant"
        )
        yield
        diagnostic_log.write("AI proxy shutting down")
        restore_process_handlers()
        diagnostic_log.close()

    app = FastAPI(title="Assistant Relay", lifespan=lifespan)
    app.state.relay_service = RelayService(
        provider,
        diagnostic_log,
        timeout=app_settings.upstream_timeout,
        transport=transport,
    )

    register_exception_handlers(app)
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=app_settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(relay_router, prefix="/api", tags=["assistant"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "provider": provider.name if provider else None}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host=settings.app_host, port=settings.port)
