import logging
import traceback
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from translation_orchestrator.api.v1.router import api_v1_router
from translation_orchestrator.core.config import settings, validate_settings_for_production
from translation_orchestrator.core.logging import setup_logging
from translation_orchestrator.core.metrics import PrometheusMiddleware, metrics_response
from translation_orchestrator.gateway.service import TranslationService

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    logger.info("Starting translation orchestrator...")

    service = TranslationService()
    service.start()
    app.state.translation_service = service

    yield

    # Shutdown
    await service.stop()
    logger.info("Translation orchestrator shut down")


app = FastAPI(
    title="Translation Orchestrator",
    description="Queued, cached and rate-limited access to external translation providers",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": f"{type(exc).__name__}: {exc}"})


app.add_middleware(PrometheusMiddleware)

# CORS: parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)


@app.get("/api/v1/health")
async def health(request: Request):
    service: TranslationService = request.app.state.translation_service
    return {
        "status": "ok",
        "queue_length": len(service.queue),
        "is_processing": service.processor.is_processing,
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run(
        "translation_orchestrator.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
