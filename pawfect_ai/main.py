"""
FastAPI Application Entry Point

Main application with lifecycle management for the pooled HTTP clients.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pawfect_ai.api import API_VERSION, api_router
from pawfect_ai.core.config import settings
from pawfect_ai.core.logging import setup_logging
from pawfect_ai.tools import backend_store, insight_provider, notifier

logger = logging.getLogger(__name__)

HTTP_CLIENTS = {
    "backend": backend_store,
    "insight provider": insight_provider,
    "notification": notifier,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Closes the pooled httpx clients on shutdown.
    """
    setup_logging()
    logger.info(f"Pawfect AI service starting up (env={settings.APP_ENV})")

    yield

    logger.info("Pawfect AI service shutting down...")

    for name, module in HTTP_CLIENTS.items():
        try:
            await module.aclose_client()
        except Exception as e:
            logger.error(f"Error closing {name} client: {e}")

    logger.info("Pawfect AI service shutdown complete")


app = FastAPI(
    title="Pawfect AI - Sitter Trust and Booking Service",
    description="Sitter trust scoring, time-slot recommendation and booking conflict management",
    version=API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Service banner."""
    return {
        "service": "Pawfect AI",
        "status": "running",
        "version": API_VERSION
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "pawfect_ai",
        "components": {
            "api": "ok",
            "data_store": settings.DATA_STORE,
            "external_insight": "configured" if settings.INSIGHT_API_KEY else "disabled"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
