"""
Anchor Proof Verifier - Main Entry Point

Provides an API for verifying blockchain-anchored proofs of existence.
"""

import signal
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from starlette.responses import Response

from proofcheck.api.v1 import router as api_v1_router
from proofcheck.core.config import settings
from proofcheck.core.logging import setup_logging
from proofcheck.metrics import get_verification_metrics
from proofcheck.services.blockchain_client import BlockchainInfoClient
from proofcheck.services.data_fetcher import HttpDataFetcher

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "Starting Proof Verifier",
        version=settings.VERSION,
        environment=settings.ENV,
        blockchain_api=settings.BLOCKCHAIN_API_URL,
        data_base_url=settings.DATA_BASE_URL,
    )

    # Shared collaborators; each request gets its own transaction cache
    data_fetcher = HttpDataFetcher()
    transaction_fetcher = BlockchainInfoClient()
    app.state.data_fetcher = data_fetcher
    app.state.transaction_fetcher = transaction_fetcher

    if settings.METRICS_ENABLED:
        get_verification_metrics().set_service_info(
            version=settings.VERSION,
            environment=settings.ENV,
            blockchain_api=settings.BLOCKCHAIN_API_URL,
        )

    yield

    logger.info("Shutting down Proof Verifier")

    await data_fetcher.aclose()
    await transaction_fetcher.aclose()

    logger.info("Proof Verifier shutdown complete")


def create_application() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        title="Anchor Proof Verifier API",
        description="Verification of blockchain-anchored Merkle proofs of existence",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV != "production" else None,
        redoc_url="/redoc" if settings.ENV != "production" else None,
        lifespan=lifespan,
    )

    # Include routers
    app.include_router(api_v1_router, prefix="/api/v1")

    # Metrics endpoint
    if settings.METRICS_ENABLED:
        metrics_app = make_asgi_app()
        app.mount("/metrics", metrics_app)

    @app.get("/health")
    async def health() -> dict:
        """Overall service health check."""
        return {
            "status": "healthy",
            "service": "proof-verifier",
            "version": settings.VERSION,
            "blockchain_api": settings.BLOCKCHAIN_API_URL,
        }

    @app.get("/live")
    async def live() -> Response:
        """Liveness probe for Kubernetes."""
        return Response(status_code=200, content="alive")

    return app


app = create_application()


def handle_signal(signum: int, frame: object) -> None:
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, initiating shutdown")
    sys.exit(0)


def main() -> None:
    """Run the service."""
    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    logger.info(
        "Starting Proof Verifier service",
        host=settings.HOST,
        port=settings.PORT,
    )

    uvicorn.run(
        "proofcheck.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
