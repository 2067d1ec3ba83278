"""FastAPI application for CoinTrace backend"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cointrace.config import settings
from cointrace.services.history import get_search_history
from cointrace.services.transaction_fetcher import get_client_factory
from cointrace.api import address, classify, graph, history, prices

# Configure logging
log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# Align key loggers with configured level
logging.getLogger("cointrace").setLevel(log_level)
logging.getLogger("uvicorn").setLevel(log_level)
logging.getLogger("uvicorn.access").setLevel(log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for startup/shutdown"""
    # Startup
    logger.info("Starting CoinTrace backend...")
    search_history = await get_search_history()
    logger.info("Search history initialized")

    yield

    # Shutdown
    logger.info("Shutting down CoinTrace backend...")
    await search_history.close_redis()
    await get_client_factory().close_all()


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Cryptocurrency address inspection and transaction graph API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(classify.router, prefix="/api", tags=["Classify"])
app.include_router(address.router, prefix="/api/address", tags=["Address"])
app.include_router(graph.router, prefix="/api/graph", tags=["Graph"])
app.include_router(prices.router, prefix="/api", tags=["Prices"])
app.include_router(history.router, prefix="/api", tags=["History"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "CoinTrace API",
        "version": settings.api_version,
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
