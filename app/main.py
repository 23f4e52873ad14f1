"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import availability, slot_blocks
from app.core.config import settings
from app.core.database import engine, init_db

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Venue Slot Service")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if settings.DEBUG:
        # Production schemas are managed by the venue platform
        await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Venue Slot Service")
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Venue Slot Service",
    description="Slot availability and blocking for venue admins",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(availability.router)
app.include_router(slot_blocks.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
