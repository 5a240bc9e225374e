"""Configurator Builder FastAPI Application"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv()  # Load .env file

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import configurators, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    logger.info("Starting Configurator Builder API...")
    if configurators.store.load():
        logger.info(f"Restored {len(configurators.store.all())} configurator(s)")
    yield
    logger.info("Shutting down Configurator Builder API...")


app = FastAPI(
    title="Configurator Builder",
    description="Option resolution and preview API for 3D product configurators",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(configurators.router, prefix="/api/configurators", tags=["Configurators"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Configurator Builder",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
    }
