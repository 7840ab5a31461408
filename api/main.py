"""
api/main.py — FastAPI application entry point.

Run with:
    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from exposure_engine.config import settings
from exposure_engine.db.session import engine
from api.endpoints.analysis_routes import router as analysis_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown logic."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection verified (engine=%s).", settings.analysis_engine)
    yield
    logger.info("Application shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Exposure Engine",
    description=(
        "Scores a youth soccer player's realistic visibility to D1, D2, D3, NAIA "
        "and JUCO programs and produces risk flags and a 90-day action plan."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router, prefix="/analysis", tags=["Analysis"])


# ── Health check ─────────────────────────────────────────────────────────────

@app.get("/health", tags=["System"])
def health_check():
    """Returns service liveness status."""
    return {"status": "ok", "service": "exposure-engine"}


@app.get("/", tags=["System"])
def root():
    return {
        "message": "Exposure Engine is running.",
        "docs": "/docs",
        "engine": settings.analysis_engine,
        "rubric": "/analysis/rubric",
    }
