"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.config import settings
from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.deps import get_audit_client
from app.services.rule_store import RuleStore

setup_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed default rules on startup and flush audit events on shutdown."""
    if settings.SEED_DEFAULT_RULES:
        async with SessionLocal() as session:
            seeded = await RuleStore(session).seed_default_rules()
            if seeded:
                logger.info(f"Seeded {seeded} default decision rules")

    logger.info(
        f"Credit decision engine started (mode={settings.DECISION_MODE.value}, "
        f"llm_enabled={settings.LLM_ENABLED}, provider={settings.LLM_PROVIDER.value})"
    )
    yield
    await get_audit_client().drain()


# Create FastAPI application
app = FastAPI(
    title="Credit Decision Engine API",
    description="Credit bureau aggregation with rule-based, LLM and hybrid loan decisioning",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router with v1 prefix
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "message": "Credit Decision Engine API",
        "version": "1.0.0",
        "docs": "/api/docs",
    }
