"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import credit, decisions, health, llm, rules

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    health.router,
    tags=["health"],
)

api_router.include_router(
    credit.router,
    prefix="/credit",
    tags=["credit"],
)

api_router.include_router(
    decisions.router,
    prefix="/decisions",
    tags=["decisions"],
)

api_router.include_router(
    rules.router,
    prefix="/rules",
    tags=["rules"],
)

api_router.include_router(
    llm.router,
    prefix="/llm",
    tags=["llm"],
)
