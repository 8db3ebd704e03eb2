"""API v1 router aggregation."""

from fastapi import APIRouter

from progress_companion.api.v1.endpoints import analytics, body_composition, health, insights

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(body_composition.router, prefix="/body-composition", tags=["body-composition"])
api_router.include_router(insights.router, prefix="/insights", tags=["insights"])
