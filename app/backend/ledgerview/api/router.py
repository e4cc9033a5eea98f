"""Top-level API router."""

from fastapi import APIRouter

from ledgerview.api.routes.business_insights import router as business_insights_router
from ledgerview.api.routes.cashflow import router as cashflow_router
from ledgerview.api.routes.health import router as health_router
from ledgerview.api.routes.personal_insights import router as personal_insights_router
from ledgerview.api.routes.projects import router as projects_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(cashflow_router)
api_router.include_router(business_insights_router)
api_router.include_router(projects_router)
api_router.include_router(personal_insights_router)
