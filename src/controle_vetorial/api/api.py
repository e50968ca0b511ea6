from fastapi import APIRouter
from controle_vetorial.api.endpoints import health, reports, dashboard, hierarchy

api_router = APIRouter()


api_router.include_router(health.router, tags=["Health"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(hierarchy.router, prefix="/hierarchy", tags=["Hierarchy"])
