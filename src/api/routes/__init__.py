"""API route registration.

Aggregates all API routers into a single router
for inclusion in the main application.
"""

from fastapi import APIRouter

from src.api.routes.agents import router as agents_router
from src.api.routes.constitution import router as constitution_router
from src.api.routes.decision_framework import router as decision_framework_router
from src.api.routes.documents import router as documents_router
from src.api.routes.system import router as system_router
from src.api.routes.workflows import router as workflows_router

# Main API router
api_router = APIRouter()

# System: health, readiness, metrics, dashboard stats
api_router.include_router(system_router, tags=["System"])
# Agent catalog and standalone execution
api_router.include_router(agents_router)
# Workflows and their execution stream
api_router.include_router(workflows_router)
# Documents and version history
api_router.include_router(documents_router)
# Governance
api_router.include_router(constitution_router)
api_router.include_router(decision_framework_router)

__all__ = ["api_router"]
