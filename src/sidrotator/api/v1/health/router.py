"""Health Check API Routes - Route registration only."""

from fastapi import APIRouter

from sidrotator.api.v1.health import api

# Health endpoints are served at root level
router = APIRouter()
router.include_router(api.router, tags=["Health"])
