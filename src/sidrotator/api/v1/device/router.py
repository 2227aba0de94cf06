"""Device API Routes - Route registration only."""

from fastapi import APIRouter

from sidrotator.api.v1 import SECURITY_IDENTIFIER_PREFIX
from sidrotator.api.v1.device import api

router = APIRouter()
router.include_router(
    api.router, prefix=SECURITY_IDENTIFIER_PREFIX, tags=["security-identifier"]
)
