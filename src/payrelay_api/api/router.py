from fastapi import APIRouter

from ..modules.health.router import router as health_router
from ..modules.payments.router import router as payments_router


router = APIRouter()

# Public/basic endpoints
router.include_router(health_router, tags=["health"])  # /health

router.include_router(payments_router)
