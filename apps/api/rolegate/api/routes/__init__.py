"""
API routes aggregation.
"""

from fastapi import APIRouter

from .users import router as users_router
from .abilities import router as abilities_router

router = APIRouter()

router.include_router(users_router, prefix="/users", tags=["users"])
router.include_router(abilities_router, prefix="/abilities", tags=["abilities"])
