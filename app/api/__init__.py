"""
API routes for the TVM engine.
"""

from fastapi import APIRouter

from app.api import calculations

router = APIRouter()

router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
