"""
Routes package - aggregates all API routers
"""

from fastapi import APIRouter

from . import chat, health, practice

router = APIRouter()
router.include_router(chat.router)
router.include_router(practice.router)
router.include_router(health.router)

__all__ = ["router"]
