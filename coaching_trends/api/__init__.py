"""
Backend API package initialization.

This package contains FastAPI router modules for the Coaching Trends service:
- trends: rep and aggregate trend analysis, coaching summary, history
"""

from fastapi import APIRouter

from coaching_trends.api.trends import router as trends_router

# Create main API router
api_router = APIRouter()

api_router.include_router(trends_router)  # trends router has its own prefix

__all__ = [
    "api_router",
    "trends_router",
]
