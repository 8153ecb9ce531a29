"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from nightline.api.routes import auth, events, manage, users, support, profile

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(manage.router)
api_router.include_router(users.router)
api_router.include_router(support.router)
api_router.include_router(profile.router)
