"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Protected routes take the account through
Depends(get_current_account) in each handler, because the handler needs
the Account itself as the owner of every query. Health and the open auth
routes (register, login) need no token.
"""

from fastapi import APIRouter

from taskgate.api.auth import router as auth_router
from taskgate.api.health import router as health_router
from taskgate.api.tasks import router as tasks_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(tasks_router, tags=["tasks"])
