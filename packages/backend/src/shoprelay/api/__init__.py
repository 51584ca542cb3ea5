"""API route aggregation.

All routers registered here get mounted in main.py. No per-request auth:
/api/notify is meant to be reachable only from the backend's network.
"""

from fastapi import APIRouter

from shoprelay.api.health import router as health_router
from shoprelay.api.notify import router as notify_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(notify_router, tags=["notify"])
