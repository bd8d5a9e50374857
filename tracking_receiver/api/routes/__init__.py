from fastapi import APIRouter

from tracking_receiver.api.routes import health, orders, tracking

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(orders.router, tags=["orders"])
api_router.include_router(tracking.router, tags=["tracking"])
