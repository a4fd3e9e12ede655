"""Top-level API router; mounts all domain routers under /api/v1."""

from fastapi import APIRouter

from narrative.api.routes import admin, assets, cron, market, tickers

api_router = APIRouter()
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(market.router, prefix="/market", tags=["market"])
api_router.include_router(assets.router, prefix="/assets", tags=["assets"])
api_router.include_router(tickers.router, prefix="/tickers", tags=["tickers"])
