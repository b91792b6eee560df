"""Master API router mounted at /api/v1."""

from fastapi import APIRouter

from coinforge.api.routes import account, auth, deposits, generation, health

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(generation.router)
api_router.include_router(deposits.router)
api_router.include_router(auth.router)
api_router.include_router(account.router)
