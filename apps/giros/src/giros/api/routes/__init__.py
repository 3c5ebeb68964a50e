"""API v1 router registration."""

from fastapi import APIRouter

from giros.api.routes import banks, giros, minoristas, rates, transferencistas

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(rates.router)
v1_router.include_router(giros.router)
v1_router.include_router(minoristas.router)
v1_router.include_router(banks.router)
v1_router.include_router(banks.accounts_router)
v1_router.include_router(transferencistas.router)
