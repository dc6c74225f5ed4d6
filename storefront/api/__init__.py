"""Tüm JSON API router'ları /api altında."""
from fastapi import APIRouter

from storefront.api import admin, auth, orders, products

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router)
api_router.include_router(products.router)
api_router.include_router(orders.router)
api_router.include_router(admin.router)
