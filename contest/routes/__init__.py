"""
contest/routes/__init__.py
Route registration
"""
from fastapi import APIRouter
from contest.routes import admin, public

router = APIRouter()

router.include_router(public.router)
router.include_router(admin.router)
