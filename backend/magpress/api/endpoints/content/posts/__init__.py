"""
文章 API 路由
"""

from fastapi import APIRouter

from .posts import router as admin_posts_router
from .public_posts import router as public_posts_router

router = APIRouter()
router.include_router(admin_posts_router, prefix="/posts")
router.include_router(public_posts_router, prefix="/public/posts", tags=["public-posts"])

__all__ = ["router"]
