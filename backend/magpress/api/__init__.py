"""
API 路由注册
"""

from fastapi import APIRouter
from magpress.api.endpoints.system.health import router as health_router
from magpress.api.endpoints.content.posts import router as posts_router
from magpress.api.endpoints.content.comments import router as comments_router
from magpress.api.endpoints.newsletter import router as newsletter_router

api_router = APIRouter()

# 注册各个模块的路由
api_router.include_router(health_router, tags=["health"])
api_router.include_router(posts_router, tags=["posts"])
api_router.include_router(comments_router, tags=["comments"], prefix="/comments")
api_router.include_router(newsletter_router, tags=["newsletter"], prefix="/newsletter")
