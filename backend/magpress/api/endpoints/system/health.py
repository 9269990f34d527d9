"""
健康检查 API 端点
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.config import settings
from magpress.db.database import get_db
from magpress.utils.cache import cache

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    健康检查接口
    检查数据库连接和缓存状态
    """
    try:
        result = await db.execute(text("SELECT 1"))
        db_status = "healthy" if result.scalar() == 1 else "unhealthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    if not cache.enabled:
        redis_status = "disabled"
    else:
        try:
            redis_status = "healthy" if await cache.ping() else "unhealthy"
        except Exception:
            redis_status = "unhealthy"

    if db_status != "healthy":
        overall_status = "unhealthy"
    elif redis_status == "unhealthy":
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return {
        "status": overall_status,
        "checks": {"database": db_status, "redis": redis_status},
        "system": {
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "timestamp": datetime.now().isoformat(),
            "environment": settings.DEPLOYMENT_ENV,
            "debug_mode": settings.DEBUG,
        },
    }
