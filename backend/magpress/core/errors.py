"""
服务层错误类型
所有存储驱动异常在服务边界被转换为以下类型，端点再映射为 HTTP 状态码
"""

import functools
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError


class ServiceError(Exception):
    """服务层错误基类"""

    code: str = "service_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.field:
            detail["field"] = self.field
        return detail


class ValidationError(ServiceError):
    """输入不满足约束，调用方修正输入后可重试"""

    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    """引用的实体不存在"""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """唯一约束冲突（slug 重复）"""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class ForeignKeyError(ServiceError):
    """评论引用了不存在的文章"""

    code = "foreign_key_error"
    status_code = status.HTTP_400_BAD_REQUEST


class PersistenceError(ServiceError):
    """存储不可用或返回了意外错误，消息对外保持通用"""

    code = "persistence_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "数据存储暂时不可用，请稍后重试", field: Optional[str] = None):
        super().__init__(message, field)


def http_error(exc: ServiceError) -> HTTPException:
    """将服务层错误转换为 HTTPException"""
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def _constraint_message(exc: Exception) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).lower()


def _sqlstate(exc: Exception) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    # asyncpg 经 SQLAlchemy 适配后 sqlstate 挂在 orig 上
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_unique_violation(exc: Exception) -> bool:
    """判断 IntegrityError 是否为唯一约束冲突"""
    if _sqlstate(exc) == "23505":
        return True
    message = _constraint_message(exc)
    return "unique" in message or "duplicate key" in message


def is_foreign_key_violation(exc: Exception) -> bool:
    """判断 IntegrityError 是否为外键约束冲突"""
    if _sqlstate(exc) == "23503":
        return True
    return "foreign key" in _constraint_message(exc)


def store_guard(action: str):
    """
    服务方法装饰器：将未处理的 SQLAlchemyError 转换为 PersistenceError
    被装饰函数的第一个参数必须是 AsyncSession
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(db, *args, **kwargs):
            try:
                return await func(db, *args, **kwargs)
            except SQLAlchemyError as exc:
                logger.error(f"{action}失败: {exc}")
                try:
                    await db.rollback()
                except SQLAlchemyError as rollback_exc:
                    logger.warning(f"{action}回滚失败: {rollback_exc}")
                raise PersistenceError() from exc
        return wrapper
    return decorator
