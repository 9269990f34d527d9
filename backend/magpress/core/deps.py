"""
FastAPI 依赖注入工具 - 身份校验和权限控制
令牌由外部身份提供方签发，本服务只做校验
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from magpress.core.config import settings
from magpress.schemas.core import Actor
from magpress.services.identity import actor_from_token

# Bearer 令牌（也支持从 Cookie 读取）
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token", auto_error=False)


async def get_access_token(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[str]:
    if token:
        return token
    return request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)


async def get_current_actor(
    token: Optional[str] = Depends(get_access_token),
) -> Actor:
    """
    获取当前认证的操作者（必须有有效的认证令牌）

    异常:
        401: 未授权访问
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="未提供认证令牌",
            headers={"WWW-Authenticate": "Bearer"},
        )

    actor = actor_from_token(token)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证令牌",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor


async def require_admin(
    actor: Actor = Depends(get_current_actor),
) -> Actor:
    """
    要求操作者具备管理员角色

    异常:
        403: 权限不足
    """
    if not actor.has_any_role(settings.IDENTITY_ADMIN_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="需要管理员权限",
        )
    return actor
