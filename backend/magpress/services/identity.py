"""
身份服务
校验外部身份提供方签发的令牌，并把作者资料同步到本地
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.config import settings
from magpress.core.errors import store_guard
from magpress.models.core import Author
from magpress.schemas.core import Actor


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """验证 JWT 令牌"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """签发令牌（开发环境与测试中模拟身份提供方）"""
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + (expires_delta or timedelta(minutes=15)), "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def actor_from_token(token: str) -> Optional[Actor]:
    """从令牌解析当前操作者，令牌无效时返回 None"""
    payload = verify_token(token)
    if not payload or not payload.get("sub"):
        return None
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Actor(
        subject=str(payload["sub"]),
        role=str(payload.get("role") or "user"),
        name=payload.get("name"),
        email=payload.get("email"),
        picture=payload.get("picture"),
        roles=[str(r) for r in roles],
    )


class AuthorService:
    """作者资料同步"""

    @staticmethod
    @store_guard("同步作者资料")
    async def sync_from_identity(db: AsyncSession, actor: Actor) -> str:
        """
        按令牌中的资料创建或更新作者记录，返回作者ID
        """
        result = await db.execute(select(Author).where(Author.id == actor.subject))
        author = result.scalar_one_or_none()

        if author is None:
            author = Author(
                id=actor.subject,
                name=actor.name,
                email=actor.email,
                avatar=actor.picture,
                role=actor.role.upper(),
            )
            db.add(author)
            logger.info(f"作者资料已创建: {actor.subject}")
        else:
            if actor.name:
                author.name = actor.name
            if actor.email:
                author.email = actor.email
            if actor.picture:
                author.avatar = actor.picture
            author.role = actor.role.upper()

        await db.commit()
        return author.id
