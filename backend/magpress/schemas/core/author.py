"""
作者与身份相关的 Pydantic 模型
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from magpress.core.config import settings

UNKNOWN_AUTHOR_NAME = "Unknown Author"


class AuthorInfo(BaseModel):
    """作者信息模型（用于嵌套响应）"""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: str = "USER"
    bio: Optional[str] = None
    website: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_author(cls, author: Any) -> "AuthorInfo":
        """由作者记录构建，缺失的名称与头像使用展示默认值"""
        info = cls.model_validate(author)
        if not info.name:
            info.name = UNKNOWN_AUTHOR_NAME
        if not info.avatar:
            info.avatar = settings.DEFAULT_AUTHOR_AVATAR
        return info

    @classmethod
    def system_default(cls) -> "AuthorInfo":
        """文章未关联作者时展示的系统默认作者"""
        return cls(
            id=settings.DEFAULT_AUTHOR_ID,
            name=settings.DEFAULT_AUTHOR_NAME,
            email=settings.DEFAULT_AUTHOR_EMAIL,
            avatar=settings.DEFAULT_AUTHOR_AVATAR,
            role=settings.DEFAULT_AUTHOR_ROLE,
            bio=settings.DEFAULT_AUTHOR_BIO,
            website=None,
        )


class Actor(BaseModel):
    """外部身份提供方令牌中解析出的当前操作者"""
    subject: str = Field(..., min_length=1)
    role: str = "user"
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None
    roles: List[str] = []

    def has_any_role(self, allowed: List[str]) -> bool:
        granted = {self.role.lower(), *(r.lower() for r in self.roles)}
        return any(r.lower() in granted for r in allowed)
