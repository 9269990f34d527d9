"""
评论相关的 Pydantic 模型
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from magpress.db.database import MAX_ID
from magpress.models.blog.comment import CommentStatus


class CommentCreate(BaseModel):
    """评论提交模型"""
    # 兼容前端历史字段名 blogId / blogPostId
    post_id: int = Field(
        ...,
        gt=0,
        le=MAX_ID,
        validation_alias=AliasChoices("post_id", "postId", "blog_id", "blogId", "blogPostId"),
        description="文章ID",
    )
    name: str = Field(..., max_length=50, description="评论者名称")
    content: str = Field(..., max_length=1000, description="评论内容")
    email: Optional[EmailStr] = Field(None, description="评论者邮箱 (可选)")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("名称至少需要 2 个字符")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        v = v.strip()
        if len(v) < 5:
            raise ValueError("评论至少需要 5 个字符")
        return v


class CommentResponse(BaseModel):
    """评论响应模型"""
    id: int
    post_id: int
    name: str
    email: Optional[str] = None
    content: str
    status: CommentStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommentWithPost(CommentResponse):
    """审核列表中附带文章信息"""
    post_title: Optional[str] = None
    post_slug: Optional[str] = None


class CommentModerationList(BaseModel):
    total: int
    comments: List[CommentWithPost]
