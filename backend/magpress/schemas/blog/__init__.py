"""
博客内容 Schema 模块
包含文章、评论相关的 Pydantic 模型
"""

from .post import (
    PostCreate,
    PostUpdate,
    PostStatusUpdate,
    PostResponse,
    PostList,
)

from .comment import (
    CommentCreate,
    CommentResponse,
    CommentWithPost,
    CommentModerationList,
)

__all__ = [
    # 文章Schema
    "PostCreate",
    "PostUpdate",
    "PostStatusUpdate",
    "PostResponse",
    "PostList",

    # 评论Schema
    "CommentCreate",
    "CommentResponse",
    "CommentWithPost",
    "CommentModerationList",
]
