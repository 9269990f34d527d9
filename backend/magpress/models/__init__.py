"""
数据库模型定义 - 模块化结构
表名前缀：sys_ (身份同步的系统表), blog_ (内容表)
"""

from magpress.db.database import Base

# 核心系统模型 (sys_ 前缀)
from .core import Author

# 博客内容模型 (blog_ 前缀)
from .blog import Post, PostStatus, Comment, CommentStatus

__all__ = [
    "Base",
    "Author",
    "Post",
    "PostStatus",
    "Comment",
    "CommentStatus",
]
