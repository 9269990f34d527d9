"""
博客内容服务模块
"""

from magpress.services.blog.post import PostService
from magpress.services.blog.comment import CommentService

__all__ = ["PostService", "CommentService"]
