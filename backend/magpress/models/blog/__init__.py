"""
博客内容模型模块
包含文章、评论模型
"""

from magpress.models.blog.post import Post, PostStatus
from magpress.models.blog.comment import Comment, CommentStatus

__all__ = ["Post", "PostStatus", "Comment", "CommentStatus"]
