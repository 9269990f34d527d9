"""
持久化适配层
"""

from magpress.repositories.post import PostRepository

__all__ = ["PostRepository"]
