"""
核心 Schema 模块
"""

from .author import Actor, AuthorInfo

__all__ = ["Actor", "AuthorInfo"]
