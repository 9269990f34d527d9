"""
核心系统模型模块
包含外部身份同步的作者模型
"""

from magpress.models.core.author import Author

__all__ = ["Author"]
