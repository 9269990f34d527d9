"""
Magpress 博客/杂志内容后端
"""

__version__ = "1.0.0"
