from .comments import router

__all__ = ["router"]
