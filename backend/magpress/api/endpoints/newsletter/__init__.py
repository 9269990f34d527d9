from .subscribe import router

__all__ = ["router"]
