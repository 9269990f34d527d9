"""
Magpress 后端应用主入口
FastAPI 应用配置和启动
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from magpress.api import api_router
from magpress.core.config import Settings, settings
from magpress.db.database import Database
from magpress.utils.cache import shutdown_cache, startup_cache


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体/参数校验失败统一返回 400"""
    issues = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "validation_failed", "issues": issues}),
    )


def create_app(cfg: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    database 可由调用方注入（测试使用），否则在 lifespan 中按配置创建
    """
    cfg = cfg or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        应用生命周期管理
        - 启动时：初始化数据库连接，按需创建表，初始化缓存
        - 关闭时：清理资源
        """
        logger.info("应用启动中...")
        db = database or Database(cfg)
        app.state.db = db

        if cfg.DEBUG or cfg.AUTO_CREATE_TABLES:
            logger.info("创建数据库表（仅开发环境/首次部署可选，生产请使用 Alembic 迁移）...")
            await db.create_all()

        # 缓存不可用时不阻止启动，读取退化为未命中
        try:
            await startup_cache()
        except Exception as e:
            logger.error(f"缓存服务初始化失败: {e}")

        logger.info("应用启动完成")
        yield
        logger.info("应用关闭中...")

        try:
            await shutdown_cache()
        except Exception as e:
            logger.error(f"缓存服务关闭失败: {e}")

        if database is None:
            await db.dispose()
        logger.info("应用已关闭")

    app = FastAPI(
        title=cfg.PROJECT_NAME,
        version=cfg.VERSION,
        description="Magpress 博客内容管理后端 API 服务",
        openapi_url=f"{cfg.API_V1_STR}/openapi.json",
        docs_url="/docs" if cfg.DEBUG else None,
        redoc_url="/redoc" if cfg.DEBUG else None,
        lifespan=lifespan,
    )

    # 配置 CORS
    if cfg.DEBUG:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    elif cfg.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in cfg.CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # 注册 API 路由
    app.include_router(api_router, prefix=cfg.API_V1_STR)

    @app.get("/")
    async def root() -> Dict[str, Any]:
        """根路径，返回应用信息"""
        return {
            "name": cfg.PROJECT_NAME,
            "version": cfg.VERSION,
            "description": "Magpress 博客内容管理后端 API 服务",
            "docs": "/docs" if cfg.DEBUG else None,
            "health": f"{cfg.API_V1_STR}/health",
        }

    @app.get("/ping")
    async def ping():
        """简单的 ping 接口，用于测试"""
        return {"message": "pong"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.BACKEND_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
