"""
Redis缓存工具
为公开文章读取提供简单的Redis缓存，CACHE_ENABLED=false 时全部操作退化为未命中
"""

import asyncio
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

from magpress.core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis缓存客户端封装"""

    def __init__(self):
        self._client: Optional[redis.Redis] = None
        self._initialized: bool = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def enabled(self) -> bool:
        return settings.CACHE_ENABLED

    async def initialize(self) -> None:
        """初始化Redis连接"""
        if not self.enabled:
            logger.info("缓存已禁用，跳过Redis初始化")
            return
        if self._initialized and self._client:
            return

        try:
            self._loop = asyncio.get_running_loop()
            self._client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB_CACHE,
                decode_responses=True,  # 自动解码返回的字符串
                socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
                socket_keepalive=True,
                retry_on_timeout=True,
            )

            # 测试连接
            await self._client.ping()
            self._initialized = True
            logger.info("Redis缓存客户端初始化成功")

        except Exception as e:
            logger.error(f"Redis缓存客户端初始化失败: {e}")
            raise

    async def get_client(self) -> redis.Redis:
        """获取Redis客户端实例"""
        if not self.enabled:
            raise RuntimeError("缓存已禁用")
        loop = asyncio.get_running_loop()
        # 事件循环更换后旧连接不可复用
        if self._loop is not None and loop is not self._loop:
            self._client = None
            self._initialized = False
            self._loop = None
        if not self._initialized or self._client is None:
            await self.initialize()
        if self._client is None:
            raise RuntimeError("Redis客户端初始化失败")
        return self._client

    async def close(self) -> None:
        """关闭Redis连接"""
        if self._client:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning(f"Redis关闭连接时出错: {e}")
            finally:
                self._client = None
                self._initialized = False
                logger.info("Redis缓存客户端已关闭")

    async def ping(self) -> bool:
        client = await self.get_client()
        pong = await client.ping()
        return pong is True or pong == "PONG"

    async def get(self, key: str) -> Optional[Any]:
        """获取缓存值"""
        if not self.enabled:
            return None
        try:
            client = await self.get_client()
            value = await client.get(key)
            if value is None:
                return None
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        except Exception as e:
            logger.warning(f"Redis获取缓存失败: {e}")
            return None

    async def set(self, key: str, value: Any, expire_seconds: Optional[int] = None) -> bool:
        """设置缓存值"""
        if not self.enabled:
            return False
        try:
            client = await self.get_client()
            serialized_value = json.dumps(value, ensure_ascii=False, default=str)
            if expire_seconds:
                result = await client.setex(key, expire_seconds, serialized_value)
            else:
                result = await client.set(key, serialized_value)
            return result is True
        except Exception as e:
            logger.warning(f"Redis设置缓存失败: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """删除缓存键"""
        if not self.enabled:
            return False
        try:
            client = await self.get_client()
            result = await client.delete(key)
            return result > 0
        except Exception as e:
            logger.warning(f"Redis删除缓存失败: {e}")
            return False

    async def clear_pattern(self, pattern: str) -> int:
        """清除匹配模式的缓存键"""
        if not self.enabled:
            return 0
        try:
            client = await self.get_client()
            deleted_total = 0
            cursor: int = 0
            batch: list[str] = []

            while True:
                cursor, keys = await client.scan(cursor=cursor, match=pattern, count=1000)
                if keys:
                    batch.extend(list(keys))
                while len(batch) >= 500:
                    chunk = batch[:500]
                    batch = batch[500:]
                    deleted_total += int(await client.delete(*chunk) or 0)
                if cursor == 0:
                    break

            if batch:
                deleted_total += int(await client.delete(*batch) or 0)

            if deleted_total:
                logger.info(f"清除了 {deleted_total} 个匹配模式 '{pattern}' 的缓存键")
            return deleted_total
        except Exception as e:
            logger.warning(f"Redis清除模式缓存失败: {e}")
            return 0


# 全局缓存实例
cache = RedisCache()


def compact_cache_key_generator(prefix: str, *args) -> str:
    """紧凑版缓存键生成器（直接传递参数值）"""
    if not args:
        return prefix
    param_str = ":".join(str(arg) for arg in args)
    return f"{prefix}:{param_str}"


class PostCacheKeys:
    """文章相关缓存键生成器"""

    @staticmethod
    def public_list(
        page: int = 1,
        size: int = 20,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> str:
        """公开文章列表缓存键"""
        featured_flag = "-" if featured is None else int(featured)
        return compact_cache_key_generator("posts:p:list", page, size, category or "-", featured_flag)

    @staticmethod
    def public_detail(post_id: int) -> str:
        """公开文章详情缓存键"""
        return f"posts:p:detail:{post_id}"

    @staticmethod
    def clear_post(post_id: Optional[int] = None):
        """清除文章相关缓存的键模式"""
        patterns = ["posts:p:list:*"]
        if post_id:
            patterns.append(f"posts:p:detail:{post_id}")
        return patterns


async def clear_post_cache(post_id: Optional[int] = None) -> None:
    """清除文章相关缓存"""
    deleted_total = 0
    for pattern in PostCacheKeys.clear_post(post_id):
        deleted_total += await cache.clear_pattern(pattern)

    if deleted_total > 0:
        logger.info(f"清除了 {deleted_total} 个文章相关缓存")


# FastAPI生命周期事件
async def startup_cache():
    """应用启动时初始化缓存"""
    await cache.initialize()
    logger.info("缓存服务启动完成")


async def shutdown_cache():
    """应用关闭时清理缓存连接"""
    await cache.close()
    logger.info("缓存服务已关闭")
