"""
公开文章 API 端点
访客浏览已发布的文章，无需登录
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.config import settings
from magpress.core.errors import ServiceError, http_error
from magpress.db.database import MAX_ID, get_db
from magpress.models.blog import PostStatus
from magpress.schemas.blog import PostList, PostResponse
from magpress.services.blog import PostService
from magpress.utils.cache import PostCacheKeys, cache

router = APIRouter()

PUBLISHED = PostStatus.PUBLISHED.value


@router.get("", response_model=PostList)
async def list_public_posts(
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(20, ge=1, le=settings.POST_PAGE_SIZE_MAX, description="每页数量"),
    category: Optional[str] = Query(None, description="按分类筛选"),
    featured: Optional[bool] = Query(None, description="按精选筛选"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    获取已发布文章列表
    """
    cache_key = PostCacheKeys.public_list(page=page, size=size, category=category, featured=featured)
    cached_result = await cache.get(cache_key)
    if cached_result is not None:
        return cached_result

    try:
        total = await PostService.count_posts(db, status=PUBLISHED, category=category, featured=featured)
        posts = await PostService.list_posts(
            db,
            status=PUBLISHED,
            category=category,
            featured=featured,
            limit=size,
            offset=(page - 1) * size,
        )
    except ServiceError as e:
        raise http_error(e)

    response_data: Dict[str, Any] = jsonable_encoder({
        "total": total,
        "posts": posts,
        "page": page,
        "size": size,
        "total_pages": (total + size - 1) // size if total > 0 else 1,
    })
    await cache.set(cache_key, response_data, expire_seconds=settings.POST_CACHE_PUBLIC_LIST_TTL)
    return response_data


@router.get("/slug/{slug}", response_model=PostResponse)
async def get_public_post_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    根据slug阅读文章，同时记录一次浏览
    """
    try:
        post = await PostService.get_post_by_slug(db, slug, published_only=True)
        viewed = await PostService.record_view(db, post.id)
    except ServiceError as e:
        raise http_error(e)

    # 浏览数已变化，按ID缓存的详情失效
    await cache.delete(PostCacheKeys.public_detail(post.id))
    return viewed


@router.get("/{post_id}", response_model=PostResponse)
async def get_public_post(
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    根据ID获取已发布文章
    """
    cache_key = PostCacheKeys.public_detail(post_id)
    cached_result = await cache.get(cache_key)
    if cached_result is not None:
        return cached_result

    try:
        post = await PostService.get_post(db, post_id, published_only=True)
    except ServiceError as e:
        raise http_error(e)

    response_data = jsonable_encoder(post)
    await cache.set(cache_key, response_data, expire_seconds=settings.POST_CACHE_PUBLIC_DETAIL_TTL)
    return response_data
