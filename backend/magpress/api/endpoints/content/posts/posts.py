"""
文章管理 API 端点
提供文章的完整CRUD操作，需要管理员权限
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.config import settings
from magpress.core.deps import require_admin
from magpress.core.errors import ServiceError, http_error
from magpress.db.database import MAX_ID, get_db
from magpress.models.blog import PostStatus
from magpress.schemas.blog import PostCreate, PostList, PostResponse, PostStatusUpdate, PostUpdate
from magpress.schemas.core import Actor
from magpress.services.blog import PostService
from magpress.services.identity import AuthorService
from magpress.utils.cache import clear_post_cache

router = APIRouter()


@router.get("", response_model=PostList)
async def list_posts(
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(20, ge=1, le=settings.POST_PAGE_SIZE_MAX, description="每页数量"),
    status_filter: Optional[PostStatus] = Query(None, alias="status", description="按状态筛选，缺省返回全部"),
    category: Optional[str] = Query(None, description="按分类筛选"),
    featured: Optional[bool] = Query(None, description="按精选筛选"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Dict[str, Any]:
    """
    获取文章列表（支持分页和筛选）

    权限：管理员
    """
    status_value = status_filter.value if status_filter else None
    try:
        total = await PostService.count_posts(db, status=status_value, category=category, featured=featured)
        posts = await PostService.list_posts(
            db,
            status=status_value,
            category=category,
            featured=featured,
            limit=size,
            offset=(page - 1) * size,
        )
    except ServiceError as e:
        raise http_error(e)

    return {
        "total": total,
        "posts": posts,
        "page": page,
        "size": size,
        "total_pages": (total + size - 1) // size if total > 0 else 1,
    }


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_admin),
) -> Any:
    """
    创建新文章

    权限：管理员
    """
    try:
        author_id = await AuthorService.sync_from_identity(db, actor)
        post = await PostService.create_post(db, post_data, author_id=author_id)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(post.id)
    return post


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Any:
    """
    根据ID获取文章详情（含草稿）

    权限：管理员
    """
    try:
        return await PostService.get_post(db, post_id)
    except ServiceError as e:
        raise http_error(e)


async def _update(post_id: int, post_data: PostUpdate, db: AsyncSession) -> PostResponse:
    try:
        post = await PostService.update_post(db, post_id, post_data)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(post_id)
    return post


@router.patch("/{post_id}", response_model=PostResponse)
async def patch_post(
    *,
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    post_data: PostUpdate,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Any:
    """
    部分更新文章，未提供的字段保持不变

    权限：管理员
    """
    return await _update(post_id, post_data, db)


@router.put("/{post_id}", response_model=PostResponse)
async def put_post(
    *,
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    post_data: PostUpdate,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Any:
    """
    更新文章（与 PATCH 语义一致，兼容旧版编辑页）

    权限：管理员
    """
    return await _update(post_id, post_data, db)


@router.post("/{post_id}/status", response_model=PostResponse)
async def set_post_status(
    *,
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    payload: PostStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Any:
    """
    发布/撤回文章

    权限：管理员
    """
    try:
        post = await PostService.set_status(db, post_id, payload.status)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(post_id)
    return post


@router.delete("/{post_id}")
async def delete_post(
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Dict[str, Any]:
    """
    删除文章（评论级联删除）

    权限：管理员
    """
    try:
        await PostService.delete_post(db, post_id)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(post_id)
    return {"success": True}
