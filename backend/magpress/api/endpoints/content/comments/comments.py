"""
评论 API 端点
访客提交与查看评论；管理员审核与删除
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.deps import require_admin
from magpress.core.errors import ServiceError, http_error
from magpress.db.database import MAX_ID, get_db
from magpress.models.blog import CommentStatus
from magpress.schemas.blog import CommentCreate, CommentModerationList, CommentResponse
from magpress.schemas.core import Actor
from magpress.services.blog import CommentService
from magpress.utils.cache import clear_post_cache

router = APIRouter()


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    提交评论，默认进入待审核状态
    """
    try:
        comment = await CommentService.create_comment(db, comment_data)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(comment.post_id)
    return comment


@router.get("", response_model=List[CommentResponse])
async def list_comments(
    post_id: int = Query(..., ge=1, le=MAX_ID, description="文章ID"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    获取文章下已审核通过的评论
    """
    try:
        return await CommentService.list_comments(db, post_id, status=CommentStatus.APPROVED)
    except ServiceError as e:
        raise http_error(e)


@router.get("/admin", response_model=CommentModerationList)
async def list_comments_for_moderation(
    status_filter: Optional[CommentStatus] = Query(None, alias="status", description="按审核状态筛选"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Dict[str, Any]:
    """
    审核列表

    权限：管理员
    """
    try:
        comments = await CommentService.list_all_comments(db, status=status_filter)
    except ServiceError as e:
        raise http_error(e)
    return {"total": len(comments), "comments": comments}


@router.get("/admin/post/{post_id}", response_model=List[CommentResponse])
async def list_post_comments_for_moderation(
    post_id: int = Path(..., ge=1, le=MAX_ID, description="文章ID"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Any:
    """
    某篇文章的全部评论（含待审核）

    权限：管理员
    """
    try:
        return await CommentService.list_comments(db, post_id)
    except ServiceError as e:
        raise http_error(e)


@router.post("/{comment_id}/approve", response_model=CommentResponse)
async def approve_comment(
    comment_id: int = Path(..., ge=1, le=MAX_ID, description="评论ID"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Any:
    """
    审核通过评论

    权限：管理员
    """
    try:
        comment = await CommentService.approve_comment(db, comment_id)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(comment.post_id)
    return comment


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int = Path(..., ge=1, le=MAX_ID, description="评论ID"),
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(require_admin),
) -> Dict[str, Any]:
    """
    删除评论

    权限：管理员
    """
    try:
        post_id = await CommentService.delete_comment(db, comment_id)
    except ServiceError as e:
        raise http_error(e)

    await clear_post_cache(post_id)
    return {"success": True}
