"""
评论服务 - 提交、查询与审核
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.config import settings
from magpress.core.errors import (
    ForeignKeyError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    is_foreign_key_violation,
    store_guard,
)
from magpress.db.database import MAX_ID
from magpress.models.blog import Comment, CommentStatus, Post
from magpress.schemas.blog import CommentCreate, CommentResponse, CommentWithPost


def _check_post_id(post_id) -> int:
    if isinstance(post_id, bool) or not isinstance(post_id, int) or not 0 < post_id <= MAX_ID:
        raise ValidationError("文章ID必须为有效的正整数", field="post_id")
    return post_id


class CommentService:
    """评论服务类"""

    @staticmethod
    async def _get(db: AsyncSession, comment_id: int) -> Comment:
        result = await db.execute(select(Comment).where(Comment.id == comment_id))
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError(f"评论ID {comment_id} 不存在", field="id")
        return comment

    @staticmethod
    @store_guard("提交评论")
    async def create_comment(db: AsyncSession, comment_data: CommentCreate) -> CommentResponse:
        """
        提交评论

        不预先检查文章是否存在，由外键约束拒绝孤立引用
        """
        comment = Comment(
            post_id=comment_data.post_id,
            name=comment_data.name,
            email=str(comment_data.email) if comment_data.email else None,
            content=comment_data.content,
            status=settings.COMMENT_DEFAULT_STATUS,
        )
        db.add(comment)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if is_foreign_key_violation(exc):
                raise ForeignKeyError(f"文章ID {comment_data.post_id} 不存在", field="post_id") from exc
            logger.error(f"提交评论失败: {exc}")
            raise PersistenceError() from exc

        logger.info(f"评论已提交: id={comment.id}, post_id={comment.post_id}, status={comment.status}")
        return CommentResponse.model_validate(comment)

    @staticmethod
    @store_guard("获取评论列表")
    async def list_comments(
        db: AsyncSession,
        post_id: int,
        status: Optional[CommentStatus] = None,
    ) -> List[CommentResponse]:
        """获取文章下的评论，按创建时间倒序"""
        _check_post_id(post_id)
        query = select(Comment).where(Comment.post_id == post_id)
        if status is not None:
            query = query.where(Comment.status == status.value)
        query = query.order_by(desc(Comment.created_at), desc(Comment.id))

        result = await db.execute(query)
        return [CommentResponse.model_validate(c) for c in result.scalars().all()]

    @staticmethod
    @store_guard("获取审核列表")
    async def list_all_comments(
        db: AsyncSession,
        status: Optional[CommentStatus] = None,
    ) -> List[CommentWithPost]:
        """审核列表：全部评论及所属文章"""
        query = select(Comment, Post.title, Post.slug).join(Post, Post.id == Comment.post_id)
        if status is not None:
            query = query.where(Comment.status == status.value)
        query = query.order_by(desc(Comment.created_at), desc(Comment.id))

        rows = (await db.execute(query)).all()
        items = []
        for comment, title, slug in rows:
            item = CommentWithPost.model_validate(comment)
            item.post_title = title
            item.post_slug = slug
            items.append(item)
        return items

    @staticmethod
    @store_guard("审核评论")
    async def approve_comment(db: AsyncSession, comment_id: int) -> CommentResponse:
        """审核通过评论"""
        comment = await CommentService._get(db, comment_id)
        if comment.status != CommentStatus.APPROVED.value:
            comment.status = CommentStatus.APPROVED.value
            await db.commit()
            logger.info(f"评论已通过审核: id={comment_id}")
        return CommentResponse.model_validate(comment)

    @staticmethod
    @store_guard("删除评论")
    async def delete_comment(db: AsyncSession, comment_id: int) -> int:
        """删除评论，返回其所属文章ID"""
        comment = await CommentService._get(db, comment_id)
        post_id = comment.post_id
        await db.delete(comment)
        await db.commit()
        logger.info(f"评论已删除: id={comment_id}, post_id={post_id}")
        return post_id
