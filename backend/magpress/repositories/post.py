"""
文章持久化适配器
封装文章表的读写，以及作者、评论数的关联查询
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from magpress.models.blog import Comment, Post


def _comment_count_subquery():
    return (
        select(Comment.post_id, func.count(Comment.id).label("comments_count"))
        .group_by(Comment.post_id)
        .subquery()
    )


class PostRepository:
    """文章仓储，持有调用方传入的会话"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, post_id: int) -> Optional[Post]:
        result = await self.db.execute(
            select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Optional[Post]:
        result = await self.db.execute(select(Post).where(Post.slug == slug))
        return result.scalar_one_or_none()

    async def get_with_relations(self, post_id: int) -> Optional[Tuple[Post, int]]:
        """获取文章及其作者、评论数"""
        counts = _comment_count_subquery()
        query = (
            select(Post, func.coalesce(counts.c.comments_count, 0))
            .outerjoin(counts, counts.c.post_id == Post.id)
            .where(Post.id == post_id)
            .options(selectinload(Post.author))
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(query)).first()
        if row is None:
            return None
        return row[0], int(row[1] or 0)

    async def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Post.id).where(Post.slug == slug)
        if exclude_id is not None:
            query = query.where(Post.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    def add(self, post: Post) -> None:
        self.db.add(post)

    async def delete(self, post_id: int) -> int:
        # 评论由外键 ON DELETE CASCADE 级联删除
        result = await self.db.execute(delete(Post).where(Post.id == post_id))
        return result.rowcount or 0

    async def increment_views(self, post_id: int) -> int:
        result = await self.db.execute(
            update(Post).where(Post.id == post_id).values(views=Post.views + 1)
        )
        return result.rowcount or 0

    def _filtered(self, query, status: Optional[str], category: Optional[str], featured: Optional[bool]):
        if status:
            query = query.where(Post.status == status)
        if category:
            query = query.where(Post.category == category)
        if featured is not None:
            query = query.where(Post.featured == featured)
        return query

    async def count(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> int:
        query = self._filtered(select(func.count(Post.id)), status, category, featured)
        result = await self.db.execute(query)
        return int(result.scalar() or 0)

    async def list_with_counts(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tuple[Post, int]]:
        """按创建时间倒序列出文章，附带评论数"""
        counts = _comment_count_subquery()
        query = (
            select(Post, func.coalesce(counts.c.comments_count, 0))
            .outerjoin(counts, counts.c.post_id == Post.id)
            .options(selectinload(Post.author))
        )
        query = self._filtered(query, status, category, featured)
        query = query.order_by(desc(Post.created_at), desc(Post.id))
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        rows: Sequence = (await self.db.execute(query)).all()
        return [(row[0], int(row[1] or 0)) for row in rows]

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
