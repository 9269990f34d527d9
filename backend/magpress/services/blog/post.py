"""
文章服务 - 文章生命周期
负责校验后的写入、派生字段（slug/摘要/阅读时间）计算与 slug 唯一性处理
"""

import time
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from magpress.core.config import settings
from magpress.core.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    is_foreign_key_violation,
    is_unique_violation,
    store_guard,
)
from magpress.models.blog import Post, PostStatus
from magpress.repositories.post import PostRepository
from magpress.schemas.blog import PostCreate, PostResponse, PostUpdate
from magpress.utils.content import (
    derive_excerpt,
    derive_read_time,
    derive_slug,
    disambiguate_slug,
)

FALLBACK_SLUG = "post"

# 补丁中直接写入的普通字段
_PLAIN_FIELDS = ("title", "subtitle", "category", "image_url", "tags", "featured", "status")


def _now_ms() -> int:
    return int(time.time() * 1000)


class PostService:
    """文章服务类 - 提供文章的创建、更新、删除与查询"""

    @staticmethod
    async def _resolve_slug(
        repo: PostRepository,
        base: str,
        exclude_id: Optional[int] = None,
        attempt: int = 1,
    ) -> str:
        """
        乐观的 slug 唯一性处理
        首次尝试先查重，base 空闲则直接使用；否则追加毫秒时间戳。
        重试时 base 已被证明冲突，直接生成带序号的新后缀。
        最终以数据库唯一约束为准。
        """
        if attempt == 1:
            if not await repo.slug_exists(base, exclude_id=exclude_id):
                return base
            return disambiguate_slug(base, _now_ms())
        return disambiguate_slug(base, f"{_now_ms()}-{attempt}")

    @staticmethod
    async def _load(repo: PostRepository, post_id: int) -> PostResponse:
        loaded = await repo.get_with_relations(post_id)
        if loaded is None:
            raise NotFoundError(f"文章ID {post_id} 不存在", field="id")
        post, comments_count = loaded
        return PostResponse.from_post(post, comments_count)

    @staticmethod
    @store_guard("创建文章")
    async def create_post(
        db: AsyncSession,
        post_data: PostCreate,
        author_id: Optional[str] = None,
    ) -> PostResponse:
        """
        创建文章

        slug 冲突时按 POST_SLUG_MAX_RETRIES 有限次重试，仍失败则抛出 ConflictError
        """
        repo = PostRepository(db)
        base = derive_slug(post_data.title) or FALLBACK_SLUG
        excerpt = post_data.excerpt or derive_excerpt(post_data.content, settings.POST_EXCERPT_LENGTH)
        read_time = derive_read_time(post_data.content, settings.POST_WORDS_PER_MINUTE)
        status = (post_data.status or PostStatus(settings.POST_DEFAULT_STATUS)).value

        attempts = max(1, settings.POST_SLUG_MAX_RETRIES)
        for attempt in range(1, attempts + 1):
            slug = await PostService._resolve_slug(repo, base, attempt=attempt)
            post = Post(
                title=post_data.title,
                subtitle=post_data.subtitle or None,
                content=post_data.content,
                excerpt=excerpt,
                category=post_data.category,
                status=status,
                image_url=post_data.image_url,
                read_time=read_time,
                featured=post_data.featured,
                tags=list(post_data.tags),
                slug=slug,
                views=0,
                author_id=author_id,
            )
            repo.add(post)
            try:
                await repo.commit()
            except IntegrityError as exc:
                await repo.rollback()
                if is_foreign_key_violation(exc):
                    raise ValidationError(f"作者 '{author_id}' 不存在", field="author_id") from exc
                if not is_unique_violation(exc):
                    logger.error(f"创建文章失败: {exc}")
                    raise PersistenceError() from exc
                logger.warning(f"slug '{slug}' 插入冲突，第 {attempt}/{attempts} 次尝试")
                continue

            logger.info(f"文章已创建: id={post.id}, slug={post.slug}")
            return await PostService._load(repo, post.id)

        raise ConflictError(f"slug '{base}' 冲突，{attempts} 次尝试后仍未成功", field="slug")

    @staticmethod
    async def _build_changes(
        repo: PostRepository,
        post: Post,
        patch: Dict[str, Any],
        attempt: int,
    ) -> Dict[str, Any]:
        """根据补丁计算实际需要写入的字段，值未变化的字段不写入"""
        changes: Dict[str, Any] = {}

        for field in _PLAIN_FIELDS:
            if field in patch and patch[field] != getattr(post, field):
                changes[field] = patch[field]

        # slug：显式指定优先，否则标题派生的 slug 基底变化时重新生成
        if "slug" in patch:
            slug = patch["slug"]
            if slug != post.slug:
                if await repo.slug_exists(slug, exclude_id=post.id):
                    raise ConflictError(f"slug '{slug}' 已存在", field="slug")
                changes["slug"] = slug
        elif "title" in changes:
            base = derive_slug(changes["title"]) or FALLBACK_SLUG
            if base != (derive_slug(post.title) or FALLBACK_SLUG):
                changes["slug"] = await PostService._resolve_slug(repo, base, exclude_id=post.id, attempt=attempt)

        # 正文变化时阅读时间总是重算；摘要仅在同一补丁未提供时重算
        content = patch.get("content", post.content)
        content_changed = "content" in patch and patch["content"] != post.content
        if content_changed:
            changes["content"] = content
            changes["read_time"] = derive_read_time(content, settings.POST_WORDS_PER_MINUTE)

        excerpt = None
        if "excerpt" in patch:
            excerpt = patch["excerpt"] or derive_excerpt(content, settings.POST_EXCERPT_LENGTH)
        elif content_changed:
            excerpt = derive_excerpt(content, settings.POST_EXCERPT_LENGTH)
        if excerpt is not None and excerpt != post.excerpt:
            changes["excerpt"] = excerpt

        return changes

    @staticmethod
    @store_guard("更新文章")
    async def update_post(
        db: AsyncSession,
        post_id: int,
        post_data: PostUpdate,
    ) -> PostResponse:
        """
        更新文章（部分更新）

        未提供的字段保持不变；空补丁或值未变化的补丁不产生写入
        """
        repo = PostRepository(db)
        patch = post_data.model_dump(exclude_unset=True, mode="json")
        if "subtitle" in patch:
            patch["subtitle"] = patch["subtitle"] or None

        attempts = max(1, settings.POST_SLUG_MAX_RETRIES)
        for attempt in range(1, attempts + 1):
            post = await repo.get(post_id)
            if post is None:
                raise NotFoundError(f"文章ID {post_id} 不存在", field="id")

            changes = await PostService._build_changes(repo, post, patch, attempt)
            if not changes:
                return await PostService._load(repo, post_id)

            for field, value in changes.items():
                setattr(post, field, value)

            try:
                await repo.commit()
            except IntegrityError as exc:
                await repo.rollback()
                if not is_unique_violation(exc):
                    logger.error(f"更新文章失败: {exc}")
                    raise PersistenceError() from exc
                if "slug" in patch:
                    raise ConflictError(f"slug '{patch['slug']}' 已存在", field="slug") from exc
                logger.warning(f"文章 {post_id} slug 更新冲突，第 {attempt}/{attempts} 次尝试")
                continue

            logger.info(f"文章已更新: id={post_id}, 字段={sorted(changes)}")
            return await PostService._load(repo, post_id)

        raise ConflictError(f"文章 {post_id} 的 slug 冲突，{attempts} 次尝试后仍未成功", field="slug")

    @staticmethod
    @store_guard("删除文章")
    async def delete_post(db: AsyncSession, post_id: int) -> None:
        """
        删除文章，关联评论级联删除
        """
        repo = PostRepository(db)
        post = await repo.get(post_id)
        if post is None:
            raise NotFoundError(f"文章ID {post_id} 不存在", field="id")

        await repo.delete(post_id)
        await repo.commit()
        logger.info(f"文章已删除: id={post_id}, slug={post.slug}")

    @staticmethod
    @store_guard("获取文章列表")
    async def list_posts(
        db: AsyncSession,
        status: Optional[str] = PostStatus.PUBLISHED.value,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PostResponse]:
        """
        获取文章列表，按创建时间倒序，附带评论数与作者
        status 为 None 时不按状态筛选
        """
        repo = PostRepository(db)
        rows = await repo.list_with_counts(
            status=status,
            category=category,
            featured=featured,
            limit=limit,
            offset=offset,
        )
        return [PostResponse.from_post(post, count) for post, count in rows]

    @staticmethod
    @store_guard("统计文章数量")
    async def count_posts(
        db: AsyncSession,
        status: Optional[str] = PostStatus.PUBLISHED.value,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> int:
        return await PostRepository(db).count(status=status, category=category, featured=featured)

    @staticmethod
    @store_guard("获取文章")
    async def get_post(db: AsyncSession, post_id: int, published_only: bool = False) -> PostResponse:
        """根据ID获取文章"""
        post = await PostService._load(PostRepository(db), post_id)
        if published_only and post.status != PostStatus.PUBLISHED:
            raise NotFoundError(f"文章ID {post_id} 不存在", field="id")
        return post

    @staticmethod
    @store_guard("获取文章")
    async def get_post_by_slug(db: AsyncSession, slug: str, published_only: bool = False) -> PostResponse:
        """根据slug获取文章"""
        repo = PostRepository(db)
        post = await repo.get_by_slug(slug)
        if post is None or (published_only and post.status != PostStatus.PUBLISHED.value):
            raise NotFoundError(f"文章slug '{slug}' 不存在", field="slug")
        return await PostService._load(repo, post.id)

    @staticmethod
    @store_guard("记录浏览")
    async def record_view(db: AsyncSession, post_id: int) -> PostResponse:
        """浏览数原子加一"""
        repo = PostRepository(db)
        if not await repo.increment_views(post_id):
            raise NotFoundError(f"文章ID {post_id} 不存在", field="id")
        await repo.commit()
        return await PostService._load(repo, post_id)

    @staticmethod
    async def set_status(db: AsyncSession, post_id: int, status: PostStatus) -> PostResponse:
        """切换文章发布状态"""
        return await PostService.update_post(db, post_id, PostUpdate(status=status))
