import re

import pytest
from sqlalchemy import func, select

from magpress.core.errors import ConflictError, NotFoundError
from magpress.models.blog import Comment, Post, PostStatus
from magpress.repositories.post import PostRepository
from magpress.schemas.blog import CommentCreate, PostCreate, PostUpdate
from magpress.schemas.core import Actor
from magpress.services.blog import CommentService, PostService
from magpress.services.identity import AuthorService
import magpress.services.blog.post as post_service_module


def _create(run, title="Hello World Today", content="word " * 10, category="Technology", **extra):
    return run(PostService.create_post, PostCreate(title=title, content=content, category=category, **extra))


async def _slugs(db):
    result = await db.execute(select(Post.slug))
    return list(result.scalars().all())


def test_create_post_derives_fields(run):
    content = "word " * 10
    post = _create(run, content=content)

    assert post.slug == "hello-world-today"
    assert post.read_time == 1
    assert post.excerpt == content
    assert post.status == PostStatus.PUBLISHED
    assert post.views == 0
    assert post.comments_count == 0
    assert post.tags == []


def test_create_post_uses_given_excerpt_and_status(run):
    post = _create(run, excerpt="Custom summary", status="Draft", tags=["python", "python", " web "])
    assert post.excerpt == "Custom summary"
    assert post.status == PostStatus.DRAFT
    assert post.tags == ["python", "web"]


def test_create_post_without_author_shows_default_author(run):
    post = _create(run)
    assert post.author.id == "system"
    assert post.author.name == "Admin"


def test_same_title_gets_disambiguated_slug(run):
    first = _create(run, title="Same Title")
    second = _create(run, title="Same Title")

    assert first.slug == "same-title"
    assert re.fullmatch(r"same-title-\d{10,}", second.slug)
    assert run(_slugs).count("same-title") == 1


def test_slug_race_is_resolved_by_unique_constraint(run, monkeypatch):
    """预检查失效（并发创建）时由唯一约束兜底并重新生成 slug"""
    async def never_exists(self, slug, exclude_id=None):
        return False

    monkeypatch.setattr(PostRepository, "slug_exists", never_exists)

    first = _create(run, title="Same Title")
    second = _create(run, title="Same Title")

    assert first.slug == "same-title"
    assert re.fullmatch(r"same-title-\d{10,}-2", second.slug)
    slugs = run(_slugs)
    assert len(slugs) == len(set(slugs)) == 2


def test_slug_conflict_after_retries_raises(run, monkeypatch):
    async def never_exists(self, slug, exclude_id=None):
        return False

    monkeypatch.setattr(PostRepository, "slug_exists", never_exists)
    monkeypatch.setattr(post_service_module, "disambiguate_slug", lambda base, token: base)

    _create(run, title="Same Title")
    with pytest.raises(ConflictError) as exc_info:
        _create(run, title="Same Title")

    assert exc_info.value.field == "slug"
    assert run(_slugs) == ["same-title"]


def test_title_without_ascii_falls_back_to_default_slug(run):
    post = _create(run, title="你好，世界！！")
    assert post.slug == "post"


def test_empty_patch_changes_nothing(run):
    post = _create(run)
    updated = run(PostService.update_post, post.id, PostUpdate())
    assert updated.model_dump() == post.model_dump()


def test_repeated_patch_is_idempotent(run):
    post = _create(run)
    patch = PostUpdate(title="A Brand New Title", tags=["news"])

    once = run(PostService.update_post, post.id, patch)
    twice = run(PostService.update_post, post.id, patch)

    assert once.slug == "a-brand-new-title"
    assert once.tags == ["news"]
    assert twice.model_dump() == once.model_dump()


def test_patch_leaves_unspecified_fields(run):
    post = _create(run, subtitle="Sub", featured=True, image_url="https://cdn.example.com/a.png")
    updated = run(PostService.update_post, post.id, PostUpdate(category="Design"))

    assert updated.category == "Design"
    assert updated.subtitle == "Sub"
    assert updated.featured is True
    assert updated.image_url == "https://cdn.example.com/a.png"
    assert updated.slug == post.slug
    assert updated.content == post.content


def test_content_change_recomputes_read_time_and_excerpt(run):
    post = _create(run)
    long_content = "lorem " * 450
    updated = run(PostService.update_post, post.id, PostUpdate(content=long_content))

    assert updated.read_time == 3
    assert updated.excerpt == long_content[:150] + "..."


def test_explicit_excerpt_wins_over_recomputed(run):
    post = _create(run)
    updated = run(
        PostService.update_post,
        post.id,
        PostUpdate(content="fresh body text " * 5, excerpt="Hand written"),
    )
    assert updated.excerpt == "Hand written"


def test_null_excerpt_regenerates_from_content(run):
    post = _create(run, excerpt="Custom summary")
    updated = run(PostService.update_post, post.id, PostUpdate(excerpt=None))
    assert updated.excerpt == post.content


def test_retitle_within_same_base_keeps_slug(run):
    _create(run, title="Same Title")
    second = _create(run, title="Same Title")
    updated = run(PostService.update_post, second.id, PostUpdate(title="Same  Title!"))
    assert updated.slug == second.slug


def test_retitle_with_long_number_rederives_slug(run):
    post = _create(run, title="Release 1760000000000")
    assert post.slug == "release-1760000000000"

    updated = run(PostService.update_post, post.id, PostUpdate(title="Release"))
    assert updated.slug == "release"

    again = run(PostService.update_post, post.id, PostUpdate(title="Release"))
    assert again.model_dump() == updated.model_dump()


def test_blank_subtitle_is_stored_as_none(run):
    created = _create(run, subtitle="")
    assert created.subtitle is None

    post = _create(run, title="With Subtitle", subtitle="Sub")
    updated = run(PostService.update_post, post.id, PostUpdate(subtitle=""))
    assert updated.subtitle is None


def test_author_without_profile_gets_display_defaults(run):
    author_id = run(AuthorService.sync_from_identity, Actor(subject="anon-author", role="admin"))
    post = run(
        PostService.create_post,
        PostCreate(title="Anonymous Author", content="word " * 10, category="General"),
        author_id=author_id,
    )
    assert post.author.id == "anon-author"
    assert post.author.name == "Unknown Author"
    assert post.author.avatar == "/default-avatar.png"


def test_explicit_slug_collision_is_conflict(run):
    first = _create(run, title="First Post")
    second = _create(run, title="Second Post")

    with pytest.raises(ConflictError):
        run(PostService.update_post, second.id, PostUpdate(slug=first.slug))


def test_explicit_slug_is_applied(run):
    post = _create(run)
    updated = run(PostService.update_post, post.id, PostUpdate(slug="Custom-Slug"))
    assert updated.slug == "custom-slug"


def test_update_missing_post_is_not_found(run):
    with pytest.raises(NotFoundError):
        run(PostService.update_post, 9999, PostUpdate(title="Whatever Title"))


def test_set_status_toggles_publication(run):
    post = _create(run)
    draft = run(PostService.set_status, post.id, PostStatus.DRAFT)
    assert draft.status == PostStatus.DRAFT

    with pytest.raises(NotFoundError):
        run(PostService.get_post, post.id, published_only=True)


def test_delete_post_cascades_comments(run):
    post = _create(run)
    run(CommentService.create_comment, CommentCreate(post_id=post.id, name="Reader", content="Nice article"))

    run(PostService.delete_post, post.id)

    async def comment_count(db):
        return (await db.execute(select(func.count(Comment.id)))).scalar()

    assert run(comment_count) == 0
    with pytest.raises(NotFoundError):
        run(PostService.get_post, post.id)


def test_delete_missing_post_is_not_found(run):
    with pytest.raises(NotFoundError):
        run(PostService.delete_post, 12345)


def test_list_posts_filters_and_counts(run):
    a = _create(run, title="Published One", category="Tech", featured=True)
    _create(run, title="Draft Two", category="Tech", status="Draft")
    c = _create(run, title="Published Three", category="Life")
    run(CommentService.create_comment, CommentCreate(post_id=a.id, name="Reader", content="First comment"))

    published = run(PostService.list_posts)
    assert [p.id for p in published] == [c.id, a.id]
    assert {p.id: p.comments_count for p in published} == {a.id: 1, c.id: 0}

    assert run(PostService.count_posts) == 2
    assert run(PostService.count_posts, status=None) == 3
    assert [p.id for p in run(PostService.list_posts, category="Tech")] == [a.id]
    assert [p.id for p in run(PostService.list_posts, featured=True)] == [a.id]
    assert len(run(PostService.list_posts, status=None, limit=1, offset=1)) == 1


def test_record_view_increments(run):
    post = _create(run)
    run(PostService.record_view, post.id)
    viewed = run(PostService.record_view, post.id)
    assert viewed.views == 2


def test_get_by_slug(run):
    post = _create(run)
    found = run(PostService.get_post_by_slug, "hello-world-today")
    assert found.id == post.id
    with pytest.raises(NotFoundError):
        run(PostService.get_post_by_slug, "missing-slug")
