"""
文章相关的 Pydantic 模型
用于请求/响应的数据验证
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from magpress.core.config import settings
from magpress.models.blog.post import PostStatus
from magpress.schemas.core.author import AuthorInfo
from magpress.utils.content import is_valid_slug

_http_url = TypeAdapter(HttpUrl)

IMAGE_URL_ALIASES = AliasChoices("image_url", "imageUrl", "featured_image", "featuredImage")


def _clean_title(v: str) -> str:
    v = v.strip()
    if len(v) < 5:
        raise ValueError("标题至少需要 5 个字符")
    return v


def _clean_tags(v: List[str]) -> List[str]:
    """去除空白标签与重复标签，保持原有顺序"""
    tags: List[str] = []
    for tag in v:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    if len(tags) > settings.POST_MAX_TAGS:
        raise ValueError(f"最多允许 {settings.POST_MAX_TAGS} 个标签")
    return tags


def _clean_image_url(v: Optional[str]) -> Optional[str]:
    if v is None or not str(v).strip():
        return None
    v = str(v).strip()
    try:
        _http_url.validate_python(v)
    except ValueError:
        raise ValueError("图片URL无效，需以 http:// 或 https:// 开头")
    return v


class PostCreate(BaseModel):
    """文章创建模型"""
    title: str = Field(..., max_length=200, description="文章标题")
    subtitle: Optional[str] = Field(None, max_length=100, description="副标题 (可选)")
    content: str = Field(..., min_length=10, description="文章正文内容")
    excerpt: Optional[str] = Field(None, max_length=300, description="摘要 (可选，缺省时由正文生成)")
    category: str = Field(..., min_length=1, max_length=100, description="分类")
    image_url: Optional[str] = Field(None, validation_alias=IMAGE_URL_ALIASES, description="封面图URL")
    tags: List[str] = Field(default_factory=list, description="标签")
    featured: bool = Field(False, description="是否精选")
    status: Optional[PostStatus] = Field(None, description="发布状态，缺省使用部署默认值")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        if not v.strip():
            raise ValueError("分类不能为空")
        return v.strip()

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v):
        return _clean_image_url(v)


class PostUpdate(BaseModel):
    """
    文章更新模型（部分更新）
    未提供的字段保持不变；只有可空字段允许显式传入 null
    """
    title: Optional[str] = Field(None, max_length=200, description="文章标题")
    subtitle: Optional[str] = Field(None, max_length=100, description="副标题")
    content: Optional[str] = Field(None, min_length=10, description="文章正文内容")
    excerpt: Optional[str] = Field(None, max_length=300, description="摘要，传 null 表示由正文重新生成")
    category: Optional[str] = Field(None, min_length=1, max_length=100, description="分类")
    image_url: Optional[str] = Field(None, validation_alias=IMAGE_URL_ALIASES, description="封面图URL")
    tags: Optional[List[str]] = Field(None, description="标签")
    featured: Optional[bool] = Field(None, description="是否精选")
    status: Optional[PostStatus] = Field(None, description="发布状态")
    slug: Optional[str] = Field(None, min_length=1, max_length=255, description="显式指定的 slug")

    @field_validator("title", "content", "category", "tags", "featured", "status", "slug")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} 不能为 null")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        if not v.strip():
            raise ValueError("分类不能为空")
        return v.strip()

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v):
        return _clean_image_url(v)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        """验证slug格式"""
        v = v.strip().lower()
        if not is_valid_slug(v):
            raise ValueError("slug只能包含小写字母、数字和单个连字符")
        return v


class PostStatusUpdate(BaseModel):
    """发布/撤回"""
    status: PostStatus


class PostResponse(BaseModel):
    """文章响应模型"""
    id: int
    title: str
    subtitle: Optional[str] = None
    content: str
    excerpt: str
    category: str
    status: PostStatus
    image_url: Optional[str] = None
    read_time: int
    featured: bool
    slug: str
    tags: List[str] = []
    views: int
    comments_count: int = 0
    author: AuthorInfo
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_post(cls, post: Any, comments_count: int = 0) -> "PostResponse":
        """由 ORM 对象构建响应，未关联作者时使用系统默认作者"""
        author = AuthorInfo.from_author(post.author) if post.author is not None else AuthorInfo.system_default()
        return cls(
            id=post.id,
            title=post.title,
            subtitle=post.subtitle,
            content=post.content,
            excerpt=post.excerpt or "",
            category=post.category,
            status=post.status,
            image_url=post.image_url,
            read_time=post.read_time,
            featured=bool(post.featured),
            slug=post.slug,
            tags=list(post.tags or []),
            views=post.views or 0,
            comments_count=comments_count,
            author=author,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostList(BaseModel):
    """文章列表响应模型"""
    total: int
    posts: List[PostResponse]
    page: int
    size: int
    total_pages: int
