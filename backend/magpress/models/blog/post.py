"""
文章模型定义 - 使用 blog_ 前缀
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from magpress.db.database import Base


class PostStatus(str, enum.Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"


class Post(Base):
    """文章表模型 - blog_posts"""
    __tablename__ = "blog_posts"

    # 主键
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # 文章基本信息
    title = Column(String(200), nullable=False, comment="文章标题")
    subtitle = Column(String(100), nullable=True, comment="副标题 (可选)")
    content = Column(Text, nullable=False, comment="文章正文内容")
    category = Column(String(100), nullable=False, comment="分类")
    image_url = Column(String(1000), nullable=True, comment="封面图URL（外部媒体服务）")

    # 派生字段，仅由文章服务写入
    slug = Column(String(255), unique=True, index=True, nullable=False, comment="URL友好的别名")
    excerpt = Column(Text, nullable=False, default="", comment="摘要")
    read_time = Column(Integer, nullable=False, default=1, server_default="1", comment="预计阅读分钟数")

    # 发布相关
    status = Column(String(20), nullable=False, default=PostStatus.PUBLISHED.value, index=True, comment="Draft / Published")
    featured = Column(Boolean, nullable=False, default=False, server_default=expression.false(), comment="是否精选")
    tags = Column(JSON, nullable=False, default=list, comment="标签列表")
    views = Column(Integer, nullable=False, default=0, server_default="0", comment="浏览次数")

    # 外键关联
    author_id = Column(String(191), ForeignKey("sys_authors.id", ondelete="SET NULL"), nullable=True, comment="作者ID (可选)")

    # 时间戳
    created_at = Column(DateTime(timezone=True), default=datetime.now, nullable=False, index=True, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=datetime.now, onupdate=datetime.now, nullable=False, comment="更新时间")

    # 关系定义
    author = relationship("Author", back_populates="posts", lazy="select")
    comments = relationship(
        "Comment",
        back_populates="post",
        lazy="select",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Post(id={self.id}, title='{self.title}', slug='{self.slug}')>"
