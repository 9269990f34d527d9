"""
评论模型定义 - 使用 blog_ 前缀
"""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from magpress.db.database import Base


class CommentStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"


class Comment(Base):
    """评论表模型 - blog_comments"""
    __tablename__ = "blog_comments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(50), nullable=False, comment="评论者显示名")
    email = Column(String(255), nullable=True, comment="评论者邮箱 (可选)")
    content = Column(Text, nullable=False, comment="评论内容")
    status = Column(String(20), nullable=False, default=CommentStatus.PENDING.value, index=True, comment="Pending / Approved")

    # 文章删除时评论级联删除
    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True, comment="文章ID")

    created_at = Column(DateTime(timezone=True), default=datetime.now, nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=datetime.now, onupdate=datetime.now, nullable=False, comment="更新时间")

    post = relationship("Post", back_populates="comments", lazy="select")

    def __repr__(self):
        return f"<Comment(id={self.id}, post_id={self.post_id}, status='{self.status}')>"
