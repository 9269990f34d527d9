"""
作者模型定义 - 使用 sys_ 前缀
作者信息来源于外部身份提供方，主键即身份提供方的 subject
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from magpress.db.database import Base


class Author(Base):
    """作者表模型 - sys_authors"""
    __tablename__ = "sys_authors"

    # 主键（身份提供方 subject）
    id = Column(String(191), primary_key=True, comment="身份提供方用户ID")

    # 基本信息
    name = Column(String(100), nullable=True, comment="显示名称")
    email = Column(String(255), nullable=True, comment="邮箱")
    avatar = Column(String(500), nullable=True, comment="头像URL")
    role = Column(String(20), nullable=False, default="USER", server_default="USER", comment="角色")
    bio = Column(Text, nullable=True, comment="简介")
    website = Column(String(500), nullable=True, comment="个人网站")

    # 时间戳
    created_at = Column(DateTime(timezone=True), default=datetime.now, nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=datetime.now, onupdate=datetime.now, nullable=False, comment="更新时间")

    # 关系定义
    posts = relationship("Post", back_populates="author", lazy="select")

    def __repr__(self):
        return f"<Author(id='{self.id}', name='{self.name}', role='{self.role}')>"
