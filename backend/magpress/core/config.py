"""
应用配置管理
从环境变量加载配置，提供类型安全的配置访问
"""

import json
from pathlib import Path
from typing import List, Optional, Union
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """应用配置类，从环境变量加载所有配置"""

    # ==================== 项目信息 ====================
    PROJECT_NAME: str = Field(default="Magpress")
    VERSION: str = Field(default="1.0.0")
    API_V1_STR: str = Field(default="/api/v1")

    # ==================== 部署环境 ====================
    DEPLOYMENT_ENV: str = Field(default="development")  # development, docker, production

    # ==================== 服务器配置 ====================
    BACKEND_HOST: str = Field(default="0.0.0.0")
    BACKEND_PORT: int = Field(default=8000)
    BACKEND_RELOAD: bool = Field(default=True)  # 开发模式热重载

    # ==================== 安全 / 身份提供方配置 ====================
    # 令牌由外部身份提供方签发，这里只负责校验
    SECRET_KEY: str = Field(default="change_me")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_COOKIE_NAME: str = Field(default="mp_access_token")
    IDENTITY_ADMIN_ROLES: List[str] = Field(default=["admin", "super_admin"])

    # ==================== 调试配置 ====================
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # ==================== CORS 配置 ====================
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://127.0.0.1:3000"])

    @field_validator("CORS_ORIGINS", "IDENTITY_ADMIN_ROLES", mode="before")
    @classmethod
    def parse_str_list(cls, v: Union[str, List[str]]) -> List[str]:
        """解析列表配置，支持JSON字符串或逗号分隔"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    # ==================== 数据库配置 ====================
    POSTGRES_USER: str = Field(default="admin")
    POSTGRES_PASSWORD: str = Field(default="change_me")
    POSTGRES_DB: str = Field(default="magpress_db")
    POSTGRES_HOST: str = Field(default="127.0.0.1")
    POSTGRES_PORT: str = Field(default="5432")
    POSTGRES_MAX_CONNECTIONS: int = Field(default=20)
    DB_MAX_OVERFLOW: int = Field(default=20)
    DB_POOL_TIMEOUT_SECONDS: int = Field(default=30)
    POSTGRES_STATEMENT_TIMEOUT: int = Field(default=30000)
    DATABASE_DRIVER: str = Field(default="asyncpg")

    # 数据库URL - 优先使用环境变量中的值
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info) -> Optional[str]:
        """构建数据库连接 URL"""
        if v:
            return v

        values = info.data
        driver = values.get("DATABASE_DRIVER", "asyncpg")
        username = values.get("POSTGRES_USER")
        password = values.get("POSTGRES_PASSWORD")
        host = values.get("POSTGRES_HOST")
        port = values.get("POSTGRES_PORT")
        db = values.get("POSTGRES_DB")

        if all([driver, username, password, host, port, db]):
            return f"postgresql+{driver}://{username}:{password}@{host}:{port}/{db}"
        return None

    SQLALCHEMY_ECHO: bool = Field(default=False)
    AUTO_CREATE_TABLES: bool = Field(default=False)

    # ==================== Redis 缓存配置 ====================
    CACHE_ENABLED: bool = Field(default=True)
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB_CACHE: int = Field(default=0)                      # 缓存数据库索引
    REDIS_CONNECT_TIMEOUT: int = Field(default=5)               # 连接超时秒数

    POST_CACHE_PUBLIC_LIST_TTL: int = Field(default=300)        # 公开列表5分钟
    POST_CACHE_PUBLIC_DETAIL_TTL: int = Field(default=600)      # 公开详情10分钟

    # ==================== 文章相关配置 ====================
    POST_EXCERPT_LENGTH: int = Field(default=150)
    POST_WORDS_PER_MINUTE: int = Field(default=200)
    POST_MAX_TAGS: int = Field(default=10)
    POST_SLUG_MAX_RETRIES: int = Field(default=3)
    POST_DEFAULT_STATUS: str = Field(default="Published")       # Draft / Published
    POST_PAGE_SIZE_MAX: int = Field(default=100)

    # ==================== 评论相关配置 ====================
    COMMENT_DEFAULT_STATUS: str = Field(default="Pending")      # Pending / Approved

    # ==================== 默认作者（文章未关联作者时使用） ====================
    DEFAULT_AUTHOR_ID: str = Field(default="system")
    DEFAULT_AUTHOR_NAME: str = Field(default="Admin")
    DEFAULT_AUTHOR_EMAIL: str = Field(default="admin@example.com")
    DEFAULT_AUTHOR_AVATAR: str = Field(default="/default-avatar.png")
    DEFAULT_AUTHOR_ROLE: str = Field(default="ADMIN")
    DEFAULT_AUTHOR_BIO: str = Field(default="System Administrator")

    @field_validator("POST_DEFAULT_STATUS")
    @classmethod
    def validate_post_status(cls, v: str) -> str:
        if v not in {"Draft", "Published"}:
            raise ValueError("POST_DEFAULT_STATUS 只能为 Draft 或 Published")
        return v

    @field_validator("COMMENT_DEFAULT_STATUS")
    @classmethod
    def validate_comment_status(cls, v: str) -> str:
        if v not in {"Pending", "Approved"}:
            raise ValueError("COMMENT_DEFAULT_STATUS 只能为 Pending 或 Approved")
        return v

    @model_validator(mode="after")
    def validate_security_settings(self):
        if "POSTGRES_MAX_CONNECTIONS" not in self.model_fields_set:
            self.POSTGRES_MAX_CONNECTIONS = 20 if self.DEBUG else 50
        if "DB_MAX_OVERFLOW" not in self.model_fields_set:
            self.DB_MAX_OVERFLOW = 10 if self.DEBUG else 20

        if self.DEBUG:
            return self

        def must_set(name: str, value: str):
            if not value or str(value).strip() in {"", "change_me"}:
                raise ValueError(f"{name} 未配置或仍为默认值，请在 .env 中设置为安全值")

        must_set("SECRET_KEY", self.SECRET_KEY)
        if "DATABASE_URL" not in self.model_fields_set:
            must_set("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)

        if len(self.SECRET_KEY) < 32:
            raise ValueError("SECRET_KEY 长度过短，建议至少 32 字符")

        return self

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False  # 环境变量不区分大小写
        extra = "ignore"  # 忽略额外的环境变量


# 创建全局配置实例
settings = Settings()
