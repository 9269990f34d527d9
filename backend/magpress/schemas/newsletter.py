"""
订阅相关的 Pydantic 模型
"""

from pydantic import BaseModel, EmailStr


class NewsletterSubscribe(BaseModel):
    email: EmailStr


class NewsletterSubscribeResponse(BaseModel):
    message: str
