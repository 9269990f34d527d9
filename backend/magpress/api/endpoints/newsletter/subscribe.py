"""
订阅 API 端点
订阅数据的存储由外部邮件营销服务负责，这里只做校验并记录
"""

from fastapi import APIRouter
from loguru import logger

from magpress.schemas.newsletter import NewsletterSubscribe, NewsletterSubscribeResponse

router = APIRouter()


@router.post("/subscribe", response_model=NewsletterSubscribeResponse)
async def subscribe(payload: NewsletterSubscribe) -> NewsletterSubscribeResponse:
    """订阅邮件通讯"""
    logger.info(f"新的订阅: {payload.email}")
    return NewsletterSubscribeResponse(message="订阅成功")
