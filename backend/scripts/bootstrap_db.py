"""
初始化数据库：建表并写入默认作者
仅用于本地开发；生产环境使用 alembic upgrade head
"""

import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from loguru import logger

from magpress.core.config import settings
from magpress.db.database import Database
from magpress.models import Author


async def main() -> None:
    db = Database(settings)
    try:
        await db.create_all()
        async with db.session() as session:
            if await session.get(Author, settings.DEFAULT_AUTHOR_ID) is None:
                session.add(
                    Author(
                        id=settings.DEFAULT_AUTHOR_ID,
                        name=settings.DEFAULT_AUTHOR_NAME,
                        email=settings.DEFAULT_AUTHOR_EMAIL,
                        avatar=settings.DEFAULT_AUTHOR_AVATAR,
                        role=settings.DEFAULT_AUTHOR_ROLE,
                        bio=settings.DEFAULT_AUTHOR_BIO,
                    )
                )
                await session.commit()
                logger.info(f"默认作者已创建: {settings.DEFAULT_AUTHOR_ID}")
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(main())
