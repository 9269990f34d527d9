import asyncio
import os
import tempfile

# 必须在导入 magpress 之前设置，配置在导入时加载
_TMP_DIR = tempfile.mkdtemp(prefix="magpress-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'default.db')}")
os.environ["CACHE_ENABLED"] = "false"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-for-magpress-0123456789"

import pytest
from fastapi.testclient import TestClient

from magpress.db.database import Database
from magpress.services.identity import create_access_token


@pytest.fixture
def database(tmp_path):
    db = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'magpress.db'}")
    asyncio.run(db.create_all())
    yield db
    asyncio.run(db.dispose())


@pytest.fixture
def run(database):
    """在独立会话中执行一个接收 AsyncSession 的协程函数"""
    def _run(fn, *args, **kwargs):
        async def scenario():
            async with database.session() as session:
                return await fn(session, *args, **kwargs)
        return asyncio.run(scenario())
    return _run


@pytest.fixture
def client(database):
    from main import create_app

    app = create_app(database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers():
    token = create_access_token(
        {"sub": "editor-1", "role": "admin", "name": "Editor", "email": "editor@example.com"}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    token = create_access_token({"sub": "reader-1", "role": "user", "name": "Reader"})
    return {"Authorization": f"Bearer {token}"}
