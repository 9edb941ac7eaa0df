"""测试夹具：为 pytest 提供数据库、缓存、上传目录与客户端的共享配置。"""

import io
import os
import shutil
import tempfile
import uuid
from typing import Callable, Generator

TEST_ROOT = tempfile.mkdtemp(prefix="mediahub_tests_")
TEST_DB_PATH = os.path.join(TEST_ROOT, "test.db")
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["CACHE_BACKEND"] = "memory"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_ROOT, "uploads")
os.environ["THUMBNAIL_DIR"] = os.path.join(TEST_ROOT, "thumbnails")
os.environ["LOG_DIR"] = os.path.join(TEST_ROOT, "log")
os.environ["MAX_FILE_SIZE"] = str(1024 * 1024)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from app.main import app  # noqa: E402
from app.packages.mediahub.client import MediaHubClient  # noqa: E402
from app.packages.mediahub.core.cache import reset_cache  # noqa: E402
from app.packages.mediahub.core.dependencies import get_db  # noqa: E402
from app.packages.mediahub.db import session as db_session  # noqa: E402
from app.packages.mediahub.db.init_db import init_db  # noqa: E402
from app.packages.mediahub.models.base import Base  # noqa: E402

API = "/api/v1"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理临时目录。"""
    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    init_db()
    yield

    engine.dispose()
    shutil.rmtree(TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
def fresh_cache():
    """每个用例使用独立的内存缓存，避免跨用例命中。"""
    return reset_cache()


@pytest.fixture()
def db_session_fixture() -> Generator[Session, None, None]:
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session_fixture):
    """构建 FastAPI TestClient，并注入测试专用的数据库依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _login(client: TestClient, username: str, password: str) -> dict[str, str]:
    resp = client.post(f"{API}/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    return _login(client, "admin", "admin123")


@pytest.fixture()
def register_user(client: TestClient) -> Callable[..., tuple[dict, dict[str, str]]]:
    """注册一个新的作者账号，返回 ``(用户资料, 认证头)``。"""

    def _register(prefix: str = "author") -> tuple[dict, dict[str, str]]:
        username = f"{prefix}_{uuid.uuid4().hex[:8]}"
        resp = client.post(
            f"{API}/auth/register",
            json={"username": username, "password": "secret123", "email": f"{username}@example.com"},
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['access_token']}"}

    return _register


@pytest.fixture()
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (640, 320), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def upload(client: TestClient) -> Callable[..., list[dict]]:
    """通过接口上传文件，返回上传后的文件列表。"""

    def _upload(headers: dict[str, str], *files: tuple[str, bytes, str], folder_id=None) -> list[dict]:
        data = {"folder_id": str(folder_id)} if folder_id is not None else None
        resp = client.post(
            f"{API}/files/upload",
            headers=headers,
            data=data,
            files=[("files", item) for item in files],
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]

    return _upload


@pytest.fixture()
def unique_name() -> Callable[[str], str]:
    return lambda prefix: f"{prefix}-{uuid.uuid4().hex[:8]}"


@pytest.fixture()
def api_client(client: TestClient) -> Callable[[dict[str, str]], MediaHubClient]:
    """基于 TestClient 的 REST 客户端，使用给定认证头中的令牌。"""

    def _build(headers: dict[str, str]) -> MediaHubClient:
        token = headers["Authorization"].split(" ", 1)[1]
        return MediaHubClient(client=client, token=token)

    return _build
