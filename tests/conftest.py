"""
测试公共夹具：内存存储 + 本地文件存储，校验阈值调低便于构造数据
"""
from typing import Dict, List, Tuple

import httpx
import pytest

from app.core.config import Settings
from app.schemas.post import PostForm
from app.services.auth_service import OTPSender
from app.services.container import build_services
from app.store.base import new_id
from app.store.blobs import LocalBlobStore
from app.store.memory import MemoryDocumentStore
from app.utils.auth import create_access_token
from app.utils.rate_limit import RateLimiter

WRITER_ID = "writer-1"
OTHER_WRITER_ID = "writer-2"
READER_ID = "reader-1"
ADMIN_ID = "admin-1"

CONTENT = "<p>" + " ".join(f"word{i}" for i in range(12)) + "</p>"


class RecordingSender(OTPSender):
    """记录发送的验证码"""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    async def send(self, email: str, code: str) -> None:
        self.sent.append((email, code))

    def last_code(self) -> str:
        return self.sent[-1][1]


def make_form(title: str = "A fairly long post title for tests", **overrides) -> PostForm:
    data: Dict = {
        "title": title,
        "description": "a short description with enough words",
        "content": CONTENT,
        "categoryId": "",
    }
    data.update(overrides)
    return PostForm(**data)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        STORE_BACKEND="memory",
        BLOB_BACKEND="local",
        BLOB_ROOT=str(tmp_path / "uploads"),
        STORAGE_ENDPOINT="http://testserver",
        APPWRITE_PROJECT_ID="inkwell-test",
        ADMIN_COLLECTION="admins",
        SECRET_KEY="test-secret",
        TITLE_MIN_LENGTH=10,
        TITLE_MAX_LENGTH=200,
        DESCRIPTION_MIN_WORDS=3,
        DESCRIPTION_MAX_WORDS=50,
        CONTENT_MIN_WORDS=5,
        CONTENT_MAX_WORDS=500,
    )


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def services(settings, store, sender):
    blobs = LocalBlobStore(settings.BLOB_ROOT, settings.STORAGE_ENDPOINT, settings.APPWRITE_PROJECT_ID)
    return build_services(settings, store, blobs, limiter=RateLimiter(settings.RATE_LIMITS), sender=sender)


async def add_profile(store, settings, user_id: str, role: str = "writer", name: str = None) -> str:
    profile_id = new_id()
    await store.create(settings.PROFILE_COLLECTION, profile_id, {
        "author_id": user_id,
        "role": role,
        "name": name or user_id.title(),
    }, unique=("author_id",))
    return profile_id


@pytest.fixture
async def seeded(store, settings):
    """两个作者、一个读者、一个管理员和一个分类"""
    await add_profile(store, settings, WRITER_ID)
    await add_profile(store, settings, OTHER_WRITER_ID)
    await add_profile(store, settings, READER_ID, role="reader")
    await store.create(settings.ADMIN_COLLECTION, new_id(), {"userId": ADMIN_ID, "name": "Root"})
    category = await store.create(settings.CATEGORY_COLLECTION, new_id(), {"name": "Technology"}, unique=("name",))
    return {"category_id": category["$id"]}


@pytest.fixture
async def post(services, seeded):
    """作者 writer-1 创建的待审核文章"""
    result = await services.posts.create_post(WRITER_ID, make_form(categoryId=seeded["category_id"]))
    assert result.success, result.error
    return result.data


@pytest.fixture
def app(services):
    from main import create_app
    return create_app(services)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


def session_cookies(settings, user_id: str) -> Dict[str, str]:
    token = create_access_token(settings, {"sub": user_id})
    return {settings.SESSION_COOKIE: token}
