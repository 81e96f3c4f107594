"""
服务容器：按配置组装存储后端与各业务服务，进程启动时创建一次
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings
from app.db.database import build_engine, build_session_factory, init_db
from app.services.admin import AdminMembership
from app.services.auth_service import AuthService, OTPSender
from app.services.category_service import CategoryService
from app.services.comment_service import CommentService
from app.services.like_service import LikeService
from app.services.post_service import PostService
from app.services.profile_service import ProfileService
from app.services.saved_post_service import SavedPostService
from app.services.uploads import ImageUploader
from app.store.appwrite import AppwriteBlobStore, AppwriteDocumentStore
from app.store.base import DocumentStore
from app.store.blobs import BlobStore, LocalBlobStore
from app.store.memory import MemoryDocumentStore
from app.store.sql import SQLDocumentStore
from app.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: DocumentStore
    blobs: BlobStore
    admins: AdminMembership
    auth: AuthService
    posts: PostService
    likes: LikeService
    comments: CommentService
    categories: CategoryService
    profiles: ProfileService
    saved_posts: SavedPostService
    engine: Optional[AsyncEngine] = field(default=None, repr=False)

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def build_blob_store(settings: Settings) -> BlobStore:
    if settings.BLOB_BACKEND == "appwrite":
        return AppwriteBlobStore(settings)
    if settings.BLOB_BACKEND == "local":
        return LocalBlobStore(settings.BLOB_ROOT, settings.STORAGE_ENDPOINT, settings.APPWRITE_PROJECT_ID)
    raise ValueError(f"Unknown blob backend: {settings.BLOB_BACKEND}")


def build_services(
    settings: Settings,
    store: DocumentStore,
    blobs: BlobStore,
    limiter: Optional[RateLimiter] = None,
    sender: Optional[OTPSender] = None,
    engine: Optional[AsyncEngine] = None,
) -> Services:
    """
    用已有的存储后端组装服务，测试中直接调用
    """
    admins = AdminMembership(store, settings.ADMIN_COLLECTION)
    uploader = ImageUploader(blobs, settings.BUCKET_ID)
    likes = LikeService(settings, store, admins)
    posts = PostService(settings, store, admins, uploader, likes)
    return Services(
        settings=settings,
        store=store,
        blobs=blobs,
        admins=admins,
        auth=AuthService(settings, store, admins, limiter or RateLimiter(settings.RATE_LIMITS), sender),
        posts=posts,
        likes=likes,
        comments=CommentService(settings, store, admins),
        categories=CategoryService(settings, store, admins, uploader),
        profiles=ProfileService(settings, store, admins, uploader),
        saved_posts=SavedPostService(settings, store, admins, posts),
        engine=engine,
    )


async def create_services(settings: Settings) -> Services:
    """
    按配置创建存储后端；SQL后端会自动建表
    """
    engine = None
    if settings.STORE_BACKEND == "sql":
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG and settings.LOG_LEVEL == "DEBUG")
        await init_db(engine)
        store: DocumentStore = SQLDocumentStore(build_session_factory(engine))
    elif settings.STORE_BACKEND == "memory":
        store = MemoryDocumentStore()
    elif settings.STORE_BACKEND == "appwrite":
        store = AppwriteDocumentStore(settings)
    else:
        raise ValueError(f"Unknown store backend: {settings.STORE_BACKEND}")

    logger.info("using %s document store and %s blob store", settings.STORE_BACKEND, settings.BLOB_BACKEND)
    if not settings.ADMIN_COLLECTION:
        logger.warning("ADMIN_COLLECTION is not set, admin features are disabled")
    if not settings.likes_enabled:
        logger.warning("LIKES_COLLECTION is not set, likes are disabled")
    return build_services(settings, store, build_blob_store(settings), engine=engine)


def get_services(request: Request) -> Services:
    """
    获取服务容器依赖
    """
    return request.app.state.services
