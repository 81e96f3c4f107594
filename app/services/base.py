"""
服务基类：持有配置、存储与管理员检查，并提供常用的实体查询
"""
from typing import Optional

from app.core.config import Settings
from app.schemas.category import Category
from app.schemas.post import Post
from app.schemas.profile import Profile
from app.services.admin import AdminMembership
from app.services.mappers import to_category, to_post, to_profile
from app.store.base import DocumentNotFound, DocumentStore, equal


class ServiceBase:

    def __init__(self, settings: Settings, store: DocumentStore, admins: AdminMembership):
        self.settings = settings
        self.store = store
        self.admins = admins

    async def is_admin(self, user_id: Optional[str]) -> bool:
        return await self.admins.is_admin(user_id)

    async def find_post(self, post_id: Optional[str]) -> Optional[Post]:
        if not post_id:
            return None
        try:
            doc = await self.store.get(self.settings.POST_COLLECTION, post_id)
        except DocumentNotFound:
            return None
        return to_post(doc)

    async def find_post_by_slug(self, slug: str) -> Optional[Post]:
        doc = await self.store.find_one(self.settings.POST_COLLECTION, equal("slug", slug))
        return to_post(doc) if doc else None

    async def find_profile(self, profile_id: Optional[str]) -> Optional[Profile]:
        if not profile_id:
            return None
        try:
            doc = await self.store.get(self.settings.PROFILE_COLLECTION, profile_id)
        except DocumentNotFound:
            return None
        return to_profile(doc)

    async def find_profile_by_author(self, user_id: Optional[str]) -> Optional[Profile]:
        if not user_id:
            return None
        doc = await self.store.find_one(self.settings.PROFILE_COLLECTION, equal("author_id", user_id))
        return to_profile(doc) if doc else None

    async def find_category(self, category_id: Optional[str]) -> Optional[Category]:
        if not category_id:
            return None
        try:
            doc = await self.store.get(self.settings.CATEGORY_COLLECTION, category_id)
        except DocumentNotFound:
            return None
        return to_category(doc)
