"""
收藏服务
"""
import logging
from typing import Optional

from app.services.base import ServiceBase
from app.services.mappers import to_saved_post
from app.services.post_service import PostService
from app.services.results import (
    ActionResult, action_boundary, conflict, invalid, not_authenticated, not_found, ok,
)
from app.store.base import DocumentNotFound, DuplicateDocument, equal, new_id, order_desc

logger = logging.getLogger(__name__)


class SavedPostService(ServiceBase):
    """收藏服务类，(文章, 用户) 组合唯一"""

    def __init__(self, settings, store, admins, posts: PostService):
        super().__init__(settings, store, admins)
        self.posts = posts

    @property
    def collection(self) -> str:
        return self.settings.SAVED_POST_COLLECTION

    async def _find(self, user_id: str, post_id: str):
        return await self.store.find_one(self.collection, equal("postId", post_id), equal("userId", user_id))

    @action_boundary("Failed to save post")
    async def save_post(self, user_id: Optional[str], post_id: str) -> ActionResult:
        if not user_id:
            return not_authenticated("Please log in to save posts")
        if not post_id:
            return invalid("Post ID is required")
        if await self.find_post(post_id) is None:
            return not_found("Post not found")

        try:
            doc = await self.store.create(
                self.collection,
                new_id(),
                {"postId": post_id, "userId": user_id, "pair": f"{post_id}:{user_id}"},
                unique=("pair",),
            )
        except DuplicateDocument:
            return conflict("Post is already saved")
        return ok(data=to_saved_post(doc), message="Post saved successfully")

    @action_boundary("Failed to unsave post")
    async def unsave_post(self, user_id: Optional[str], post_id: str) -> ActionResult:
        if not user_id:
            return not_authenticated("Please log in to unsave posts")
        existing = await self._find(user_id, post_id)
        if existing is None:
            return not_found("Post is not saved")
        try:
            await self.store.delete(self.collection, existing["$id"])
        except DocumentNotFound:
            return not_found("Post is not saved")
        return ok(message="Post unsaved successfully")

    @action_boundary("Failed to check saved status")
    async def is_post_saved(self, user_id: Optional[str], post_id: str) -> ActionResult:
        """未登录时视为未收藏"""
        if not user_id:
            return ok(data=False)
        return ok(data=await self._find(user_id, post_id) is not None)

    @action_boundary("Failed to get saved posts")
    async def list_saved_posts(self, user_id: Optional[str]) -> ActionResult:
        """
        收藏的文章详情，按收藏时间倒序

        已被删除的文章直接跳过
        """
        if not user_id:
            return not_authenticated("Please log in to view saved posts")
        result = await self.store.list(self.collection, [equal("userId", user_id)], order=order_desc())
        saved = [to_saved_post(doc) for doc in result.documents]

        posts = []
        for item in saved:
            post = await self.find_post(item.postId)
            if post is None:
                logger.debug("saved post %s no longer exists", item.postId)
                continue
            posts.append(post)
        return ok(data=await self.posts.details(posts, user_id))

    @action_boundary("Failed to get saved posts count")
    async def saved_posts_count(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return ok(data=0)
        return ok(data=await self.store.count(self.collection, equal("userId", user_id)))
