"""
点赞服务
"""
import asyncio
import logging
from typing import Optional

from app.schemas.engagement import LikesInfo
from app.services.base import ServiceBase
from app.services.results import (
    ActionResult, action_boundary, not_authenticated, not_found, ok, upstream,
)
from app.store.base import DuplicateDocument, DocumentNotFound, equal, new_id

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Likes feature is not configured"


def pair_key(post_id: str, user_id: str) -> str:
    """(文章, 用户) 组合键，用于唯一约束"""
    return f"{post_id}:{user_id}"


class LikeService(ServiceBase):
    """点赞：存在记录即视为已点赞，通过切换创建或删除"""

    @property
    def collection(self) -> Optional[str]:
        return self.settings.LIKES_COLLECTION

    async def count_for(self, post_id: str) -> int:
        if not self.collection:
            return 0
        return await self.store.count(self.collection, equal("post_id", post_id))

    async def has_liked(self, user_id: Optional[str], post_id: str) -> bool:
        if not self.collection or not user_id:
            return False
        doc = await self.store.find_one(self.collection, equal("post_id", post_id), equal("user_id", user_id))
        return doc is not None

    @action_boundary("Failed to toggle like")
    async def toggle_like(self, user_id: Optional[str], post_id: str) -> ActionResult:
        """
        切换点赞状态

        连续切换两次回到原来的状态，点赞数也恢复原值
        """
        if not self.collection:
            return upstream(NOT_CONFIGURED)
        if not user_id:
            return not_authenticated("You must be logged in to like posts")
        if await self.find_post(post_id) is None:
            return not_found("Post not found")

        existing = await self.store.find_one(
            self.collection, equal("post_id", post_id), equal("user_id", user_id)
        )
        if existing is not None:
            try:
                await self.store.delete(self.collection, existing["$id"])
            except DocumentNotFound:
                # 并发请求已经删除
                pass
            liked = False
        else:
            try:
                await self.store.create(
                    self.collection,
                    new_id(),
                    {"post_id": post_id, "user_id": user_id, "pair": pair_key(post_id, user_id)},
                    unique=("pair",),
                )
            except DuplicateDocument:
                logger.info("like for %s by %s already exists", post_id, user_id)
            liked = True

        count = await self.count_for(post_id)
        return ok(data={"liked": liked, "likeCount": count})

    @action_boundary("Failed to get like count")
    async def like_count(self, post_id: str) -> ActionResult:
        if not self.collection:
            return upstream(NOT_CONFIGURED)
        return ok(data=await self.count_for(post_id))

    @action_boundary("Failed to check like status")
    async def user_liked(self, user_id: Optional[str], post_id: str) -> ActionResult:
        if not self.collection:
            return upstream(NOT_CONFIGURED)
        return ok(data=await self.has_liked(user_id, post_id))

    @action_boundary("Failed to get like information")
    async def likes_info(self, user_id: Optional[str], post_id: str) -> ActionResult:
        if not self.collection:
            return upstream(NOT_CONFIGURED)
        count, liked = await asyncio.gather(
            self.count_for(post_id),
            self.has_liked(user_id, post_id),
        )
        return ok(data=LikesInfo(likeCount=count, userLiked=liked))
