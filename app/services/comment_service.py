"""
评论服务
"""
import asyncio
import logging
from collections import Counter
from typing import Dict, List, Optional

from app.schemas.comment import (
    Comment, CommentAuthor, CommentWithAuthor, CommentWithContext, UserCommentCount,
)
from app.services.base import ServiceBase
from app.services.mappers import to_comment
from app.services.results import (
    ActionResult, action_boundary, invalid, not_authenticated, not_authorized, not_found, ok,
)
from app.store.base import DocumentNotFound, equal, new_id, order_asc, order_desc

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 1000


class CommentService(ServiceBase):
    """评论服务类"""

    @property
    def collection(self) -> str:
        return self.settings.COMMENT_COLLECTION

    async def _find_comment(self, comment_id: str) -> Optional[Comment]:
        if not comment_id:
            return None
        try:
            doc = await self.store.get(self.collection, comment_id)
        except DocumentNotFound:
            return None
        return to_comment(doc)

    async def _authors(self, user_ids) -> Dict[str, CommentAuthor]:
        unique_ids = list(dict.fromkeys(user_ids))
        profiles = await asyncio.gather(*(self.find_profile_by_author(uid) for uid in unique_ids))
        return {
            uid: CommentAuthor(id=uid, name=profile.name, image=profile.image)
            for uid, profile in zip(unique_ids, profiles)
            if profile is not None
        }

    def _check_content(self, content: str) -> Optional[str]:
        if not content or not content.strip():
            return "Comment content is required"
        if len(content.strip()) > COMMENT_MAX_LENGTH:
            return f"Comment must be less than {COMMENT_MAX_LENGTH} characters"
        return None

    async def _can_manage(self, user_id: str, comment: Comment) -> bool:
        if comment.userId == user_id:
            return True
        return await self.is_admin(user_id)

    @action_boundary("Failed to create comment")
    async def create_comment(self, user_id: Optional[str], post_id: str, content: str) -> ActionResult:
        if not user_id:
            return not_authenticated("You must be logged in to comment")
        error = self._check_content(content)
        if error:
            return invalid(error)
        if await self.find_post(post_id) is None:
            return not_found("Post not found")

        doc = await self.store.create(
            self.collection, new_id(),
            {"postId": post_id, "userId": user_id, "content": content.strip()},
        )
        return ok(data=to_comment(doc), message="Comment added successfully")

    @action_boundary("Failed to get comments")
    async def list_comments(self, post_id: str) -> ActionResult:
        """按时间正序列出文章评论"""
        result = await self.store.list(self.collection, [equal("postId", post_id)], order=order_asc())
        return ok(data=[to_comment(doc) for doc in result.documents])

    @action_boundary("Failed to get comments")
    async def list_comments_with_authors(self, post_id: str) -> ActionResult:
        result = await self.store.list(self.collection, [equal("postId", post_id)], order=order_asc())
        comments = [to_comment(doc) for doc in result.documents]
        authors = await self._authors(c.userId for c in comments)
        return ok(data=[
            CommentWithAuthor(**c.model_dump(), author=authors.get(c.userId))
            for c in comments
        ])

    @action_boundary("Failed to get comment count")
    async def comment_count(self, post_id: str) -> ActionResult:
        return ok(data=await self.store.count(self.collection, equal("postId", post_id)))

    @action_boundary("Failed to delete comment")
    async def delete_comment(self, user_id: Optional[str], comment_id: str) -> ActionResult:
        """评论作者或管理员可以删除"""
        if not user_id:
            return not_authenticated("You must be logged in to delete comments")
        comment = await self._find_comment(comment_id)
        if comment is None:
            return not_found("Comment not found")
        if not await self._can_manage(user_id, comment):
            return not_authorized("You can only delete your own comments")

        await self.store.delete(self.collection, comment.id)
        return ok(message="Comment deleted successfully")

    @action_boundary("Failed to update comment")
    async def update_comment(self, user_id: Optional[str], comment_id: str, content: str) -> ActionResult:
        if not user_id:
            return not_authenticated("You must be logged in to update comments")
        error = self._check_content(content)
        if error:
            return invalid(error)
        comment = await self._find_comment(comment_id)
        if comment is None:
            return not_found("Comment not found")
        if not await self._can_manage(user_id, comment):
            return not_authorized("You can only update your own comments")

        doc = await self.store.update(self.collection, comment.id, {"content": content.strip()})
        return ok(data=to_comment(doc), message="Comment updated successfully")

    # ------------------------------------------------------------------ 管理后台

    async def _require_admin(self, user_id: Optional[str]) -> Optional[ActionResult]:
        if not user_id:
            return not_authenticated("You must be logged in")
        if not await self.is_admin(user_id):
            return not_authorized("Admin access required")
        return None

    @action_boundary("Failed to delete comment")
    async def admin_delete_comment(self, user_id: Optional[str], comment_id: str) -> ActionResult:
        denied = await self._require_admin(user_id)
        if denied:
            return denied
        comment = await self._find_comment(comment_id)
        if comment is None:
            return not_found("Comment not found")
        await self.store.delete(self.collection, comment.id)
        logger.info("comment %s removed by admin %s", comment.id, user_id)
        return ok(message="Comment deleted successfully")

    @action_boundary("Failed to get comments")
    async def list_all_comments(self, user_id: Optional[str]) -> ActionResult:
        """所有评论，附带作者与文章信息，按时间倒序"""
        denied = await self._require_admin(user_id)
        if denied:
            return denied
        result = await self.store.list(self.collection, order=order_desc())
        comments = [to_comment(doc) for doc in result.documents]

        post_ids = list(dict.fromkeys(c.postId for c in comments))
        posts, authors = await asyncio.gather(
            asyncio.gather(*(self.find_post(pid) for pid in post_ids)),
            self._authors(c.userId for c in comments),
        )
        post_map = {pid: post for pid, post in zip(post_ids, posts) if post is not None}

        items: List[CommentWithContext] = []
        for c in comments:
            post = post_map.get(c.postId)
            items.append(CommentWithContext(
                **c.model_dump(),
                author=authors.get(c.userId),
                postTitle=post.title if post else None,
                postSlug=post.slug if post else None,
            ))
        return ok(data=items)

    @action_boundary("Failed to get users")
    async def users_with_comment_counts(self, user_id: Optional[str]) -> ActionResult:
        denied = await self._require_admin(user_id)
        if denied:
            return denied
        result = await self.store.list(self.collection)
        counts = Counter(str(doc.get("userId")) for doc in result.documents)
        authors = await self._authors(counts.keys())

        items = []
        for uid, total in counts.most_common():
            author = authors.get(uid)
            items.append(UserCommentCount(
                userId=uid,
                name=author.name if author else None,
                image=author.image if author else None,
                commentCount=total,
            ))
        return ok(data=items)
