"""
文章服务

文章生命周期：作者创建（待审核）-> 作者或管理员编辑 -> 作者或管理员切换状态 ->
作者在未发布时删除，管理员任何状态都可删除
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from app.core.config import Settings
from app.schemas.post import AuthorInfo, CategoryInfo, Post, PostDetail, PostForm, PostStatus
from app.services import policy
from app.services.admin import AdminMembership
from app.services.base import ServiceBase
from app.services.like_service import LikeService
from app.services.mappers import post_fields, to_post
from app.services.results import (
    ActionResult, action_boundary, conflict, invalid, not_authenticated,
    not_authorized, not_found, ok,
)
from app.services.slugs import SLUG_MAX_LENGTH, derive_slug, is_valid_slug
from app.services.uploads import ImageUploader, UploadedFile
from app.services.validation import extract_storage_images, validate_image, validate_post_fields
from app.store.base import DocumentStore, DuplicateDocument, equal, new_id, order_desc

logger = logging.getLogger(__name__)

SLUG_FORMAT_ERROR = "Slug can only contain lowercase letters, numbers, and hyphens"
SLUG_EXISTS_ERROR = "Slug already exists. Please choose a different one."
SLUG_LENGTH_ERROR = f"Slug must be at most {SLUG_MAX_LENGTH} characters"


class PostService(ServiceBase):
    """文章服务"""

    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        admins: AdminMembership,
        uploader: ImageUploader,
        likes: LikeService,
    ):
        super().__init__(settings, store, admins)
        self.uploader = uploader
        self.likes = likes

    @property
    def collection(self) -> str:
        return self.settings.POST_COLLECTION

    # ------------------------------------------------------------------ 详情组装

    async def detail(self, post: Post, viewer_id: Optional[str] = None, owner_view: bool = False) -> PostDetail:
        """并发获取作者、分类与点赞信息，它们之间没有一致性要求"""
        profile_lookup = (
            self.find_profile(post.profileId) if post.profileId
            else self.find_profile_by_author(post.authorId)
        )
        profile, category, like_count, liked = await asyncio.gather(
            profile_lookup,
            self.find_category(post.categoryId),
            self.likes.count_for(post.id),
            self.likes.has_liked(viewer_id, post.id),
        )
        detail = PostDetail(**post.model_dump())
        if profile is not None:
            detail.author = AuthorInfo(id=profile.authorId, name=profile.name, image=profile.image, bio=profile.bio)
        if category is not None:
            detail.category = CategoryInfo(id=category.id, name=category.name)
        detail.likes = like_count
        detail.userLiked = liked
        if owner_view:
            detail.canEdit = policy.can_owner_edit(post)
        return detail

    async def details(self, posts: Sequence[Post], viewer_id: Optional[str] = None,
                      owner_view: bool = False) -> List[PostDetail]:
        return list(await asyncio.gather(*(self.detail(p, viewer_id, owner_view) for p in posts)))

    async def _list(self, *filters) -> List[Post]:
        result = await self.store.list(self.collection, filters, order=order_desc())
        return [to_post(doc) for doc in result.documents]

    # ------------------------------------------------------------------ 图片

    def _image_error(self, thumbnail: Optional[UploadedFile], images: Sequence[UploadedFile]) -> Optional[str]:
        for upload in [thumbnail, *images]:
            error = validate_image(self.settings, upload)
            if error:
                return error
        return None

    @action_boundary("Failed to upload image")
    async def upload_image(self, user_id: Optional[str], upload: UploadedFile) -> ActionResult:
        """编辑器内上传图片"""
        if not user_id:
            return not_authenticated("You must be logged in to upload images")
        error = validate_image(self.settings, upload)
        if error:
            return invalid(error)
        return ok(data=await self.uploader.upload(upload))

    @action_boundary("Failed to upload images")
    async def upload_images(self, user_id: Optional[str], uploads: List[UploadedFile]) -> ActionResult:
        if not user_id:
            return not_authenticated("You must be logged in to upload images")
        error = self._image_error(None, uploads)
        if error:
            return invalid(error)
        return ok(data=await self.uploader.upload_many(uploads))

    # ------------------------------------------------------------------ 创建与编辑

    @action_boundary("Failed to create post")
    async def create_post(
        self,
        user_id: Optional[str],
        form: PostForm,
        thumbnail: Optional[UploadedFile] = None,
        background_images: Sequence[UploadedFile] = (),
    ) -> ActionResult:
        """
        创建文章，状态固定为待审核

        未提供slug时由标题生成；slug重复时，生成的slug会换一个新后缀重试，
        调用方指定的slug直接返回冲突
        """
        if not user_id:
            return not_authenticated("You must be logged in to create posts")

        profile = await self.find_profile_by_author(user_id)
        if profile is None:
            return not_found("Please create a profile first")

        error = validate_post_fields(self.settings, form.title, form.description, form.content, form.categoryId)
        if error:
            return invalid(error)

        requested_slug = (form.slug or "").strip()
        if len(requested_slug) > SLUG_MAX_LENGTH:
            return invalid(SLUG_LENGTH_ERROR)
        if requested_slug and not is_valid_slug(requested_slug):
            return invalid(SLUG_FORMAT_ERROR)

        category = await self.find_category(form.categoryId)
        if category is None:
            return not_found("Selected category does not exist")

        error = self._image_error(thumbnail, background_images)
        if error:
            return invalid(error)

        uploaded: List[str] = []
        try:
            for upload in background_images:
                uploaded.append(await self.uploader.upload(upload))
            thumbnail_url = None
            if thumbnail is not None and thumbnail.size > 0:
                thumbnail_url = await self.uploader.upload(thumbnail)
                uploaded.append(thumbnail_url)

            fields = post_fields(
                title=form.title.strip(),
                description=form.description.strip(),
                content=form.content.strip(),
                category_id=category.id,
                category_name=category.name,
                thumbnail=thumbnail_url,
                background_images=extract_storage_images(form.content) + uploaded[:len(background_images)],
            )
            fields.update({
                "profile_id": profile.id,
                "author_id": profile.authorId,
                "status": PostStatus.PENDING.value,
                "views": 0,
            })
            doc = await self._insert(fields, requested_slug, form.title)
        except Exception:
            await self._discard(uploaded)
            raise
        if doc is None:
            await self._discard(uploaded)
            return conflict(SLUG_EXISTS_ERROR)

        post = to_post(doc)
        logger.info("post %s created by %s", post.id, user_id)
        return ok(data=post, message="Post created successfully! It is now pending approval.")

    async def _insert(self, fields: dict, requested_slug: str, title: str) -> Optional[dict]:
        """写入文章并占用slug，slug无法占用时返回None"""
        slug = requested_slug or derive_slug(title)
        for attempt in range(self.settings.SLUG_MAX_ATTEMPTS):
            try:
                return await self.store.create(self.collection, new_id(), {**fields, "slug": slug}, unique=("slug",))
            except DuplicateDocument:
                if requested_slug:
                    return None
                logger.info("slug %s taken, deriving a new one (attempt %d)", slug, attempt + 1)
                slug = derive_slug(title)
        return None

    async def _discard(self, urls: Sequence[str]) -> None:
        for url in urls:
            await self.uploader.delete_by_url(url)

    @action_boundary("Failed to update post")
    async def update_post(
        self,
        user_id: Optional[str],
        post_id: str,
        form: PostForm,
        thumbnail: Optional[UploadedFile] = None,
    ) -> ActionResult:
        """
        编辑文章内容

        slug 与作者在创建后保持不变，状态保持原值
        """
        if not user_id:
            return not_authenticated("You must be logged in to update posts")
        if not post_id:
            return invalid("Post ID is required")

        error = validate_post_fields(self.settings, form.title, form.description, form.content, form.categoryId)
        if error:
            return invalid(error)

        post = await self.find_post(post_id)
        if post is None:
            return not_found("Post not found")

        decision = policy.check_edit(user_id, post, await self.is_admin(user_id))
        if not decision:
            return not_authorized(decision.reason)

        submitted_slug = (form.slug or "").strip()
        if submitted_slug and submitted_slug != post.slug:
            return invalid("Slug cannot be changed after the post is created")

        category = await self.find_category(form.categoryId)
        if category is None:
            return not_found("Selected category does not exist")

        error = validate_image(self.settings, thumbnail)
        if error:
            return invalid(error)

        thumbnail_url = post.thumbnail
        if thumbnail is not None and thumbnail.size > 0:
            thumbnail_url = await self.uploader.upload(thumbnail)

        fields = post_fields(
            title=form.title.strip(),
            description=form.description.strip(),
            content=form.content.strip(),
            category_id=category.id,
            category_name=category.name,
            thumbnail=thumbnail_url,
            background_images=extract_storage_images(form.content),
        )
        doc = await self.store.update(self.collection, post.id, fields)
        return ok(data=to_post(doc), message="Post updated successfully!")

    @action_boundary("Failed to update post status")
    async def update_post_status(self, user_id: Optional[str], post_id: str, status: str) -> ActionResult:
        """
        更新文章状态

        三种状态之间可以任意切换，除持久化新状态外没有其他副作用
        """
        if not user_id:
            return not_authenticated("You must be logged in to update post status")
        try:
            new_status = PostStatus(status)
        except ValueError:
            return invalid("Invalid status. Must be one of: pending, published, rejected")

        post = await self.find_post(post_id)
        if post is None:
            return not_found("Post not found")

        decision = policy.check_status_change(user_id, post, await self.is_admin(user_id))
        if not decision:
            return not_authorized(decision.reason)

        doc = await self.store.update(self.collection, post.id, {"status": new_status.value})
        logger.info("post %s status %s -> %s by %s", post.id, post.status.value, new_status.value, user_id)
        return ok(data=to_post(doc), message=f"Post status updated to {new_status.value}")

    @action_boundary("Failed to delete post")
    async def delete_post(self, user_id: Optional[str], post_id: str) -> ActionResult:
        if not user_id:
            return not_authenticated("You must be logged in to delete posts")

        post = await self.find_post(post_id)
        if post is None:
            return not_found("Post not found")

        decision = policy.check_delete(user_id, post, await self.is_admin(user_id))
        if not decision:
            return not_authorized(decision.reason)

        await self.store.delete(self.collection, post.id)
        logger.info("post %s deleted by %s", post.id, user_id)
        return ok(message="Post deleted successfully")

    # ------------------------------------------------------------------ 查询

    @action_boundary("Failed to get post")
    async def get_post_by_slug(self, slug: str, viewer_id: Optional[str] = None) -> ActionResult:
        post = await self.find_post_by_slug(slug)
        if post is None:
            return not_found("Post not found")
        return ok(data=await self.detail(post, viewer_id))

    @action_boundary("Failed to get post")
    async def get_post_for_edit(self, user_id: Optional[str], post_id: str) -> ActionResult:
        if not user_id:
            return not_authenticated("You must be logged in to edit posts")

        post = await self.find_post(post_id)
        if post is None:
            return not_found("Post not found")

        if not policy.can_modify(user_id, post, await self.is_admin(user_id)):
            return not_authorized("You can only edit your own posts")
        return ok(data=post)

    @action_boundary("Failed to get your posts")
    async def list_current_user_posts(self, user_id: Optional[str]) -> ActionResult:
        """作者后台：当前用户的全部文章（所有状态）"""
        if not user_id:
            return not_authenticated("You must be logged in to view your posts")
        posts = await self._list(equal("author_id", user_id))
        return ok(data=await self.details(posts, user_id, owner_view=True))

    @action_boundary("Failed to get posts")
    async def list_published_posts(self, viewer_id: Optional[str] = None) -> ActionResult:
        posts = await self._list(equal("status", PostStatus.PUBLISHED.value))
        return ok(data=await self.details(posts, viewer_id))

    @action_boundary("Failed to get posts for admin")
    async def list_posts_for_admin(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return not_authenticated("You must be logged in to access admin dashboard")
        if not await self.is_admin(user_id):
            return not_authorized("Admin access required. You do not have permission to view this page.")
        posts = await self._list()
        return ok(data=await self.details(posts, user_id))

    @action_boundary("Failed to get posts by category")
    async def list_posts_by_category(self, category_name: str, viewer_id: Optional[str] = None) -> ActionResult:
        posts = await self._list(
            equal("category_name", category_name),
            equal("status", PostStatus.PUBLISHED.value),
        )
        return ok(data=await self.details(posts, viewer_id))

    @action_boundary("Failed to increment views")
    async def increment_views(self, slug: str) -> ActionResult:
        """浏览量加一；并发时后写覆盖先写"""
        post = await self.find_post_by_slug(slug)
        if post is None:
            return not_found("Post not found")
        await self.store.update(self.collection, post.id, {"views": post.viewCount + 1})
        return ok(data=post.viewCount + 1)

    @action_boundary("Failed to check admin access")
    async def debug_admin_access(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return not_authenticated("No user ID found. Please log in first.")
        is_admin = await self.is_admin(user_id)
        return ok(data={
            "userId": user_id,
            "isAdmin": is_admin,
            "adminCollection": self.admins.collection,
        })
