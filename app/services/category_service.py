"""
分类服务

分类的增删改只允许管理员操作，分类名称全局唯一
"""
import logging
from typing import Optional

from app.services.base import ServiceBase
from app.services.mappers import to_category
from app.services.results import (
    ActionResult, action_boundary, conflict, invalid, not_authenticated, not_authorized, not_found, ok,
)
from app.services.uploads import ImageUploader, UploadedFile
from app.services.validation import validate_image
from app.store.base import DuplicateDocument, new_id, order_asc

logger = logging.getLogger(__name__)

CATEGORY_NAME_MIN_LENGTH = 2
CATEGORY_NAME_MAX_LENGTH = 100
CATEGORY_EXISTS_ERROR = "A category with this name already exists"


class CategoryService(ServiceBase):
    """分类服务类"""

    def __init__(self, settings, store, admins, uploader: ImageUploader):
        super().__init__(settings, store, admins)
        self.uploader = uploader

    @property
    def collection(self) -> str:
        return self.settings.CATEGORY_COLLECTION

    async def _require_admin(self, user_id: Optional[str]) -> Optional[ActionResult]:
        if not user_id:
            return not_authenticated("You must be logged in to manage categories")
        if not await self.is_admin(user_id):
            return not_authorized("Admin access required to manage categories")
        return None

    @staticmethod
    def _check_name(name: str) -> Optional[str]:
        if not name or not name.strip():
            return "Category name is required"
        if len(name.strip()) < CATEGORY_NAME_MIN_LENGTH:
            return f"Category name must be at least {CATEGORY_NAME_MIN_LENGTH} characters"
        if len(name.strip()) > CATEGORY_NAME_MAX_LENGTH:
            return f"Category name must be less than {CATEGORY_NAME_MAX_LENGTH} characters"
        return None

    @action_boundary("Failed to create category")
    async def create_category(self, user_id: Optional[str], name: str,
                              image: Optional[UploadedFile] = None) -> ActionResult:
        denied = await self._require_admin(user_id)
        if denied:
            return denied
        error = self._check_name(name) or validate_image(self.settings, image)
        if error:
            return invalid(error)

        fields = {"name": name.strip()}
        if image is not None and image.size > 0:
            fields["image"] = await self.uploader.upload(image)
        try:
            doc = await self.store.create(self.collection, new_id(), fields, unique=("name",))
        except DuplicateDocument:
            await self.uploader.delete_by_url(fields.get("image"))
            return conflict(CATEGORY_EXISTS_ERROR)
        logger.info("category %s created by %s", doc["$id"], user_id)
        return ok(data=to_category(doc), message="Category created successfully")

    @action_boundary("Failed to get categories")
    async def list_categories(self) -> ActionResult:
        result = await self.store.list(self.collection, order=order_asc())
        return ok(data=[to_category(doc) for doc in result.documents])

    @action_boundary("Failed to get category")
    async def get_category(self, category_id: str) -> ActionResult:
        category = await self.find_category(category_id)
        if category is None:
            return not_found("Category not found")
        return ok(data=category)

    @action_boundary("Failed to update category")
    async def update_category(
        self,
        user_id: Optional[str],
        category_id: str,
        name: str,
        image: Optional[UploadedFile] = None,
        remove_image: bool = False,
    ) -> ActionResult:
        """
        更新分类

        上传新图片会替换旧图片；remove_image 为真且没有新图片时清除图片
        """
        denied = await self._require_admin(user_id)
        if denied:
            return denied
        error = self._check_name(name) or validate_image(self.settings, image)
        if error:
            return invalid(error)

        category = await self.find_category(category_id)
        if category is None:
            return not_found("Category not found")

        fields = {"name": name.strip()}
        old_image = None
        if image is not None and image.size > 0:
            fields["image"] = await self.uploader.upload(image)
            old_image = category.image
        elif remove_image:
            fields["image"] = None
            old_image = category.image

        try:
            doc = await self.store.update(self.collection, category.id, fields, unique=("name",))
        except DuplicateDocument:
            return conflict(CATEGORY_EXISTS_ERROR)

        await self.uploader.delete_by_url(old_image)
        return ok(data=to_category(doc), message="Category updated successfully")

    @action_boundary("Failed to delete category")
    async def delete_category(self, user_id: Optional[str], category_id: str) -> ActionResult:
        denied = await self._require_admin(user_id)
        if denied:
            return denied
        category = await self.find_category(category_id)
        if category is None:
            return not_found("Category not found")

        await self.store.delete(self.collection, category.id)
        await self.uploader.delete_by_url(category.image)
        logger.info("category %s deleted by %s", category.id, user_id)
        return ok(message="Category deleted successfully")
