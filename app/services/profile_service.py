"""
个人资料服务

每个用户只有一份资料，角色在创建时确定（reader / writer），之后不可修改
"""
import asyncio
import logging
from typing import List, Optional

from app.schemas.profile import ProfileForm, ProfileRole, UserSummary
from app.services.base import ServiceBase
from app.services.mappers import to_profile, to_user
from app.services.results import (
    ActionResult, action_boundary, conflict, invalid, not_authenticated, not_authorized, not_found, ok,
)
from app.services.uploads import ImageUploader, UploadedFile
from app.services.validation import validate_image
from app.store.base import DuplicateDocument, new_id, order_desc

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
BASE_FIELDS = ["name", "dob", "image", "role"]

WRITER_HOME = "/authDashboard/posts"
READER_HOME = "/userDashboard/save"
PROFILE_CREATE_PATH = "/profile/create"


def allowed_fields(role: Optional[str] = ProfileRole.READER.value) -> List[str]:
    """角色可编辑的资料字段，只有作者可以填写电话"""
    if role == ProfileRole.WRITER.value:
        return BASE_FIELDS + ["phone"]
    return list(BASE_FIELDS)


def redirect_path(role: Optional[str]) -> str:
    """按角色决定登录或建档后的跳转页面"""
    if role is None:
        return PROFILE_CREATE_PATH
    if role == ProfileRole.WRITER.value:
        return WRITER_HOME
    return READER_HOME


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProfileService(ServiceBase):
    """个人资料服务类"""

    def __init__(self, settings, store, admins, uploader: ImageUploader):
        super().__init__(settings, store, admins)
        self.uploader = uploader

    @property
    def collection(self) -> str:
        return self.settings.PROFILE_COLLECTION

    @staticmethod
    def _check_name(name: str) -> Optional[str]:
        if not name or not name.strip():
            return "Name is required"
        if len(name.strip()) > NAME_MAX_LENGTH:
            return f"Name must be less than {NAME_MAX_LENGTH} characters"
        return None

    @action_boundary("Failed to create profile")
    async def create_profile(self, user_id: Optional[str], form: ProfileForm,
                             image: Optional[UploadedFile] = None) -> ActionResult:
        """
        创建个人资料

        成功时 data 中包含资料与按角色计算的跳转路径
        """
        if not user_id:
            return not_authenticated("Please log in to create a profile.")
        error = self._check_name(form.name) or validate_image(self.settings, image)
        if error:
            return invalid(error)
        try:
            role = ProfileRole(form.role or ProfileRole.READER.value)
        except ValueError:
            return invalid("Role must be either reader or writer")

        if await self.find_profile_by_author(user_id) is not None:
            return conflict("Profile already exists")

        fields = {
            "author_id": user_id,
            "role": role.value,
            "name": form.name.strip(),
            "dob": _blank_to_none(form.dob),
            "bio": _blank_to_none(form.bio),
        }
        if role == ProfileRole.WRITER:
            fields["phone"] = _blank_to_none(form.phone)
        if image is not None and image.size > 0:
            fields["image"] = await self.uploader.upload(image)

        try:
            doc = await self.store.create(self.collection, new_id(), fields, unique=("author_id",))
        except DuplicateDocument:
            await self.uploader.delete_by_url(fields.get("image"))
            return conflict("Profile already exists")

        profile = to_profile(doc)
        logger.info("profile %s created for %s as %s", profile.id, user_id, role.value)
        return ok(
            data={"profile": profile, "redirectPath": redirect_path(role.value)},
            message="Profile created successfully!",
        )

    @action_boundary("Failed to get profile")
    async def get_profile(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return not_authenticated("No active session")
        profile = await self.find_profile_by_author(user_id)
        if profile is None:
            return not_found("Profile not found")
        return ok(data=profile)

    @action_boundary("Failed to update profile")
    async def update_profile(
        self,
        user_id: Optional[str],
        profile_id: str,
        form: ProfileForm,
        image: Optional[UploadedFile] = None,
    ) -> ActionResult:
        """
        更新个人资料

        只有资料本人可以修改；提交的角色必须与现有角色一致
        """
        if not user_id:
            return not_authenticated("Please log in to update your profile.")
        error = self._check_name(form.name) or validate_image(self.settings, image)
        if error:
            return invalid(error)

        profile = await self.find_profile(profile_id)
        if profile is None:
            return not_found("Profile not found.")
        if profile.authorId != user_id:
            return not_authorized("You can only update your own profile.")
        if form.role and form.role != profile.role.value:
            return invalid("Role cannot be changed after the profile is created")

        fields = {
            "name": form.name.strip(),
            "dob": _blank_to_none(form.dob),
            "bio": _blank_to_none(form.bio),
        }
        if "phone" in allowed_fields(profile.role.value):
            fields["phone"] = _blank_to_none(form.phone)

        old_image = None
        if image is not None and image.size > 0:
            fields["image"] = await self.uploader.upload(image)
            old_image = profile.image
        elif form.removeImage:
            fields["image"] = None
            old_image = profile.image

        doc = await self.store.update(self.collection, profile.id, fields)
        await self.uploader.delete_by_url(old_image)
        return ok(
            data={"profile": to_profile(doc), "redirectPath": redirect_path(profile.role.value)},
            message="Profile updated successfully!",
        )

    @action_boundary("Failed to fetch users")
    async def list_users(self, user_id: Optional[str]) -> ActionResult:
        """管理后台：所有用户及其资料"""
        if not user_id:
            return not_authenticated("You must be logged in")
        if not await self.is_admin(user_id):
            return not_authorized("Admin access required")

        users_result = await self.store.list(self.settings.USER_COLLECTION, order=order_desc())
        users = [to_user(doc) for doc in users_result.documents]
        profiles = await asyncio.gather(*(self.find_profile_by_author(u.id) for u in users))

        items = []
        for user, profile in zip(users, profiles):
            items.append(UserSummary(
                id=user.id,
                email=user.email,
                name=profile.name if profile else None,
                role=profile.role.value if profile else None,
                image=profile.image if profile else None,
                createdAt=user.createdAt,
            ))
        return ok(data=items)
