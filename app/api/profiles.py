"""
个人资料API
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from app.api.auth import set_role_cookie
from app.core.config import Settings, get_settings
from app.schemas.common import ResponseModel
from app.schemas.profile import ProfileForm
from app.services.container import Services, get_services
from app.services.profile_service import allowed_fields
from app.utils.auth import get_current_user_id
from app.utils.responses import read_upload, to_response

router = APIRouter(prefix="/api", tags=["个人资料"])


def profile_form(
    name: str = Form(""),
    role: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    removeImage: bool = Form(False),
) -> ProfileForm:
    return ProfileForm(name=name, role=role, phone=phone, dob=dob, bio=bio, removeImage=removeImage)


@router.get("/profile", response_model=ResponseModel)
async def get_profile(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.profiles.get_profile(user_id)
    return to_response(result, response)


@router.get("/profile/fields", response_model=ResponseModel)
async def get_allowed_fields(role: str = "reader"):
    """
    按角色返回可编辑的字段
    """
    return ResponseModel(code=200, data=allowed_fields(role))


@router.post("/profile", response_model=ResponseModel)
async def create_profile(
    response: Response,
    form: ProfileForm = Depends(profile_form),
    image: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    创建个人资料，并写入角色Cookie
    """
    result = await services.profiles.create_profile(user_id, form, await read_upload(image))
    if result.success:
        set_role_cookie(response, settings, result.data["profile"].role.value)
    return to_response(result, response)


@router.put("/profile/{profile_id}", response_model=ResponseModel)
async def update_profile(
    profile_id: str,
    response: Response,
    form: ProfileForm = Depends(profile_form),
    image: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.profiles.update_profile(user_id, profile_id, form, await read_upload(image))
    return to_response(result, response)


@router.get("/admin/users", response_model=ResponseModel)
async def list_users(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.profiles.list_users(user_id)
    return to_response(result, response)
