"""
分类管理API
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from app.schemas.common import ResponseModel
from app.services.container import Services, get_services
from app.utils.auth import get_current_user_id
from app.utils.responses import read_upload, to_response

router = APIRouter(prefix="/api/categories", tags=["分类管理"])


@router.get("", response_model=ResponseModel)
async def list_categories(response: Response, services: Services = Depends(get_services)):
    result = await services.categories.list_categories()
    return to_response(result, response)


@router.get("/{category_id}", response_model=ResponseModel)
async def get_category(category_id: str, response: Response, services: Services = Depends(get_services)):
    result = await services.categories.get_category(category_id)
    return to_response(result, response)


@router.post("", response_model=ResponseModel)
async def create_category(
    response: Response,
    name: str = Form(""),
    image: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    创建分类（仅管理员）
    """
    result = await services.categories.create_category(user_id, name, await read_upload(image))
    return to_response(result, response)


@router.put("/{category_id}", response_model=ResponseModel)
async def update_category(
    category_id: str,
    response: Response,
    name: str = Form(""),
    removeImage: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    更新分类（仅管理员），可替换或移除图片
    """
    result = await services.categories.update_category(
        user_id, category_id, name, await read_upload(image), remove_image=removeImage,
    )
    return to_response(result, response)


@router.delete("/{category_id}", response_model=ResponseModel)
async def delete_category(
    category_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.categories.delete_category(user_id, category_id)
    return to_response(result, response)
