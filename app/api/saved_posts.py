"""
收藏API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Response

from app.schemas.common import ResponseModel
from app.services.container import Services, get_services
from app.utils.auth import get_current_user_id
from app.utils.responses import to_response

router = APIRouter(prefix="/api/saved-posts", tags=["收藏"])


@router.get("", response_model=ResponseModel)
async def list_saved_posts(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    获取收藏的文章，按收藏时间倒序
    """
    result = await services.saved_posts.list_saved_posts(user_id)
    return to_response(result, response)


@router.get("/count", response_model=ResponseModel)
async def saved_posts_count(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.saved_posts.saved_posts_count(user_id)
    return to_response(result, response)


@router.get("/{post_id}", response_model=ResponseModel)
async def is_post_saved(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.saved_posts.is_post_saved(user_id, post_id)
    return to_response(result, response)


@router.post("/{post_id}", response_model=ResponseModel)
async def save_post(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.saved_posts.save_post(user_id, post_id)
    return to_response(result, response)


@router.delete("/{post_id}", response_model=ResponseModel)
async def unsave_post(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.saved_posts.unsave_post(user_id, post_id)
    return to_response(result, response)
