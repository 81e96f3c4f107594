"""
点赞API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Response

from app.schemas.common import ResponseModel
from app.services.container import Services, get_services
from app.utils.auth import get_current_user_id
from app.utils.responses import to_response

router = APIRouter(prefix="/api/posts", tags=["点赞"])


@router.post("/{post_id}/like", response_model=ResponseModel)
async def toggle_like(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    切换点赞状态，返回最新的点赞状态与点赞数
    """
    result = await services.likes.toggle_like(user_id, post_id)
    return to_response(result, response)


@router.get("/{post_id}/likes", response_model=ResponseModel)
async def likes_info(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.likes.likes_info(user_id, post_id)
    return to_response(result, response)


@router.get("/{post_id}/likes/count", response_model=ResponseModel)
async def like_count(post_id: str, response: Response, services: Services = Depends(get_services)):
    result = await services.likes.like_count(post_id)
    return to_response(result, response)


@router.get("/{post_id}/likes/me", response_model=ResponseModel)
async def user_liked(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.likes.user_liked(user_id, post_id)
    return to_response(result, response)
