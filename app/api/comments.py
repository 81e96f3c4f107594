"""
评论API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Response

from app.schemas.comment import CommentCreate, CommentUpdate
from app.schemas.common import ResponseModel
from app.services.container import Services, get_services
from app.utils.auth import get_current_user_id
from app.utils.responses import to_response

router = APIRouter(prefix="/api", tags=["评论"])


@router.get("/posts/{post_id}/comments", response_model=ResponseModel)
async def list_comments(post_id: str, response: Response, services: Services = Depends(get_services)):
    """
    获取文章评论（含评论者信息），按时间正序
    """
    result = await services.comments.list_comments_with_authors(post_id)
    return to_response(result, response)


@router.get("/posts/{post_id}/comments/count", response_model=ResponseModel)
async def comment_count(post_id: str, response: Response, services: Services = Depends(get_services)):
    result = await services.comments.comment_count(post_id)
    return to_response(result, response)


@router.post("/posts/{post_id}/comments", response_model=ResponseModel)
async def create_comment(
    post_id: str,
    payload: CommentCreate,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.comments.create_comment(user_id, post_id, payload.content)
    return to_response(result, response)


@router.put("/comments/{comment_id}", response_model=ResponseModel)
async def update_comment(
    comment_id: str,
    payload: CommentUpdate,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.comments.update_comment(user_id, comment_id, payload.content)
    return to_response(result, response)


@router.delete("/comments/{comment_id}", response_model=ResponseModel)
async def delete_comment(
    comment_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    删除评论：评论者本人或管理员
    """
    result = await services.comments.delete_comment(user_id, comment_id)
    return to_response(result, response)


@router.get("/admin/comments", response_model=ResponseModel)
async def list_all_comments(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.comments.list_all_comments(user_id)
    return to_response(result, response)


@router.delete("/admin/comments/{comment_id}", response_model=ResponseModel)
async def admin_delete_comment(
    comment_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.comments.admin_delete_comment(user_id, comment_id)
    return to_response(result, response)


@router.get("/admin/comment-users", response_model=ResponseModel)
async def users_with_comment_counts(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.comments.users_with_comment_counts(user_id)
    return to_response(result, response)
