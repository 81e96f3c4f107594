"""
文章管理API
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from app.schemas.common import ResponseModel
from app.schemas.post import PostForm, PostStatusUpdate
from app.services.container import Services, get_services
from app.utils.auth import get_current_user_id
from app.utils.responses import read_upload, read_uploads, to_response

router = APIRouter(prefix="/api", tags=["文章管理"])


def post_form(
    title: str = Form(""),
    description: str = Form(""),
    content: str = Form(""),
    categoryId: str = Form(""),
    slug: Optional[str] = Form(None),
) -> PostForm:
    return PostForm(title=title, description=description, content=content, categoryId=categoryId, slug=slug)


@router.get("/posts", response_model=ResponseModel)
async def list_published_posts(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    获取已发布的文章列表
    """
    result = await services.posts.list_published_posts(user_id)
    return to_response(result, response)


@router.get("/posts/mine", response_model=ResponseModel)
async def list_current_user_posts(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    作者后台：当前用户的全部文章
    """
    result = await services.posts.list_current_user_posts(user_id)
    return to_response(result, response)


@router.get("/admin/posts", response_model=ResponseModel)
async def list_posts_for_admin(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.posts.list_posts_for_admin(user_id)
    return to_response(result, response)


@router.get("/categories/{category_name}/posts", response_model=ResponseModel)
async def list_posts_by_category(
    category_name: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.posts.list_posts_by_category(category_name, user_id)
    return to_response(result, response)


@router.get("/posts/id/{post_id}/edit", response_model=ResponseModel)
async def get_post_for_edit(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    获取待编辑的文章，只有作者或管理员可以访问
    """
    result = await services.posts.get_post_for_edit(user_id, post_id)
    return to_response(result, response)


@router.get("/posts/{slug}", response_model=ResponseModel)
async def get_post_by_slug(
    slug: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    按slug获取文章详情（含作者、分类与点赞信息）
    """
    result = await services.posts.get_post_by_slug(slug, user_id)
    return to_response(result, response)


@router.post("/posts/{slug}/views", response_model=ResponseModel)
async def increment_views(slug: str, response: Response, services: Services = Depends(get_services)):
    result = await services.posts.increment_views(slug)
    return to_response(result, response)


@router.post("/posts", response_model=ResponseModel)
async def create_post(
    response: Response,
    form: PostForm = Depends(post_form),
    thumbnail: Optional[UploadFile] = File(None),
    backgroundImages: Optional[List[UploadFile]] = File(None),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    创建文章，新文章状态为待审核
    """
    result = await services.posts.create_post(
        user_id, form,
        thumbnail=await read_upload(thumbnail),
        background_images=await read_uploads(backgroundImages),
    )
    return to_response(result, response)


@router.put("/posts/{post_id}", response_model=ResponseModel)
async def update_post(
    post_id: str,
    response: Response,
    form: PostForm = Depends(post_form),
    thumbnail: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    更新文章内容，slug与状态保持不变
    """
    result = await services.posts.update_post(user_id, post_id, form, thumbnail=await read_upload(thumbnail))
    return to_response(result, response)


@router.patch("/posts/{post_id}/status", response_model=ResponseModel)
async def update_post_status(
    post_id: str,
    payload: PostStatusUpdate,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.posts.update_post_status(user_id, post_id, payload.status)
    return to_response(result, response)


@router.delete("/posts/{post_id}", response_model=ResponseModel)
async def delete_post(
    post_id: str,
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    删除文章：作者只能删除未发布的文章
    """
    result = await services.posts.delete_post(user_id, post_id)
    return to_response(result, response)


@router.post("/upload-image", response_model=ResponseModel)
async def upload_image(
    response: Response,
    file: UploadFile = File(...),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    编辑器图片上传，返回图片URL
    """
    upload = await read_upload(file)
    if upload is None:
        response.status_code = 400
        return ResponseModel(code=400, success=False, message="No file provided", errorKind="ValidationFailed")
    result = await services.posts.upload_image(user_id, upload)
    return to_response(result, response)


@router.post("/upload-images", response_model=ResponseModel)
async def upload_images(
    response: Response,
    files: List[UploadFile] = File(...),
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.posts.upload_images(user_id, await read_uploads(files))
    return to_response(result, response)
