"""
登录认证API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from app.core.config import Settings, get_settings
from app.schemas.auth import LoginResult, OTPRequest, OTPVerifyRequest
from app.schemas.common import ResponseModel
from app.services.container import Services, get_services
from app.utils.auth import client_ip, get_current_user_id
from app.utils.responses import to_response

router = APIRouter(prefix="/api", tags=["登录认证"])


def set_login_cookies(response: Response, settings: Settings, login: LoginResult) -> None:
    """
    写入会话Cookie、用户ID与角色Cookie
    """
    options = {
        "max_age": settings.COOKIE_MAX_AGE,
        "path": "/",
        "samesite": "lax",
        "secure": settings.COOKIE_SECURE,
    }
    response.set_cookie(settings.SESSION_COOKIE, login.session.token, httponly=True, **options)
    response.set_cookie(settings.USER_ID_COOKIE, login.session.userId, httponly=True, **options)
    if login.role:
        response.set_cookie(settings.USER_ROLE_COOKIE, login.role, **options)


def set_role_cookie(response: Response, settings: Settings, role: str) -> None:
    response.set_cookie(
        settings.USER_ROLE_COOKIE, role,
        max_age=settings.COOKIE_MAX_AGE, path="/", samesite="lax", secure=settings.COOKIE_SECURE,
    )


def clear_login_cookies(response: Response, settings: Settings) -> None:
    for name in (settings.SESSION_COOKIE, settings.USER_ID_COOKIE, settings.USER_ROLE_COOKIE):
        response.delete_cookie(name, path="/")


@router.post("/auth/otp", response_model=ResponseModel)
async def send_otp(
    payload: OTPRequest,
    request: Request,
    response: Response,
    services: Services = Depends(get_services),
):
    """
    发送登录验证码
    """
    result = await services.auth.send_otp(payload.email, client_ip(request))
    return to_response(result, response)


@router.post("/auth/otp/verify", response_model=ResponseModel)
async def verify_otp(
    payload: OTPVerifyRequest,
    request: Request,
    response: Response,
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    """
    验证验证码并登录
    """
    result = await services.auth.verify_otp(payload.tempToken, payload.secret, client_ip(request))
    if result.success:
        set_login_cookies(response, settings, result.data)
    return to_response(result, response)


@router.post("/admin/auth/otp", response_model=ResponseModel)
async def send_admin_otp(
    payload: OTPRequest,
    request: Request,
    response: Response,
    services: Services = Depends(get_services),
):
    result = await services.auth.send_admin_otp(payload.email, client_ip(request))
    return to_response(result, response)


@router.post("/admin/auth/otp/verify", response_model=ResponseModel)
async def verify_admin_otp(
    payload: OTPVerifyRequest,
    request: Request,
    response: Response,
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    """
    管理员登录：验证码通过且在管理员集合中
    """
    result = await services.auth.verify_admin_otp(payload.tempToken, payload.secret, client_ip(request))
    if result.success:
        set_login_cookies(response, settings, result.data)
    return to_response(result, response)


@router.post("/auth/logout", response_model=ResponseModel)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    """
    退出登录，清除所有会话Cookie
    """
    clear_login_cookies(response, settings)
    return ResponseModel(code=200, message="Logged out", data={"redirectPath": "/login"})


@router.get("/admin/me", response_model=ResponseModel)
async def current_admin_profile(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    result = await services.auth.current_admin_profile(user_id)
    return to_response(result, response)


@router.get("/admin/debug", response_model=ResponseModel)
async def debug_admin_access(
    response: Response,
    services: Services = Depends(get_services),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    排查管理员权限：返回当前用户ID与管理员判定结果
    """
    result = await services.posts.debug_admin_access(user_id)
    return to_response(result, response)
