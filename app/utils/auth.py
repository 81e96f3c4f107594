"""
认证工具函数
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Mapping
from jose import JWTError, jwt
from fastapi import Depends, Request
from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SESSION_TOKEN = "session"
TEMP_TOKEN = "otp"


def create_access_token(
    settings: Settings,
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    创建JWT访问token

    Args:
        data: 要编码到token中的数据
        expires_delta: token过期时间增量，默认使用配置中的时间

    Returns:
        str: JWT token字符串
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    to_encode.setdefault("typ", SESSION_TOKEN)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(settings: Settings, token: str, token_type: str = SESSION_TOKEN) -> Optional[Dict[str, Any]]:
    """
    验证JWT token

    Returns:
        Dict: token中的payload数据，签名无效、过期或类型不符时返回None
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("typ") != token_type:
        return None
    return payload


def create_temp_token(settings: Settings, user_id: str) -> str:
    """
    创建验证码登录用的临时token，避免把用户ID直接暴露给客户端
    """
    return create_access_token(
        settings,
        {"sub": user_id, "typ": TEMP_TOKEN},
        expires_delta=timedelta(minutes=settings.TEMP_TOKEN_EXPIRE_MINUTES),
    )


def verify_temp_token(settings: Settings, token: str) -> Optional[str]:
    payload = verify_token(settings, token, TEMP_TOKEN)
    return payload.get("sub") if payload else None


def resolve_user_id(settings: Settings, cookies: Mapping[str, str]) -> Optional[str]:
    """
    从Cookie中解析当前用户ID

    优先使用会话Cookie；会话Cookie缺失或无效时，退回到明文的 user-id Cookie。
    user-id Cookie 只做存在性检查，不做签名校验。
    """
    session_token = cookies.get(settings.SESSION_COOKIE)
    if session_token:
        payload = verify_token(settings, session_token)
        if payload and payload.get("sub"):
            return str(payload["sub"])
        logger.debug("invalid session cookie, falling back to %s", settings.USER_ID_COOKIE)
    return cookies.get(settings.USER_ID_COOKIE) or None


async def get_current_user_id(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """
    获取当前用户ID依赖，未登录时返回None，由服务层返回 NotAuthenticated
    """
    return resolve_user_id(settings, request.cookies)


def client_ip(request: Request) -> str:
    """获取客户端IP，用于限流"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"
