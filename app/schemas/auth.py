"""
认证相关Schema
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class User(BaseModel):
    """用户实体"""
    id: str
    email: str
    createdAt: Optional[datetime] = None


class LoginCode(BaseModel):
    """登录验证码实体"""
    id: str
    userId: str
    code: str
    expireAt: datetime
    used: bool = False


class OTPRequest(BaseModel):
    """发送验证码请求"""
    email: str = ""


class OTPVerifyRequest(BaseModel):
    """验证码验证请求"""
    tempToken: str = ""
    secret: str = ""


class SessionInfo(BaseModel):
    """登录会话"""
    userId: str
    token: str
    expire: datetime


class LoginResult(BaseModel):
    """登录结果"""
    session: SessionInfo
    hasProfile: bool = False
    role: Optional[str] = None
    redirectPath: str = "/profile/create"
