"""
个人资料Schema模型
"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileRole(str, Enum):
    """用户角色，创建后不可修改"""
    READER = "reader"
    WRITER = "writer"


class Profile(BaseModel):
    """个人资料实体"""
    id: str
    authorId: str
    role: ProfileRole = ProfileRole.READER
    name: str
    image: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    bio: Optional[str] = None
    createdAt: Optional[datetime] = None


class ProfileForm(BaseModel):
    """个人资料表单"""
    name: str = ""
    role: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    bio: Optional[str] = None
    removeImage: bool = False


class UserSummary(BaseModel):
    """管理后台的用户列表项"""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    image: Optional[str] = None
    createdAt: Optional[datetime] = None
