"""
文章Schema模型
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class PostStatus(str, Enum):
    """文章状态：三种状态之间可以任意切换"""
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


class Post(BaseModel):
    """文章实体"""
    id: str
    authorId: str
    profileId: Optional[str] = None
    slug: str
    status: PostStatus = PostStatus.PENDING
    title: str
    description: str = ""
    content: str = ""
    categoryId: Optional[str] = None
    categoryName: Optional[str] = None
    thumbnail: Optional[str] = None
    backgroundImages: List[str] = Field(default_factory=list)
    viewCount: int = 0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class AuthorInfo(BaseModel):
    """作者信息"""
    id: str
    name: str
    image: Optional[str] = None
    bio: Optional[str] = None


class CategoryInfo(BaseModel):
    """分类信息"""
    id: str
    name: str


class PostDetail(Post):
    """带作者、分类与互动数据的文章"""
    author: Optional[AuthorInfo] = None
    category: Optional[CategoryInfo] = None
    likes: int = 0
    userLiked: bool = False
    canEdit: Optional[bool] = None


class PostForm(BaseModel):
    """创建/更新文章的表单数据"""
    title: str = ""
    description: str = ""
    content: str = ""
    categoryId: str = ""
    slug: Optional[str] = None


class PostStatusUpdate(BaseModel):
    """更新文章状态请求模型"""
    status: str = Field(..., description="文章状态：pending / published / rejected")
