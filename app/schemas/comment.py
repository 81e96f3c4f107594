"""
评论Schema模型
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Comment(BaseModel):
    """评论实体"""
    id: str
    postId: str
    userId: str
    content: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CommentAuthor(BaseModel):
    """评论作者"""
    id: str
    name: str
    image: Optional[str] = None


class CommentWithAuthor(Comment):
    author: Optional[CommentAuthor] = None


class CommentWithContext(CommentWithAuthor):
    """管理后台使用：附带文章标题与链接"""
    postTitle: Optional[str] = None
    postSlug: Optional[str] = None


class CommentCreate(BaseModel):
    """创建评论请求模型"""
    content: str = Field("", description="评论内容")


class CommentUpdate(BaseModel):
    """更新评论请求模型"""
    content: str = Field("", description="评论内容")


class UserCommentCount(BaseModel):
    userId: str
    name: Optional[str] = None
    image: Optional[str] = None
    commentCount: int = 0
