"""
点赞与收藏Schema模型
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Like(BaseModel):
    """点赞实体"""
    id: str
    postId: str
    userId: str


class LikesInfo(BaseModel):
    """点赞汇总"""
    likeCount: int = 0
    userLiked: bool = False


class SavedPost(BaseModel):
    """收藏实体"""
    id: str
    postId: str
    userId: str
    createdAt: Optional[datetime] = None
