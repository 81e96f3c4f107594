"""
分类Schema模型
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Category(BaseModel):
    """分类实体"""
    id: str
    name: str
    image: Optional[str] = None
    createdAt: Optional[datetime] = None
