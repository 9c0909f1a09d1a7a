"""
评论数据模型
定义评论相关的数据结构
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from .base import StoreModel, RecordId, utc_now

ANONYMOUS_NAME = "Anonymous"


class Comment(StoreModel):
    """评论模型，匿名评论的 user_id 为空"""
    
    id: Optional[RecordId] = None
    diary_id: RecordId = Field(alias="diaryId")
    user_id: Optional[RecordId] = Field(default=None, alias="userId")
    guest_name: str = Field(alias="guestName")
    content: str
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")


class CommentCreate(BaseModel):
    """发表评论请求模型"""
    content: str
    anonymous: bool = False
