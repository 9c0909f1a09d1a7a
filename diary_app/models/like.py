"""
点赞数据模型
每条记录表示一个用户对一篇日记的点赞
"""

from datetime import datetime
from typing import Optional
from pydantic import Field
from .base import StoreModel, RecordId, utc_now


class Like(StoreModel):
    """点赞记录模型"""
    
    id: Optional[RecordId] = None
    diary_id: RecordId = Field(alias="diaryId")
    user_id: RecordId = Field(alias="userId")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
