"""
日记数据模型
定义日记相关的数据结构
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from .base import StoreModel, RecordId, utc_now


class Diary(StoreModel):
    """日记模型"""
    
    id: Optional[RecordId] = None
    user_id: RecordId = Field(alias="userId")
    title: str = ""
    content: str = ""
    is_public: bool = Field(default=False, alias="isPublic")
    likes: int = 0
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")
    
    @field_validator("likes", mode="before")
    @classmethod
    def _clamp_likes(cls, value):
        """点赞数缺省为0且不能为负"""
        if value is None:
            return 0
        return max(0, int(value))


class DiaryCreate(BaseModel):
    """创建日记请求模型"""
    title: str
    content: str
    is_public: bool = Field(default=False, alias="isPublic")
    
    class Config:
        populate_by_name = True


class DiaryUpdate(BaseModel):
    """更新日记请求模型"""
    title: Optional[str] = None
    content: Optional[str] = None
    is_public: Optional[bool] = Field(default=None, alias="isPublic")
    
    class Config:
        populate_by_name = True
