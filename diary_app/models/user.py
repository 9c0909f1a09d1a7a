"""
用户数据模型
定义用户相关的数据结构
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from .base import StoreModel, RecordId, utc_now


class User(StoreModel):
    """用户模型（password 字段保存的是加盐哈希）"""
    
    id: Optional[RecordId] = None
    username: str
    email: str
    password: str = Field(default="", repr=False)
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    
    def to_response(self) -> "UserResponse":
        """转换为不含密码的响应模型"""
        return UserResponse(
            id=self.id,
            username=self.username,
            email=self.email,
            avatar=self.avatar,
            created_at=self.created_at
        )


class UserCreate(BaseModel):
    """注册请求模型"""
    username: str
    email: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")
    
    class Config:
        populate_by_name = True


class UserLogin(BaseModel):
    """登录请求模型"""
    username: str
    password: str


class UserResponse(StoreModel):
    """用户响应模型"""
    id: Optional[RecordId] = None
    username: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")
