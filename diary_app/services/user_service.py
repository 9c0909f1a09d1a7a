"""
用户服务
处理用户注册：表单校验、唯一性检查、密码哈希和默认头像
"""

from werkzeug.security import generate_password_hash
from diary_app.models.user import User
from diary_app.services.store_client import DataStoreClient, store_client
from diary_app.utils.config import settings
from diary_app.utils.errors import ValidationFailure
from diary_app.utils.logger import logger
from diary_app.utils.validators import validate_username, validate_email, validate_password


class UserService:
    """用户服务"""
    
    def __init__(self, client: DataStoreClient = None):
        self.client = client or store_client
    
    async def register(self, username: str, email: str, password: str, confirm_password: str) -> User:
        """
        注册新用户
        
        Args:
            username: 用户名
            email: 邮箱
            password: 密码
            confirm_password: 确认密码
            
        Returns:
            创建后的用户（包含存储分配的ID）
            
        Raises:
            ValidationFailure: 表单不合法或用户名/邮箱已被使用
        """
        username = (username or "").strip()
        
        if not validate_username(username):
            raise ValidationFailure("用户名不合法！只能使用字母、数字、下划线和连字符，长度3-20个字符")
        if not validate_email(email):
            raise ValidationFailure("邮箱格式不正确！例如: user@example.com")
        if not validate_password(password):
            raise ValidationFailure("密码至少6位且不能为空！")
        if password != confirm_password:
            raise ValidationFailure("两次输入的密码不一致！")
        
        if await self.client.find_users(username=username):
            raise ValidationFailure("用户名已存在！")
        if await self.client.find_users(email=email):
            raise ValidationFailure("邮箱已被使用！")
        
        user = User(
            username=username,
            email=email,
            password=generate_password_hash(password),
            avatar=settings.default_avatar_template.format(username=username)
        )
        created = await self.client.create_user(user)
        logger.info(f"用户注册成功: {username} ({created.id})")
        return created


# 创建全局用户服务实例
user_service = UserService()
