"""
会话服务
管理当前登录用户，登录后签发JWT令牌，页面刷新后可通过令牌恢复会话
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from werkzeug.security import check_password_hash
from diary_app.models.user import User
from diary_app.services.store_client import DataStoreClient, store_client
from diary_app.utils.config import settings
from diary_app.utils.errors import AuthenticationFailed, NotFound, ValidationFailure
from diary_app.utils.logger import logger
from diary_app.utils.validators import validate_username, validate_password


class Session:
    """会话对象，显式传递给权限判定和信息流组装"""
    
    def __init__(self, user: Optional[User] = None, token: Optional[str] = None):
        self.user = user
        self.token = token
    
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
    
    @property
    def user_id(self):
        return self.user.id if self.user else None
    
    @classmethod
    def anonymous(cls) -> "Session":
        return cls()
    
    def __repr__(self) -> str:
        name = self.user.username if self.user else "anonymous"
        return f"Session({name})"


class SessionManager:
    """会话管理"""
    
    def __init__(self, client: DataStoreClient = None):
        self.client = client or store_client
    
    def issue_token(self, user: User) -> str:
        """为用户签发访问令牌"""
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
        to_encode = {"sub": str(user.id), "exp": expire}
        return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    
    async def login(self, username: str, password: str) -> Session:
        """
        用户登录
        
        Args:
            username: 用户名（首尾空白会被去掉）
            password: 密码
            
        Returns:
            已登录的会话
            
        Raises:
            ValidationFailure: 用户名或密码格式不合法
            AuthenticationFailed: 用户名或密码错误
        """
        username = (username or "").strip()
        if not validate_username(username):
            raise ValidationFailure("用户名不合法！只能使用字母、数字、下划线和连字符，长度3-20个字符")
        if not validate_password(password):
            raise ValidationFailure("密码至少6位且不能为空！")
        
        users = await self.client.find_users(username=username)
        user = next((u for u in users if u.username == username), None)
        if user is None or not user.password or not check_password_hash(user.password, password):
            logger.warning(f"登录失败: {username}")
            raise AuthenticationFailed()
        
        logger.info(f"用户登录成功: {username}")
        return Session(user=user, token=self.issue_token(user))
    
    async def restore(self, token: Optional[str]) -> Session:
        """
        根据令牌恢复会话，令牌缺失、无效或过期时返回匿名会话
        
        Args:
            token: 访问令牌
            
        Returns:
            会话对象
        """
        if not token:
            return Session.anonymous()
        
        try:
            payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
            user_id = payload["sub"]
        except (JWTError, KeyError) as e:
            logger.warning(f"令牌无效或已过期: {e}")
            return Session.anonymous()
        
        try:
            user = await self.client.get_user(user_id)
        except NotFound:
            logger.warning(f"令牌对应的用户不存在: {user_id}")
            return Session.anonymous()
        
        return Session(user=user, token=token)
    
    def logout(self, session: Session) -> Session:
        """退出登录，返回匿名会话"""
        if session.user:
            logger.info(f"用户退出登录: {session.user.username}")
        return Session.anonymous()


# 创建全局会话管理实例
session_manager = SessionManager()
