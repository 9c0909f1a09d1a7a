"""
接口依赖
从请求头解析访问令牌并恢复会话
"""

from typing import Optional
from fastapi import Header
from diary_app.services.session_service import Session, session_manager
from diary_app.utils.errors import AuthenticationRequired


def _extract_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_session(authorization: Optional[str] = Header(None)) -> Session:
    """当前会话，未携带令牌时为匿名会话"""
    return await session_manager.restore(_extract_token(authorization))


async def require_session(authorization: Optional[str] = Header(None)) -> Session:
    """需要登录的接口使用"""
    session = await get_session(authorization)
    if not session.is_authenticated:
        raise AuthenticationRequired()
    return session
