"""
认证接口
注册、登录、退出和获取当前用户
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends
from diary_app.api.deps import get_session, require_session
from diary_app.models.user import UserCreate, UserLogin
from diary_app.services.session_service import Session, session_manager
from diary_app.services.user_service import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_data(user) -> Dict[str, Any]:
    return user.to_response().model_dump(by_alias=True, mode="json")


@router.post("/register")
async def register(request: UserCreate) -> Dict[str, Any]:
    """注册新用户"""
    user = await user_service.register(
        request.username,
        request.email,
        request.password,
        request.confirm_password
    )
    return {"code": 0, "msg": "注册成功，请登录", "data": _user_data(user)}


@router.post("/login")
async def login(request: UserLogin) -> Dict[str, Any]:
    """登录并返回访问令牌"""
    session = await session_manager.login(request.username, request.password)
    return {
        "code": 0,
        "msg": "登录成功",
        "data": {"token": session.token, "user": _user_data(session.user)}
    }


@router.post("/logout")
async def logout(session: Session = Depends(get_session)) -> Dict[str, Any]:
    """退出登录（令牌由客户端丢弃）"""
    session_manager.logout(session)
    return {"code": 0, "msg": "已退出登录"}


@router.get("/me")
async def me(session: Session = Depends(require_session)) -> Dict[str, Any]:
    """获取当前登录用户"""
    return {"code": 0, "msg": "success", "data": _user_data(session.user)}
