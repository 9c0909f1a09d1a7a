"""
可见性与权限判定
根据日记、请求者（未登录为None）和操作类型判定是否允许，纯函数，无副作用
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel
from diary_app.models.base import same_id
from diary_app.models.comment import Comment
from diary_app.models.diary import Diary
from diary_app.models.user import User
from diary_app.utils.errors import AuthenticationRequired, PermissionDenied, ValidationFailure


class Action(str, Enum):
    """可判定的操作"""
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"
    LIKE = "like"
    COMMENT = "comment"
    DELETE_COMMENT = "delete_comment"


class Decision(str, Enum):
    """判定结果"""
    ALLOWED = "allowed"
    DENIED_NEEDS_AUTH = "denied_needs_auth"
    DENIED_FORBIDDEN = "denied_forbidden"
    
    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOWED


class Affordances(BaseModel):
    """前端可展示的交互入口"""
    can_like: bool = False
    can_comment: bool = False
    can_edit: bool = False
    can_delete: bool = False
    show_interactions: bool = False


def is_owner(diary: Diary, requester: Optional[User]) -> bool:
    """请求者是否为日记作者"""
    return requester is not None and same_id(requester.id, diary.user_id)


def can_view(diary: Diary, requester: Optional[User]) -> bool:
    """公开日记所有人可见，私密日记只有作者可见"""
    return diary.is_public or is_owner(diary, requester)


def _denied(requester: Optional[User]) -> Decision:
    if requester is None:
        return Decision.DENIED_NEEDS_AUTH
    return Decision.DENIED_FORBIDDEN


def authorize(diary: Diary, requester: Optional[User], action: Action,
              comment: Optional[Comment] = None) -> Decision:
    """
    判定操作是否允许
    
    规则按顺序匹配：
    - VIEW: 公开日记或作者本人
    - EDIT/DELETE: 仅作者本人
    - LIKE: 已登录且（公开日记或作者本人）
    - COMMENT: 已登录且日记公开，作者也不能评论自己的私密日记
    - DELETE_COMMENT: 已登录且为评论作者或日记作者，匿名评论只有日记作者能删
    
    Args:
        diary: 日记快照
        requester: 当前用户，未登录为None
        action: 操作类型
        comment: DELETE_COMMENT 时的目标评论
        
    Returns:
        判定结果
    """
    if action is Action.VIEW:
        return Decision.ALLOWED if can_view(diary, requester) else _denied(requester)
    
    if action in (Action.EDIT, Action.DELETE):
        return Decision.ALLOWED if is_owner(diary, requester) else _denied(requester)
    
    if requester is None:
        return Decision.DENIED_NEEDS_AUTH
    
    if action is Action.LIKE:
        return Decision.ALLOWED if can_view(diary, requester) else Decision.DENIED_FORBIDDEN
    
    if action is Action.COMMENT:
        return Decision.ALLOWED if diary.is_public else Decision.DENIED_FORBIDDEN
    
    if action is Action.DELETE_COMMENT:
        if comment is None:
            raise ValidationFailure("删除评论需要指定评论")
        if same_id(requester.id, comment.user_id) or is_owner(diary, requester):
            return Decision.ALLOWED
        return Decision.DENIED_FORBIDDEN
    
    raise ValidationFailure(f"未知操作: {action}")


DENIAL_MESSAGES = {
    Action.VIEW: "这篇日记是私密的，你没有权限查看",
    Action.EDIT: "你没有权限编辑这篇日记",
    Action.DELETE: "你没有权限删除这篇日记",
    Action.LIKE: "不能点赞私密日记",
    Action.COMMENT: "不能评论私密日记",
    Action.DELETE_COMMENT: "你没有权限删除这条评论",
}


def require(diary: Diary, requester: Optional[User], action: Action,
            comment: Optional[Comment] = None) -> None:
    """
    判定失败时抛出异常，供服务层使用
    
    Raises:
        AuthenticationRequired: 未登录
        PermissionDenied: 已登录但无权限
    """
    raise_for(authorize(diary, requester, action, comment), action)


def raise_for(decision: Decision, action: Action) -> None:
    """把拒绝结果转换为异常，允许时什么都不做"""
    if decision is Decision.DENIED_NEEDS_AUTH:
        raise AuthenticationRequired()
    if decision is Decision.DENIED_FORBIDDEN:
        raise PermissionDenied(DENIAL_MESSAGES[action])


def affordances(diary: Diary, requester: Optional[User]) -> Affordances:
    """计算当前用户对日记可用的交互入口，私密日记对非作者全部关闭"""
    if not can_view(diary, requester):
        return Affordances()
    owner = is_owner(diary, requester)
    return Affordances(
        can_like=authorize(diary, requester, Action.LIKE).allowed,
        can_comment=authorize(diary, requester, Action.COMMENT).allowed,
        can_edit=owner,
        can_delete=owner,
        show_interactions=True
    )
