"""
日记接口
首页信息流、我的日记、日记增删改查、点赞和评论
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Query
from diary_app.api.deps import get_session, require_session
from diary_app.models.base import same_id
from diary_app.models.comment import CommentCreate
from diary_app.models.diary import DiaryCreate, DiaryUpdate
from diary_app.services.authorization import Action, raise_for
from diary_app.services.diary_service import diary_service
from diary_app.services.feed_service import feed_service
from diary_app.services.interaction_service import interaction_manager
from diary_app.services.session_service import Session
from diary_app.services.store_client import store_client
from diary_app.utils.errors import NotFound

router = APIRouter(prefix="/api/diaries", tags=["diaries"])


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


@router.get("")
async def list_feed(session: Session = Depends(get_session)) -> Dict[str, Any]:
    """首页信息流"""
    items = await feed_service.list_visible(session.user)
    return {"code": 0, "msg": "success", "data": [item.to_dict() for item in items]}


@router.get("/mine")
async def list_mine(visibility: str = Query("all"),
                    session: Session = Depends(require_session)) -> Dict[str, Any]:
    """我的日记，支持 all/public/private 筛选"""
    diaries = await feed_service.list_owned(session.user_id)
    filtered = feed_service.filter_visibility(diaries, visibility)
    return {
        "code": 0,
        "msg": "success",
        "data": {
            "diaries": [_dump(d) for d in filtered],
            "stats": feed_service.owned_stats(diaries)
        }
    }


@router.post("")
async def create_diary(request: DiaryCreate, session: Session = Depends(require_session)) -> Dict[str, Any]:
    """写新日记"""
    diary = await diary_service.create(session.user, request.title, request.content, request.is_public)
    return {"code": 0, "msg": "日记已创建", "data": _dump(diary)}


@router.get("/{diary_id}")
async def get_diary(diary_id: str, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """日记详情"""
    detail = await diary_service.get_detail(diary_id, session.user)
    return {"code": 0, "msg": "success", "data": detail.to_dict()}


@router.patch("/{diary_id}")
async def update_diary(diary_id: str, request: DiaryUpdate,
                       session: Session = Depends(get_session)) -> Dict[str, Any]:
    """编辑日记"""
    diary = await diary_service.update(
        diary_id,
        session.user,
        title=request.title,
        content=request.content,
        is_public=request.is_public
    )
    return {"code": 0, "msg": "日记已更新", "data": _dump(diary)}


@router.delete("/{diary_id}")
async def delete_diary(diary_id: str, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """删除日记"""
    await diary_service.delete(diary_id, session.user)
    return {"code": 0, "msg": "日记已删除"}


@router.post("/{diary_id}/like")
async def toggle_like(diary_id: str, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """点赞/取消点赞"""
    diary = await store_client.get_diary(diary_id)
    state = await interaction_manager.state_for(diary, session.user)
    decision = await interaction_manager.toggle_like(state, session.user)
    raise_for(decision, Action.LIKE)
    return {"code": 0, "msg": "success", "data": state.to_dict()}


@router.post("/{diary_id}/comments")
async def add_comment(diary_id: str, request: CommentCreate,
                      session: Session = Depends(get_session)) -> Dict[str, Any]:
    """发表评论"""
    diary = await store_client.get_diary(diary_id)
    state = await interaction_manager.state_for(diary, session.user)
    decision, comment = await interaction_manager.add_comment(
        state, session.user, request.content, request.anonymous
    )
    raise_for(decision, Action.COMMENT)
    return {"code": 0, "msg": "评论已发表", "data": _dump(comment)}


@router.delete("/{diary_id}/comments/{comment_id}")
async def delete_comment(diary_id: str, comment_id: str,
                         session: Session = Depends(get_session)) -> Dict[str, Any]:
    """删除评论"""
    diary = await store_client.get_diary(diary_id)
    comment = await store_client.get_comment(comment_id)
    if not same_id(comment.diary_id, diary.id):
        raise NotFound("评论不存在")
    
    state = await interaction_manager.state_for(diary, session.user)
    decision = await interaction_manager.delete_comment(state, comment, session.user)
    raise_for(decision, Action.DELETE_COMMENT)
    return {"code": 0, "msg": "评论已删除"}
