"""
互动状态服务
维护每篇日记对当前用户的点赞状态、点赞数和评论列表，先乐观更新本地状态再持久化，持久化失败时回滚
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from diary_app.models.base import same_id, utc_now
from diary_app.models.comment import Comment, ANONYMOUS_NAME
from diary_app.models.diary import Diary
from diary_app.models.user import User
from diary_app.services.authorization import Action, Decision, authorize, can_view
from diary_app.services.like_service import LikeStrategy, like_strategy
from diary_app.services.store_client import DataStoreClient, store_client
from diary_app.utils.errors import DiaryAppError, OperationPending, ValidationFailure
from diary_app.utils.logger import logger


class LikeStatus(str, Enum):
    """点赞操作状态机: IDLE -> PENDING -> COMMITTED | ROLLED_BACK"""
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class InteractionState:
    """单篇日记的互动状态"""
    
    def __init__(self, diary: Diary, liked: bool = False, comments: List[Comment] = None):
        self.diary = diary
        self.liked = liked
        self.like_count = diary.likes
        self.comments: List[Comment] = sorted(comments or [], key=lambda c: c.created_at, reverse=True)
        self.status = LikeStatus.IDLE
    
    def to_dict(self) -> Dict:
        return {
            "diaryId": self.diary.id,
            "liked": self.liked,
            "likes": self.like_count,
            "commentCount": len(self.comments),
            "status": self.status.value,
        }


class InteractionManager:
    """
    互动状态管理
    
    每次请求都从存储重新构建互动状态；只有正在持久化（PENDING）的状态
    会登记在 _in_flight 中，持久化结束后立即移除。
    """
    
    def __init__(self, client: DataStoreClient = None, strategy: LikeStrategy = None):
        self.client = client or store_client
        self.strategy = strategy or like_strategy
        self._in_flight: Dict[Tuple[str, Optional[str]], InteractionState] = {}
    
    @staticmethod
    def _key(diary: Diary, requester: Optional[User]) -> Tuple[str, Optional[str]]:
        return str(diary.id), (str(requester.id) if requester else None)
    
    async def state_for(self, diary: Diary, requester: Optional[User]) -> InteractionState:
        """
        获取日记的互动状态
        
        同一用户对同一日记有点赞正在持久化时返回该状态，否则从存储重新构建
        
        Args:
            diary: 日记快照
            requester: 当前用户
            
        Returns:
            互动状态
        """
        key = self._key(diary, requester)
        state = self._in_flight.get(key)
        if state is not None:
            return state
        
        liked = False
        if requester is not None and can_view(diary, requester):
            liked = await self.strategy.is_liked(diary.id, requester.id)
        comments = await self.client.list_comments(diary.id) if can_view(diary, requester) else []
        
        return InteractionState(diary, liked=liked, comments=comments)
    
    def forget(self, diary_id) -> None:
        """日记删除后清理状态"""
        self._in_flight = {k: v for k, v in self._in_flight.items() if k[0] != str(diary_id)}
    
    async def toggle_like(self, state: InteractionState, requester: Optional[User]) -> Decision:
        """
        切换点赞
        
        先在本地翻转点赞状态并调整点赞数，再调用持久化；
        持久化失败时恢复原值，状态置为 ROLLED_BACK 并抛出异常。
        
        Args:
            state: 互动状态
            requester: 当前用户
            
        Returns:
            权限判定结果，未通过时状态不变
            
        Raises:
            OperationPending: 上一次点赞还在持久化
            DiaryAppError: 持久化失败（本地状态已回滚）
        """
        decision = authorize(state.diary, requester, Action.LIKE)
        if not decision.allowed:
            logger.info(f"点赞被拒绝: diary={state.diary.id}, {decision.value}")
            return decision
        
        if state.status is LikeStatus.PENDING:
            raise OperationPending()
        
        key = self._key(state.diary, requester)
        previous = (state.liked, state.like_count)
        unliking = state.liked
        
        state.liked = not unliking
        state.like_count = max(0, state.like_count + (-1 if unliking else 1))
        state.status = LikeStatus.PENDING
        self._in_flight[key] = state
        
        try:
            if unliking:
                persisted = await self.strategy.unlike(state.diary.id, requester.id)
            else:
                persisted = await self.strategy.like(state.diary.id, requester.id)
        except DiaryAppError as e:
            state.liked, state.like_count = previous
            state.status = LikeStatus.ROLLED_BACK
            logger.error(f"点赞持久化失败，已回滚: diary={state.diary.id} - {e.msg}")
            raise
        finally:
            self._in_flight.pop(key, None)
        
        state.like_count = persisted
        state.diary = state.diary.model_copy(update={"likes": state.like_count})
        state.status = LikeStatus.COMMITTED
        logger.info(f"{'取消点赞' if unliking else '点赞'}成功: diary={state.diary.id}, likes={state.like_count}")
        return decision
    
    async def add_comment(self, state: InteractionState, requester: Optional[User], content: str,
                          display_as_anonymous: bool = False) -> Tuple[Decision, Optional[Comment]]:
        """
        发表评论
        
        Args:
            state: 互动状态
            requester: 当前用户
            content: 评论内容
            display_as_anonymous: 是否以 Anonymous 名义显示（此时不记录用户ID）
            
        Returns:
            (权限判定结果, 存储返回的评论)，未通过时评论为None
        """
        decision = authorize(state.diary, requester, Action.COMMENT)
        if not decision.allowed:
            logger.info(f"评论被拒绝: diary={state.diary.id}, {decision.value}")
            return decision, None
        
        if not content or not content.strip():
            raise ValidationFailure("评论内容不能为空")
        
        comment = Comment(
            diary_id=state.diary.id,
            user_id=None if display_as_anonymous else requester.id,
            guest_name=ANONYMOUS_NAME if display_as_anonymous else requester.username,
            content=content.strip(),
            created_at=utc_now()
        )
        created = await self.client.create_comment(comment)
        state.comments.insert(0, created)
        return decision, created
    
    async def delete_comment(self, state: InteractionState, comment: Comment,
                             requester: Optional[User]) -> Decision:
        """
        删除评论，评论作者或日记作者可删
        
        Raises:
            DiaryAppError: 删除失败（评论已恢复到原位置）
        """
        decision = authorize(state.diary, requester, Action.DELETE_COMMENT, comment)
        if not decision.allowed:
            logger.info(f"删除评论被拒绝: comment={comment.id}, {decision.value}")
            return decision
        
        index = next((i for i, c in enumerate(state.comments) if same_id(c.id, comment.id)), None)
        if index is not None:
            state.comments.pop(index)
        
        try:
            await self.client.delete_comment(comment.id)
        except DiaryAppError:
            if index is not None:
                state.comments.insert(index, comment)
            raise
        return decision


# 创建全局互动状态管理实例
interaction_manager = InteractionManager()
