"""
信息流服务
组装首页和"我的日记"列表：合并日记、作者信息和评论，按可见性过滤并按创建时间倒序
"""

import asyncio
from datetime import timezone
from typing import List, Dict, Any, Optional
from diary_app.models.base import RecordId
from diary_app.models.comment import Comment
from diary_app.models.diary import Diary
from diary_app.models.user import User
from diary_app.services.authorization import can_view
from diary_app.services.store_client import DataStoreClient, store_client
from diary_app.utils.errors import NotFound, ValidationFailure
from diary_app.utils.logger import logger

VISIBILITY_FILTERS = ("all", "public", "private")


def _recency_key(diary: Diary):
    created = diary.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


def sort_by_recency(diaries: List[Diary]) -> List[Diary]:
    """按创建时间倒序排列"""
    return sorted(diaries, key=_recency_key, reverse=True)


class FeedItem:
    """信息流条目"""
    
    def __init__(self, diary: Diary, author: Optional[User], comments: List[Comment]):
        self.diary = diary
        self.author = author
        self.comments = comments
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "diary": self.diary.model_dump(by_alias=True, mode="json"),
            "author": self.author.to_response().model_dump(by_alias=True, mode="json") if self.author else None,
            "comments": [c.model_dump(by_alias=True, mode="json") for c in self.comments],
            "commentCount": len(self.comments),
        }


class FeedService:
    """信息流服务"""
    
    def __init__(self, client: DataStoreClient = None):
        self.client = client or store_client
    
    async def _fetch_author(self, user_id: RecordId) -> Optional[User]:
        try:
            return await self.client.get_user(user_id)
        except NotFound:
            logger.warning(f"日记作者不存在: {user_id}")
            return None
    
    async def list_visible(self, requester: Optional[User]) -> List[FeedItem]:
        """
        首页信息流
        
        公开日记所有人可见，私密日记只对作者本人展示；
        只有公开日记会加载评论。作者和评论并发查询。
        
        Args:
            requester: 当前用户，未登录为None
            
        Returns:
            按创建时间倒序的信息流条目
        """
        diaries = await self.client.list_diaries()
        visible = sort_by_recency([d for d in diaries if can_view(d, requester)])
        
        user_ids = list({str(d.user_id): d.user_id for d in visible}.values())
        authors = await asyncio.gather(*(self._fetch_author(uid) for uid in user_ids))
        authors_by_id = {str(uid): author for uid, author in zip(user_ids, authors)}
        
        public_diaries = [d for d in visible if d.is_public]
        comment_lists = await asyncio.gather(*(self.client.list_comments(d.id) for d in public_diaries))
        comments_by_diary = {str(d.id): comments for d, comments in zip(public_diaries, comment_lists)}
        
        logger.info(f"信息流组装完成: {len(visible)}/{len(diaries)} 篇可见")
        return [
            FeedItem(d, authors_by_id.get(str(d.user_id)), comments_by_diary.get(str(d.id), []))
            for d in visible
        ]
    
    async def list_owned(self, user_id: RecordId, visibility: str = "all") -> List[Diary]:
        """
        获取用户自己的日记
        
        Args:
            user_id: 用户ID
            visibility: all / public / private
            
        Returns:
            按创建时间倒序的日记列表
        """
        if visibility not in VISIBILITY_FILTERS:
            raise ValidationFailure(f"不支持的筛选条件: {visibility}")
        
        diaries = sort_by_recency(await self.client.list_diaries(userId=user_id))
        return self.filter_visibility(diaries, visibility)
    
    @staticmethod
    def filter_visibility(diaries: List[Diary], visibility: str) -> List[Diary]:
        """按公开/私密筛选"""
        if visibility not in VISIBILITY_FILTERS:
            raise ValidationFailure(f"不支持的筛选条件: {visibility}")
        if visibility == "public":
            return [d for d in diaries if d.is_public]
        if visibility == "private":
            return [d for d in diaries if not d.is_public]
        return diaries
    
    @staticmethod
    def owned_stats(diaries: List[Diary]) -> Dict[str, int]:
        """统计日记总数、公开数、私密数和总点赞数"""
        return {
            "total": len(diaries),
            "public": sum(1 for d in diaries if d.is_public),
            "private": sum(1 for d in diaries if not d.is_public),
            "totalLikes": sum(d.likes for d in diaries),
        }


# 创建全局信息流服务实例
feed_service = FeedService()
