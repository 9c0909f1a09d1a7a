"""
日记服务
管理日记的创建、查看、更新和删除，所有操作先经过权限判定
"""

import asyncio
from typing import Optional, Dict, Any, List
from diary_app.models.base import RecordId, utc_now
from diary_app.models.comment import Comment
from diary_app.models.diary import Diary
from diary_app.models.user import User
from diary_app.services.authorization import Action, Affordances, affordances, require
from diary_app.services.interaction_service import InteractionManager, interaction_manager
from diary_app.services.store_client import DataStoreClient, store_client
from diary_app.utils.errors import AuthenticationRequired, NotFound, ValidationFailure
from diary_app.utils.logger import logger


class DiaryDetail:
    """日记详情"""
    
    def __init__(self, diary: Diary, author: Optional[User], comments: List[Comment],
                 permissions: Affordances, liked: bool = False):
        self.diary = diary
        self.author = author
        self.comments = comments
        self.permissions = permissions
        self.liked = liked
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "diary": self.diary.model_dump(by_alias=True, mode="json"),
            "author": self.author.to_response().model_dump(by_alias=True, mode="json") if self.author else None,
            "comments": [c.model_dump(by_alias=True, mode="json") for c in self.comments],
            "liked": self.liked,
            "permissions": self.permissions.model_dump(),
        }


class DiaryService:
    """日记服务"""
    
    def __init__(self, client: DataStoreClient = None, interactions: InteractionManager = None):
        self.client = client or store_client
        self.interactions = interactions or interaction_manager
    
    async def _fetch_author(self, user_id: RecordId) -> Optional[User]:
        try:
            return await self.client.get_user(user_id)
        except NotFound:
            logger.warning(f"日记作者不存在: {user_id}")
            return None
    
    async def create(self, requester: Optional[User], title: str, content: str, is_public: bool = False) -> Diary:
        """
        创建日记
        
        Args:
            requester: 当前用户
            title: 标题
            content: 内容
            is_public: 是否公开
            
        Returns:
            创建后的日记
        """
        if requester is None:
            raise AuthenticationRequired()
        if not title or not title.strip():
            raise ValidationFailure("标题不能为空")
        if not content or not content.strip():
            raise ValidationFailure("内容不能为空")
        
        now = utc_now()
        diary = Diary(
            user_id=requester.id,
            title=title,
            content=content,
            is_public=is_public,
            likes=0,
            created_at=now,
            updated_at=now
        )
        created = await self.client.create_diary(diary)
        logger.info(f"日记创建成功: {created.id} (用户 {requester.id})")
        return created
    
    async def get_detail(self, diary_id: RecordId, requester: Optional[User]) -> DiaryDetail:
        """
        查看日记详情
        
        日记不可见时直接拒绝，不返回标题和内容；
        评论只在可见时附带（私密日记只有作者能看到评论）。
        """
        diary = await self.client.get_diary(diary_id)
        require(diary, requester, Action.VIEW)
        
        author, state = await asyncio.gather(
            self._fetch_author(diary.user_id),
            self.interactions.state_for(diary, requester)
        )
        
        return DiaryDetail(
            diary=diary,
            author=author,
            comments=list(state.comments),
            permissions=affordances(diary, requester),
            liked=state.liked
        )
    
    async def update(self, diary_id: RecordId, requester: Optional[User], title: str = None,
                     content: str = None, is_public: bool = None) -> Diary:
        """
        更新日记，只更新传入的字段
        """
        diary = await self.client.get_diary(diary_id)
        require(diary, requester, Action.EDIT)
        
        fields: Dict[str, Any] = {}
        if title is not None:
            if not title.strip():
                raise ValidationFailure("标题不能为空")
            fields["title"] = title
        if content is not None:
            if not content.strip():
                raise ValidationFailure("内容不能为空")
            fields["content"] = content
        if is_public is not None:
            fields["isPublic"] = is_public
        fields["updatedAt"] = utc_now().isoformat()
        
        updated = await self.client.update_diary(diary_id, fields)
        logger.info(f"日记更新成功: {diary_id}")
        return updated
    
    async def delete(self, diary_id: RecordId, requester: Optional[User]) -> None:
        """
        删除日记及其评论和点赞记录
        """
        diary = await self.client.get_diary(diary_id)
        require(diary, requester, Action.DELETE)
        
        for comment in await self.client.list_comments(diary_id):
            await self.client.delete_comment(comment.id)
        await self.interactions.strategy.cleanup(diary_id)
        await self.client.delete_diary(diary_id)
        self.interactions.forget(diary_id)
        logger.info(f"日记删除成功: {diary_id}")


# 创建全局日记服务实例
diary_service = DiaryService()
