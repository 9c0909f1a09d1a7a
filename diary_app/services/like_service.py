"""
点赞持久化服务
提供两种持久化策略：
- counter: 读取日记点赞数后写回 ±1（读改写，并发时会丢失更新）
- membership: 每个点赞一条记录，点赞数为记录条数（并发安全）
"""

from abc import ABC, abstractmethod
from typing import Set, Tuple
from diary_app.models.base import RecordId
from diary_app.models.like import Like
from diary_app.services.store_client import DataStoreClient, store_client
from diary_app.utils.config import settings
from diary_app.utils.logger import logger

# 点赞数缓存写回的最大次数
MAX_SYNC_ATTEMPTS = 3


class LikeStrategy(ABC):
    """点赞持久化策略基类"""
    
    name = ""
    
    def __init__(self, client: DataStoreClient = None):
        self.client = client or store_client
    
    @abstractmethod
    async def like(self, diary_id: RecordId, user_id: RecordId) -> int:
        """
        点赞
        
        Returns:
            持久化后的点赞数
        """
        pass
    
    @abstractmethod
    async def unlike(self, diary_id: RecordId, user_id: RecordId) -> int:
        """
        取消点赞
        
        Returns:
            持久化后的点赞数
        """
        pass
    
    @abstractmethod
    async def is_liked(self, diary_id: RecordId, user_id: RecordId) -> bool:
        """用户是否已点赞"""
        pass
    
    async def cleanup(self, diary_id: RecordId) -> None:
        """删除日记时清理点赞数据"""
        pass


class CounterLikeStrategy(LikeStrategy):
    """
    计数器策略：读取当前点赞数再写回，没有任何锁或事务
    
    存储里没有点赞关系，谁点过赞只记录在进程内存中。服务重启后记录清空，
    同一用户可以再次点赞，点赞数会被重复累加。
    """
    
    name = "counter"
    
    def __init__(self, client: DataStoreClient = None):
        super().__init__(client)
        # 计数器模式下存储里没有点赞关系，只能在进程内记录
        self._members: Set[Tuple[str, str]] = set()
    
    async def _adjust(self, diary_id: RecordId, delta: int) -> int:
        diary = await self.client.get_diary(diary_id)
        likes = max(0, diary.likes + delta)
        await self.client.update_diary(diary_id, {"likes": likes})
        return likes
    
    async def like(self, diary_id: RecordId, user_id: RecordId) -> int:
        likes = await self._adjust(diary_id, 1)
        self._members.add((str(diary_id), str(user_id)))
        return likes
    
    async def unlike(self, diary_id: RecordId, user_id: RecordId) -> int:
        likes = await self._adjust(diary_id, -1)
        self._members.discard((str(diary_id), str(user_id)))
        return likes
    
    async def is_liked(self, diary_id: RecordId, user_id: RecordId) -> bool:
        return (str(diary_id), str(user_id)) in self._members
    
    async def cleanup(self, diary_id: RecordId) -> None:
        self._members = {m for m in self._members if m[0] != str(diary_id)}


class MembershipLikeStrategy(LikeStrategy):
    """
    点赞记录策略
    
    每个 (userId, diaryId) 对应一条 likes 记录，点赞数由记录条数得出。
    并发点赞各自插入自己的记录，不会丢失。日记上的 likes 字段只是缓存，
    每次点赞变化后用记录条数刷新。
    """
    
    name = "membership"
    
    async def count(self, diary_id: RecordId) -> int:
        """统计日记的点赞数"""
        return len(await self.client.list_likes(diaryId=diary_id))
    
    async def _sync_counter(self, diary_id: RecordId) -> int:
        """
        用记录条数刷新日记上的 likes 缓存
        
        统计和写回之间可能有其他请求写入更旧的条数，所以写回后再统计一次，
        条数变化时重新写回，直到两次统计一致。
        """
        likes = await self.count(diary_id)
        for _ in range(MAX_SYNC_ATTEMPTS):
            await self.client.update_diary(diary_id, {"likes": likes})
            current = await self.count(diary_id)
            if current == likes:
                break
            logger.info(f"点赞数在写回期间变化: diary={diary_id}, {likes} -> {current}")
            likes = current
        else:
            logger.warning(f"点赞数缓存未能稳定: diary={diary_id}, likes={likes}")
        return likes
    
    async def like(self, diary_id: RecordId, user_id: RecordId) -> int:
        existing = await self.client.list_likes(diaryId=diary_id, userId=user_id)
        if not existing:
            await self.client.create_like(Like(diary_id=diary_id, user_id=user_id))
        else:
            logger.info(f"重复点赞已忽略: diary={diary_id}, user={user_id}")
        return await self._sync_counter(diary_id)
    
    async def unlike(self, diary_id: RecordId, user_id: RecordId) -> int:
        for like in await self.client.list_likes(diaryId=diary_id, userId=user_id):
            await self.client.delete_like(like.id)
        return await self._sync_counter(diary_id)
    
    async def is_liked(self, diary_id: RecordId, user_id: RecordId) -> bool:
        return bool(await self.client.list_likes(diaryId=diary_id, userId=user_id))
    
    async def cleanup(self, diary_id: RecordId) -> None:
        for like in await self.client.list_likes(diaryId=diary_id):
            await self.client.delete_like(like.id)


STRATEGIES = {
    CounterLikeStrategy.name: CounterLikeStrategy,
    MembershipLikeStrategy.name: MembershipLikeStrategy,
}


def get_like_strategy(name: str = None, client: DataStoreClient = None) -> LikeStrategy:
    """
    根据名称创建点赞策略
    
    Args:
        name: 策略名称，默认使用配置
        client: 数据存储客户端
        
    Returns:
        点赞策略实例
    """
    name = name or settings.like_strategy
    if name not in STRATEGIES:
        raise ValueError(f"未知的点赞策略: {name}")
    return STRATEGIES[name](client)


# 创建全局点赞策略实例
like_strategy = get_like_strategy()
