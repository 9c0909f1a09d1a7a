"""
数据存储客户端
通过HTTP访问 json-server 风格的REST数据服务，提供 users/diaries/comments/likes 四个集合的增删改查
"""

from typing import List, Dict, Any, Optional
import httpx
from diary_app.models.user import User
from diary_app.models.diary import Diary
from diary_app.models.comment import Comment
from diary_app.models.like import Like
from diary_app.models.base import RecordId
from diary_app.utils.config import settings
from diary_app.utils.errors import NetworkFailure, NotFound
from diary_app.utils.logger import logger

USERS = "users"
DIARIES = "diaries"
COMMENTS = "comments"
LIKES = "likes"


def _query_value(value: Any) -> str:
    """查询参数转换，布尔值使用 json-server 的 true/false"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DataStoreClient:
    """数据存储客户端"""
    
    def __init__(self, base_url: str = None, timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        初始化数据存储客户端
        
        Args:
            base_url: 数据服务地址，默认使用配置
            timeout: 单次请求超时时间（秒），默认使用配置
            transport: 自定义传输层（测试时注入）
        """
        self.base_url = (base_url or settings.store_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.store_timeout
        self.transport = transport
    
    async def _request(self, method: str, path: str, params: Dict[str, Any] = None,
                       json: Dict[str, Any] = None) -> Any:
        """
        发送请求并处理错误
        
        Args:
            method: HTTP方法
            path: 请求路径
            params: 查询参数
            json: 请求体
            
        Returns:
            解析后的JSON响应，无内容时返回None
            
        Raises:
            NotFound: 资源不存在
            NetworkFailure: 网络错误、超时或其他非2xx响应
        """
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self.transport) as client:
                response = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            logger.error(f"数据服务请求超时: {method} {path} - {e}")
            raise NetworkFailure("数据服务请求超时，请稍后重试") from e
        except httpx.HTTPError as e:
            logger.error(f"数据服务请求失败: {method} {path} - {e}")
            raise NetworkFailure() from e
        
        if response.status_code == 404:
            raise NotFound(f"资源不存在: {path}")
        
        if response.status_code >= 400:
            logger.error(f"数据服务返回错误: {method} {path} - {response.status_code} {response.text}")
            raise NetworkFailure(upstream_status=response.status_code)
        
        if not response.content:
            return None
        return response.json()
    
    # ---------- 通用操作 ----------
    
    async def list(self, collection: str, filters: Dict[str, Any] = None,
                   sort: str = None, order: str = "asc") -> List[Dict[str, Any]]:
        """
        查询集合
        
        Args:
            collection: 集合名称
            filters: 字段过滤条件（字段=值）
            sort: 排序字段
            order: asc 或 desc
            
        Returns:
            记录列表
        """
        params = {key: _query_value(value) for key, value in (filters or {}).items()}
        if sort:
            params["_sort"] = sort
            params["_order"] = order
        return await self._request("GET", f"/{collection}", params=params) or []
    
    async def get(self, collection: str, record_id: RecordId) -> Dict[str, Any]:
        """根据ID获取记录"""
        return await self._request("GET", f"/{collection}/{record_id}")
    
    async def create(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """创建记录，ID由数据服务分配"""
        created = await self._request("POST", f"/{collection}", json=record)
        if not created:
            logger.error(f"创建记录后数据服务未返回记录: {collection}")
            raise NetworkFailure("数据服务未返回新建的记录")
        logger.info(f"记录创建成功: {collection}/{created.get('id')}")
        return created
    
    async def update(self, collection: str, record_id: RecordId, fields: Dict[str, Any]) -> Dict[str, Any]:
        """部分更新记录"""
        updated = await self._request("PATCH", f"/{collection}/{record_id}", json=fields)
        logger.info(f"记录更新成功: {collection}/{record_id} {sorted(fields)}")
        return updated
    
    async def delete(self, collection: str, record_id: RecordId) -> None:
        """删除记录"""
        await self._request("DELETE", f"/{collection}/{record_id}")
        logger.info(f"记录删除成功: {collection}/{record_id}")
    
    # ---------- 用户 ----------
    
    async def get_user(self, user_id: RecordId) -> User:
        return User.model_validate(await self.get(USERS, user_id))
    
    async def find_users(self, **filters) -> List[User]:
        return [User.model_validate(r) for r in await self.list(USERS, filters)]
    
    async def create_user(self, user: User) -> User:
        return User.model_validate(await self.create(USERS, user.to_store()))
    
    # ---------- 日记 ----------
    
    async def list_diaries(self, **filters) -> List[Diary]:
        """按创建时间倒序查询日记"""
        records = await self.list(DIARIES, filters, sort="createdAt", order="desc")
        return [Diary.model_validate(r) for r in records]
    
    async def get_diary(self, diary_id: RecordId) -> Diary:
        return Diary.model_validate(await self.get(DIARIES, diary_id))
    
    async def create_diary(self, diary: Diary) -> Diary:
        return Diary.model_validate(await self.create(DIARIES, diary.to_store()))
    
    async def update_diary(self, diary_id: RecordId, fields: Dict[str, Any]) -> Diary:
        return Diary.model_validate(await self.update(DIARIES, diary_id, fields))
    
    async def delete_diary(self, diary_id: RecordId) -> None:
        await self.delete(DIARIES, diary_id)
    
    # ---------- 评论 ----------
    
    async def list_comments(self, diary_id: RecordId) -> List[Comment]:
        """按创建时间倒序查询日记的评论"""
        records = await self.list(COMMENTS, {"diaryId": diary_id}, sort="createdAt", order="desc")
        return [Comment.model_validate(r) for r in records]
    
    async def get_comment(self, comment_id: RecordId) -> Comment:
        return Comment.model_validate(await self.get(COMMENTS, comment_id))
    
    async def create_comment(self, comment: Comment) -> Comment:
        return Comment.model_validate(await self.create(COMMENTS, comment.to_store()))
    
    async def delete_comment(self, comment_id: RecordId) -> None:
        await self.delete(COMMENTS, comment_id)
    
    # ---------- 点赞 ----------
    
    async def list_likes(self, **filters) -> List[Like]:
        return [Like.model_validate(r) for r in await self.list(LIKES, filters)]
    
    async def create_like(self, like: Like) -> Like:
        return Like.model_validate(await self.create(LIKES, like.to_store()))
    
    async def delete_like(self, like_id: RecordId) -> None:
        await self.delete(LIKES, like_id)


# 创建全局数据存储客户端实例
store_client = DataStoreClient()
