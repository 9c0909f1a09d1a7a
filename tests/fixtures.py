"""
测试用内存数据服务
内存版 json-server，通过 httpx.MockTransport 接入，业务代码走真实的HTTP客户端
"""

import asyncio
import json
import httpx
from diary_app.models.user import User

COLLECTIONS = ("users", "diaries", "comments", "likes")


def _as_query(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FakeStore:
    """内存版 json-server"""
    
    def __init__(self):
        self.data = {name: [] for name in COLLECTIONS}
        self.next_id = 1
        self.requests = []
        self.fail = set()  # (method, collection)
        self._gates = {}
        self._pauses = {}
    
    def seed(self, collection, **record):
        if "id" not in record:
            record["id"] = self.next_id
            self.next_id += 1
        self.data[collection].append(record)
        return record
    
    def find(self, collection, record_id):
        for record in self.data[collection]:
            if str(record["id"]) == str(record_id):
                return record
        return None
    
    def hold_reads(self, path, parties):
        """让指定路径的GET请求都到达后再一起读取，用于复现并发读改写"""
        self._gates[path] = {"arrived": 0, "parties": parties, "event": asyncio.Event()}
    
    def pause_once(self, method, path):
        """
        让下一个匹配的请求停住，直到测试放行
        
        Returns:
            (请求已到达事件, 放行事件)
        """
        reached, release = asyncio.Event(), asyncio.Event()
        self._pauses[(method, path)] = (reached, release)
        return reached, release
    
    async def handler(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)
        path = request.url.path
        parts = path.strip("/").split("/")
        collection = parts[0]
        record_id = parts[1] if len(parts) > 1 else None
        method = request.method
        self.requests.append((method, path, dict(request.url.params)))
        
        pause = self._pauses.pop((method, path), None)
        if pause is not None:
            reached, release = pause
            reached.set()
            await release.wait()
        
        if (method, collection) in self.fail:
            return httpx.Response(500, json={"error": "boom"})
        if collection not in self.data:
            return httpx.Response(404, json={})
        
        if method == "GET" and record_id is None:
            params = dict(request.url.params)
            sort = params.pop("_sort", None)
            order = params.pop("_order", "asc")
            records = [
                r for r in self.data[collection]
                if all(_as_query(r.get(k)) == v for k, v in params.items())
            ]
            if sort:
                records = sorted(records, key=lambda r: str(r.get(sort, "")), reverse=(order == "desc"))
            return httpx.Response(200, json=records)
        
        if method == "GET":
            gate = self._gates.get(path)
            if gate is not None:
                gate["arrived"] += 1
                if gate["arrived"] >= gate["parties"]:
                    gate["event"].set()
                else:
                    await gate["event"].wait()
            record = self.find(collection, record_id)
            if record is None:
                return httpx.Response(404, json={})
            return httpx.Response(200, json=dict(record))
        
        if method == "POST":
            record = json.loads(request.content)
            created = self.seed(collection, **record)
            return httpx.Response(201, json=dict(created))
        
        if method == "PATCH":
            record = self.find(collection, record_id)
            if record is None:
                return httpx.Response(404, json={})
            record.update(json.loads(request.content))
            return httpx.Response(200, json=dict(record))
        
        if method == "DELETE":
            record = self.find(collection, record_id)
            if record is None:
                return httpx.Response(404, json={})
            self.data[collection].remove(record)
            return httpx.Response(200, json={})
        
        return httpx.Response(405, json={})


def run(coro):
    """在同步测试中运行协程"""
    return asyncio.run(coro)


def make_user(user_id, username=None):
    return User(id=user_id, username=username or f"user{user_id}", email=f"user{user_id}@example.com")


