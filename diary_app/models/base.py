"""
模型公共定义
数据存储使用 camelCase 字段名，模型属性使用 snake_case，通过别名互相转换
"""

from datetime import datetime, timezone
from typing import Union, Any, Dict
from pydantic import BaseModel

# json-server 生成的 id 可能是整数也可能是字符串
RecordId = Union[int, str]


def utc_now() -> datetime:
    """当前UTC时间"""
    return datetime.now(timezone.utc)


def same_id(left: Any, right: Any) -> bool:
    """比较两个记录ID，忽略整数/字符串表示差异，任一为空则不相等"""
    if left is None or right is None:
        return False
    return str(left) == str(right)


class StoreModel(BaseModel):
    """存储记录模型基类"""
    
    class Config:
        populate_by_name = True
    
    def to_store(self, exclude_id: bool = True) -> Dict[str, Any]:
        """
        转换为写入数据存储的字典
        
        Args:
            exclude_id: 是否去掉 id 字段（创建记录时由存储分配）
            
        Returns:
            camelCase 字段名的字典
        """
        data = self.model_dump(by_alias=True, mode="json")
        if exclude_id:
            data.pop("id", None)
        return data
