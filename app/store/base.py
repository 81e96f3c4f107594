"""
文档存储抽象

与托管后端的文档数据库对应：按集合进行增删改查，只支持精确匹配过滤与排序，
不支持联表。原始文档以字典形式返回，系统字段以 `$` 开头。
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

ID_FIELD = "$id"
CREATED_FIELD = "$createdAt"
UPDATED_FIELD = "$updatedAt"
SYSTEM_FIELDS = (ID_FIELD, CREATED_FIELD, UPDATED_FIELD)

RawDocument = Dict[str, Any]


class StoreError(Exception):
    """存储调用失败（网络、配额、结构不匹配等）"""


class DocumentNotFound(StoreError):
    """文档不存在"""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"Document '{document_id}' not found in '{collection}'")
        self.collection = collection
        self.document_id = document_id


class DuplicateDocument(StoreError):
    """违反唯一约束"""

    def __init__(self, collection: str, field_name: str, value: Any = None):
        super().__init__(f"Duplicate value for '{field_name}' in '{collection}'")
        self.collection = collection
        self.field = field_name
        self.value = value


@dataclass(frozen=True)
class Filter:
    """精确匹配条件"""
    field: str
    value: Any


@dataclass(frozen=True)
class Order:
    """排序条件"""
    field: str
    descending: bool = False


def equal(field_name: str, value: Any) -> Filter:
    return Filter(field_name, value)


def order_desc(field_name: str = CREATED_FIELD) -> Order:
    return Order(field_name, descending=True)


def order_asc(field_name: str = CREATED_FIELD) -> Order:
    return Order(field_name, descending=False)


@dataclass
class DocumentList:
    """列表查询结果"""
    total: int
    documents: List[RawDocument] = field(default_factory=list)


def new_id() -> str:
    """生成文档ID"""
    return uuid.uuid4().hex[:20]


class DocumentStore(ABC):
    """文档存储接口"""

    @abstractmethod
    async def create(
        self,
        collection: str,
        document_id: str,
        fields: Dict[str, Any],
        unique: Sequence[str] = (),
    ) -> RawDocument:
        """
        创建文档

        Args:
            unique: 需要全局唯一的字段，重复时原子地抛出 DuplicateDocument
        """

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> RawDocument:
        """获取文档，不存在时抛出 DocumentNotFound"""

    @abstractmethod
    async def list(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> DocumentList:
        """按条件列出文档"""

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        fields: Dict[str, Any],
        unique: Sequence[str] = (),
    ) -> RawDocument:
        """合并更新文档字段"""

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """删除文档"""

    async def find_one(self, collection: str, *filters: Filter) -> Optional[RawDocument]:
        """返回第一条匹配的文档"""
        result = await self.list(collection, filters, limit=1)
        return result.documents[0] if result.documents else None

    async def count(self, collection: str, *filters: Filter) -> int:
        result = await self.list(collection, filters)
        return result.total
