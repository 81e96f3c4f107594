"""
管理员身份检查

管理员集合的结构没有固定下来，这里按顺序尝试多种可能的字段名，
全部失败后再退回到对前50条记录做子串扫描。

注意：子串扫描是一个已知的弱启发式规则，若某个无关字段的值恰好包含
用户ID，也会被判定为管理员。为保持行为一致暂时保留，它被隔离为独立的
探测策略，替换时不需要改动调用方。
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

from app.store.base import DocumentStore, RawDocument, StoreError, equal

logger = logging.getLogger(__name__)

ADMIN_ID_FIELDS = ("userId", "user_id", "author_id", "userID", "uid", "id", "email")
SCAN_LIMIT = 50


class AdminProbe(ABC):
    """单个探测策略"""

    @abstractmethod
    async def find(self, store: DocumentStore, collection: str, user_id: str) -> Optional[RawDocument]:
        """返回匹配的管理员记录，没有则返回None"""


class FieldMatchProbe(AdminProbe):
    """按字段精确匹配"""

    def __init__(self, field_name: str):
        self.field = field_name

    async def find(self, store, collection, user_id):
        try:
            result = await store.list(collection, [equal(self.field, user_id)], limit=1)
        except StoreError as e:
            # 集合中没有该字段，继续尝试下一个
            logger.debug("admin probe on %s skipped: %s", self.field, e)
            return None
        return result.documents[0] if result.documents else None

    def __repr__(self):
        return f"FieldMatchProbe({self.field!r})"


class SubstringScanProbe(AdminProbe):
    """在序列化后的记录中做不区分大小写的子串匹配"""

    def __init__(self, limit: int = SCAN_LIMIT):
        self.limit = limit

    async def find(self, store, collection, user_id):
        try:
            result = await store.list(collection, limit=self.limit)
        except StoreError as e:
            logger.warning("admin scan failed: %s", e)
            return None
        needle = user_id.lower()
        for doc in result.documents:
            if needle in json.dumps(doc, default=str, ensure_ascii=False).lower():
                return doc
        return None

    def __repr__(self):
        return f"SubstringScanProbe(limit={self.limit})"


def default_probes(fields: Iterable[str] = ADMIN_ID_FIELDS) -> List[AdminProbe]:
    probes: List[AdminProbe] = [FieldMatchProbe(name) for name in fields]
    probes.append(SubstringScanProbe())
    return probes


class AdminMembership:
    """管理员成员检查"""

    def __init__(self, store: DocumentStore, collection: Optional[str], probes: Optional[Sequence[AdminProbe]] = None):
        self.store = store
        self.collection = collection
        self.probes = list(probes) if probes is not None else default_probes()

    async def find_record(self, user_id: Optional[str]) -> Optional[RawDocument]:
        if not self.collection or not user_id:
            return None
        for probe in self.probes:
            record = await probe.find(self.store, self.collection, user_id)
            if record is not None:
                logger.debug("user %s is admin via %r", user_id, probe)
                return record
        return None

    async def is_admin(self, user_id: Optional[str]) -> bool:
        """
        判断用户是否为管理员

        未配置管理员集合时始终返回False
        """
        return await self.find_record(user_id) is not None
