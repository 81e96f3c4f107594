"""
内存文档存储

用于开发与测试；单进程内有效，重启后数据丢失
"""
import copy
import itertools
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from app.store.base import (
    CREATED_FIELD, ID_FIELD, SYSTEM_FIELDS, UPDATED_FIELD,
    DocumentList, DocumentNotFound, DocumentStore, DuplicateDocument,
    Filter, Order, RawDocument,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryDocumentStore(DocumentStore):
    """基于字典的文档存储"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, RawDocument]] = {}
        self._sequence: Dict[Tuple[str, str], int] = {}
        self._unique: Dict[Tuple[str, str, str], str] = {}
        self._counter = itertools.count()

    def _collection(self, collection: str) -> Dict[str, RawDocument]:
        return self._collections.setdefault(collection, {})

    def _reserve(self, collection: str, document_id: str, fields: Dict[str, Any], unique: Sequence[str]) -> None:
        # 先全部检查再写入，保证要么全部占用要么都不占用
        keys = []
        for name in unique:
            if name not in fields or fields[name] is None:
                continue
            key = (collection, name, str(fields[name]))
            owner = self._unique.get(key)
            if owner is not None and owner != document_id:
                raise DuplicateDocument(collection, name, fields[name])
            keys.append(key)
        for key in keys:
            self._unique[key] = document_id

    def _release(self, collection: str, document_id: str, names: Optional[Iterable[str]] = None) -> None:
        for key, owner in list(self._unique.items()):
            if key[0] != collection or owner != document_id:
                continue
            if names is None or key[1] in names:
                del self._unique[key]

    async def create(self, collection, document_id, fields, unique=()):
        docs = self._collection(collection)
        if document_id in docs:
            raise DuplicateDocument(collection, ID_FIELD, document_id)
        self._reserve(collection, document_id, fields, unique)

        now = _now()
        document = {k: copy.deepcopy(v) for k, v in fields.items() if k not in SYSTEM_FIELDS}
        document.update({ID_FIELD: document_id, CREATED_FIELD: now, UPDATED_FIELD: now})
        docs[document_id] = document
        self._sequence[(collection, document_id)] = next(self._counter)
        return copy.deepcopy(document)

    async def get(self, collection, document_id):
        document = self._collection(collection).get(document_id)
        if document is None:
            raise DocumentNotFound(collection, document_id)
        return copy.deepcopy(document)

    async def list(self, collection, filters=(), order=None, limit=None):
        filters = list(filters)
        matched = [
            doc for doc in self._collection(collection).values()
            if all(_matches(doc, f) for f in filters)
        ]
        if order is None:
            order = Order(CREATED_FIELD)
        matched.sort(
            key=lambda doc: (_sort_value(doc.get(order.field)), self._sequence[(collection, doc[ID_FIELD])]),
            reverse=order.descending,
        )
        total = len(matched)
        if limit is not None:
            matched = matched[:limit]
        return DocumentList(total=total, documents=[copy.deepcopy(doc) for doc in matched])

    async def update(self, collection, document_id, fields, unique=()):
        docs = self._collection(collection)
        document = docs.get(document_id)
        if document is None:
            raise DocumentNotFound(collection, document_id)

        changed = [name for name in unique if name in fields]
        if changed:
            previous = {k: v for k, v in self._unique.items() if k[0] == collection and v == document_id}
            self._release(collection, document_id, changed)
            try:
                self._reserve(collection, document_id, fields, changed)
            except DuplicateDocument:
                self._unique.update(previous)
                raise

        for key, value in fields.items():
            if key not in SYSTEM_FIELDS:
                document[key] = copy.deepcopy(value)
        document[UPDATED_FIELD] = _now()
        return copy.deepcopy(document)

    async def delete(self, collection, document_id):
        docs = self._collection(collection)
        if document_id not in docs:
            raise DocumentNotFound(collection, document_id)
        del docs[document_id]
        self._sequence.pop((collection, document_id), None)
        self._release(collection, document_id)


def _matches(document: RawDocument, condition: Filter) -> bool:
    if condition.field not in document:
        return False
    value = document[condition.field]
    if isinstance(value, list):
        return condition.value in value
    return value == condition.value


def _sort_value(value: Any) -> Tuple[int, Any]:
    # None 排在最前，数字与字符串分组比较
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)):
        return (1, value)
    return (2, str(value))
