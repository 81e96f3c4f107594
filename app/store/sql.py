"""
SQLAlchemy文档存储

文档以JSON形式保存在 documents 表；唯一字段的值写入 document_unique_keys 表，
与文档在同一事务中提交，重复值由唯一约束原子地拒绝
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Sequence

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.models.document_unique_key import DocumentUniqueKey
from app.models.stored_document import StoredDocument
from app.store.base import (
    CREATED_FIELD, ID_FIELD, SYSTEM_FIELDS, UPDATED_FIELD,
    DocumentList, DocumentNotFound, DocumentStore, DuplicateDocument,
    Filter, Order, RawDocument, StoreError,
)


def _to_raw(row: StoredDocument) -> RawDocument:
    document = dict(row.data or {})
    document[ID_FIELD] = row.document_id
    document[CREATED_FIELD] = _isoformat(row.created_at)
    document[UPDATED_FIELD] = _isoformat(row.updated_at)
    return document


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _column_for(field_name: str, value: Any = None):
    """把字段名映射为可比较的SQL表达式"""
    if field_name == ID_FIELD:
        return StoredDocument.document_id
    if field_name == CREATED_FIELD:
        return StoredDocument.created_at
    if field_name == UPDATED_FIELD:
        return StoredDocument.updated_at
    element = StoredDocument.data[field_name]
    if isinstance(value, bool):
        return element.as_boolean()
    if isinstance(value, int):
        return element.as_integer()
    if isinstance(value, float):
        return element.as_float()
    return element.as_string()


def _strip(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in SYSTEM_FIELDS}


class SQLDocumentStore(DocumentStore):
    """基于关系数据库的文档存储"""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def _load(self, session, collection: str, document_id: str) -> StoredDocument:
        result = await session.execute(
            select(StoredDocument).where(
                StoredDocument.collection == collection,
                StoredDocument.document_id == document_id,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise DocumentNotFound(collection, document_id)
        return row

    async def create(self, collection, document_id, fields, unique=()):
        now = datetime.now(timezone.utc)
        async with self._session_factory() as session:
            row = StoredDocument(
                collection=collection,
                document_id=document_id,
                data=_strip(fields),
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            for name in unique:
                if fields.get(name) is not None:
                    session.add(DocumentUniqueKey(
                        collection=collection,
                        field=name,
                        value=str(fields[name]),
                        document_id=document_id,
                    ))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateDocument(collection, _violated_field(unique), None) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(str(e)) from e
            return _to_raw(row)

    async def get(self, collection, document_id):
        async with self._session_factory() as session:
            row = await self._load(session, collection, document_id)
            return _to_raw(row)

    async def list(self, collection, filters=(), order=None, limit=None):
        conditions = [StoredDocument.collection == collection]
        for condition in filters:
            conditions.append(_column_for(condition.field, condition.value) == condition.value)

        if order is None:
            order = Order(CREATED_FIELD)
        column = _column_for(order.field)
        if order.descending:
            ordering = [column.desc(), StoredDocument.id.desc()]
        else:
            ordering = [column.asc(), StoredDocument.id.asc()]

        try:
            async with self._session_factory() as session:
                total = await session.scalar(
                    select(func.count()).select_from(StoredDocument).where(*conditions)
                )
                stmt = select(StoredDocument).where(*conditions).order_by(*ordering)
                if limit is not None:
                    stmt = stmt.limit(limit)
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        return DocumentList(total=total or 0, documents=[_to_raw(row) for row in rows])

    async def update(self, collection, document_id, fields, unique=()):
        async with self._session_factory() as session:
            row = await self._load(session, collection, document_id)
            data = dict(row.data or {})
            data.update(_strip(fields))
            row.data = data
            row.updated_at = datetime.now(timezone.utc)

            changed = [name for name in unique if name in fields]
            if changed:
                await session.execute(
                    delete(DocumentUniqueKey).where(
                        DocumentUniqueKey.collection == collection,
                        DocumentUniqueKey.document_id == document_id,
                        DocumentUniqueKey.field.in_(changed),
                    )
                )
                for name in changed:
                    if fields[name] is not None:
                        session.add(DocumentUniqueKey(
                            collection=collection,
                            field=name,
                            value=str(fields[name]),
                            document_id=document_id,
                        ))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateDocument(collection, _violated_field(changed), None) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(str(e)) from e
            return _to_raw(row)

    async def delete(self, collection, document_id):
        async with self._session_factory() as session:
            row = await self._load(session, collection, document_id)
            await session.delete(row)
            await session.execute(
                delete(DocumentUniqueKey).where(
                    DocumentUniqueKey.collection == collection,
                    DocumentUniqueKey.document_id == document_id,
                )
            )
            await session.commit()


def _violated_field(unique: Iterable[str]) -> str:
    names = list(unique)
    if not names:
        return ID_FIELD
    return ",".join(names)
