"""
托管后端（Appwrite兼容REST接口）的文档与文件存储
"""
import json
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import Settings
from app.store.base import (
    DocumentList, DocumentNotFound, DocumentStore, DuplicateDocument,
    Filter, Order, StoreError, SYSTEM_FIELDS,
)
from app.store.blobs import BlobStore


class AppwriteClient:
    """REST调用封装"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.endpoint = settings.APPWRITE_ENDPOINT.rstrip("/")
        self.headers = {
            "X-Appwrite-Project": settings.APPWRITE_PROJECT_ID,
            "X-Appwrite-Key": settings.APPWRITE_API_KEY or "",
        }
        self._transport = transport

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.endpoint,
                headers=self.headers,
                transport=self._transport,
                timeout=30.0,
            ) as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"Backend request failed: {e}") from e


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.text
    except ValueError:
        return response.text


def _query(method: str, attribute: Optional[str] = None, values: Optional[List[Any]] = None) -> str:
    query: Dict[str, Any] = {"method": method}
    if attribute is not None:
        query["attribute"] = attribute
    if values is not None:
        query["values"] = values
    return json.dumps(query)


class AppwriteDocumentStore(DocumentStore):
    """托管文档数据库"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = AppwriteClient(settings, transport)
        self._database_id = settings.APPWRITE_DATABASE_ID

    def _path(self, collection: str, document_id: Optional[str] = None) -> str:
        path = f"/databases/{self._database_id}/collections/{collection}/documents"
        if document_id is not None:
            path = f"{path}/{document_id}"
        return path

    def _check(self, response: httpx.Response, collection: str, document_id: Optional[str] = None,
               unique=()) -> None:
        if response.is_success:
            return
        if response.status_code == 404 and document_id is not None:
            raise DocumentNotFound(collection, document_id)
        if response.status_code == 409:
            names = list(unique)
            raise DuplicateDocument(collection, ",".join(names) if names else "$id")
        raise StoreError(_error_message(response))

    async def create(self, collection, document_id, fields, unique=()):
        # 唯一性由后端的唯一索引保证，冲突时返回409
        data = {k: v for k, v in fields.items() if k not in SYSTEM_FIELDS}
        response = await self._client.request(
            "POST", self._path(collection),
            json={"documentId": document_id, "data": data},
        )
        self._check(response, collection, unique=unique)
        return response.json()

    async def get(self, collection, document_id):
        response = await self._client.request("GET", self._path(collection, document_id))
        self._check(response, collection, document_id)
        return response.json()

    async def list(self, collection, filters=(), order=None, limit=None):
        queries = [_query("equal", f.field, [f.value]) for f in filters]
        if order is not None:
            queries.append(_query("orderDesc" if order.descending else "orderAsc", order.field))
        if limit is not None:
            queries.append(_query("limit", values=[limit]))

        response = await self._client.request(
            "GET", self._path(collection), params={"queries[]": queries},
        )
        self._check(response, collection)
        payload = response.json()
        return DocumentList(total=payload.get("total", 0), documents=payload.get("documents", []))

    async def update(self, collection, document_id, fields, unique=()):
        data = {k: v for k, v in fields.items() if k not in SYSTEM_FIELDS}
        response = await self._client.request(
            "PATCH", self._path(collection, document_id), json={"data": data},
        )
        self._check(response, collection, document_id, unique)
        return response.json()

    async def delete(self, collection, document_id):
        response = await self._client.request("DELETE", self._path(collection, document_id))
        self._check(response, collection, document_id)


class AppwriteBlobStore(BlobStore):
    """托管文件存储"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(settings.APPWRITE_ENDPOINT, settings.APPWRITE_PROJECT_ID)
        self._client = AppwriteClient(settings, transport)

    async def upload(self, bucket, file_id, content, filename, content_type):
        response = await self._client.request(
            "POST", f"/storage/buckets/{bucket}/files",
            data={"fileId": file_id},
            files={"file": (filename, content, content_type)},
        )
        if not response.is_success:
            raise StoreError(_error_message(response))
        return response.json().get("$id", file_id)

    async def delete(self, bucket, file_id):
        response = await self._client.request("DELETE", f"/storage/buckets/{bucket}/files/{file_id}")
        if response.status_code == 404:
            return
        if not response.is_success:
            raise StoreError(_error_message(response))
