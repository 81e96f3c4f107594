"""
文件存储抽象与本地实现
"""
import asyncio
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

from app.store.base import StoreError

_FILE_ID_RE = re.compile(r"/storage/buckets/([^/]+)/files/([^/]+)/view")
_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class BlobStore(ABC):
    """文件存储接口，URL由端点、桶与文件ID确定性推导"""

    def __init__(self, endpoint: str, project_id: str):
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id

    def file_url(self, bucket: str, file_id: str) -> str:
        return f"{self.endpoint}/storage/buckets/{bucket}/files/{file_id}/view?project={self.project_id}"

    @staticmethod
    def parse_url(url: str) -> Optional[Tuple[str, str]]:
        """从文件URL中解析出 (bucket, file_id)"""
        if not url:
            return None
        match = _FILE_ID_RE.search(url)
        if not match:
            return None
        return match.group(1), match.group(2)

    @abstractmethod
    async def upload(self, bucket: str, file_id: str, content: bytes, filename: str, content_type: str) -> str:
        """上传文件，返回文件ID"""

    @abstractmethod
    async def delete(self, bucket: str, file_id: str) -> None:
        """删除文件，文件不存在时忽略"""


class LocalBlobStore(BlobStore):
    """保存在本地目录的文件存储"""

    def __init__(self, root: str, endpoint: str, project_id: str):
        super().__init__(endpoint, project_id)
        self.root = Path(root)

    def _paths(self, bucket: str, file_id: str) -> Tuple[Path, Path]:
        if not _SAFE_ID_RE.match(bucket) or not _SAFE_ID_RE.match(file_id):
            raise StoreError("Invalid bucket or file id")
        folder = self.root / bucket
        return folder / file_id, folder / f"{file_id}.meta.json"

    async def upload(self, bucket, file_id, content, filename, content_type):
        data_path, meta_path = self._paths(bucket, file_id)

        def _write():
            data_path.parent.mkdir(parents=True, exist_ok=True)
            data_path.write_bytes(content)
            meta_path.write_text(json.dumps({"name": filename, "mimeType": content_type}))

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StoreError(f"Failed to store file: {e}") from e
        return file_id

    async def read(self, bucket: str, file_id: str) -> Tuple[bytes, str]:
        """读取文件内容与类型"""
        data_path, meta_path = self._paths(bucket, file_id)

        def _read():
            meta = json.loads(meta_path.read_text()) if meta_path.exists() else {}
            return data_path.read_bytes(), meta.get("mimeType", "application/octet-stream")

        try:
            return await asyncio.to_thread(_read)
        except FileNotFoundError as e:
            raise StoreError("File not found") from e

    async def delete(self, bucket, file_id):
        data_path, meta_path = self._paths(bucket, file_id)

        def _remove():
            data_path.unlink(missing_ok=True)
            meta_path.unlink(missing_ok=True)

        await asyncio.to_thread(_remove)
