"""
图片上传服务
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.store.base import StoreError, new_id
from app.store.blobs import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """请求中上传的文件"""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class ImageUploader:
    """把图片写入文件存储并返回可访问的URL"""

    def __init__(self, blobs: BlobStore, bucket: str):
        self.blobs = blobs
        self.bucket = bucket

    async def upload(self, upload: UploadedFile) -> str:
        try:
            file_id = await self.blobs.upload(
                self.bucket, new_id(), upload.content, upload.filename, upload.content_type,
            )
        except StoreError as e:
            raise StoreError(f"Failed to upload image {upload.filename}: {e}") from e
        return self.blobs.file_url(self.bucket, file_id)

    async def upload_many(self, uploads: List[UploadedFile]) -> List[str]:
        urls = []
        for upload in uploads:
            urls.append(await self.upload(upload))
        return urls

    async def delete_by_url(self, url: Optional[str]) -> None:
        """按URL删除图片，失败只记录日志"""
        parsed = BlobStore.parse_url(url or "")
        if parsed is None:
            return
        bucket, file_id = parsed
        try:
            await self.blobs.delete(bucket, file_id)
        except StoreError as e:
            logger.warning("failed to delete image %s: %s", url, e)
