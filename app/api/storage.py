"""
本地文件存储的访问接口

地址格式与托管后端一致，便于切换存储后端时不修改已保存的图片链接
"""
from fastapi import APIRouter, Depends, HTTPException, Response

from app.services.container import Services, get_services
from app.store.base import StoreError
from app.store.blobs import LocalBlobStore

router = APIRouter(prefix="/storage", tags=["文件存储"])


@router.get("/buckets/{bucket}/files/{file_id}/view")
async def view_file(bucket: str, file_id: str, services: Services = Depends(get_services)):
    """
    读取本地存储的文件
    """
    if not isinstance(services.blobs, LocalBlobStore):
        raise HTTPException(status_code=404, detail="File not found")
    try:
        content, mime_type = await services.blobs.read(bucket, file_id)
    except StoreError:
        raise HTTPException(status_code=404, detail="File not found")
    return Response(content=content, media_type=mime_type)
