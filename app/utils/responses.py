"""
把服务层的 ActionResult 转换为接口响应
"""
from typing import List, Optional

from fastapi import Response, UploadFile

from app.schemas.common import ResponseModel
from app.services.results import ActionResult, ErrorKind
from app.services.uploads import UploadedFile

STATUS_CODES = {
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPSTREAM_FAILURE: 502,
}


def to_response(result: ActionResult, response: Response) -> ResponseModel:
    """
    成功时返回200，失败时按错误类型设置HTTP状态码
    """
    if result.success:
        return ResponseModel(code=200, success=True, message=result.message, data=result.data)

    code = STATUS_CODES.get(result.errorKind, 500)
    response.status_code = code
    return ResponseModel(
        code=code,
        success=False,
        message=result.error,
        errorKind=result.errorKind.value if result.errorKind else None,
        data=result.data,
    )


async def read_upload(file: Optional[UploadFile]) -> Optional[UploadedFile]:
    """读取上传文件，未选择文件时返回None"""
    if file is None or not file.filename:
        return None
    content = await file.read()
    return UploadedFile(
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        content=content,
    )


async def read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedFile]:
    uploads = []
    for file in files or []:
        upload = await read_upload(file)
        if upload is not None:
            uploads.append(upload)
    return uploads
