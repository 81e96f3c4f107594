"""
动作结果

所有对外的服务方法都返回 ActionResult；失败是普通的返回值而不是异常，
调用方必须根据 success 分支处理
"""
import functools
import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """失败类型"""
    NOT_AUTHENTICATED = "NotAuthenticated"
    NOT_AUTHORIZED = "NotAuthorized"
    NOT_FOUND = "NotFound"
    VALIDATION_FAILED = "ValidationFailed"
    CONFLICT = "Conflict"
    UPSTREAM_FAILURE = "UpstreamFailure"


class ActionResult(BaseModel):
    """动作执行结果"""
    success: bool
    error: Optional[str] = None
    errorKind: Optional[ErrorKind] = None
    message: Optional[str] = None
    data: Optional[Any] = None


def ok(data: Any = None, message: Optional[str] = None) -> ActionResult:
    return ActionResult(success=True, data=data, message=message)


def fail(kind: ErrorKind, error: str, data: Any = None) -> ActionResult:
    return ActionResult(success=False, errorKind=kind, error=error, data=data)


def not_authenticated(error: str) -> ActionResult:
    return fail(ErrorKind.NOT_AUTHENTICATED, error)


def not_authorized(error: str) -> ActionResult:
    logger.info("access denied: %s", error)
    return fail(ErrorKind.NOT_AUTHORIZED, error)


def not_found(error: str) -> ActionResult:
    return fail(ErrorKind.NOT_FOUND, error)


def invalid(error: str) -> ActionResult:
    return fail(ErrorKind.VALIDATION_FAILED, error)


def conflict(error: str) -> ActionResult:
    return fail(ErrorKind.CONFLICT, error)


def upstream(error: str) -> ActionResult:
    return fail(ErrorKind.UPSTREAM_FAILURE, error)


def action_boundary(default_error: str):
    """
    动作边界装饰器

    捕获方法内部逃逸的任何异常，转换为 UpstreamFailure 结果。
    异常信息原样传给调用方用于展示，为空时使用 default_error。
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> ActionResult:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.exception("%s failed", func.__qualname__)
                return upstream(str(e) or default_error)
        return wrapper
    return decorator
