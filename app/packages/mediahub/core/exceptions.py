"""业务异常与全局异常处理：所有错误响应统一为 ``{msg, data, code}``。"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.packages.mediahub.core.logger import logger
from app.packages.mediahub.core.responses import create_response


class AppException(HTTPException):
    """服务层抛出的业务异常，``data`` 会原样放入响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


def _jsonable(obj: Any) -> Any:
    """校验错误中可能夹带异常对象或原始字节，转换为可序列化的值。"""
    if isinstance(obj, Exception):
        return str(obj)
    if isinstance(obj, dict):
        return {key: _jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(item) for item in obj]
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return obj


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    payload = create_response(exc.detail, getattr(exc, "data", None), exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    payload = create_response(
        "请求参数验证失败", _jsonable(exc.errors()), status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """唯一约束冲突（并发写入同一别名或用户名）统一返回 409。"""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    payload = create_response("数据已存在，请勿重复提交", None, status.HTTP_409_CONFLICT)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=payload)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底处理：记录堆栈并返回 500。"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    payload = create_response("服务器内部错误", None, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


EXCEPTION_HANDLERS = {
    StarletteHTTPException: http_exception_handler,
    RequestValidationError: validation_exception_handler,
    IntegrityError: integrity_error_handler,
    Exception: generic_exception_handler,
}
