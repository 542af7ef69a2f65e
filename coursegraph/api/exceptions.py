"""
全局异常处理器
所有失败路径都返回统一的 ApiResponse 结构
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from coursegraph.core.exceptions import ApplyState, BusinessException, PartialWriteError
from coursegraph.models.responses import ApiResponse

logger = logging.getLogger(__name__)


def _response(status_code: int, body: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """业务异常"""
    if isinstance(exc, PartialWriteError):
        logger.error(f"部分写入 {request.method} {request.url.path}: {exc.message} {exc.details}")
    elif exc.status_code >= 500:
        logger.error(f"业务异常 {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"请求被拒绝 {request.method} {request.url.path}: {exc.error_code} {exc.message}")
    return _response(exc.status_code, ApiResponse.from_exception(exc))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求参数校验失败"""
    return _response(422, ApiResponse(
        success=False,
        message="请求参数校验失败",
        error_code="REQUEST_VALIDATION_ERROR",
        applied=ApplyState.NONE,
        details={"errors": jsonable_errors(exc)}
    ))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTP异常"""
    return _response(exc.status_code, ApiResponse(
        success=False,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}"
    ))


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """数据库异常"""
    logger.error(f"数据库操作失败 {request.method} {request.url.path}: {exc}")
    return _response(503, ApiResponse(
        success=False,
        message="数据存储暂时不可用",
        error_code="STORE_UNAVAILABLE"
    ))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底异常"""
    logger.exception(f"未处理的异常 {request.method} {request.url.path}: {exc}")
    return _response(500, ApiResponse(
        success=False,
        message="服务器内部错误",
        error_code="INTERNAL_ERROR"
    ))


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
