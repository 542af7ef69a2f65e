"""
统一响应模型
所有接口（包括失败路径）都返回同一结构
"""

from typing import Any, Optional
from pydantic import BaseModel

from coursegraph.core.exceptions import ApplyState, BusinessException


class ApiResponse(BaseModel):
    """接口响应包装"""

    success: bool
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    applied: Optional[ApplyState] = None
    details: Optional[dict] = None

    @classmethod
    def ok(cls, message: str, data: Any = None, applied: Optional[ApplyState] = None) -> "ApiResponse":
        return cls(success=True, message=message, data=data, applied=applied)

    @classmethod
    def from_exception(cls, exc: BusinessException) -> "ApiResponse":
        return cls(
            success=False,
            message=exc.message,
            error_code=exc.error_code,
            applied=exc.applied,
            details=exc.details or None
        )
