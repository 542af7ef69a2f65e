"""
业务异常定义
所有异常都携带错误码、HTTP状态码和写入状态（完全应用/未应用/部分应用）
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ApplyState(str, Enum):
    """写操作的落库状态"""
    FULL = "full"
    NONE = "none"
    PARTIAL = "partial"


class BusinessException(Exception):
    """业务异常基类"""

    status_code: int = 400
    default_error_code: str = "BUSINESS_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        applied: ApplyState = ApplyState.NONE
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        self.applied = applied


# ---- 校验错误：调用方问题，不重试 ----

class ValidationError(BusinessException):
    status_code = 400
    default_error_code = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    default_error_code = "MISSING_FIELD"

    def __init__(self, fields: List[str]):
        super().__init__(
            f"必填字段缺失: {', '.join(fields)}",
            details={"fields": list(fields)}
        )
        self.fields = list(fields)


class InvalidFieldEncodingError(ValidationError):
    default_error_code = "INVALID_FIELD_ENCODING"

    def __init__(self, field: str, reason: str = ""):
        super().__init__(
            f"字段 {field} 不是合法的JSON编码值",
            details={"field": field, "reason": reason}
        )
        self.field = field


class InvalidFieldValueError(ValidationError):
    default_error_code = "INVALID_FIELD_VALUE"

    def __init__(self, field: str, reason: str):
        super().__init__(f"字段 {field} 取值非法: {reason}", details={"field": field, "reason": reason})
        self.field = field


class UnknownFieldError(ValidationError):
    default_error_code = "UNKNOWN_FIELD"

    def __init__(self, fields: List[str]):
        super().__init__(
            f"不允许修改的字段: {', '.join(fields)}",
            details={"fields": list(fields)}
        )
        self.fields = list(fields)


# ---- 资源不存在 ----

class NotFoundError(BusinessException):
    status_code = 404
    default_error_code = "NOT_FOUND"


class CourseNotFoundError(NotFoundError):
    default_error_code = "COURSE_NOT_FOUND"

    def __init__(self, course_id: str):
        super().__init__(f"课程不存在: {course_id}", details={"course_id": course_id})
        self.course_id = course_id


class CategoryNotFoundError(NotFoundError):
    default_error_code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str):
        super().__init__(f"分类不存在: {category_id}", details={"category_id": category_id})
        self.category_id = category_id


class SubSectionNotFoundError(NotFoundError):
    default_error_code = "SUB_SECTION_NOT_FOUND"

    def __init__(self, sub_section_id: str):
        super().__init__(f"课时不存在: {sub_section_id}", details={"sub_section_id": sub_section_id})
        self.sub_section_id = sub_section_id


class ActorNotInstructorError(NotFoundError):
    status_code = 403
    default_error_code = "ACTOR_NOT_INSTRUCTOR"

    def __init__(self, actor_id: str):
        super().__init__(f"讲师信息不存在: {actor_id}", details={"actor_id": actor_id})
        self.actor_id = actor_id


# ---- 上游错误：可由调用方重试 ----

class UpstreamError(BusinessException):
    status_code = 502
    default_error_code = "UPSTREAM_ERROR"


class UploadError(UpstreamError):
    default_error_code = "UPLOAD_FAILED"


class StoreError(UpstreamError):
    status_code = 503
    default_error_code = "STORE_UNAVAILABLE"


# ---- 部分应用：已有写入生效，需要重新执行来恢复 ----

class PartialWriteError(BusinessException):
    status_code = 500
    default_error_code = "PARTIALLY_APPLIED"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details, applied=ApplyState.PARTIAL)


class PartialCascadeError(PartialWriteError):
    default_error_code = "PARTIAL_CASCADE"

    def __init__(self, course_id: str, completed_steps: List[str], failed_step: str, reason: str):
        super().__init__(
            f"课程 {course_id} 删除在步骤 {failed_step} 失败，已部分删除，请重新执行删除",
            details={
                "course_id": course_id,
                "completed_steps": list(completed_steps),
                "failed_step": failed_step,
                "reason": reason
            }
        )
        self.course_id = course_id
        self.completed_steps = list(completed_steps)
        self.failed_step = failed_step
