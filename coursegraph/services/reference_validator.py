"""
创建课程时的引用校验
只读检查：必填字段、讲师身份、分类存在，不做任何写入
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from coursegraph.core.exceptions import (
    ActorNotInstructorError,
    CategoryNotFoundError,
    InvalidFieldEncodingError,
    InvalidFieldValueError,
    MissingFieldError
)
from coursegraph.models.course import AccountType, CourseCreate, CourseStatus, ValidatedCourseInput
from coursegraph.repositories.entity_store import EntityKind, EntityStore

REQUIRED_FIELDS = (
    "course_name",
    "course_description",
    "what_you_will_learn",
    "price",
    "tag",
    "thumbnail",
    "category",
)

COURSE_NAME_MAX_LENGTH = 200


def is_blank(value: Any) -> bool:
    """None、空字符串、空列表都视为未提供；价格0不算空"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def decode_string_list(field: str, value: Any) -> Optional[List[str]]:
    """表单里的列表字段以JSON字符串传入，需要先解码"""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (TypeError, ValueError) as e:
            raise InvalidFieldEncodingError(field, str(e)) from e
    if not isinstance(value, list):
        raise InvalidFieldEncodingError(field, "应为字符串数组")
    return [str(item) for item in value]


def parse_course_name(value: Any) -> str:
    """课程名去掉首尾空白后不能为空，且不超过表字段长度"""
    name = str(value).strip() if value is not None else ""
    if not name:
        raise InvalidFieldValueError("course_name", "不能为空")
    if len(name) > COURSE_NAME_MAX_LENGTH:
        raise InvalidFieldValueError("course_name", f"长度不能超过{COURSE_NAME_MAX_LENGTH}个字符")
    return name


def parse_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidFieldValueError("price", "不是合法数字") from e
    if not price.is_finite() or price < 0:
        raise InvalidFieldValueError("price", "价格不能为负数")
    return price


def parse_status(value: Any) -> CourseStatus:
    try:
        return CourseStatus(value)
    except ValueError as e:
        raise InvalidFieldValueError("status", f"只能是 {', '.join(s.value for s in CourseStatus)}") from e


class ReferenceValidator:
    """课程创建引用校验器"""

    def __init__(self, store: EntityStore):
        self.store = store

    async def validate_create(self, request: CourseCreate, actor_id: str, thumbnail: Any) -> ValidatedCourseInput:
        values = request.model_dump()
        values["thumbnail"] = thumbnail

        missing = [field for field in REQUIRED_FIELDS if is_blank(values.get(field))]
        if missing:
            raise MissingFieldError(missing)

        course_name = parse_course_name(request.course_name)
        tag = decode_string_list("tag", request.tag)
        if not tag:
            raise MissingFieldError(["tag"])
        instructions = decode_string_list("instructions", request.instructions)
        price = parse_price(request.price)
        status = parse_status(request.status) if request.status else CourseStatus.DRAFT

        instructor = await self.store.find_by_id(EntityKind.USER, actor_id)
        if instructor is None or instructor.account_type != AccountType.INSTRUCTOR.value:
            raise ActorNotInstructorError(actor_id)

        category = await self.store.find_by_id(EntityKind.CATEGORY, request.category)
        if category is None:
            raise CategoryNotFoundError(request.category)

        return ValidatedCourseInput(
            course_name=course_name,
            course_description=request.course_description,
            what_you_will_learn=request.what_you_will_learn,
            price=price,
            tag=tag,
            category_id=category.category_id,
            instructor_id=instructor.user_id,
            status=status,
            instructions=instructions
        )
