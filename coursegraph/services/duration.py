"""
课程总时长计算
"""

import re
from typing import Any, Iterable

from coursegraph.models.course import CourseView

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")

ZERO_DURATION = "0s"


def parse_duration_seconds(value: Any) -> int:
    """解析课时时长为整数秒，无法解析或为负数时按0处理"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return max(int(value), 0)

    # 字符串取前导整数部分，例如 "12.7" -> 12
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return max(int(match.group()), 0)


def sum_durations(values: Iterable[Any]) -> int:
    return sum(parse_duration_seconds(value) for value in values)


def convert_seconds_to_duration(total_seconds: int) -> str:
    """秒数转为 "1h 1m 1s" 格式，为0的分量省略"""
    total_seconds = max(int(total_seconds), 0)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")

    return " ".join(parts) if parts else ZERO_DURATION


def total_duration_seconds(course_view: CourseView) -> int:
    """按课程顺序遍历章节和课时，累加时长秒数"""
    return sum_durations(
        sub_section.time_duration
        for section in course_view.sections
        for sub_section in section.sub_section
    )


def total_duration(course_view: CourseView) -> str:
    return convert_seconds_to_duration(total_duration_seconds(course_view))
