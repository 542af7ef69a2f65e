"""
数据模型包初始化文件
"""

from .course import (
    Actor,
    AccountType,
    Course,
    CourseCreate,
    CourseStatus,
    CourseView,
    CategorySummary,
    DeletionAck,
    FullCourseDetails,
    InstructorSummary,
    MissingReference,
    SectionView,
    SubSectionView,
    ValidatedCourseInput,
    ViewDepth
)
from .progress import CourseProgress, ProgressUpdate
from .responses import ApiResponse

__all__ = [
    "Actor",
    "AccountType",
    "Course",
    "CourseCreate",
    "CourseStatus",
    "CourseView",
    "CategorySummary",
    "DeletionAck",
    "FullCourseDetails",
    "InstructorSummary",
    "MissingReference",
    "SectionView",
    "SubSectionView",
    "ValidatedCourseInput",
    "ViewDepth",
    "CourseProgress",
    "ProgressUpdate",
    "ApiResponse"
]
