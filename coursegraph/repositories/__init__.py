"""
仓库包初始化文件 - 数据库访问层
"""

from .entity_store import EntityStore, EntityKind, BackReferenceKind
from .course_repository import CourseRepository
from .content_repository import ContentRepository
from .progress_repository import CourseProgressRepository

__all__ = [
    "EntityStore",
    "EntityKind",
    "BackReferenceKind",
    "CourseRepository",
    "ContentRepository",
    "CourseProgressRepository"
]
