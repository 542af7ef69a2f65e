"""
服务包初始化文件
"""

from .course_service import CourseService
from .progress_service import ProgressService
from .cascade_deletion import CascadeDeletionCoordinator
from .content_tree import ContentTreeAssembler
from .reference_validator import ReferenceValidator
from .media_uploader import LocalMediaUploader, MediaUploader, UploadResult
from .common_cache import SimpleCache, course_cache

__all__ = [
    "CourseService",
    "ProgressService",
    "CascadeDeletionCoordinator",
    "ContentTreeAssembler",
    "ReferenceValidator",
    "LocalMediaUploader",
    "MediaUploader",
    "UploadResult",
    "SimpleCache",
    "course_cache"
]
