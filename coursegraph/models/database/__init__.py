"""
数据库模型包初始化文件
"""

from .course_db import CourseDB, SectionDB, SubSectionDB
from .catalog_db import CategoryDB, UserDB
from .progress_db import CourseProgressDB

__all__ = [
    "CourseDB",
    "SectionDB",
    "SubSectionDB",
    "CategoryDB",
    "UserDB",
    "CourseProgressDB"
]
