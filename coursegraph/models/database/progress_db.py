"""
学习进度数据库模型
"""

from sqlalchemy import Column, String, DateTime, JSON, UniqueConstraint
from coursegraph.core.database import Base
from coursegraph.models.database.course_db import utc_now


class CourseProgressDB(Base):
    """课程学习进度表，每个(课程, 用户)最多一条"""

    __tablename__ = "course_progress"

    progress_id = Column(String(50), primary_key=True, comment="进度ID")
    course_id = Column(String(50), nullable=False, index=True, comment="课程ID")
    user_id = Column(String(50), nullable=False, index=True, comment="用户ID")
    completed_videos = Column(JSON, default=list, comment="已完成课时ID")

    created_at = Column(DateTime(timezone=True), default=utc_now, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, comment="更新时间")

    __table_args__ = (
        UniqueConstraint("course_id", "user_id", name="uq_course_progress_course_user"),
        {'comment': '课程学习进度表'}
    )
