"""
学习进度数据库操作层
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursegraph.models.progress import CourseProgress
from coursegraph.models.database.progress_db import CourseProgressDB
from coursegraph.repositories.entity_store import EntityKind, EntityStore

logger = logging.getLogger(__name__)


class CourseProgressRepository:
    """学习进度数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)

    async def get_by_course_and_user(self, course_id: str, user_id: str) -> Optional[CourseProgressDB]:
        """获取(课程, 用户)唯一的进度记录"""
        result = await self.db.execute(
            select(CourseProgressDB).where(
                and_(
                    CourseProgressDB.course_id == course_id,
                    CourseProgressDB.user_id == user_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, course_id: str, user_id: str) -> CourseProgressDB:
        """首次完成课时时惰性创建进度记录"""
        db_progress = await self.get_by_course_and_user(course_id, user_id)
        if db_progress:
            return db_progress

        db_progress = CourseProgressDB(
            progress_id=f"progress_{uuid.uuid4().hex}",
            course_id=course_id,
            user_id=user_id,
            completed_videos=[]
        )
        self.db.add(db_progress)
        try:
            await self.db.flush()
        except IntegrityError:
            # 并发请求已创建同一条记录，回滚后读取已有记录
            await self.db.rollback()
            logger.info(f"进度记录已被并发创建: {course_id}/{user_id}")
            existing = await self.get_by_course_and_user(course_id, user_id)
            if existing is None:
                raise
            return existing
        return db_progress

    async def mark_completed(self, course_id: str, user_id: str, sub_section_id: str) -> Tuple[CourseProgressDB, bool]:
        """将课时加入已完成集合，返回(进度记录, 是否新增)"""
        db_progress = await self.get_or_create(course_id, user_id)
        changed = await self.store.add_reference(
            EntityKind.PROGRESS, db_progress.progress_id, "completed_videos", sub_section_id
        )
        return db_progress, changed

    def to_model(self, db_progress: CourseProgressDB) -> CourseProgress:
        """转换为Pydantic模型"""
        return CourseProgress.model_validate(db_progress)
