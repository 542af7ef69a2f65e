"""
课程数据库操作层
"""

import uuid
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from coursegraph.models.course import Course, CourseStatus, ValidatedCourseInput
from coursegraph.models.database.course_db import CourseDB
from coursegraph.repositories.entity_store import EntityKind, EntityStore, BackReferenceKind


class CourseRepository:
    """课程数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)

    async def get_by_course_id(self, course_id: str) -> Optional[CourseDB]:
        """根据课程ID获取课程"""
        if not course_id:
            return None
        result = await self.db.execute(
            select(CourseDB).where(CourseDB.course_id == course_id)
        )
        return result.scalar_one_or_none()

    async def create(self, course_data: ValidatedCourseInput, thumbnail: str) -> CourseDB:
        """创建课程记录"""
        db_course = CourseDB(
            course_id=f"course_{uuid.uuid4().hex}",
            course_name=course_data.course_name,
            course_description=course_data.course_description,
            what_you_will_learn=course_data.what_you_will_learn,
            price=course_data.price,
            tag=list(course_data.tag),
            status=course_data.status.value,
            thumbnail=thumbnail,
            instructor_id=course_data.instructor_id,
            category_id=course_data.category_id,
            instructions=course_data.instructions,
            course_content=[],
            students_enrolled=[]
        )

        self.db.add(db_course)
        await self.db.flush()
        return db_course

    async def get_published_courses(self, limit: int = 100, offset: int = 0) -> List[CourseDB]:
        """获取已发布课程"""
        query = select(CourseDB).where(
            CourseDB.status == CourseStatus.PUBLISHED.value
        ).order_by(desc(CourseDB.created_at)).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_instructor_courses(self, instructor_id: str) -> List[CourseDB]:
        """获取讲师的全部课程，最新创建的在前"""
        query = select(CourseDB).where(
            CourseDB.instructor_id == instructor_id
        ).order_by(desc(CourseDB.created_at))

        result = await self.db.execute(query)
        return result.scalars().all()

    async def enroll_student(self, course_id: str, user_id: str) -> bool:
        """学员报名：课程和学员两侧都按集合语义添加"""
        added = await self.store.add_reference(EntityKind.COURSE, course_id, "students_enrolled", user_id)
        await self.store.add_back_reference(BackReferenceKind.STUDENT_ENROLLMENTS, user_id, course_id)
        return added

    def to_model(self, db_course: CourseDB) -> Course:
        """转换为Pydantic模型"""
        return Course.model_validate(db_course)
