"""
课程级联删除
按顺序逐步删除并逐步提交，不包在单个事务里；每一步都是幂等的，
中途失败后重新执行删除即可把剩余部分清理干净。
"""

from typing import Awaitable, Callable, List, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from coursegraph.core.exceptions import CourseNotFoundError, PartialCascadeError, StoreError
from coursegraph.models.course import DeletionAck
from coursegraph.repositories.entity_store import BackReferenceKind, EntityKind, EntityStore

logger = structlog.get_logger()

T = TypeVar("T")


class CascadeDeletionCoordinator:
    """课程级联删除协调器

    顺序：
    1. 读取课程，不存在则 CourseNotFoundError
    2. 从每个已报名学员的报名列表中移除课程（学员不存在则跳过）
    3. 按课程内容顺序，先删除章节下的全部课时，再删除章节
    4. 从讲师和分类的课程列表中移除课程
    5. 删除课程记录

    课程记录最后删除，保证失败后仍能通过课程ID重新执行。
    """

    def __init__(self, store: EntityStore):
        self.store = store

    async def delete_course(self, course_id: str) -> DeletionAck:
        completed_steps: List[str] = []

        async def run_step(step: str, action: Callable[[], Awaitable[T]], commit: bool = True) -> T:
            """执行一步；读取步骤不提交也不计入已完成步骤，但失败时同样区分部分应用"""
            try:
                result = await action()
                if commit:
                    await self.store.commit()
            except SQLAlchemyError as e:
                await self.store.rollback()
                if completed_steps:
                    logger.error(
                        "课程级联删除部分完成",
                        course_id=course_id,
                        completed_steps=completed_steps,
                        failed_step=step,
                        error=str(e)
                    )
                    raise PartialCascadeError(course_id, completed_steps, step, str(e)) from e
                logger.error("课程删除失败，未产生任何写入", course_id=course_id, failed_step=step, error=str(e))
                raise StoreError(f"课程删除失败: {course_id}", details={"failed_step": step}) from e
            if commit:
                completed_steps.append(step)
            return result

        db_course = await run_step(
            "load_course", lambda: self.store.find_by_id(EntityKind.COURSE, course_id), commit=False
        )
        if db_course is None:
            raise CourseNotFoundError(course_id)

        students = list(db_course.students_enrolled or [])
        section_ids = list(db_course.course_content or [])
        instructor_id = db_course.instructor_id
        category_id = db_course.category_id

        ack = DeletionAck(course_id=course_id)

        # 学员报名列表
        for student_id in students:
            retracted = await run_step(
                f"unenroll:{student_id}",
                lambda student_id=student_id: self.store.remove_back_reference(
                    BackReferenceKind.STUDENT_ENROLLMENTS, student_id, course_id
                )
            )
            if retracted:
                ack.unenrolled_students.append(student_id)
            else:
                logger.info("学员不存在或未报名，跳过", course_id=course_id, student_id=student_id)

        # 章节和课时
        for section_id in section_ids:
            db_section = await run_step(
                f"load_section:{section_id}",
                lambda section_id=section_id: self.store.find_by_id(EntityKind.SECTION, section_id),
                commit=False
            )
            sub_section_ids = list(db_section.sub_section or []) if db_section else []

            for sub_section_id in sub_section_ids:
                deleted = await run_step(
                    f"delete_sub_section:{sub_section_id}",
                    lambda sub_section_id=sub_section_id: self.store.delete_by_id(
                        EntityKind.SUB_SECTION, sub_section_id
                    )
                )
                if deleted:
                    ack.deleted_sub_sections.append(sub_section_id)

            deleted = await run_step(
                f"delete_section:{section_id}",
                lambda section_id=section_id: self.store.delete_by_id(EntityKind.SECTION, section_id)
            )
            if deleted:
                ack.deleted_sections.append(section_id)

        # 讲师和分类上的反向引用
        for kind, owner_id in (
            (BackReferenceKind.INSTRUCTOR_COURSES, instructor_id),
            (BackReferenceKind.CATEGORY_COURSES, category_id),
        ):
            retracted = await run_step(
                f"retract:{kind.value}:{owner_id}",
                lambda kind=kind, owner_id=owner_id: self.store.remove_back_reference(kind, owner_id, course_id)
            )
            if retracted:
                ack.retracted_back_references.append(f"{kind.value}:{owner_id}")

        await run_step("delete_course", lambda: self.store.delete_by_id(EntityKind.COURSE, course_id))

        logger.info(
            "课程删除完成",
            course_id=course_id,
            sections=len(ack.deleted_sections),
            sub_sections=len(ack.deleted_sub_sections),
            students=len(ack.unenrolled_students)
        )
        return ack
