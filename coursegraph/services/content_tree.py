"""
课程内容树组装
把课程记录上的引用（讲师、分类、章节、课时）解析为完整视图
"""

import logging
from typing import List

from coursegraph.core.exceptions import CourseNotFoundError
from coursegraph.models.course import (
    Course,
    CourseView,
    CategorySummary,
    InstructorSummary,
    MissingReference,
    SectionView,
    SubSectionView,
    ViewDepth
)
from coursegraph.models.database.course_db import CourseDB
from coursegraph.repositories.entity_store import EntityKind, EntityStore

logger = logging.getLogger(__name__)


class ContentTreeAssembler:
    """课程内容树组装器

    子级按层批量读取，再按父记录上的引用顺序排列，保证同一输入得到同一结构。
    已失效的引用（记录已被删除）直接跳过，并记录在视图的 missing_references 中。
    """

    def __init__(self, store: EntityStore):
        self.store = store

    async def assemble(self, course_id: str, depth: ViewDepth = ViewDepth.FULL) -> CourseView:
        db_course = await self.store.find_by_id(EntityKind.COURSE, course_id)
        if db_course is None:
            raise CourseNotFoundError(course_id)
        return await self.assemble_record(db_course, depth)

    async def assemble_record(self, db_course: CourseDB, depth: ViewDepth = ViewDepth.FULL) -> CourseView:
        course = Course.model_validate(db_course)
        missing: List[MissingReference] = []

        instructor = await self.store.find_by_id(EntityKind.USER, course.instructor_id)
        if instructor is None:
            missing.append(MissingReference(kind="instructor", reference_id=course.instructor_id, parent_id=course.course_id))

        category = await self.store.find_by_id(EntityKind.CATEGORY, course.category_id)
        if category is None:
            missing.append(MissingReference(kind="category", reference_id=course.category_id, parent_id=course.course_id))

        sections: List[SectionView] = []
        if depth == ViewDepth.FULL:
            sections = await self._resolve_sections(course, missing)

        if missing:
            logger.warning(
                f"课程 {course.course_id} 存在失效引用: "
                + ", ".join(f"{ref.kind}:{ref.reference_id}" for ref in missing)
            )

        return CourseView(
            **course.model_dump(),
            depth=depth,
            instructor=InstructorSummary.model_validate(instructor) if instructor else None,
            category=CategorySummary.model_validate(category) if category else None,
            sections=sections,
            missing_references=missing
        )

    async def _resolve_sections(self, course: Course, missing: List[MissingReference]) -> List[SectionView]:
        db_sections = await self.store.find_many(EntityKind.SECTION, course.course_content)

        ordered_sections = []
        for section_id in course.course_content:
            db_section = db_sections.get(section_id)
            if db_section is None:
                missing.append(MissingReference(kind="section", reference_id=section_id, parent_id=course.course_id))
                continue
            ordered_sections.append(db_section)

        sub_section_ids = [
            sub_section_id
            for db_section in ordered_sections
            for sub_section_id in (db_section.sub_section or [])
        ]
        db_sub_sections = await self.store.find_many(EntityKind.SUB_SECTION, sub_section_ids)

        sections = []
        for db_section in ordered_sections:
            sub_sections = []
            for sub_section_id in db_section.sub_section or []:
                db_sub_section = db_sub_sections.get(sub_section_id)
                if db_sub_section is None:
                    missing.append(MissingReference(
                        kind="sub_section", reference_id=sub_section_id, parent_id=db_section.section_id
                    ))
                    continue
                sub_sections.append(SubSectionView.model_validate(db_sub_section))

            sections.append(SectionView(
                section_id=db_section.section_id,
                section_name=db_section.section_name,
                sub_section=sub_sections
            ))

        return sections
