"""
课程内容树组装测试
"""

import pytest

from coursegraph.core.exceptions import CourseNotFoundError
from coursegraph.models.course import ViewDepth
from coursegraph.repositories.entity_store import EntityKind
from coursegraph.services.content_tree import ContentTreeAssembler


@pytest.mark.asyncio
class TestContentTreeAssembler:
    """内容树组装器测试类"""

    @pytest.fixture
    def assembler(self, store):
        return ContentTreeAssembler(store)

    async def test_shallow_view(self, assembler, build_course):
        db_course = await build_course(sections=2, sub_sections=2)

        view = await assembler.assemble(db_course.course_id, ViewDepth.SHALLOW)

        assert view.depth == ViewDepth.SHALLOW
        assert view.sections == []
        assert view.course_content == db_course.course_content
        assert view.instructor.first_name == "Lin"
        assert view.category.name == "Python"

    async def test_full_view_follows_reference_order(self, assembler, store, build_course):
        db_course = await build_course(sections=3, sub_sections=2)
        reordered = list(reversed(db_course.course_content))
        db_course.course_content = reordered
        await store.save(db_course)
        await store.commit()

        view = await assembler.assemble(db_course.course_id)

        assert [section.section_id for section in view.sections] == reordered
        assert view.sections[0].section_name == "第3章"

    async def test_assembly_is_deterministic(self, assembler, build_course):
        db_course = await build_course(sections=2, sub_sections=3)

        first = await assembler.assemble(db_course.course_id)
        second = await assembler.assemble(db_course.course_id)

        assert first.model_dump() == second.model_dump()

    async def test_dangling_section_skipped(self, assembler, store, build_course):
        """已删除的章节被跳过并记录为失效引用"""
        db_course = await build_course(sections=2, sub_sections=1)
        gone_section_id = db_course.course_content[0]
        await store.delete_by_id(EntityKind.SECTION, gone_section_id)
        await store.commit()

        view = await assembler.assemble(db_course.course_id)

        assert [section.section_id for section in view.sections] == db_course.course_content[1:]
        assert len(view.missing_references) == 1
        missing = view.missing_references[0]
        assert missing.kind == "section"
        assert missing.reference_id == gone_section_id
        assert missing.parent_id == db_course.course_id

    async def test_dangling_sub_section_skipped(self, assembler, store, build_course):
        db_course = await build_course(sections=1, sub_sections=3)
        section = await store.find_by_id(EntityKind.SECTION, db_course.course_content[0])
        gone_id = section.sub_section[1]
        await store.delete_by_id(EntityKind.SUB_SECTION, gone_id)
        await store.commit()

        view = await assembler.assemble(db_course.course_id)

        remaining = [sub.sub_section_id for sub in view.sections[0].sub_section]
        assert remaining == [section.sub_section[0], section.sub_section[2]]
        assert view.missing_references[0].kind == "sub_section"
        assert view.missing_references[0].parent_id == section.section_id

    async def test_missing_category_reported(self, assembler, store, build_course):
        db_course = await build_course(sections=0)
        await store.delete_by_id(EntityKind.CATEGORY, "category_python")
        await store.commit()

        view = await assembler.assemble(db_course.course_id, ViewDepth.SHALLOW)

        assert view.category is None
        assert [ref.kind for ref in view.missing_references] == ["category"]

    async def test_missing_course(self, assembler, seeded):
        with pytest.raises(CourseNotFoundError):
            await assembler.assemble("course_missing")
