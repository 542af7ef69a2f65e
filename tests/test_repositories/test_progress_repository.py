"""
学习进度Repository数据库操作测试
"""

import pytest

from coursegraph.models.database import CourseProgressDB
from coursegraph.repositories.progress_repository import CourseProgressRepository


@pytest.mark.asyncio
class TestCourseProgressRepository:
    """学习进度Repository测试类"""

    async def test_get_or_create_once_per_course_and_user(self, db_session, count_rows):
        progress_repo = CourseProgressRepository(db_session)

        first = await progress_repo.get_or_create("course_1", "student_a")
        second = await progress_repo.get_or_create("course_1", "student_a")
        other = await progress_repo.get_or_create("course_1", "student_b")
        await db_session.commit()

        assert first.progress_id == second.progress_id
        assert other.progress_id != first.progress_id
        assert await count_rows(CourseProgressDB) == 2

    async def test_mark_completed(self, db_session):
        progress_repo = CourseProgressRepository(db_session)

        db_progress, changed = await progress_repo.mark_completed("course_1", "student_a", "subsection_1")
        _, changed_again = await progress_repo.mark_completed("course_1", "student_a", "subsection_1")
        await progress_repo.mark_completed("course_1", "student_a", "subsection_2")
        await db_session.commit()

        progress = progress_repo.to_model(db_progress)
        assert changed is True
        assert changed_again is False
        assert progress.completed_videos == ["subsection_1", "subsection_2"]
        assert progress.progress_id.startswith("progress_")

    async def test_get_missing_progress(self, db_session):
        progress_repo = CourseProgressRepository(db_session)

        assert await progress_repo.get_by_course_and_user("course_1", "student_a") is None
