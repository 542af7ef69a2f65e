"""
学习进度服务
"""

import logging
from typing import List

from coursegraph.core.exceptions import CourseNotFoundError, SubSectionNotFoundError
from coursegraph.models.progress import ProgressUpdate
from coursegraph.repositories.entity_store import EntityKind, EntityStore
from coursegraph.repositories.progress_repository import CourseProgressRepository

logger = logging.getLogger(__name__)


class ProgressService:
    """学习进度服务"""

    def __init__(self, store: EntityStore, progress_repo: CourseProgressRepository):
        self.store = store
        self.progress_repo = progress_repo

    async def merge_progress(self, course_id: str, user_id: str) -> List[str]:
        """用户在课程下已完成的课时ID，未开始学习时返回空列表

        不校验这些ID是否仍在当前课程树中。
        """
        db_progress = await self.progress_repo.get_by_course_and_user(course_id, user_id)
        if db_progress is None:
            return []
        return list(db_progress.completed_videos or [])

    async def mark_sub_section_complete(self, course_id: str, user_id: str, sub_section_id: str) -> ProgressUpdate:
        """标记课时完成，重复标记不报错"""
        if await self.store.find_by_id(EntityKind.COURSE, course_id) is None:
            raise CourseNotFoundError(course_id)
        if await self.store.find_by_id(EntityKind.SUB_SECTION, sub_section_id) is None:
            raise SubSectionNotFoundError(sub_section_id)

        db_progress, changed = await self.progress_repo.mark_completed(course_id, user_id, sub_section_id)
        await self.store.commit()

        if changed:
            logger.info(f"课时完成: course={course_id} user={user_id} sub_section={sub_section_id}")

        return ProgressUpdate(
            course_id=course_id,
            user_id=user_id,
            completed_videos=list(db_progress.completed_videos or []),
            changed=changed
        )
