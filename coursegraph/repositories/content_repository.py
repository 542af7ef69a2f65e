"""
章节/课时数据库操作层
章节和课时的创建属于课程编辑流程，这里只提供挂到父级引用列表上的基础写入
"""

import uuid
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from coursegraph.models.database.course_db import SectionDB, SubSectionDB
from coursegraph.repositories.entity_store import EntityKind, EntityStore


class ContentRepository:
    """课程内容数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)

    async def create_section(self, course_id: str, section_name: str) -> Optional[SectionDB]:
        """创建章节并追加到课程内容末尾，课程不存在返回None"""
        course = await self.store.find_by_id(EntityKind.COURSE, course_id)
        if course is None:
            return None

        db_section = SectionDB(
            section_id=f"section_{uuid.uuid4().hex}",
            section_name=section_name,
            sub_section=[]
        )
        self.db.add(db_section)
        await self.db.flush()

        await self.store.add_reference(EntityKind.COURSE, course_id, "course_content", db_section.section_id)
        return db_section

    async def create_sub_section(
        self,
        section_id: str,
        title: str,
        time_duration: Union[int, str, None] = None,
        description: Optional[str] = None,
        video_url: Optional[str] = None
    ) -> Optional[SubSectionDB]:
        """创建课时并追加到章节末尾，章节不存在返回None"""
        section = await self.store.find_by_id(EntityKind.SECTION, section_id)
        if section is None:
            return None

        db_sub_section = SubSectionDB(
            sub_section_id=f"subsection_{uuid.uuid4().hex}",
            title=title,
            description=description,
            video_url=video_url,
            time_duration=str(time_duration) if time_duration is not None else None
        )
        self.db.add(db_sub_section)
        await self.db.flush()

        await self.store.add_reference(EntityKind.SECTION, section_id, "sub_section", db_sub_section.sub_section_id)
        return db_sub_section
