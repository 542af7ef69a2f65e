"""
实体存储层
按实体类型提供统一的按ID读写，以及引用列表的原子集合操作（不存在才添加 / 存在才移除）
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from coursegraph.models.database.course_db import CourseDB, SectionDB, SubSectionDB
from coursegraph.models.database.catalog_db import CategoryDB, UserDB
from coursegraph.models.database.progress_db import CourseProgressDB

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """实体类型"""
    COURSE = "course"
    SECTION = "section"
    SUB_SECTION = "sub_section"
    PROGRESS = "progress"
    CATEGORY = "category"
    USER = "user"


class BackReferenceKind(str, Enum):
    """指向课程的反向引用列表"""
    INSTRUCTOR_COURSES = "instructor_courses"
    CATEGORY_COURSES = "category_courses"
    STUDENT_ENROLLMENTS = "student_enrollments"


_ENTITY_MODELS = {
    EntityKind.COURSE: (CourseDB, CourseDB.course_id),
    EntityKind.SECTION: (SectionDB, SectionDB.section_id),
    EntityKind.SUB_SECTION: (SubSectionDB, SubSectionDB.sub_section_id),
    EntityKind.PROGRESS: (CourseProgressDB, CourseProgressDB.progress_id),
    EntityKind.CATEGORY: (CategoryDB, CategoryDB.category_id),
    EntityKind.USER: (UserDB, UserDB.user_id),
}

# 反向引用类型 -> (所属实体类型, 列表字段)
_BACK_REFERENCE_FIELDS = {
    BackReferenceKind.INSTRUCTOR_COURSES: (EntityKind.USER, "courses"),
    BackReferenceKind.CATEGORY_COURSES: (EntityKind.CATEGORY, "courses"),
    BackReferenceKind.STUDENT_ENROLLMENTS: (EntityKind.USER, "enrolled_courses"),
}


def _model_for(kind: EntityKind) -> Tuple[Any, Any]:
    return _ENTITY_MODELS[EntityKind(kind)]


class EntityStore:
    """实体存储"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, kind: EntityKind, entity_id: str) -> Optional[Any]:
        """根据ID获取实体，不存在返回None"""
        if not entity_id:
            return None
        model, pk = _model_for(kind)
        result = await self.db.execute(select(model).where(pk == entity_id))
        return result.scalar_one_or_none()

    async def find_many(self, kind: EntityKind, entity_ids: Iterable[str]) -> Dict[str, Any]:
        """批量获取实体，返回 ID -> 实体 的映射，不存在的ID不出现在结果里"""
        ids = {entity_id for entity_id in entity_ids if entity_id}
        if not ids:
            return {}
        model, pk = _model_for(kind)
        result = await self.db.execute(select(model).where(pk.in_(ids)))
        return {getattr(row, pk.key): row for row in result.scalars().all()}

    async def delete_by_id(self, kind: EntityKind, entity_id: str) -> bool:
        """删除实体，记录不存在时为空操作"""
        model, pk = _model_for(kind)
        result = await self.db.execute(delete(model).where(pk == entity_id))
        deleted = result.rowcount > 0
        if not deleted:
            logger.debug(f"删除时记录已不存在: {kind.value}:{entity_id}")
        return deleted

    async def save(self, entity: Any) -> Any:
        """持久化实体上被修改过的字段"""
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def _lock(self, kind: EntityKind, entity_id: str) -> Optional[Any]:
        """加行锁读取最新记录"""
        model, pk = _model_for(kind)
        result = await self.db.execute(
            select(model)
            .where(pk == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_reference(self, kind: EntityKind, owner_id: str, field: str, value: str) -> bool:
        """向实体的ID列表字段追加值（已存在则不变），返回列表是否发生变化"""
        owner = await self._lock(kind, owner_id)
        if owner is None:
            logger.warning(f"引用列表所属实体不存在: {kind.value}:{owner_id}")
            return False

        current = list(getattr(owner, field) or [])
        if value in current:
            return False

        # JSON列需要整体重新赋值才能被识别为修改
        setattr(owner, field, current + [value])
        await self.db.flush()
        return True

    async def remove_reference(self, kind: EntityKind, owner_id: str, field: str, value: str) -> bool:
        """从实体的ID列表字段移除值（不存在则不变），返回列表是否发生变化"""
        owner = await self._lock(kind, owner_id)
        if owner is None:
            logger.warning(f"引用列表所属实体不存在: {kind.value}:{owner_id}")
            return False

        current = list(getattr(owner, field) or [])
        if value not in current:
            return False

        setattr(owner, field, [item for item in current if item != value])
        await self.db.flush()
        return True

    async def add_back_reference(self, kind: BackReferenceKind, owner_id: str, course_id: str) -> bool:
        """在讲师/分类/学员上登记课程反向引用"""
        entity_kind, field = _BACK_REFERENCE_FIELDS[BackReferenceKind(kind)]
        return await self.add_reference(entity_kind, owner_id, field, course_id)

    async def remove_back_reference(self, kind: BackReferenceKind, owner_id: str, course_id: str) -> bool:
        """撤销讲师/分类/学员上的课程反向引用"""
        entity_kind, field = _BACK_REFERENCE_FIELDS[BackReferenceKind(kind)]
        return await self.remove_reference(entity_kind, owner_id, field, course_id)
