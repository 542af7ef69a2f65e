"""
课程业务服务层
创建、编辑、查询、删除课程，并维护课程视图缓存
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from coursegraph.core.config import settings
from coursegraph.core.exceptions import (
    CategoryNotFoundError,
    CourseNotFoundError,
    InvalidFieldValueError,
    PartialWriteError,
    UnknownFieldError
)
from coursegraph.models.course import (
    Course,
    CourseCreate,
    CourseView,
    DeletionAck,
    FullCourseDetails,
    ViewDepth
)
from coursegraph.repositories.course_repository import CourseRepository
from coursegraph.repositories.entity_store import BackReferenceKind, EntityKind
from coursegraph.services.cascade_deletion import CascadeDeletionCoordinator
from coursegraph.services.common_cache import SimpleCache, course_cache
from coursegraph.services.content_tree import ContentTreeAssembler
from coursegraph.services.duration import total_duration
from coursegraph.services.media_uploader import LocalMediaUploader, MediaUploader
from coursegraph.services.progress_service import ProgressService
from coursegraph.services.reference_validator import (
    ReferenceValidator,
    decode_string_list,
    is_blank,
    parse_course_name,
    parse_price,
    parse_status
)

logger = logging.getLogger(__name__)


def _parse_text(field: str) -> Callable[[Any], str]:
    def parse(value: Any) -> str:
        if is_blank(value):
            raise InvalidFieldValueError(field, "不能为空")
        return str(value)
    return parse


def _parse_status(value: Any) -> str:
    return parse_status(value).value


def _parse_list(field: str) -> Callable[[Any], List[str]]:
    return lambda value: decode_string_list(field, value) or []


def _parse_tag(value: Any) -> List[str]:
    tag = decode_string_list("tag", value)
    if not tag:
        raise InvalidFieldValueError("tag", "至少需要一个标签")
    return tag


# 允许编辑的字段 -> 类型化解析函数；category需要异步校验，单独处理
EDITABLE_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "course_name": parse_course_name,
    "course_description": _parse_text("course_description"),
    "what_you_will_learn": _parse_text("what_you_will_learn"),
    "price": parse_price,
    "tag": _parse_tag,
    "instructions": _parse_list("instructions"),
    "status": _parse_status,
    # 整体替换章节序列，仅在明确需要时使用
    "course_content": _parse_list("course_content"),
}

# 请求里会带上但不属于修改内容的键
IGNORED_PATCH_KEYS = {"course_id"}


class CourseService:
    """课程业务服务"""

    def __init__(
        self,
        course_repo: CourseRepository,
        progress_service: ProgressService,
        uploader: Optional[MediaUploader] = None,
        cache: Optional[SimpleCache] = None
    ):
        self.course_repo = course_repo
        self.store = course_repo.store
        self.progress_service = progress_service
        self.validator = ReferenceValidator(self.store)
        self.assembler = ContentTreeAssembler(self.store)
        self.deletion = CascadeDeletionCoordinator(self.store)
        self.uploader = uploader or LocalMediaUploader()
        self.cache = cache or course_cache
        self.cache_ttl = settings.course_cache_ttl

    async def create_course(self, course_data: CourseCreate, actor_id: str, thumbnail: Any) -> Course:
        """创建课程

        校验全部通过后才上传封面并写库；课程写入后再登记讲师和分类的反向引用。
        """
        validated = await self.validator.validate_create(course_data, actor_id, thumbnail)

        upload = await self.uploader.upload(thumbnail, settings.media_folder_name)

        db_course = await self.course_repo.create(validated, upload.secure_url)
        await self.store.commit()
        course = self.course_repo.to_model(db_course)
        logger.info(f"课程创建成功: {course.course_id} by {actor_id}")

        try:
            await self.store.add_back_reference(
                BackReferenceKind.INSTRUCTOR_COURSES, validated.instructor_id, course.course_id
            )
            await self.store.add_back_reference(
                BackReferenceKind.CATEGORY_COURSES, validated.category_id, course.course_id
            )
            await self.store.commit()
        except SQLAlchemyError as e:
            await self.store.rollback()
            logger.error(f"课程 {course.course_id} 已创建，但登记反向引用失败: {e}")
            raise PartialWriteError(
                f"课程已创建，但讲师/分类关联登记失败: {course.course_id}",
                details={"course_id": course.course_id}
            ) from e

        await self._clear_course_caches()
        return course

    async def edit_course(
        self,
        course_id: str,
        patch: Mapping[str, Any],
        thumbnail: Any = None
    ) -> CourseView:
        """部分更新课程，只修改请求中出现的字段"""
        db_course = await self.course_repo.get_by_course_id(course_id)
        if not db_course:
            raise CourseNotFoundError(course_id)

        updates = {key: value for key, value in patch.items() if key not in IGNORED_PATCH_KEYS}
        unknown = sorted(key for key in updates if key not in EDITABLE_FIELDS and key != "category")
        if unknown:
            raise UnknownFieldError(unknown)

        # 先全部解析，任一字段非法都不产生写入
        parsed = {key: EDITABLE_FIELDS[key](value) for key, value in updates.items() if key != "category"}

        new_category_id = None
        if "category" in updates:
            new_category_id = updates["category"]
            if await self.store.find_by_id(EntityKind.CATEGORY, new_category_id) is None:
                raise CategoryNotFoundError(new_category_id)

        if thumbnail is not None:
            upload = await self.uploader.upload(thumbnail, settings.media_folder_name)
            db_course.thumbnail = upload.secure_url

        for key, value in parsed.items():
            setattr(db_course, key, value)

        old_category_id = db_course.category_id
        if new_category_id and new_category_id != old_category_id:
            db_course.category_id = new_category_id
            await self.store.remove_back_reference(BackReferenceKind.CATEGORY_COURSES, old_category_id, course_id)
            await self.store.add_back_reference(BackReferenceKind.CATEGORY_COURSES, new_category_id, course_id)

        await self.store.save(db_course)
        await self.store.commit()
        logger.info(f"课程更新成功: {course_id} 字段: {sorted(updates)}")

        await self._clear_course_caches(course_id)
        return await self.assembler.assemble_record(db_course, ViewDepth.FULL)

    async def list_published_courses(self, use_cache: bool = True) -> List[CourseView]:
        """已发布课程列表（浅层视图）"""
        cache_key = "published"

        if use_cache:
            cached_courses = await self.cache.get(cache_key)
            if cached_courses:
                return [CourseView.model_validate(data) for data in cached_courses]

        db_courses = await self.course_repo.get_published_courses()
        courses = [await self.assembler.assemble_record(db_course, ViewDepth.SHALLOW) for db_course in db_courses]

        if use_cache:
            await self.cache.set(
                cache_key,
                [course.model_dump(mode="json") for course in courses],
                ttl=self.cache_ttl // 2  # 列表缓存时间短一些
            )

        return courses

    async def get_course_details(self, course_id: str, use_cache: bool = True) -> CourseView:
        """课程详情（完整课程树）"""
        cache_key = f"detail:{course_id}"

        if use_cache:
            cached_course = await self.cache.get(cache_key)
            if cached_course:
                return CourseView.model_validate(cached_course)

        course = await self.assembler.assemble(course_id, ViewDepth.FULL)

        if use_cache:
            await self.cache.set(cache_key, course.model_dump(mode="json"), ttl=self.cache_ttl)

        return course

    async def get_full_course_details(self, course_id: str, user_id: str) -> FullCourseDetails:
        """课程详情 + 总时长 + 用户已完成课时"""
        course = await self.get_course_details(course_id)
        completed_videos = await self.progress_service.merge_progress(course_id, user_id)

        return FullCourseDetails(
            course_details=course,
            total_duration=total_duration(course),
            completed_videos=completed_videos
        )

    async def list_instructor_courses(self, instructor_id: str) -> List[CourseView]:
        """讲师的全部课程，最新的在前"""
        db_courses = await self.course_repo.get_instructor_courses(instructor_id)
        return [await self.assembler.assemble_record(db_course, ViewDepth.FULL) for db_course in db_courses]

    async def delete_course(self, course_id: str) -> DeletionAck:
        """级联删除课程"""
        try:
            return await self.deletion.delete_course(course_id)
        finally:
            await self._clear_course_caches(course_id)

    async def _clear_course_caches(self, course_id: Optional[str] = None):
        """清除课程相关缓存"""
        await self.cache.delete("published")
        if course_id:
            await self.cache.delete(f"detail:{course_id}")
