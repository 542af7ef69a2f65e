"""
课程接口
"""

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from coursegraph.api.dependencies import get_course_service, get_current_actor, get_progress_service
from coursegraph.core.config import settings
from coursegraph.core.exceptions import ApplyState
from coursegraph.models.course import Actor, CourseCreate
from coursegraph.models.responses import ApiResponse
from coursegraph.services.course_service import CourseService
from coursegraph.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/courses", tags=["课程"])

THUMBNAIL_FIELD = "thumbnail_image"


@router.post("", response_model=ApiResponse)
async def create_course(
    course_name: Optional[str] = Form(None),
    course_description: Optional[str] = Form(None),
    what_you_will_learn: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    tag: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    instructions: Optional[str] = Form(None),
    thumbnail_image: Optional[UploadFile] = File(None),
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service)
):
    """创建课程（multipart表单，tag/instructions为JSON字符串）"""
    course_data = CourseCreate(
        course_name=course_name,
        course_description=course_description,
        what_you_will_learn=what_you_will_learn,
        price=price,
        tag=tag,
        category=category,
        status=status,
        instructions=instructions
    )
    course = await course_service.create_course(course_data, actor.user_id, thumbnail_image)
    return ApiResponse.ok("课程创建成功", course.model_dump(mode="json"), applied=ApplyState.FULL)


@router.get("", response_model=ApiResponse)
async def list_published_courses(course_service: CourseService = Depends(get_course_service)):
    """已发布课程列表"""
    courses = await course_service.list_published_courses()
    return ApiResponse.ok("课程列表获取成功", [course.model_dump(mode="json") for course in courses])


@router.get("/instructor/mine", response_model=ApiResponse)
async def list_instructor_courses(
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service)
):
    """当前讲师的全部课程"""
    courses = await course_service.list_instructor_courses(actor.user_id)
    return ApiResponse.ok("讲师课程获取成功", [course.model_dump(mode="json") for course in courses])


@router.get("/{course_id}", response_model=ApiResponse)
async def get_course_details(course_id: str, course_service: CourseService = Depends(get_course_service)):
    """课程详情"""
    course = await course_service.get_course_details(course_id)
    return ApiResponse.ok("课程详情获取成功", course.model_dump(mode="json"))


@router.get("/{course_id}/full", response_model=ApiResponse)
async def get_full_course_details(
    course_id: str,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service)
):
    """课程详情 + 总时长 + 当前用户的学习进度"""
    details = await course_service.get_full_course_details(course_id, actor.user_id)
    return ApiResponse.ok("课程完整详情获取成功", details.model_dump(mode="json"))


@router.patch("/{course_id}", response_model=ApiResponse)
async def edit_course(
    course_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service)
):
    """部分更新课程，支持multipart表单或JSON"""
    patch, thumbnail = await _read_patch(request)
    course = await course_service.edit_course(course_id, patch, thumbnail)
    logger.info(f"课程 {course_id} 由 {actor.user_id} 更新")
    return ApiResponse.ok("课程更新成功", course.model_dump(mode="json"), applied=ApplyState.FULL)


@router.delete("/{course_id}", response_model=ApiResponse)
async def delete_course(
    course_id: str,
    actor: Actor = Depends(get_current_actor),
    course_service: CourseService = Depends(get_course_service)
):
    """级联删除课程"""
    ack = await course_service.delete_course(course_id)
    logger.info(f"课程 {course_id} 由 {actor.user_id} 删除")
    return ApiResponse.ok("课程删除成功", ack.model_dump(mode="json"), applied=ApplyState.FULL)


@router.post("/{course_id}/progress/{sub_section_id}", response_model=ApiResponse)
async def mark_sub_section_complete(
    course_id: str,
    sub_section_id: str,
    actor: Actor = Depends(get_current_actor),
    progress_service: ProgressService = Depends(get_progress_service)
):
    """标记课时完成"""
    update = await progress_service.mark_sub_section_complete(course_id, actor.user_id, sub_section_id)
    message = "课时已标记完成" if update.changed else "课时此前已完成"
    return ApiResponse.ok(message, update.model_dump(mode="json"), applied=ApplyState.FULL)


async def _read_patch(request: Request) -> Tuple[Dict[str, Any], Any]:
    """拆分请求体为修改字段和可选的新封面文件"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.json()
        return (body if isinstance(body, dict) else {}), None

    form = await request.form()
    patch: Dict[str, Any] = {}
    thumbnail = None
    for key, value in form.multi_items():
        if isinstance(value, StarletteUploadFile):
            if key == THUMBNAIL_FIELD:
                thumbnail = value
            continue
        patch[key] = value
    return patch, thumbnail
