"""
接口依赖注入
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from coursegraph.core.database import get_db_session
from coursegraph.models.course import AccountType, Actor
from coursegraph.repositories.course_repository import CourseRepository
from coursegraph.repositories.entity_store import EntityStore
from coursegraph.repositories.progress_repository import CourseProgressRepository
from coursegraph.services.course_service import CourseService
from coursegraph.services.media_uploader import LocalMediaUploader
from coursegraph.services.progress_service import ProgressService

# 全局上传器实例
media_uploader = LocalMediaUploader()


async def get_current_actor(
    x_user_id: str = Header(..., alias="X-User-Id"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role")
) -> Actor:
    """读取网关已认证的调用方信息，这里不再重复校验凭证"""
    account_type = None
    if x_user_role:
        try:
            account_type = AccountType(x_user_role)
        except ValueError:
            account_type = None
    return Actor(user_id=x_user_id, account_type=account_type)


def get_progress_service(db: AsyncSession = Depends(get_db_session)) -> ProgressService:
    return ProgressService(EntityStore(db), CourseProgressRepository(db))


def get_course_service(
    db: AsyncSession = Depends(get_db_session),
    progress_service: ProgressService = Depends(get_progress_service)
) -> CourseService:
    return CourseService(
        CourseRepository(db),
        progress_service=progress_service,
        uploader=media_uploader
    )
