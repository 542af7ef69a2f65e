"""
测试配置文件 - pytest fixtures和共用配置
"""

import uuid
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from coursegraph.core.database import Base
from coursegraph.models.database import CategoryDB, CourseDB, UserDB
from coursegraph.repositories.content_repository import ContentRepository
from coursegraph.repositories.course_repository import CourseRepository
from coursegraph.repositories.entity_store import BackReferenceKind, EntityStore
from coursegraph.repositories.progress_repository import CourseProgressRepository
from coursegraph.services.course_service import CourseService
from coursegraph.services.media_uploader import UploadResult
from coursegraph.services.progress_service import ProgressService


# 配置pytest-asyncio
pytest_plugins = ('pytest_asyncio',)

TEST_THUMBNAIL_URL = "https://media.test/thumbnails/cover.png"


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """测试数据库引擎 - 内存SQLite，每个用例独立"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,  # 设为True可以看到SQL语句
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    # 创建表结构
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_db_engine) -> AsyncSession:
    """测试数据库会话"""
    async_session_maker = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def store(db_session):
    """实体存储"""
    return EntityStore(db_session)


@pytest.fixture
def mock_cache():
    """模拟缓存，默认全部未命中"""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    cache.delete = AsyncMock(return_value=True)
    cache.delete_pattern = AsyncMock(return_value=0)
    return cache


@pytest.fixture
def mock_uploader():
    """模拟媒体上传"""
    uploader = AsyncMock()
    uploader.upload = AsyncMock(return_value=UploadResult(secure_url=TEST_THUMBNAIL_URL))
    return uploader


@pytest.fixture
def progress_service(db_session):
    """学习进度服务"""
    return ProgressService(EntityStore(db_session), CourseProgressRepository(db_session))


@pytest.fixture
def course_service(db_session, progress_service, mock_uploader, mock_cache):
    """课程服务，缓存和上传均为模拟对象"""
    return CourseService(
        CourseRepository(db_session),
        progress_service=progress_service,
        uploader=mock_uploader,
        cache=mock_cache
    )


@pytest_asyncio.fixture
async def seeded(db_session):
    """基础数据：一名讲师、两名学员、两个分类"""
    instructor = UserDB(
        user_id="instructor_001", first_name="Lin", last_name="Wang",
        email="lin.wang@example.com", account_type="Instructor",
        courses=[], enrolled_courses=[]
    )
    student_a = UserDB(
        user_id="student_a", first_name="Mei", last_name="Chen",
        email="mei.chen@example.com", account_type="Student",
        courses=[], enrolled_courses=[]
    )
    student_b = UserDB(
        user_id="student_b", first_name="Hao", last_name="Li",
        email="hao.li@example.com", account_type="Student",
        courses=[], enrolled_courses=[]
    )
    python_category = CategoryDB(category_id="category_python", name="Python", description="Python编程", courses=[])
    data_category = CategoryDB(category_id="category_data", name="Data", description="数据分析", courses=[])

    db_session.add_all([instructor, student_a, student_b, python_category, data_category])
    await db_session.commit()

    return SimpleNamespace(
        instructor=instructor,
        student_a=student_a,
        student_b=student_b,
        category=python_category,
        other_category=data_category
    )


@pytest.fixture
def build_course(db_session, seeded):
    """构造一门带章节和课时的课程"""

    async def _build(
        sections: int = 2,
        sub_sections: int = 3,
        duration="60",
        status: str = "Published",
        students=(),
        course_name: str = "Python自动化测试课程"
    ) -> CourseDB:
        course_id = f"course_{uuid.uuid4().hex}"
        db_course = CourseDB(
            course_id=course_id,
            course_name=course_name,
            course_description="学习Python自动化测试技术",
            what_you_will_learn="掌握pytest框架",
            price=Decimal("399.00"),
            tag=["python", "testing"],
            status=status,
            thumbnail=TEST_THUMBNAIL_URL,
            instructor_id=seeded.instructor.user_id,
            category_id=seeded.category.category_id,
            instructions=["准备好Python 3环境"],
            course_content=[],
            students_enrolled=[]
        )
        db_session.add(db_course)
        await db_session.flush()

        store = EntityStore(db_session)
        await store.add_back_reference(BackReferenceKind.INSTRUCTOR_COURSES, seeded.instructor.user_id, course_id)
        await store.add_back_reference(BackReferenceKind.CATEGORY_COURSES, seeded.category.category_id, course_id)

        content_repo = ContentRepository(db_session)
        for i in range(sections):
            section = await content_repo.create_section(course_id, f"第{i + 1}章")
            for j in range(sub_sections):
                await content_repo.create_sub_section(
                    section.section_id,
                    f"第{i + 1}章 课时{j + 1}",
                    time_duration=duration,
                    video_url=f"https://media.test/videos/{i}_{j}.mp4"
                )

        course_repo = CourseRepository(db_session)
        for student_id in students:
            await course_repo.enroll_student(course_id, student_id)

        await db_session.commit()
        return db_course

    return _build


@pytest.fixture
def count_rows(db_session):
    """统计表中记录数"""

    async def _count(model) -> int:
        result = await db_session.execute(select(func.count()).select_from(model))
        return result.scalar_one()

    return _count
