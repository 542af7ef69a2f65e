"""
课程内容数据库模型
课程 → 章节 → 课时 三级结构，子级引用以有序ID列表(JSON)保存在父记录上
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Numeric, Text, DateTime, JSON
from coursegraph.core.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CourseDB(Base):
    """课程数据库表"""

    __tablename__ = "courses"

    # 主键和基本信息
    course_id = Column(String(50), primary_key=True, comment="课程ID")
    course_name = Column(String(200), nullable=False, comment="课程名称")
    course_description = Column(Text, nullable=False, comment="课程描述")
    what_you_will_learn = Column(Text, nullable=False, comment="学习成果")

    # 价格和状态
    price = Column(Numeric(10, 2), nullable=False, comment="课程价格")
    status = Column(String(20), nullable=False, default="Draft", index=True, comment="课程状态")
    thumbnail = Column(String(500), nullable=False, comment="封面图URL")

    # 外部引用
    instructor_id = Column(String(50), nullable=False, index=True, comment="讲师ID")
    category_id = Column(String(50), nullable=False, index=True, comment="分类ID")

    # 数组字段
    tag = Column(JSON, default=list, comment="课程标签")
    instructions = Column(JSON, comment="课程须知")
    course_content = Column(JSON, default=list, comment="章节ID有序列表")
    students_enrolled = Column(JSON, default=list, comment="已报名学员ID")

    # 时间
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, comment="更新时间")

    __table_args__ = (
        {'comment': '课程信息表'}
    )


class SectionDB(Base):
    """章节数据库表"""

    __tablename__ = "sections"

    section_id = Column(String(50), primary_key=True, comment="章节ID")
    section_name = Column(String(200), nullable=False, comment="章节名称")
    sub_section = Column(JSON, default=list, comment="课时ID有序列表")

    __table_args__ = (
        {'comment': '课程章节表'}
    )


class SubSectionDB(Base):
    """课时数据库表"""

    __tablename__ = "sub_sections"

    sub_section_id = Column(String(50), primary_key=True, comment="课时ID")
    title = Column(String(200), nullable=False, comment="课时标题")
    description = Column(Text, comment="课时描述")
    video_url = Column(String(500), comment="视频地址")
    # 秒数，历史数据里既有数字也有字符串
    time_duration = Column(String(32), comment="课时时长(秒)")

    __table_args__ = (
        {'comment': '课时表'}
    )
