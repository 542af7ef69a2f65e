"""
被课程引用的外部实体：分类和用户
两者只保存指向课程的反向引用列表，不拥有课程
"""

from sqlalchemy import Column, String, Text, DateTime, JSON
from coursegraph.core.database import Base
from coursegraph.models.database.course_db import utc_now


class CategoryDB(Base):
    """课程分类表"""

    __tablename__ = "categories"

    category_id = Column(String(50), primary_key=True, comment="分类ID")
    name = Column(String(100), nullable=False, unique=True, comment="分类名称")
    description = Column(Text, comment="分类描述")
    courses = Column(JSON, default=list, comment="分类下课程ID")

    __table_args__ = (
        {'comment': '课程分类表'}
    )


class UserDB(Base):
    """用户表（讲师/学员/管理员）"""

    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True, comment="用户ID")
    first_name = Column(String(100), nullable=False, comment="名")
    last_name = Column(String(100), nullable=False, comment="姓")
    email = Column(String(200), nullable=False, unique=True, comment="邮箱")
    account_type = Column(String(20), nullable=False, default="Student", index=True, comment="账号类型")

    # 反向引用
    courses = Column(JSON, default=list, comment="讲授的课程ID")
    enrolled_courses = Column(JSON, default=list, comment="报名的课程ID")

    created_at = Column(DateTime(timezone=True), default=utc_now, comment="创建时间")

    __table_args__ = (
        {'comment': '用户表'}
    )
