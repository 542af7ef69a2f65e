"""
课程相关数据模型
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Optional, Union, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


class CourseStatus(str, Enum):
    """课程状态枚举"""
    DRAFT = "Draft"
    PUBLISHED = "Published"


class AccountType(str, Enum):
    """账号类型枚举"""
    ADMIN = "Admin"
    STUDENT = "Student"
    INSTRUCTOR = "Instructor"


class ViewDepth(str, Enum):
    """课程视图展开深度"""
    SHALLOW = "shallow"  # 仅解析讲师和分类
    FULL = "full"  # 解析全部章节和课时


class Actor(BaseModel):
    """已认证的调用方"""

    user_id: str
    account_type: Optional[AccountType] = None


class Course(BaseModel):
    """课程基础模型"""

    model_config = ConfigDict(from_attributes=True)

    course_id: str = Field(..., description="课程唯一标识")
    course_name: str = Field(..., min_length=1, max_length=200, description="课程名称")
    course_description: str = Field(..., description="课程描述")
    what_you_will_learn: str = Field(..., description="学习成果")
    price: Decimal = Field(..., ge=0, description="课程价格")
    tag: List[str] = Field(default_factory=list, description="课程标签")
    status: CourseStatus = Field(default=CourseStatus.DRAFT, description="课程状态")
    thumbnail: str = Field(..., description="封面图URL")
    instructor_id: str = Field(..., description="讲师ID")
    category_id: str = Field(..., description="分类ID")
    course_content: List[str] = Field(default_factory=list, description="章节ID有序列表")
    students_enrolled: List[str] = Field(default_factory=list, description="已报名学员ID")
    instructions: Optional[List[str]] = Field(None, description="课程须知")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('tag', 'course_content', 'students_enrolled', mode='before')
    @classmethod
    def none_to_empty_list(cls, v):
        return v if v is not None else []


class CourseCreate(BaseModel):
    """创建课程请求，字段均为原始输入，由引用校验器检查是否齐全"""

    course_name: Optional[str] = None
    course_description: Optional[str] = None
    what_you_will_learn: Optional[str] = None
    price: Optional[Union[Decimal, str]] = None
    tag: Optional[Union[List[str], str]] = None
    category: Optional[str] = None
    status: Optional[str] = None
    instructions: Optional[Union[List[str], str]] = None

    @field_validator('status', mode='before')
    @classmethod
    def blank_status_to_none(cls, v):
        """空字符串视为未提供"""
        if isinstance(v, Enum):
            return v.value
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ValidatedCourseInput(BaseModel):
    """通过校验的创建参数"""

    course_name: str
    course_description: str
    what_you_will_learn: str
    price: Decimal = Field(..., ge=0)
    tag: List[str]
    category_id: str
    instructor_id: str
    status: CourseStatus = CourseStatus.DRAFT
    instructions: Optional[List[str]] = None


class InstructorSummary(BaseModel):
    """讲师信息"""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    first_name: str
    last_name: str
    email: str
    account_type: AccountType


class CategorySummary(BaseModel):
    """分类信息"""

    model_config = ConfigDict(from_attributes=True)

    category_id: str
    name: str
    description: Optional[str] = None


class SubSectionView(BaseModel):
    """课时视图"""

    model_config = ConfigDict(from_attributes=True)

    sub_section_id: str
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    time_duration: Optional[str] = None

    @field_validator('time_duration', mode='before')
    @classmethod
    def duration_to_str(cls, v: Any):
        return str(v) if v is not None else None


class SectionView(BaseModel):
    """章节视图（含课时）"""

    section_id: str
    section_name: str
    sub_section: List[SubSectionView] = Field(default_factory=list)


class MissingReference(BaseModel):
    """组装时无法解析的引用"""

    kind: str = Field(..., description="引用类型: instructor/category/section/sub_section")
    reference_id: str
    parent_id: str


class CourseView(Course):
    """组装后的课程视图"""

    depth: ViewDepth = ViewDepth.SHALLOW
    instructor: Optional[InstructorSummary] = None
    category: Optional[CategorySummary] = None
    sections: List[SectionView] = Field(default_factory=list, description="FULL深度下的章节树")
    missing_references: List[MissingReference] = Field(default_factory=list)


class FullCourseDetails(BaseModel):
    """课程完整详情：课程树 + 总时长 + 已完成课时"""

    course_details: CourseView
    total_duration: str
    completed_videos: List[str] = Field(default_factory=list)


class DeletionAck(BaseModel):
    """课程删除结果"""

    course_id: str
    unenrolled_students: List[str] = Field(default_factory=list)
    deleted_sections: List[str] = Field(default_factory=list)
    deleted_sub_sections: List[str] = Field(default_factory=list)
    retracted_back_references: List[str] = Field(default_factory=list)
