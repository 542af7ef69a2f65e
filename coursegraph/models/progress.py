"""
学习进度数据模型
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CourseProgress(BaseModel):
    """课程学习进度"""

    model_config = ConfigDict(from_attributes=True)

    progress_id: str
    course_id: str
    user_id: str
    completed_videos: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressUpdate(BaseModel):
    """标记课时完成后的结果"""

    course_id: str
    user_id: str
    completed_videos: List[str]
    changed: bool = Field(..., description="本次是否新增了完成记录")
