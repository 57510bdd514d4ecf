from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from vx_academy.models.enums import ProgressStatus

class CourseUnitProgressUpdate(BaseModel):
    course_unit_id: int
    status: Optional[ProgressStatus] = None
    completion_percentage: Optional[float] = Field(None, ge=0, le=100)

class ProgressBase(BaseModel):
    user_id: int
    status: ProgressStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

class LearningBlockProgressDisplay(ProgressBase):
    id: int
    learning_block_id: int

    class Config:
        from_attributes = True

class CourseUnitProgressDisplay(ProgressBase):
    id: int
    course_unit_id: int
    completion_percentage: float

    class Config:
        from_attributes = True

class CourseProgressDisplay(ProgressBase):
    id: int
    course_id: int
    completion_percentage: float

    class Config:
        from_attributes = True

class ModuleProgressDisplay(ProgressBase):
    id: int
    module_id: int
    completion_percentage: float

    class Config:
        from_attributes = True

class TrainingAreaProgressDisplay(ProgressBase):
    id: int
    training_area_id: int
    completion_percentage: float

    class Config:
        from_attributes = True

class UserProgressSnapshot(BaseModel):
    """Every progress row a user holds, level by level."""
    user_id: int
    learning_blocks: List[LearningBlockProgressDisplay] = []
    course_units: List[CourseUnitProgressDisplay] = []
    courses: List[CourseProgressDisplay] = []
    modules: List[ModuleProgressDisplay] = []
    training_areas: List[TrainingAreaProgressDisplay] = []

# --- Overview (TrainingArea -> Module -> Course) ---
class CourseOverview(BaseModel):
    id: int
    name: str
    status: ProgressStatus
    completion_percentage: float

class ModuleOverview(BaseModel):
    id: int
    name: str
    status: ProgressStatus
    completion_percentage: float
    courses: List[CourseOverview] = []

class TrainingAreaOverview(BaseModel):
    id: int
    name: str
    status: ProgressStatus
    completion_percentage: float
    modules: List[ModuleOverview] = []

class ProgressResetResult(BaseModel):
    user_id: int
    rows_deleted: int
