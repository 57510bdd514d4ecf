from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from vx_academy.models.enums import CourseLevel, LearningBlockType

# --- TrainingArea Schemas ---
class TrainingAreaBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Name of the training area")
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)

class TrainingAreaCreate(TrainingAreaBase):
    pass

class TrainingAreaUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)

class TrainingAreaDisplay(TrainingAreaBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Module Schemas ---
class ModuleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)

class ModuleCreate(ModuleBase):
    training_area_id: int

class ModuleUpdate(BaseModel):
    training_area_id: Optional[int] = None # Moving a module validates the target area
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)

class ModuleDisplay(ModuleBase):
    id: int
    training_area_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Course Schemas ---
class CourseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)
    internal_note: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, description="Duration in minutes")
    show_duration: bool = True
    level: CourseLevel = CourseLevel.BEGINNER
    show_level: bool = True

class CourseCreate(CourseBase):
    module_id: int

class CourseUpdate(BaseModel):
    module_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)
    internal_note: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    show_duration: Optional[bool] = None
    level: Optional[CourseLevel] = None
    show_level: Optional[bool] = None

class CourseDisplay(CourseBase):
    id: int
    module_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Unit Schemas ---
class UnitBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    internal_note: Optional[str] = None
    order: int = Field(1, ge=1)
    duration: int = Field(30, ge=0, description="Duration in minutes")
    show_duration: bool = True
    xp_points: int = Field(100, ge=0)

class UnitCreate(UnitBase):
    pass

class UnitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    internal_note: Optional[str] = None
    order: Optional[int] = Field(None, ge=1)
    duration: Optional[int] = Field(None, ge=0)
    show_duration: Optional[bool] = None
    xp_points: Optional[int] = Field(None, ge=0)

class UnitDisplay(UnitBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- CourseUnit Schemas ---
class CourseUnitCreate(BaseModel):
    course_id: int
    unit_id: int
    order: Optional[int] = Field(None, ge=1, description="Omit to append at the end")

class CourseUnitDisplay(BaseModel):
    id: int
    course_id: int
    unit_id: int
    order: int
    unit: Optional[UnitDisplay] = None

    class Config:
        from_attributes = True

# --- LearningBlock Schemas ---
class LearningBlockBase(BaseModel):
    type: LearningBlockType
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=1024)
    image_url: Optional[str] = Field(None, max_length=1024)
    interactive_data: Optional[Dict[str, Any]] = None
    xp_points: int = Field(10, ge=0)

class LearningBlockCreate(LearningBlockBase):
    unit_id: int
    order: Optional[int] = Field(None, ge=1, description="Omit to append at the end")

class LearningBlockUpdate(BaseModel):
    type: Optional[LearningBlockType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=1024)
    image_url: Optional[str] = Field(None, max_length=1024)
    interactive_data: Optional[Dict[str, Any]] = None
    xp_points: Optional[int] = Field(None, ge=0)

class LearningBlockDisplay(LearningBlockBase):
    id: int
    unit_id: int
    order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Nested views ---
class UnitWithBlocks(UnitDisplay):
    learning_blocks: List[LearningBlockDisplay] = []
