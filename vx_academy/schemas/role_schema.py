from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

# --- RoleCategory / Role Schemas ---
class RoleCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class RoleCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)

class RoleDisplay(BaseModel):
    id: int
    category_id: int
    name: str

    class Config:
        from_attributes = True

class RoleCategoryDisplay(BaseModel):
    id: int
    name: str
    roles: List[RoleDisplay] = []

    class Config:
        from_attributes = True

class RoleCreate(BaseModel):
    category_id: int
    name: str = Field(..., min_length=1, max_length=255)

class RoleUpdate(BaseModel):
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)

# --- SeniorityLevel Schemas ---
class SeniorityLevelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class SeniorityLevelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)

class SeniorityLevelDisplay(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

# --- UnitRoleAssignment Schemas ---
class UnitRoleAssignmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role_category_id: int
    seniority_level_id: int
    asset_id: int
    unit_ids: List[int] = Field(default_factory=list)

class UnitRoleAssignmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    unit_ids: Optional[List[int]] = None

class UnitRoleAssignmentDisplay(BaseModel):
    id: int
    name: str
    role_category_id: int
    seniority_level_id: int
    asset_id: int
    unit_ids: List[int] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
