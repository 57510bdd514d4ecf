from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from vx_academy.models.enums import UserType

# --- Type-specific detail schemas ---
class SubAdminDetailBase(BaseModel):
    job_title: str = Field(..., min_length=1, max_length=255)
    total_frontliners: Optional[int] = Field(None, ge=0)
    eid: str = Field(..., min_length=1, max_length=64, description="Emirates ID")
    phone_number: str = Field(..., min_length=1, max_length=32)

class SubAdminDetailDisplay(SubAdminDetailBase):
    class Config:
        from_attributes = True

class NormalUserDetailBase(BaseModel):
    role_category: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=255)
    seniority: str = Field(..., min_length=1, max_length=255)
    eid: str = Field(..., min_length=1, max_length=64, description="Emirates ID")
    phone_number: str = Field(..., min_length=1, max_length=32)
    existing: bool = Field(False, description="Existing joiner (True) or new joiner (False)")
    initial_assessment: bool = False

class NormalUserDetailDisplay(NormalUserDetailBase):
    class Config:
        from_attributes = True

# --- User Schemas ---
class UserBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    organization: str = Field(..., min_length=1, max_length=255)
    sub_organizations: Optional[List[str]] = None
    asset: str = Field(..., min_length=1, max_length=255)
    sub_asset: str = Field(..., min_length=1, max_length=255)

# Detail rules (sub_admin needs sub_admin_detail, user needs normal_user_detail,
# admin has neither) are checked in user_crud so the error names the field.
class UserCreate(UserBase):
    user_type: UserType
    password: str = Field(..., min_length=8, max_length=128)
    sub_admin_detail: Optional[SubAdminDetailBase] = None
    normal_user_detail: Optional[NormalUserDetailBase] = None

class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    organization: Optional[str] = Field(None, min_length=1, max_length=255)
    sub_organizations: Optional[List[str]] = None
    asset: Optional[str] = Field(None, min_length=1, max_length=255)
    sub_asset: Optional[str] = Field(None, min_length=1, max_length=255)
    user_type: Optional[UserType] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    sub_admin_detail: Optional[SubAdminDetailBase] = None
    normal_user_detail: Optional[NormalUserDetailBase] = None

class UserDisplay(UserBase):
    id: int
    user_type: UserType
    xp: int
    last_login: Optional[datetime] = None
    sub_admin_detail: Optional[SubAdminDetailDisplay] = None
    normal_user_detail: Optional[NormalUserDetailDisplay] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
