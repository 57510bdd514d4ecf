from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime

from vx_academy.models.enums import CertificateStatus, EnrollmentSource

# --- Certificate Schemas ---
class CertificateDisplay(BaseModel):
    id: int
    user_id: int
    course_id: int
    certificate_number: str
    issue_date: datetime
    expiry_date: datetime
    status: CertificateStatus

    class Config:
        from_attributes = True

class CertificateVerification(BaseModel):
    certificate_number: str
    valid: bool
    status: CertificateStatus
    user_name: str
    course_name: str
    issue_date: datetime
    expiry_date: datetime

# --- Enrollment Schemas ---
class EnrollmentCreate(BaseModel):
    user_id: int
    course_id: int
    enrollment_source: EnrollmentSource = EnrollmentSource.MANUAL

class EnrollmentDisplay(BaseModel):
    id: int
    user_id: int
    course_id: int
    enrolled_at: Optional[datetime] = None
    enrollment_source: EnrollmentSource

    class Config:
        from_attributes = True

# --- Badge Schemas ---
class BadgeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    image_url: Optional[str] = Field(None, max_length=1024)
    xp_points: int = Field(100, ge=0)
    type: Optional[str] = Field(None, max_length=64)

class BadgeCreate(BadgeBase):
    pass

class BadgeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = Field(None, max_length=1024)
    xp_points: Optional[int] = Field(None, ge=0)
    type: Optional[str] = Field(None, max_length=64)

class BadgeDisplay(BadgeBase):
    id: int

    class Config:
        from_attributes = True

class UserBadgeDisplay(BaseModel):
    id: int
    user_id: int
    badge_id: int
    earned_at: Optional[datetime] = None
    badge: BadgeDisplay

    class Config:
        from_attributes = True

# --- Notification Schemas ---
class NotificationCreate(BaseModel):
    user_id: int
    type: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    extra_data: Optional[Dict[str, Any]] = Field(None, alias="metadata")

    class Config:
        populate_by_name = True

class NotificationDisplay(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    read: bool
    extra_data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Media Schemas ---
class MediaFileCreate(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    original_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., min_length=1, max_length=128)
    file_size: int = Field(..., ge=0)
    url: str = Field(..., min_length=1, max_length=1024, description="Opaque reference to external storage")

class MediaFileDisplay(MediaFileCreate):
    id: int
    uploaded_by: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
