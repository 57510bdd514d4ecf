from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from vx_academy.models.enums import UserType

# --- Dashboard ---
class DashboardStats(BaseModel):
    total_users: int = Field(..., description="All registered accounts")
    total_frontliners: int = Field(..., description="Accounts of type 'user'")
    total_sub_admins: int
    total_organizations: int
    total_sub_organizations: int
    total_training_areas: int
    total_courses: int
    certificates_issued: int
    average_course_completion: float = Field(..., ge=0, le=100, description="Mean over all course-progress rows")

# --- Training area report ---
class CourseReportRow(BaseModel):
    course_id: int
    course_name: str
    users_with_progress: int
    average_completion: float = Field(..., ge=0, le=100, description="Mean over users holding a course-progress row")
    completed_count: int

class ModuleReportRow(BaseModel):
    module_id: int
    module_name: str
    users_with_progress: int
    average_completion: float = Field(..., ge=0, le=100)
    completed_count: int
    courses: List[CourseReportRow] = []

class TrainingAreaReport(BaseModel):
    training_area_id: int
    training_area_name: str
    users_with_progress: int
    average_completion: float = Field(..., ge=0, le=100)
    completed_count: int
    modules: List[ModuleReportRow] = []

# --- Certificate report ---
class CourseCertificateCount(BaseModel):
    course_id: int
    course_name: str
    issued: int

class CertificateReport(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_course: List[CourseCertificateCount] = []

# --- Users report ---
class UserReportRow(BaseModel):
    user_id: int
    full_name: str
    email: str
    user_type: UserType
    organization: str
    asset: str
    xp: int
    completed_courses: int
    certificates: int

class UsersReportFilters(BaseModel):
    organization: Optional[str] = None
    asset: Optional[str] = None
    user_type: Optional[UserType] = None

# --- Organizations report ---
class SubOrganizationReportRow(BaseModel):
    sub_organization_id: int
    name: str
    asset: Optional[str] = None
    sub_asset: Optional[str] = None

class OrganizationReportRow(BaseModel):
    organization_id: int
    organization_name: str
    sub_admins: int
    declared_frontliners: int = Field(..., description="Sum of the frontliner counts sub-admins declared for the organization")
    registered_frontliners: int
    active_frontliners: int = Field(..., description="Frontliners who logged in within ACTIVE_USER_WINDOW_DAYS")
    status: str = Field(..., description="'active' when at least one frontliner is active")
    sub_organizations: List[SubOrganizationReportRow] = []
