# This file makes the 'models' directory a Python package.

from vx_academy.core.database import Base # Base must be imported before models that use it

from .enums import ( # Import all enums
    UserType, ProgressStatus, CourseLevel, LearningBlockType, QuestionType,
    AssessmentPlacement, AssessmentOwnerType, CertificateStatus, EnrollmentSource
)

from .user_model import User, SubAdminDetail, NormalUserDetail
from .training_model import (
    TrainingArea,
    Module,
    Course,
    Unit,
    CourseUnit,
    LearningBlock
)
from .assessment_model import Assessment, Question, AssessmentAttempt
from .progress_model import (
    UserLearningBlockProgress,
    UserCourseUnitProgress,
    UserCourseProgress,
    UserModuleProgress,
    UserTrainingAreaProgress
)
from .certificate_model import Certificate
from .engagement_model import CourseEnrollment, Badge, UserBadge, Notification, MediaFile
from .organization_model import Asset, SubAsset, Organization, SubOrganization
from .role_model import RoleCategory, Role, SeniorityLevel, UnitRoleAssignment, AssignmentUnit


__all__ = [
    "Base",
    # Models
    "User",
    "SubAdminDetail",
    "NormalUserDetail",
    "TrainingArea",
    "Module",
    "Course",
    "Unit",
    "CourseUnit",
    "LearningBlock",
    "Assessment",
    "Question",
    "AssessmentAttempt",
    "UserLearningBlockProgress",
    "UserCourseUnitProgress",
    "UserCourseProgress",
    "UserModuleProgress",
    "UserTrainingAreaProgress",
    "Certificate",
    "CourseEnrollment",
    "Badge",
    "UserBadge",
    "Notification",
    "MediaFile",
    "Asset",
    "SubAsset",
    "Organization",
    "SubOrganization",
    "RoleCategory",
    "Role",
    "SeniorityLevel",
    "UnitRoleAssignment",
    "AssignmentUnit",
    # Enums
    "UserType",
    "ProgressStatus",
    "CourseLevel",
    "LearningBlockType",
    "QuestionType",
    "AssessmentPlacement",
    "AssessmentOwnerType",
    "CertificateStatus",
    "EnrollmentSource",
]
