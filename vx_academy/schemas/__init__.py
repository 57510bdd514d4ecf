# This file makes the 'schemas' directory a Python package.

from .common_schema import ApiResponse, ErrorResponse, DeleteResult, ReorderRequest

from .training_schema import (
    TrainingAreaBase, TrainingAreaCreate, TrainingAreaUpdate, TrainingAreaDisplay,
    ModuleBase, ModuleCreate, ModuleUpdate, ModuleDisplay,
    CourseBase, CourseCreate, CourseUpdate, CourseDisplay,
    UnitBase, UnitCreate, UnitUpdate, UnitDisplay, UnitWithBlocks,
    CourseUnitCreate, CourseUnitDisplay,
    LearningBlockBase, LearningBlockCreate, LearningBlockUpdate, LearningBlockDisplay
)

from .engagement_schema import (
    CertificateDisplay, CertificateVerification,
    EnrollmentCreate, EnrollmentDisplay,
    BadgeBase, BadgeCreate, BadgeUpdate, BadgeDisplay, UserBadgeDisplay,
    NotificationCreate, NotificationDisplay,
    MediaFileCreate, MediaFileDisplay
)

from .assessment_schema import (
    AssessmentOwner, AssessmentBase, AssessmentCreate, AssessmentUpdate, AssessmentDisplay,
    AssessmentWithQuestions,
    QuestionBase, QuestionCreate, QuestionUpdate, QuestionDisplay, QuestionPublic,
    AttemptSubmission, QuestionResult, AttemptDisplay, AttemptResult, AttemptSummary
)

from .progress_schema import (
    CourseUnitProgressUpdate,
    LearningBlockProgressDisplay, CourseUnitProgressDisplay, CourseProgressDisplay,
    ModuleProgressDisplay, TrainingAreaProgressDisplay, UserProgressSnapshot,
    CourseOverview, ModuleOverview, TrainingAreaOverview, ProgressResetResult
)

from .user_schema import (
    SubAdminDetailBase, SubAdminDetailDisplay, NormalUserDetailBase, NormalUserDetailDisplay,
    UserBase, UserCreate, UserUpdate, UserDisplay
)

from .organization_schema import (
    AssetCreate, AssetUpdate, AssetDisplay, SubAssetCreate, SubAssetUpdate, SubAssetDisplay,
    OrganizationCreate, OrganizationUpdate, OrganizationDisplay,
    SubOrganizationCreate, SubOrganizationUpdate, SubOrganizationDisplay
)

from .role_schema import (
    RoleCategoryCreate, RoleCategoryUpdate, RoleCategoryDisplay,
    RoleCreate, RoleUpdate, RoleDisplay,
    SeniorityLevelCreate, SeniorityLevelUpdate, SeniorityLevelDisplay,
    UnitRoleAssignmentCreate, UnitRoleAssignmentUpdate, UnitRoleAssignmentDisplay
)

from .report_schema import ( # Admin dashboard/report schemas
    DashboardStats, CourseReportRow, ModuleReportRow, TrainingAreaReport,
    CourseCertificateCount, CertificateReport, UserReportRow, UsersReportFilters,
    SubOrganizationReportRow, OrganizationReportRow
)


__all__ = [
    # Envelope
    "ApiResponse", "ErrorResponse", "DeleteResult", "ReorderRequest",

    # Training hierarchy
    "TrainingAreaBase", "TrainingAreaCreate", "TrainingAreaUpdate", "TrainingAreaDisplay",
    "ModuleBase", "ModuleCreate", "ModuleUpdate", "ModuleDisplay",
    "CourseBase", "CourseCreate", "CourseUpdate", "CourseDisplay",
    "UnitBase", "UnitCreate", "UnitUpdate", "UnitDisplay", "UnitWithBlocks",
    "CourseUnitCreate", "CourseUnitDisplay",
    "LearningBlockBase", "LearningBlockCreate", "LearningBlockUpdate", "LearningBlockDisplay",

    # Certificates, enrollments, gamification
    "CertificateDisplay", "CertificateVerification",
    "EnrollmentCreate", "EnrollmentDisplay",
    "BadgeBase", "BadgeCreate", "BadgeUpdate", "BadgeDisplay", "UserBadgeDisplay",
    "NotificationCreate", "NotificationDisplay",
    "MediaFileCreate", "MediaFileDisplay",

    # Assessments
    "AssessmentOwner", "AssessmentBase", "AssessmentCreate", "AssessmentUpdate", "AssessmentDisplay",
    "AssessmentWithQuestions",
    "QuestionBase", "QuestionCreate", "QuestionUpdate", "QuestionDisplay", "QuestionPublic",
    "AttemptSubmission", "QuestionResult", "AttemptDisplay", "AttemptResult", "AttemptSummary",

    # Progress
    "CourseUnitProgressUpdate",
    "LearningBlockProgressDisplay", "CourseUnitProgressDisplay", "CourseProgressDisplay",
    "ModuleProgressDisplay", "TrainingAreaProgressDisplay", "UserProgressSnapshot",
    "CourseOverview", "ModuleOverview", "TrainingAreaOverview", "ProgressResetResult",

    # Users
    "SubAdminDetailBase", "SubAdminDetailDisplay", "NormalUserDetailBase", "NormalUserDetailDisplay",
    "UserBase", "UserCreate", "UserUpdate", "UserDisplay",

    # Organizations
    "AssetCreate", "AssetUpdate", "AssetDisplay", "SubAssetCreate", "SubAssetUpdate", "SubAssetDisplay",
    "OrganizationCreate", "OrganizationUpdate", "OrganizationDisplay",
    "SubOrganizationCreate", "SubOrganizationUpdate", "SubOrganizationDisplay",

    # Roles
    "RoleCategoryCreate", "RoleCategoryUpdate", "RoleCategoryDisplay",
    "RoleCreate", "RoleUpdate", "RoleDisplay",
    "SeniorityLevelCreate", "SeniorityLevelUpdate", "SeniorityLevelDisplay",
    "UnitRoleAssignmentCreate", "UnitRoleAssignmentUpdate", "UnitRoleAssignmentDisplay",

    # Reports
    "DashboardStats", "CourseReportRow", "ModuleReportRow", "TrainingAreaReport",
    "CourseCertificateCount", "CertificateReport", "UserReportRow", "UsersReportFilters",
    "SubOrganizationReportRow", "OrganizationReportRow",
]
