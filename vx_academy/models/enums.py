import enum

class UserType(str, enum.Enum):
    ADMIN = "admin"
    SUB_ADMIN = "sub_admin"
    USER = "user" # Frontliner / learner

class ProgressStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class CourseLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class LearningBlockType(str, enum.Enum):
    VIDEO = "video"
    TEXT = "text"
    IMAGE = "image"
    INTERACTIVE = "interactive"

class QuestionType(str, enum.Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"

class AssessmentPlacement(str, enum.Enum):
    START = "start"
    END = "end"

class AssessmentOwnerType(str, enum.Enum):
    TRAINING_AREA = "training_area"
    MODULE = "module"
    COURSE = "course"
    UNIT = "unit"

class CertificateStatus(str, enum.Enum):
    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"

class EnrollmentSource(str, enum.Enum):
    MANUAL = "manual"
    ASSIGNMENT = "assignment" # Seeded from a unit role assignment
    SELF = "self"


def enum_values(enum_cls):
    """values_callable for SAEnum so the string values, not member names, are stored."""
    return [e.value for e in enum_cls]
