from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from vx_academy.core.config import settings
from vx_academy.models.enums import AssessmentOwnerType, AssessmentPlacement, QuestionType
from vx_academy.schemas.engagement_schema import CertificateDisplay

# --- Owner ---
class AssessmentOwner(BaseModel):
    """The single entity an assessment belongs to, e.g. {"type": "course", "id": 7}."""
    type: AssessmentOwnerType
    id: int

# --- Assessment Schemas ---
class AssessmentBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    placement: AssessmentPlacement = AssessmentPlacement.END
    is_graded: bool = True
    show_correct_answers: bool = False
    passing_score: int = Field(settings.DEFAULT_PASSING_SCORE, ge=0, le=100)
    has_time_limit: bool = False
    time_limit: Optional[int] = Field(None, gt=0, description="Time limit in minutes")
    max_retakes: int = Field(settings.DEFAULT_MAX_RETAKES, ge=1)
    has_certificate: bool = False
    certificate_template: Optional[str] = Field(None, max_length=1024)
    xp_points: int = Field(50, ge=0)

class AssessmentCreate(AssessmentBase):
    owner: AssessmentOwner

class AssessmentUpdate(BaseModel):
    owner: Optional[AssessmentOwner] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    placement: Optional[AssessmentPlacement] = None
    is_graded: Optional[bool] = None
    show_correct_answers: Optional[bool] = None
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    has_time_limit: Optional[bool] = None
    time_limit: Optional[int] = Field(None, gt=0)
    max_retakes: Optional[int] = Field(None, ge=1)
    has_certificate: Optional[bool] = None
    certificate_template: Optional[str] = Field(None, max_length=1024)
    xp_points: Optional[int] = Field(None, ge=0)

class AssessmentDisplay(AssessmentBase):
    id: int
    owner: AssessmentOwner
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Question Schemas ---
class QuestionBase(BaseModel):
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType = QuestionType.MCQ
    options: Optional[List[str]] = Field(None, description="Ordered option texts; true/false questions default to True/False")
    correct_answer: str = Field(..., min_length=1, description="Must equal one of the options")

class QuestionCreate(QuestionBase):
    assessment_id: int
    order: Optional[int] = Field(None, ge=1, description="Omit to append at the end")

class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(None, min_length=1)
    question_type: Optional[QuestionType] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = Field(None, min_length=1)

class QuestionDisplay(QuestionBase):
    id: int
    assessment_id: int
    order: int
    options: List[str]

    class Config:
        from_attributes = True

class QuestionPublic(BaseModel):
    """Question as shown to a learner taking the assessment; the answer is withheld."""
    id: int
    question_text: str
    question_type: QuestionType
    options: List[str]
    order: int

    class Config:
        from_attributes = True

class AssessmentWithQuestions(AssessmentDisplay):
    questions: List[QuestionPublic] = []

# --- Attempt Schemas ---
class AttemptSubmission(BaseModel):
    answers: Dict[int, str] = Field(..., description="Map of question ID to the submitted option text")
    course_id: Optional[int] = Field(None, description="Course context for unit-level assessments")

class QuestionResult(BaseModel):
    question_id: int
    submitted_answer: Optional[str] = None
    selected_option_index: Optional[int] = None
    is_correct: bool
    correct_answer: Optional[str] = None # Only when the assessment shows correct answers

class AttemptDisplay(BaseModel):
    id: int
    user_id: int
    assessment_id: int
    score: int
    passed: bool
    answers: Optional[Dict[str, str]] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AttemptResult(BaseModel):
    attempt: AttemptDisplay
    correct_count: int
    total_questions: int
    results: List[QuestionResult]
    remaining_attempts: int
    certificate: Optional[CertificateDisplay] = None

class AttemptSummary(BaseModel):
    assessment_id: int
    attempts_used: int
    remaining_attempts: int
    best_score: Optional[int] = None
    has_passed: bool
