from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, JSON,
    Enum as SAEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vx_academy.core.config import settings
from vx_academy.core.database import Base
from vx_academy.models.enums import (
    AssessmentPlacement, AssessmentOwnerType, QuestionType, enum_values
)

# Maps each owner kind to the foreign-key column that stores it.
OWNER_COLUMNS = {
    AssessmentOwnerType.TRAINING_AREA: "training_area_id",
    AssessmentOwnerType.MODULE: "module_id",
    AssessmentOwnerType.COURSE: "course_id",
    AssessmentOwnerType.UNIT: "unit_id",
}

_EXACTLY_ONE_OWNER = " + ".join(
    f"(CASE WHEN {column} IS NULL THEN 0 ELSE 1 END)" for column in OWNER_COLUMNS.values()
) + " = 1"


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)

    # Owner: exactly one of these is set (see ck_assessment_single_owner)
    training_area_id = Column(Integer, ForeignKey("training_areas.id", ondelete="CASCADE"), nullable=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    placement = Column(SAEnum(AssessmentPlacement, name="assessment_placement_enum", values_callable=enum_values), nullable=False, default=AssessmentPlacement.END)
    is_graded = Column(Boolean, nullable=False, default=True)
    show_correct_answers = Column(Boolean, nullable=False, default=False)
    passing_score = Column(Integer, nullable=False, default=settings.DEFAULT_PASSING_SCORE)
    has_time_limit = Column(Boolean, nullable=False, default=False)
    time_limit = Column(Integer, nullable=True) # Minutes
    max_retakes = Column(Integer, nullable=False, default=settings.DEFAULT_MAX_RETAKES)
    has_certificate = Column(Boolean, nullable=False, default=False)
    certificate_template = Column(String(1024), nullable=True)
    xp_points = Column(Integer, nullable=False, default=50)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    training_area = relationship("TrainingArea", back_populates="assessments")
    module = relationship("Module", back_populates="assessments")
    course = relationship("Course", back_populates="assessments")
    unit = relationship("Unit", back_populates="assessments")
    questions = relationship("Question", back_populates="assessment", cascade="all", order_by="Question.order")
    attempts = relationship("AssessmentAttempt", back_populates="assessment", cascade="all", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(_EXACTLY_ONE_OWNER, name='ck_assessment_single_owner'),
        CheckConstraint('passing_score >= 0 AND passing_score <= 100', name='ck_assessment_passing_score'),
        CheckConstraint('max_retakes >= 1', name='ck_assessment_max_retakes'),
    )

    @property
    def owner_type(self) -> AssessmentOwnerType:
        for owner_type, column in OWNER_COLUMNS.items():
            if getattr(self, column) is not None:
                return owner_type
        raise ValueError(f"Assessment {self.id} has no owner")

    @property
    def owner_id(self) -> int:
        return getattr(self, OWNER_COLUMNS[self.owner_type])

    @property
    def owner(self) -> dict:
        return {"type": self.owner_type, "id": self.owner_id}

    def set_owner(self, owner_type: AssessmentOwnerType, owner_id: int) -> None:
        for candidate, column in OWNER_COLUMNS.items():
            setattr(self, column, owner_id if candidate == owner_type else None)

    def __repr__(self):
        return f"<Assessment(id={self.id}, title='{self.title}')>"


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(SAEnum(QuestionType, name="question_type_enum", values_callable=enum_values), nullable=False, default=QuestionType.MCQ)
    options = Column(JSON, nullable=False) # Ordered list of option strings
    correct_answer = Column(Text, nullable=False) # Literal text of the correct option
    order = Column(Integer, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    assessment = relationship("Assessment", back_populates="questions")

    __table_args__ = (UniqueConstraint('assessment_id', 'order', name='uq_assessment_question_order'),)

    def __repr__(self):
        return f"<Question(id={self.id}, assessment_id={self.assessment_id}, type='{self.question_type}')>"


class AssessmentAttempt(Base):
    __tablename__ = "assessment_attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    answers = Column(JSON, nullable=True) # Raw map of question id -> submitted text
    started_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="attempts")
    assessment = relationship("Assessment", back_populates="attempts")

    __table_args__ = (
        CheckConstraint('score >= 0 AND score <= 100', name='ck_attempt_score_range'),
    )

    def __repr__(self):
        return f"<AssessmentAttempt(id={self.id}, user_id={self.user_id}, assessment_id={self.assessment_id}, score={self.score})>"
