from sqlalchemy import (
    Column, Integer, Float, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint,
    Enum as SAEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vx_academy.core.database import Base
from vx_academy.models.enums import ProgressStatus, enum_values

# Every level is keyed by (user, entity). Percentages above the learning-block
# level are derived by the rollup in crud/progress_crud.py and never edited directly.

def _status_column():
    return Column(
        SAEnum(ProgressStatus, name="progress_status_enum", values_callable=enum_values),
        nullable=False,
        default=ProgressStatus.NOT_STARTED,
    )


class UserLearningBlockProgress(Base):
    __tablename__ = "user_learning_block_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    learning_block_id = Column(Integer, ForeignKey("learning_blocks.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()
    started_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    learning_block = relationship("LearningBlock", back_populates="progress_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'learning_block_id', name='uq_user_learning_block_progress'),
    )

    def __repr__(self):
        return f"<UserLearningBlockProgress(user_id={self.user_id}, learning_block_id={self.learning_block_id}, status='{self.status}')>"


class UserCourseUnitProgress(Base):
    __tablename__ = "user_course_unit_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_unit_id = Column(Integer, ForeignKey("course_units.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()
    completion_percentage = Column(Float, nullable=False, default=0.0)
    started_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    course_unit = relationship("CourseUnit", back_populates="progress_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'course_unit_id', name='uq_user_course_unit_progress'),
        CheckConstraint('completion_percentage >= 0 AND completion_percentage <= 100', name='ck_course_unit_progress_range'),
    )

    def __repr__(self):
        return f"<UserCourseUnitProgress(user_id={self.user_id}, course_unit_id={self.course_unit_id}, pct={self.completion_percentage})>"


class UserCourseProgress(Base):
    __tablename__ = "user_course_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()
    completion_percentage = Column(Float, nullable=False, default=0.0)
    started_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    course = relationship("Course", back_populates="progress_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'course_id', name='uq_user_course_progress'),
        CheckConstraint('completion_percentage >= 0 AND completion_percentage <= 100', name='ck_course_progress_range'),
    )

    def __repr__(self):
        return f"<UserCourseProgress(user_id={self.user_id}, course_id={self.course_id}, pct={self.completion_percentage})>"


class UserModuleProgress(Base):
    __tablename__ = "user_module_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()
    completion_percentage = Column(Float, nullable=False, default=0.0)
    started_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    module = relationship("Module", back_populates="progress_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'module_id', name='uq_user_module_progress'),
        CheckConstraint('completion_percentage >= 0 AND completion_percentage <= 100', name='ck_module_progress_range'),
    )

    def __repr__(self):
        return f"<UserModuleProgress(user_id={self.user_id}, module_id={self.module_id}, pct={self.completion_percentage})>"


class UserTrainingAreaProgress(Base):
    __tablename__ = "user_training_area_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    training_area_id = Column(Integer, ForeignKey("training_areas.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()
    completion_percentage = Column(Float, nullable=False, default=0.0)
    started_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    training_area = relationship("TrainingArea", back_populates="progress_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'training_area_id', name='uq_user_training_area_progress'),
        CheckConstraint('completion_percentage >= 0 AND completion_percentage <= 100', name='ck_training_area_progress_range'),
    )

    def __repr__(self):
        return f"<UserTrainingAreaProgress(user_id={self.user_id}, training_area_id={self.training_area_id}, pct={self.completion_percentage})>"
