from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, JSON,
    Enum as SAEnum, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vx_academy.core.database import Base
from vx_academy.models.enums import CourseLevel, LearningBlockType, enum_values

class TrainingArea(Base):
    __tablename__ = "training_areas"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    modules = relationship("Module", back_populates="training_area", cascade="all", order_by="Module.id")
    assessments = relationship("Assessment", back_populates="training_area", cascade="all", passive_deletes=True)
    progress_entries = relationship("UserTrainingAreaProgress", back_populates="training_area", cascade="all", passive_deletes=True)

    def __repr__(self):
        return f"<TrainingArea(id={self.id}, name='{self.name}')>"

class Module(Base):
    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, index=True)
    training_area_id = Column(Integer, ForeignKey("training_areas.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    training_area = relationship("TrainingArea", back_populates="modules")
    courses = relationship("Course", back_populates="module", cascade="all", order_by="Course.id")
    assessments = relationship("Assessment", back_populates="module", cascade="all", passive_deletes=True)
    progress_entries = relationship("UserModuleProgress", back_populates="module", cascade="all", passive_deletes=True)

    def __repr__(self):
        return f"<Module(id={self.id}, name='{self.name}', training_area_id={self.training_area_id})>"

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)
    internal_note = Column(Text, nullable=True)

    duration = Column(Integer, nullable=True) # Minutes
    show_duration = Column(Boolean, nullable=False, default=True)
    level = Column(SAEnum(CourseLevel, name="course_level_enum", values_callable=enum_values), nullable=False, default=CourseLevel.BEGINNER)
    show_level = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    module = relationship("Module", back_populates="courses")
    course_units = relationship("CourseUnit", back_populates="course", cascade="all, delete-orphan", order_by="CourseUnit.order")
    assessments = relationship("Assessment", back_populates="course", cascade="all", passive_deletes=True)
    progress_entries = relationship("UserCourseProgress", back_populates="course", cascade="all", passive_deletes=True)
    enrollments = relationship("CourseEnrollment", back_populates="course", cascade="all", passive_deletes=True)
    issued_certificates = relationship("Certificate", back_populates="course", cascade="all", passive_deletes=True)

    def __repr__(self):
        return f"<Course(id={self.id}, name='{self.name}', module_id={self.module_id})>"

class Unit(Base):
    """A reusable content leaf. Units are placed into courses through CourseUnit rows."""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    internal_note = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=1)
    duration = Column(Integer, nullable=False, default=30)
    show_duration = Column(Boolean, nullable=False, default=True)
    xp_points = Column(Integer, nullable=False, default=100)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    placements = relationship("CourseUnit", back_populates="unit", cascade="all, delete-orphan")
    learning_blocks = relationship("LearningBlock", back_populates="unit", cascade="all, delete-orphan", order_by="LearningBlock.order")
    assessments = relationship("Assessment", back_populates="unit", cascade="all", passive_deletes=True)
    assignment_links = relationship("AssignmentUnit", back_populates="unit", cascade="all", passive_deletes=True)

    def __repr__(self):
        return f"<Unit(id={self.id}, name='{self.name}')>"

class CourseUnit(Base):
    """Places a Unit into a Course at a position. Learner progress is tracked per placement."""
    __tablename__ = "course_units"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    order = Column(Integer, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="course_units")
    unit = relationship("Unit", back_populates="placements")
    progress_entries = relationship("UserCourseUnitProgress", back_populates="course_unit", cascade="all", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('course_id', 'order', name='uq_course_unit_order'),
        UniqueConstraint('course_id', 'unit_id', name='uq_course_unit_placement'),
    )

    def __repr__(self):
        return f"<CourseUnit(id={self.id}, course_id={self.course_id}, unit_id={self.unit_id}, order={self.order})>"

class LearningBlock(Base):
    __tablename__ = "learning_blocks"

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SAEnum(LearningBlockType, name="learning_block_type_enum", values_callable=enum_values), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    video_url = Column(String(1024), nullable=True) # Opaque media references
    image_url = Column(String(1024), nullable=True)
    interactive_data = Column(JSON, nullable=True)
    order = Column(Integer, nullable=False)
    xp_points = Column(Integer, nullable=False, default=10)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    unit = relationship("Unit", back_populates="learning_blocks")
    progress_entries = relationship("UserLearningBlockProgress", back_populates="learning_block", cascade="all", passive_deletes=True)

    __table_args__ = (UniqueConstraint('unit_id', 'order', name='uq_learning_block_order'),)

    def __repr__(self):
        return f"<LearningBlock(id={self.id}, title='{self.title}', type='{self.type}')>"
