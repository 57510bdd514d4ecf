from sqlalchemy import (
    Column, Integer, String, Boolean, TIMESTAMP, ForeignKey, JSON,
    Enum as SAEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from vx_academy.core.database import Base
from vx_academy.models.enums import UserType, enum_values

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)

    # Reporting classification, stored by name as the admin screens submit them
    organization = Column(String(255), nullable=False)
    sub_organizations = Column(JSON, nullable=True) # List of sub-organization names
    asset = Column(String(255), nullable=False)
    sub_asset = Column(String(255), nullable=False)

    user_type = Column(SAEnum(UserType, name="user_type_enum", values_callable=enum_values), nullable=False)
    password_hash = Column(String(255), nullable=False)
    xp = Column(Integer, nullable=False, default=0)

    last_login = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Type-specific details: exactly one for sub_admin/user, none for admin
    sub_admin_detail = relationship("SubAdminDetail", back_populates="user", uselist=False, cascade="all, delete-orphan")
    normal_user_detail = relationship("NormalUserDetail", back_populates="user", uselist=False, cascade="all, delete-orphan")

    attempts = relationship("AssessmentAttempt", back_populates="user", cascade="all", passive_deletes=True)
    certificates = relationship("Certificate", back_populates="user", cascade="all", passive_deletes=True)
    enrollments = relationship("CourseEnrollment", back_populates="user", cascade="all", passive_deletes=True)
    badges = relationship("UserBadge", back_populates="user", cascade="all", passive_deletes=True)
    notifications = relationship("Notification", back_populates="user", cascade="all", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('email', name='uq_user_email'),
        CheckConstraint('xp >= 0', name='ck_user_xp_non_negative'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', user_type='{self.user_type}')>"


class SubAdminDetail(Base):
    __tablename__ = "sub_admins"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    job_title = Column(String(255), nullable=False)
    total_frontliners = Column(Integer, nullable=True)
    eid = Column(String(64), nullable=False)
    phone_number = Column(String(32), nullable=False)

    user = relationship("User", back_populates="sub_admin_detail")

    __table_args__ = (UniqueConstraint('eid', name='uq_sub_admin_eid'),)

    def __repr__(self):
        return f"<SubAdminDetail(user_id={self.user_id}, eid='{self.eid}')>"


class NormalUserDetail(Base):
    __tablename__ = "normal_users"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_category = Column(String(255), nullable=False)
    role = Column(String(255), nullable=False)
    seniority = Column(String(255), nullable=False)
    eid = Column(String(64), nullable=False)
    phone_number = Column(String(32), nullable=False)
    existing = Column(Boolean, nullable=False, default=False) # Existing joiner vs new joiner
    initial_assessment = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="normal_user_detail")

    __table_args__ = (UniqueConstraint('eid', name='uq_normal_user_eid'),)

    def __repr__(self):
        return f"<NormalUserDetail(user_id={self.user_id}, eid='{self.eid}', role='{self.role}')>"
