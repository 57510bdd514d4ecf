from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vx_academy.core.database import Base

class RoleCategory(Base):
    __tablename__ = "role_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    roles = relationship("Role", back_populates="category", cascade="all", order_by="Role.name")

    __table_args__ = (UniqueConstraint('name', name='uq_role_category_name'),)

    def __repr__(self):
        return f"<RoleCategory(id={self.id}, name='{self.name}')>"


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("role_categories.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    category = relationship("RoleCategory", back_populates="roles")

    __table_args__ = (UniqueConstraint('category_id', 'name', name='uq_role_name_in_category'),)

    def __repr__(self):
        return f"<Role(id={self.id}, name='{self.name}', category_id={self.category_id})>"


class SeniorityLevel(Base):
    __tablename__ = "seniority_levels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    __table_args__ = (UniqueConstraint('name', name='uq_seniority_level_name'),)

    def __repr__(self):
        return f"<SeniorityLevel(id={self.id}, name='{self.name}')>"


class UnitRoleAssignment(Base):
    """Declares which units apply to a (role category, seniority level, asset) profile."""
    __tablename__ = "unit_role_assignments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    role_category_id = Column(Integer, ForeignKey("role_categories.id", ondelete="CASCADE"), nullable=False)
    seniority_level_id = Column(Integer, ForeignKey("seniority_levels.id", ondelete="CASCADE"), nullable=False)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    role_category = relationship("RoleCategory")
    seniority_level = relationship("SeniorityLevel")
    asset = relationship("Asset")
    unit_links = relationship("AssignmentUnit", back_populates="assignment", cascade="all, delete-orphan", order_by="AssignmentUnit.id")

    __table_args__ = (
        UniqueConstraint('name', 'role_category_id', 'seniority_level_id', 'asset_id', name='uq_unit_role_assignment'),
    )

    @property
    def unit_ids(self):
        return [link.unit_id for link in self.unit_links]

    def __repr__(self):
        return f"<UnitRoleAssignment(id={self.id}, name='{self.name}')>"


class AssignmentUnit(Base):
    """Join row between a UnitRoleAssignment and a Unit."""
    __tablename__ = "assignment_units"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("unit_role_assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)

    assignment = relationship("UnitRoleAssignment", back_populates="unit_links")
    unit = relationship("Unit", back_populates="assignment_links")

    __table_args__ = (UniqueConstraint('assignment_id', 'unit_id', name='uq_assignment_unit'),)
