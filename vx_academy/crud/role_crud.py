from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.exceptions import ConflictError, NotFoundError
from vx_academy.models.role_model import RoleCategory, Role, SeniorityLevel, UnitRoleAssignment, AssignmentUnit
from vx_academy.models.training_model import Unit
from vx_academy.schemas import role_schema as schemas
from vx_academy.crud.crud_utils import commit_or_rollback
from vx_academy.crud.organization_crud import require_name, _ensure_unique, get_asset_or_raise

logger = logging.getLogger(__name__)

# --- RoleCategory CRUD ---
def create_role_category(db: Session, category_in: schemas.RoleCategoryCreate) -> RoleCategory:
    name = require_name(category_in.name)
    _ensure_unique(db, RoleCategory, "Role category", name)
    db_category = RoleCategory(name=name)
    db.add(db_category)
    commit_or_rollback(db, f"create role category '{name}'")
    db.refresh(db_category)
    logger.info(f"Role category '{db_category.name}' (ID: {db_category.id}) created.")
    return db_category

def get_role_category(db: Session, category_id: int) -> Optional[RoleCategory]:
    return db.query(RoleCategory).filter(RoleCategory.id == category_id).first()

def get_role_category_or_raise(db: Session, category_id: int) -> RoleCategory:
    db_category = get_role_category(db, category_id)
    if not db_category:
        logger.warning(f"Role category with ID {category_id} not found.")
        raise NotFoundError("Role category", category_id)
    return db_category

def get_role_categories(db: Session) -> List[RoleCategory]:
    return db.query(RoleCategory).order_by(RoleCategory.name).all()

def update_role_category(db: Session, category_id: int, category_in: schemas.RoleCategoryUpdate) -> RoleCategory:
    db_category = get_role_category_or_raise(db, category_id)
    if category_in.name is not None:
        name = require_name(category_in.name)
        _ensure_unique(db, RoleCategory, "Role category", name, exclude_id=category_id)
        db_category.name = name
    commit_or_rollback(db, f"update role category {category_id}")
    db.refresh(db_category)
    return db_category

def delete_role_category(db: Session, category_id: int) -> None:
    db_category = get_role_category_or_raise(db, category_id)
    db.delete(db_category)
    commit_or_rollback(db, f"delete role category {category_id}")
    logger.info(f"Role category {category_id} deleted with its roles and assignments.")

# --- Role CRUD ---
def create_role(db: Session, role_in: schemas.RoleCreate) -> Role:
    name = require_name(role_in.name)
    get_role_category_or_raise(db, role_in.category_id)
    _ensure_unique(db, Role, "Role", name, category_id=role_in.category_id)
    db_role = Role(category_id=role_in.category_id, name=name)
    db.add(db_role)
    commit_or_rollback(db, f"create role '{name}'")
    db.refresh(db_role)
    logger.info(f"Role '{db_role.name}' (ID: {db_role.id}) created in category {db_role.category_id}.")
    return db_role

def get_role(db: Session, role_id: int) -> Optional[Role]:
    return db.query(Role).filter(Role.id == role_id).first()

def get_role_or_raise(db: Session, role_id: int) -> Role:
    db_role = get_role(db, role_id)
    if not db_role:
        logger.warning(f"Role with ID {role_id} not found.")
        raise NotFoundError("Role", role_id)
    return db_role

def get_roles(db: Session, category_id: Optional[int] = None) -> List[Role]:
    query = db.query(Role)
    if category_id is not None:
        query = query.filter(Role.category_id == category_id)
    return query.order_by(Role.name).all()

def update_role(db: Session, role_id: int, role_in: schemas.RoleUpdate) -> Role:
    db_role = get_role_or_raise(db, role_id)
    category_id = role_in.category_id if role_in.category_id is not None else db_role.category_id
    if category_id != db_role.category_id:
        get_role_category_or_raise(db, category_id)
    name = require_name(role_in.name) if role_in.name is not None else db_role.name
    _ensure_unique(db, Role, "Role", name, exclude_id=role_id, category_id=category_id)
    db_role.category_id = category_id
    db_role.name = name
    commit_or_rollback(db, f"update role {role_id}")
    db.refresh(db_role)
    return db_role

def delete_role(db: Session, role_id: int) -> None:
    db_role = get_role_or_raise(db, role_id)
    db.delete(db_role)
    commit_or_rollback(db, f"delete role {role_id}")
    logger.info(f"Role {role_id} deleted.")

# --- SeniorityLevel CRUD ---
def create_seniority_level(db: Session, level_in: schemas.SeniorityLevelCreate) -> SeniorityLevel:
    name = require_name(level_in.name)
    _ensure_unique(db, SeniorityLevel, "Seniority level", name)
    db_level = SeniorityLevel(name=name)
    db.add(db_level)
    commit_or_rollback(db, f"create seniority level '{name}'")
    db.refresh(db_level)
    logger.info(f"Seniority level '{db_level.name}' (ID: {db_level.id}) created.")
    return db_level

def get_seniority_level(db: Session, level_id: int) -> Optional[SeniorityLevel]:
    return db.query(SeniorityLevel).filter(SeniorityLevel.id == level_id).first()

def get_seniority_level_or_raise(db: Session, level_id: int) -> SeniorityLevel:
    db_level = get_seniority_level(db, level_id)
    if not db_level:
        logger.warning(f"Seniority level with ID {level_id} not found.")
        raise NotFoundError("Seniority level", level_id)
    return db_level

def get_seniority_levels(db: Session) -> List[SeniorityLevel]:
    return db.query(SeniorityLevel).order_by(SeniorityLevel.name).all()

def update_seniority_level(db: Session, level_id: int, level_in: schemas.SeniorityLevelUpdate) -> SeniorityLevel:
    db_level = get_seniority_level_or_raise(db, level_id)
    if level_in.name is not None:
        name = require_name(level_in.name)
        _ensure_unique(db, SeniorityLevel, "Seniority level", name, exclude_id=level_id)
        db_level.name = name
    commit_or_rollback(db, f"update seniority level {level_id}")
    db.refresh(db_level)
    return db_level

def delete_seniority_level(db: Session, level_id: int) -> None:
    db_level = get_seniority_level_or_raise(db, level_id)
    db.delete(db_level)
    commit_or_rollback(db, f"delete seniority level {level_id}")
    logger.info(f"Seniority level {level_id} deleted.")

# --- UnitRoleAssignment CRUD ---
def _dedupe_unit_ids(db: Session, unit_ids: List[int]) -> List[int]:
    """Drops repeated ids, keeping first-seen order, and checks every unit exists."""
    unique_ids = list(dict.fromkeys(unit_ids))
    if unique_ids:
        found = {u_id for (u_id,) in db.query(Unit.id).filter(Unit.id.in_(unique_ids)).all()}
        missing = [u_id for u_id in unique_ids if u_id not in found]
        if missing:
            logger.warning(f"Unit role assignment references missing units: {missing}")
            raise NotFoundError("Unit", missing[0])
    return unique_ids

def _find_assignment(db: Session, name: str, role_category_id: int, seniority_level_id: int, asset_id: int) -> Optional[UnitRoleAssignment]:
    return db.query(UnitRoleAssignment).filter(
        UnitRoleAssignment.name == name,
        UnitRoleAssignment.role_category_id == role_category_id,
        UnitRoleAssignment.seniority_level_id == seniority_level_id,
        UnitRoleAssignment.asset_id == asset_id,
    ).first()

def create_unit_role_assignment(db: Session, assignment_in: schemas.UnitRoleAssignmentCreate) -> UnitRoleAssignment:
    name = require_name(assignment_in.name)
    get_role_category_or_raise(db, assignment_in.role_category_id)
    get_seniority_level_or_raise(db, assignment_in.seniority_level_id)
    get_asset_or_raise(db, assignment_in.asset_id)
    unit_ids = _dedupe_unit_ids(db, assignment_in.unit_ids)

    if _find_assignment(db, name, assignment_in.role_category_id, assignment_in.seniority_level_id, assignment_in.asset_id):
        logger.warning(f"Unit role assignment '{name}' already exists for this role category, seniority level and asset.")
        raise ConflictError(f"An assignment named '{name}' already exists for this role category, seniority level and asset.")

    db_assignment = UnitRoleAssignment(
        name=name,
        role_category_id=assignment_in.role_category_id,
        seniority_level_id=assignment_in.seniority_level_id,
        asset_id=assignment_in.asset_id,
    )
    db_assignment.unit_links = [AssignmentUnit(unit_id=u_id) for u_id in unit_ids]
    db.add(db_assignment)
    commit_or_rollback(db, f"create unit role assignment '{name}'")
    db.refresh(db_assignment)
    logger.info(f"Unit role assignment '{db_assignment.name}' (ID: {db_assignment.id}) created with {len(unit_ids)} unit(s).")
    return db_assignment

def get_unit_role_assignment(db: Session, assignment_id: int) -> Optional[UnitRoleAssignment]:
    return db.query(UnitRoleAssignment).filter(UnitRoleAssignment.id == assignment_id).first()

def get_unit_role_assignment_or_raise(db: Session, assignment_id: int) -> UnitRoleAssignment:
    db_assignment = get_unit_role_assignment(db, assignment_id)
    if not db_assignment:
        logger.warning(f"Unit role assignment with ID {assignment_id} not found.")
        raise NotFoundError("Unit role assignment", assignment_id)
    return db_assignment

def get_unit_role_assignments(
    db: Session,
    role_category_id: Optional[int] = None,
    seniority_level_id: Optional[int] = None,
    asset_id: Optional[int] = None
) -> List[UnitRoleAssignment]:
    query = db.query(UnitRoleAssignment)
    if role_category_id is not None:
        query = query.filter(UnitRoleAssignment.role_category_id == role_category_id)
    if seniority_level_id is not None:
        query = query.filter(UnitRoleAssignment.seniority_level_id == seniority_level_id)
    if asset_id is not None:
        query = query.filter(UnitRoleAssignment.asset_id == asset_id)
    return query.order_by(UnitRoleAssignment.id).all()

def update_unit_role_assignment(db: Session, assignment_id: int, assignment_in: schemas.UnitRoleAssignmentUpdate) -> UnitRoleAssignment:
    db_assignment = get_unit_role_assignment_or_raise(db, assignment_id)
    if assignment_in.name is not None:
        name = require_name(assignment_in.name)
        clash = _find_assignment(db, name, db_assignment.role_category_id, db_assignment.seniority_level_id, db_assignment.asset_id)
        if clash and clash.id != assignment_id:
            raise ConflictError(f"An assignment named '{name}' already exists for this role category, seniority level and asset.")
        db_assignment.name = name
    if assignment_in.unit_ids is not None:
        unit_ids = _dedupe_unit_ids(db, assignment_in.unit_ids)
        existing = {link.unit_id: link for link in db_assignment.unit_links}
        db_assignment.unit_links = [existing.get(u_id) or AssignmentUnit(unit_id=u_id) for u_id in unit_ids]
    commit_or_rollback(db, f"update unit role assignment {assignment_id}")
    db.refresh(db_assignment)
    logger.info(f"Unit role assignment {assignment_id} updated ({len(db_assignment.unit_links)} unit(s)).")
    return db_assignment

def delete_unit_role_assignment(db: Session, assignment_id: int) -> None:
    db_assignment = get_unit_role_assignment_or_raise(db, assignment_id)
    db.delete(db_assignment)
    commit_or_rollback(db, f"delete unit role assignment {assignment_id}")
    logger.info(f"Unit role assignment {assignment_id} deleted.")

def get_units_for_profile(db: Session, role_category_id: int, seniority_level_id: int, asset_id: int) -> List[Unit]:
    """Units assigned to a (role category, seniority level, asset) profile, each once, in stable order."""
    logger.debug(f"Resolving units for role_category {role_category_id}, seniority {seniority_level_id}, asset {asset_id}")
    return (
        db.query(Unit)
        .join(AssignmentUnit, AssignmentUnit.unit_id == Unit.id)
        .join(UnitRoleAssignment, AssignmentUnit.assignment_id == UnitRoleAssignment.id)
        .filter(
            UnitRoleAssignment.role_category_id == role_category_id,
            UnitRoleAssignment.seniority_level_id == seniority_level_id,
            UnitRoleAssignment.asset_id == asset_id,
        )
        .distinct()
        .order_by(Unit.order, Unit.id)
        .all()
    )
