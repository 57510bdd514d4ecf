from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import get_current_user, get_current_admin_user
from vx_academy.models.user_model import User
from vx_academy.schemas import role_schema as schemas
from vx_academy.schemas.training_schema import UnitDisplay
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult
from vx_academy.crud import role_crud as crud

logger = logging.getLogger(__name__)

role_category_router = APIRouter(prefix="/role-categories", tags=["Roles"])
role_router = APIRouter(prefix="/roles", tags=["Roles"])
seniority_level_router = APIRouter(prefix="/seniority-levels", tags=["Roles"])
assignment_router = APIRouter(prefix="/unit-role-assignments", tags=["Unit Role Assignments"])

# --- Role Category Endpoints ---
@role_category_router.post("/", response_model=ApiResponse[schemas.RoleCategoryDisplay], status_code=status.HTTP_201_CREATED)
def create_role_category(
    category_in: schemas.RoleCategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    category = crud.create_role_category(db, category_in)
    return ApiResponse(data=schemas.RoleCategoryDisplay.model_validate(category), message="Role category created.")

@role_category_router.get("/", response_model=ApiResponse[List[schemas.RoleCategoryDisplay]])
def list_role_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.RoleCategoryDisplay.model_validate(c) for c in crud.get_role_categories(db)])

@role_category_router.put("/{category_id}", response_model=ApiResponse[schemas.RoleCategoryDisplay])
def update_role_category(
    category_id: int,
    category_in: schemas.RoleCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    category = crud.update_role_category(db, category_id, category_in)
    return ApiResponse(data=schemas.RoleCategoryDisplay.model_validate(category), message="Role category updated.")

@role_category_router.delete("/{category_id}", response_model=ApiResponse[DeleteResult])
def delete_role_category(category_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_role_category(db, category_id)
    return ApiResponse(data=DeleteResult(id=category_id), message="Role category deleted.")

# --- Role Endpoints ---
@role_router.post("/", response_model=ApiResponse[schemas.RoleDisplay], status_code=status.HTTP_201_CREATED)
def create_role(role_in: schemas.RoleCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    role = crud.create_role(db, role_in)
    return ApiResponse(data=schemas.RoleDisplay.model_validate(role), message="Role created.")

@role_router.get("/", response_model=ApiResponse[List[schemas.RoleDisplay]])
def list_roles(
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ApiResponse(data=[schemas.RoleDisplay.model_validate(r) for r in crud.get_roles(db, category_id)])

@role_router.put("/{role_id}", response_model=ApiResponse[schemas.RoleDisplay])
def update_role(
    role_id: int,
    role_in: schemas.RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    role = crud.update_role(db, role_id, role_in)
    return ApiResponse(data=schemas.RoleDisplay.model_validate(role), message="Role updated.")

@role_router.delete("/{role_id}", response_model=ApiResponse[DeleteResult])
def delete_role(role_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_role(db, role_id)
    return ApiResponse(data=DeleteResult(id=role_id), message="Role deleted.")

# --- Seniority Level Endpoints ---
@seniority_level_router.post("/", response_model=ApiResponse[schemas.SeniorityLevelDisplay], status_code=status.HTTP_201_CREATED)
def create_seniority_level(
    level_in: schemas.SeniorityLevelCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    level = crud.create_seniority_level(db, level_in)
    return ApiResponse(data=schemas.SeniorityLevelDisplay.model_validate(level), message="Seniority level created.")

@seniority_level_router.get("/", response_model=ApiResponse[List[schemas.SeniorityLevelDisplay]])
def list_seniority_levels(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.SeniorityLevelDisplay.model_validate(s) for s in crud.get_seniority_levels(db)])

@seniority_level_router.put("/{level_id}", response_model=ApiResponse[schemas.SeniorityLevelDisplay])
def update_seniority_level(
    level_id: int,
    level_in: schemas.SeniorityLevelUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    level = crud.update_seniority_level(db, level_id, level_in)
    return ApiResponse(data=schemas.SeniorityLevelDisplay.model_validate(level), message="Seniority level updated.")

@seniority_level_router.delete("/{level_id}", response_model=ApiResponse[DeleteResult])
def delete_seniority_level(level_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_seniority_level(db, level_id)
    return ApiResponse(data=DeleteResult(id=level_id), message="Seniority level deleted.")

# --- Unit Role Assignment Endpoints ---
@assignment_router.post("/", response_model=ApiResponse[schemas.UnitRoleAssignmentDisplay], status_code=status.HTTP_201_CREATED)
def create_unit_role_assignment(
    assignment_in: schemas.UnitRoleAssignmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Assigns a set of units to a (role category, seniority level, asset) profile.
    """
    assignment = crud.create_unit_role_assignment(db, assignment_in)
    return ApiResponse(data=schemas.UnitRoleAssignmentDisplay.model_validate(assignment), message="Assignment created.")

@assignment_router.get("/", response_model=ApiResponse[List[schemas.UnitRoleAssignmentDisplay]])
def list_unit_role_assignments(
    role_category_id: Optional[int] = Query(None),
    seniority_level_id: Optional[int] = Query(None),
    asset_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    assignments = crud.get_unit_role_assignments(db, role_category_id, seniority_level_id, asset_id)
    return ApiResponse(data=[schemas.UnitRoleAssignmentDisplay.model_validate(a) for a in assignments])

@assignment_router.get("/units", response_model=ApiResponse[List[UnitDisplay]])
def read_units_for_profile(
    role_category_id: int = Query(...),
    seniority_level_id: int = Query(...),
    asset_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    units = crud.get_units_for_profile(db, role_category_id, seniority_level_id, asset_id)
    return ApiResponse(data=[UnitDisplay.model_validate(u) for u in units])

@assignment_router.get("/{assignment_id}", response_model=ApiResponse[schemas.UnitRoleAssignmentDisplay])
def read_unit_role_assignment(assignment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    assignment = crud.get_unit_role_assignment_or_raise(db, assignment_id)
    return ApiResponse(data=schemas.UnitRoleAssignmentDisplay.model_validate(assignment))

@assignment_router.put("/{assignment_id}", response_model=ApiResponse[schemas.UnitRoleAssignmentDisplay])
def update_unit_role_assignment(
    assignment_id: int,
    assignment_in: schemas.UnitRoleAssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    assignment = crud.update_unit_role_assignment(db, assignment_id, assignment_in)
    return ApiResponse(data=schemas.UnitRoleAssignmentDisplay.model_validate(assignment), message="Assignment updated.")

@assignment_router.delete("/{assignment_id}", response_model=ApiResponse[DeleteResult])
def delete_unit_role_assignment(assignment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_unit_role_assignment(db, assignment_id)
    return ApiResponse(data=DeleteResult(id=assignment_id), message="Assignment deleted.")
