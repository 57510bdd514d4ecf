from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import (
    get_current_user,
    get_current_admin_user,
    table_sort_state,
    require_confirmation,
)
from vx_academy.models.user_model import User
from vx_academy.schemas import training_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult, ReorderRequest
from vx_academy.crud import training_crud as crud
from vx_academy.crud.crud_utils import as_row
from vx_academy.services.table_filter import HierarchyFilter, SortState, apply_table_state, UNIT_COLUMNS

logger = logging.getLogger(__name__)

unit_router = APIRouter(prefix="/units", tags=["Units"])
course_unit_router = APIRouter(prefix="/course-units", tags=["Course Units"])
learning_block_router = APIRouter(prefix="/learning-blocks", tags=["Learning Blocks"])

# --- Unit Endpoints ---
@unit_router.post("/", response_model=ApiResponse[schemas.UnitDisplay], status_code=status.HTTP_201_CREATED)
def create_unit(
    unit_in: schemas.UnitCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} creating unit: {unit_in.name}")
    unit = crud.create_unit(db, unit_in)
    return ApiResponse(data=schemas.UnitDisplay.model_validate(unit), message="Unit created.")

@unit_router.get("/", response_model=ApiResponse[List[Dict[str, Any]]])
def list_units(
    training_area_id: Optional[int] = Query(None),
    module_id: Optional[int] = Query(None),
    course_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    sort_state: SortState = Depends(table_sort_state),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Units as admin-table rows. A course narrows to its placements in order; a
    module or training area narrows to units placed anywhere beneath it.
    """
    hierarchy = HierarchyFilter.from_params(training_area_id, module_id, course_id)
    if hierarchy.course_id is not None:
        units = crud.get_units(db, course_id=hierarchy.course_id, limit=None)
    elif hierarchy.module_id is not None or hierarchy.training_area_id is not None:
        courses = crud.get_courses(db, module_id=hierarchy.module_id, training_area_id=hierarchy.training_area_id, limit=None)
        seen = set()
        units = []
        for course in courses:
            for unit in crud.get_units(db, course_id=course.id, limit=None):
                if unit.id not in seen:
                    seen.add(unit.id)
                    units.append(unit)
    else:
        units = crud.get_units(db, limit=None)
    rows = [as_row(unit, schemas.UnitDisplay, course_count=len(unit.placements)) for unit in units]
    return ApiResponse(data=apply_table_state(rows, search, ["name", "description"], sort_state, UNIT_COLUMNS))

@unit_router.get("/{unit_id}", response_model=ApiResponse[schemas.UnitWithBlocks])
def read_unit(unit_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    A unit with its learning blocks in order.
    """
    return ApiResponse(data=schemas.UnitWithBlocks.model_validate(crud.get_unit_or_raise(db, unit_id)))

@unit_router.put("/{unit_id}", response_model=ApiResponse[schemas.UnitDisplay])
def update_unit(
    unit_id: int,
    unit_in: schemas.UnitUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    unit = crud.update_unit(db, unit_id, unit_in)
    return ApiResponse(data=schemas.UnitDisplay.model_validate(unit), message="Unit updated.")

@unit_router.delete("/{unit_id}", response_model=ApiResponse[DeleteResult])
def delete_unit(
    unit_id: int,
    _confirmed: None = Depends(require_confirmation),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} deleting unit {unit_id}")
    crud.delete_unit(db, unit_id)
    return ApiResponse(data=DeleteResult(id=unit_id), message="Unit deleted.")

# --- Course Unit (placement) Endpoints ---
@course_unit_router.post("/", response_model=ApiResponse[schemas.CourseUnitDisplay], status_code=status.HTTP_201_CREATED)
def place_unit_in_course(
    course_unit_in: schemas.CourseUnitCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Places a unit in a course. Omitting order appends; an occupied order shifts later units down.
    """
    course_unit = crud.create_course_unit(db, course_unit_in)
    return ApiResponse(data=schemas.CourseUnitDisplay.model_validate(course_unit), message="Unit placed in course.")

@course_unit_router.get("/{course_unit_id}", response_model=ApiResponse[schemas.CourseUnitDisplay])
def read_course_unit(course_unit_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.CourseUnitDisplay.model_validate(crud.get_course_unit_or_raise(db, course_unit_id)))

@course_unit_router.put("/{course_unit_id}/order", response_model=ApiResponse[schemas.CourseUnitDisplay])
def reorder_course_unit(
    course_unit_id: int,
    reorder_in: ReorderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    course_unit = crud.reorder_course_unit(db, course_unit_id, reorder_in.new_order)
    return ApiResponse(data=schemas.CourseUnitDisplay.model_validate(course_unit), message="Course unit moved.")

@course_unit_router.delete("/{course_unit_id}", response_model=ApiResponse[DeleteResult])
def remove_unit_from_course(
    course_unit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    crud.delete_course_unit(db, course_unit_id)
    return ApiResponse(data=DeleteResult(id=course_unit_id), message="Unit removed from course.")

# --- Learning Block Endpoints ---
@learning_block_router.post("/", response_model=ApiResponse[schemas.LearningBlockDisplay], status_code=status.HTTP_201_CREATED)
def create_learning_block(
    block_in: schemas.LearningBlockCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    block = crud.create_learning_block(db, block_in)
    return ApiResponse(data=schemas.LearningBlockDisplay.model_validate(block), message="Learning block created.")

@learning_block_router.get("/", response_model=ApiResponse[List[schemas.LearningBlockDisplay]])
def list_learning_blocks(
    unit_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    crud.get_unit_or_raise(db, unit_id)
    return ApiResponse(data=[schemas.LearningBlockDisplay.model_validate(b) for b in crud.get_learning_blocks(db, unit_id)])

@learning_block_router.get("/{learning_block_id}", response_model=ApiResponse[schemas.LearningBlockDisplay])
def read_learning_block(learning_block_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.LearningBlockDisplay.model_validate(crud.get_learning_block_or_raise(db, learning_block_id)))

@learning_block_router.put("/{learning_block_id}", response_model=ApiResponse[schemas.LearningBlockDisplay])
def update_learning_block(
    learning_block_id: int,
    block_in: schemas.LearningBlockUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    block = crud.update_learning_block(db, learning_block_id, block_in)
    return ApiResponse(data=schemas.LearningBlockDisplay.model_validate(block), message="Learning block updated.")

@learning_block_router.put("/{learning_block_id}/order", response_model=ApiResponse[schemas.LearningBlockDisplay])
def reorder_learning_block(
    learning_block_id: int,
    reorder_in: ReorderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    block = crud.reorder_learning_block(db, learning_block_id, reorder_in.new_order)
    return ApiResponse(data=schemas.LearningBlockDisplay.model_validate(block), message="Learning block moved.")

@learning_block_router.delete("/{learning_block_id}", response_model=ApiResponse[DeleteResult])
def delete_learning_block(
    learning_block_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    crud.delete_learning_block(db, learning_block_id)
    return ApiResponse(data=DeleteResult(id=learning_block_id), message="Learning block deleted.")
