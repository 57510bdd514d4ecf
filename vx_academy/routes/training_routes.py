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
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult
from vx_academy.crud import training_crud as crud
from vx_academy.crud.crud_utils import as_row
from vx_academy.services.table_filter import (
    HierarchyFilter, SortState, apply_table_state,
    TRAINING_AREA_COLUMNS, MODULE_COLUMNS, COURSE_COLUMNS,
)

logger = logging.getLogger(__name__)

training_area_router = APIRouter(prefix="/training-areas", tags=["Training Areas"])
module_router = APIRouter(prefix="/modules", tags=["Modules"])
course_router = APIRouter(prefix="/courses", tags=["Courses"])

# --- Training Area Endpoints ---
@training_area_router.post("/", response_model=ApiResponse[schemas.TrainingAreaDisplay], status_code=status.HTTP_201_CREATED)
def create_training_area(
    area_in: schemas.TrainingAreaCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} creating training area: {area_in.name}")
    area = crud.create_training_area(db, area_in)
    return ApiResponse(data=schemas.TrainingAreaDisplay.model_validate(area), message="Training area created.")

@training_area_router.get("/", response_model=ApiResponse[List[Dict[str, Any]]])
def list_training_areas(
    search: Optional[str] = Query(None),
    sort_state: SortState = Depends(table_sort_state),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Training areas as admin-table rows, with module counts.
    """
    rows = [
        as_row(area, schemas.TrainingAreaDisplay, module_count=len(area.modules))
        for area in crud.get_training_areas(db, limit=None)
    ]
    return ApiResponse(data=apply_table_state(rows, search, ["name", "description"], sort_state, TRAINING_AREA_COLUMNS))

@training_area_router.get("/{training_area_id}", response_model=ApiResponse[schemas.TrainingAreaDisplay])
def read_training_area(training_area_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.TrainingAreaDisplay.model_validate(crud.get_training_area_or_raise(db, training_area_id)))

@training_area_router.put("/{training_area_id}", response_model=ApiResponse[schemas.TrainingAreaDisplay])
def update_training_area(
    training_area_id: int,
    area_in: schemas.TrainingAreaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    area = crud.update_training_area(db, training_area_id, area_in)
    return ApiResponse(data=schemas.TrainingAreaDisplay.model_validate(area), message="Training area updated.")

@training_area_router.delete("/{training_area_id}", response_model=ApiResponse[DeleteResult])
def delete_training_area(
    training_area_id: int,
    _confirmed: None = Depends(require_confirmation),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Deletes a training area with its modules, courses and all related progress. Requires confirm=true.
    """
    logger.info(f"User {current_user.email} deleting training area {training_area_id}")
    crud.delete_training_area(db, training_area_id)
    return ApiResponse(data=DeleteResult(id=training_area_id), message="Training area deleted.")

# --- Module Endpoints ---
@module_router.post("/", response_model=ApiResponse[schemas.ModuleDisplay], status_code=status.HTTP_201_CREATED)
def create_module(
    module_in: schemas.ModuleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} creating module '{module_in.name}' in training area {module_in.training_area_id}")
    module = crud.create_module(db, module_in)
    return ApiResponse(data=schemas.ModuleDisplay.model_validate(module), message="Module created.")

@module_router.get("/", response_model=ApiResponse[List[Dict[str, Any]]])
def list_modules(
    training_area_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    sort_state: SortState = Depends(table_sort_state),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    hierarchy = HierarchyFilter.from_params(training_area_id=training_area_id)
    rows = [
        as_row(
            module, schemas.ModuleDisplay,
            training_area_name=module.training_area.name,
            course_count=len(module.courses),
        )
        for module in crud.get_modules(db, training_area_id=hierarchy.training_area_id, limit=None)
    ]
    return ApiResponse(data=apply_table_state(rows, search, ["name", "training_area_name"], sort_state, MODULE_COLUMNS, hierarchy))

@module_router.get("/{module_id}", response_model=ApiResponse[schemas.ModuleDisplay])
def read_module(module_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.ModuleDisplay.model_validate(crud.get_module_or_raise(db, module_id)))

@module_router.put("/{module_id}", response_model=ApiResponse[schemas.ModuleDisplay])
def update_module(
    module_id: int,
    module_in: schemas.ModuleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    module = crud.update_module(db, module_id, module_in)
    return ApiResponse(data=schemas.ModuleDisplay.model_validate(module), message="Module updated.")

@module_router.delete("/{module_id}", response_model=ApiResponse[DeleteResult])
def delete_module(
    module_id: int,
    _confirmed: None = Depends(require_confirmation),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} deleting module {module_id}")
    crud.delete_module(db, module_id)
    return ApiResponse(data=DeleteResult(id=module_id), message="Module deleted.")

# --- Course Endpoints ---
@course_router.post("/", response_model=ApiResponse[schemas.CourseDisplay], status_code=status.HTTP_201_CREATED)
def create_course(
    course_in: schemas.CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} creating course '{course_in.name}' in module {course_in.module_id}")
    course = crud.create_course(db, course_in)
    return ApiResponse(data=schemas.CourseDisplay.model_validate(course), message="Course created.")

@course_router.get("/", response_model=ApiResponse[List[Dict[str, Any]]])
def list_courses(
    training_area_id: Optional[int] = Query(None),
    module_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    sort_state: SortState = Depends(table_sort_state),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Courses as admin-table rows. Filtering by module only applies inside the selected training area.
    """
    hierarchy = HierarchyFilter.from_params(training_area_id=training_area_id, module_id=module_id)
    courses = crud.get_courses(db, module_id=hierarchy.module_id, training_area_id=hierarchy.training_area_id, limit=None)
    rows = [
        as_row(
            course, schemas.CourseDisplay,
            module_name=course.module.name,
            training_area_id=course.module.training_area_id,
            unit_count=len(course.course_units),
        )
        for course in courses
    ]
    return ApiResponse(data=apply_table_state(rows, search, ["name", "module_name", "description"], sort_state, COURSE_COLUMNS, hierarchy))

@course_router.get("/{course_id}", response_model=ApiResponse[schemas.CourseDisplay])
def read_course(course_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.CourseDisplay.model_validate(crud.get_course_or_raise(db, course_id)))

@course_router.get("/{course_id}/units", response_model=ApiResponse[List[schemas.CourseUnitDisplay]])
def read_course_units(course_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    The course's unit placements in order.
    """
    crud.get_course_or_raise(db, course_id)
    placements = crud.get_course_units(db, course_id)
    return ApiResponse(data=[schemas.CourseUnitDisplay.model_validate(p) for p in placements])

@course_router.put("/{course_id}", response_model=ApiResponse[schemas.CourseDisplay])
def update_course(
    course_id: int,
    course_in: schemas.CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    course = crud.update_course(db, course_id, course_in)
    return ApiResponse(data=schemas.CourseDisplay.model_validate(course), message="Course updated.")

@course_router.delete("/{course_id}", response_model=ApiResponse[DeleteResult])
def delete_course(
    course_id: int,
    _confirmed: None = Depends(require_confirmation),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} deleting course {course_id}")
    crud.delete_course(db, course_id)
    return ApiResponse(data=DeleteResult(id=course_id), message="Course deleted.")
