from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import (
    get_current_user,
    get_current_admin_user,
    get_current_super_admin,
    ensure_self_or_admin,
)
from vx_academy.models.user_model import User
from vx_academy.schemas import progress_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse
from vx_academy.crud import progress_crud as crud
from vx_academy.crud import training_crud

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/progress", tags=["Learning Progress"])

# --- Learner Endpoints ---
@router.post("/course-units", response_model=ApiResponse[schemas.CourseUnitProgressDisplay])
def record_course_unit_progress(
    progress_in: schemas.CourseUnitProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Records the current user's progress on a course unit and rolls it up to course,
    module and training area. Send a status, a percentage, or both (they must agree).
    """
    leaf = crud.record_course_unit_progress(
        db, current_user.id, progress_in.course_unit_id,
        status=progress_in.status, completion_percentage=progress_in.completion_percentage,
    )
    return ApiResponse(data=schemas.CourseUnitProgressDisplay.model_validate(leaf), message="Progress recorded.")

@router.post("/learning-blocks/{learning_block_id}/complete", response_model=ApiResponse[schemas.LearningBlockProgressDisplay])
def complete_learning_block(
    learning_block_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    block_row = crud.complete_learning_block(db, current_user.id, learning_block_id)
    return ApiResponse(data=schemas.LearningBlockProgressDisplay.model_validate(block_row), message="Learning block completed.")

@router.get("/me", response_model=ApiResponse[schemas.UserProgressSnapshot])
def read_my_progress(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=crud.get_user_progress_snapshot(db, current_user.id))

@router.get("/me/overview", response_model=ApiResponse[List[schemas.TrainingAreaOverview]])
def read_my_progress_overview(
    training_area_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    The content tree with the current user's percentages; untouched entities show 0%.
    """
    if training_area_id is not None:
        training_crud.get_training_area_or_raise(db, training_area_id)
    return ApiResponse(data=crud.get_user_progress_overview(db, current_user.id, training_area_id))

@router.get("/me/courses/{course_id}", response_model=ApiResponse[List[schemas.CourseUnitProgressDisplay]])
def read_my_course_unit_progress(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    training_crud.get_course_or_raise(db, course_id)
    rows = crud.get_course_unit_progress_for_course(db, current_user.id, course_id)
    return ApiResponse(data=[schemas.CourseUnitProgressDisplay.model_validate(r) for r in rows])

# --- Per-user Endpoints ---
@router.get("/users/{user_id}", response_model=ApiResponse[schemas.UserProgressSnapshot])
def read_user_progress(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ensure_self_or_admin(current_user, user_id)
    return ApiResponse(data=crud.get_user_progress_snapshot(db, user_id))

@router.post("/users/{user_id}/recalculate", response_model=ApiResponse[schemas.UserProgressSnapshot])
def recalculate_user_progress(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Rebuilds the user's course, module and training-area rows from their course-unit rows.
    """
    logger.info(f"User {current_user.email} recalculating progress for user {user_id}")
    snapshot = crud.recalculate_user_progress(db, user_id)
    return ApiResponse(data=snapshot, message="Progress recalculated.")

@router.post("/users/{user_id}/courses/{course_id}/recompute", response_model=ApiResponse[schemas.CourseProgressDisplay])
def recompute_course_progress(
    user_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    row = crud.recompute_course_progress(db, user_id, course_id)
    return ApiResponse(data=schemas.CourseProgressDisplay.model_validate(row))

@router.post("/users/{user_id}/modules/{module_id}/recompute", response_model=ApiResponse[schemas.ModuleProgressDisplay])
def recompute_module_progress(
    user_id: int,
    module_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    row = crud.recompute_module_progress(db, user_id, module_id)
    return ApiResponse(data=schemas.ModuleProgressDisplay.model_validate(row))

@router.post("/users/{user_id}/training-areas/{training_area_id}/recompute", response_model=ApiResponse[schemas.TrainingAreaProgressDisplay])
def recompute_training_area_progress(
    user_id: int,
    training_area_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    row = crud.recompute_training_area_progress(db, user_id, training_area_id)
    return ApiResponse(data=schemas.TrainingAreaProgressDisplay.model_validate(row))

@router.delete("/users/{user_id}", response_model=ApiResponse[schemas.ProgressResetResult])
def reset_user_progress(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_super_admin)
):
    logger.info(f"Admin {current_user.email} resetting all progress for user {user_id}")
    deleted = crud.reset_user_progress(db, user_id)
    return ApiResponse(data=schemas.ProgressResetResult(user_id=user_id, rows_deleted=deleted), message="Progress reset.")
