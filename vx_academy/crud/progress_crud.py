from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Dict, List, Optional, Set
from datetime import datetime, timezone
import logging

from vx_academy.core.exceptions import NotFoundError, ValidationError
from vx_academy.models.enums import ProgressStatus
from vx_academy.models.training_model import TrainingArea, Module, Course, CourseUnit, LearningBlock
from vx_academy.models.progress_model import (
    UserLearningBlockProgress,
    UserCourseUnitProgress,
    UserCourseProgress,
    UserModuleProgress,
    UserTrainingAreaProgress
)
from vx_academy.schemas import progress_schema as schemas
from vx_academy.services.rollup import derive_status, mean_completion, block_completion, validate_percentage
from vx_academy.crud.crud_utils import commit_or_rollback
from vx_academy.crud import training_crud, user_crud

logger = logging.getLogger(__name__)

# Rollup: CourseUnit -> Course -> Module -> TrainingArea. Each parent is the mean
# of ALL its expected children; a child without a row counts as 0%.

def _now() -> datetime:
    return datetime.now(timezone.utc)

def _get_or_create(db: Session, model, user_id: int, **key):
    query = db.query(model).filter(model.user_id == user_id).filter_by(**key)
    if db.get_bind().dialect.name != "sqlite":
        query = query.with_for_update()
    row = query.first()
    if row is None:
        row = model(user_id=user_id, status=ProgressStatus.NOT_STARTED, completion_percentage=0.0, **key)
        db.add(row)
    return row

def _apply_percentage(row, completion_percentage: float):
    """Writes percentage, derived status and completed_at onto a progress row."""
    status = derive_status(completion_percentage)
    row.completion_percentage = completion_percentage
    if status == ProgressStatus.COMPLETED:
        if row.status != ProgressStatus.COMPLETED or row.completed_at is None:
            row.completed_at = _now()
    else:
        row.completed_at = None
    row.status = status
    return row

def resolve_leaf_percentage(status: Optional[ProgressStatus], completion_percentage: Optional[float]) -> float:
    """
    Turns a (status, percentage) pair for a course unit into a single percentage.
    completed implies 100 and not_started implies 0; in_progress needs an explicit value.
    When both are given they must agree.
    """
    if status is None and completion_percentage is None:
        raise ValidationError(
            "Either status or completion_percentage is required.",
            errors={"status": "Required when completion_percentage is missing.",
                    "completion_percentage": "Required when status is missing."},
        )
    if completion_percentage is not None:
        completion_percentage = validate_percentage(completion_percentage)
    if status is None:
        return completion_percentage

    status = ProgressStatus(status)
    implied = {ProgressStatus.COMPLETED: 100.0, ProgressStatus.NOT_STARTED: 0.0}.get(status)
    if completion_percentage is None:
        if implied is None:
            raise ValidationError.for_field("completion_percentage", "A completion percentage is required for in_progress.")
        return implied
    if derive_status(completion_percentage) != status:
        raise ValidationError.for_field(
            "status", f"Status '{status.value}' does not match completion percentage {completion_percentage}."
        )
    return completion_percentage

# --- Level recomputation (no commit) ---
def _refresh_course(db: Session, user_id: int, course_id: int) -> UserCourseProgress:
    course_unit_ids = [cu_id for (cu_id,) in db.query(CourseUnit.id).filter(CourseUnit.course_id == course_id).all()]
    percentages = []
    if course_unit_ids:
        percentages = [
            pct for (pct,) in db.query(UserCourseUnitProgress.completion_percentage).filter(
                UserCourseUnitProgress.user_id == user_id,
                UserCourseUnitProgress.course_unit_id.in_(course_unit_ids)
            ).all()
        ]
    row = _get_or_create(db, UserCourseProgress, user_id, course_id=course_id)
    _apply_percentage(row, mean_completion(percentages, len(course_unit_ids)))
    db.flush()
    return row

def _refresh_module(db: Session, user_id: int, module_id: int) -> UserModuleProgress:
    course_ids = [c_id for (c_id,) in db.query(Course.id).filter(Course.module_id == module_id).all()]
    percentages = []
    if course_ids:
        percentages = [
            pct for (pct,) in db.query(UserCourseProgress.completion_percentage).filter(
                UserCourseProgress.user_id == user_id,
                UserCourseProgress.course_id.in_(course_ids)
            ).all()
        ]
    row = _get_or_create(db, UserModuleProgress, user_id, module_id=module_id)
    _apply_percentage(row, mean_completion(percentages, len(course_ids)))
    db.flush()
    return row

def _refresh_training_area(db: Session, user_id: int, training_area_id: int) -> UserTrainingAreaProgress:
    module_ids = [m_id for (m_id,) in db.query(Module.id).filter(Module.training_area_id == training_area_id).all()]
    percentages = []
    if module_ids:
        percentages = [
            pct for (pct,) in db.query(UserModuleProgress.completion_percentage).filter(
                UserModuleProgress.user_id == user_id,
                UserModuleProgress.module_id.in_(module_ids)
            ).all()
        ]
    row = _get_or_create(db, UserTrainingAreaProgress, user_id, training_area_id=training_area_id)
    _apply_percentage(row, mean_completion(percentages, len(module_ids)))
    db.flush()
    return row

def _rollup_course_chain(db: Session, user_id: int, course_id: int) -> None:
    """Recomputes the course, its module and its training area for one user."""
    course = training_crud.get_course_or_raise(db, course_id)
    _refresh_course(db, user_id, course.id)
    _refresh_module(db, user_id, course.module_id)
    _refresh_training_area(db, user_id, course.module.training_area_id)

def _set_course_unit_percentage(db: Session, user_id: int, course_unit: CourseUnit, completion_percentage: float) -> UserCourseUnitProgress:
    leaf = _get_or_create(db, UserCourseUnitProgress, user_id, course_unit_id=course_unit.id)
    _apply_percentage(leaf, completion_percentage)
    db.flush()
    _rollup_course_chain(db, user_id, course_unit.course_id)
    return leaf

# --- Public rollup entry points ---
def record_course_unit_progress(
    db: Session,
    user_id: int,
    course_unit_id: int,
    status: Optional[ProgressStatus] = None,
    completion_percentage: Optional[float] = None
) -> UserCourseUnitProgress:
    """
    Upserts a learner's progress on one course unit and rolls it up through
    course, module and training area in a single transaction.
    """
    pct = resolve_leaf_percentage(status, completion_percentage)
    user_crud.get_user_or_raise(db, user_id)
    course_unit = training_crud.get_course_unit_or_raise(db, course_unit_id)
    logger.debug(f"Recording {pct}% on course unit {course_unit_id} for user {user_id}")

    try:
        leaf = _set_course_unit_percentage(db, user_id, course_unit, pct)
    except Exception as e:
        db.rollback()
        logger.error(f"Rollup failed for user {user_id}, course unit {course_unit_id}: {e}", exc_info=True)
        raise
    commit_or_rollback(db, f"record progress on course unit {course_unit_id} for user {user_id}")
    db.refresh(leaf)
    logger.info(f"User {user_id} progress on course unit {course_unit_id} is {leaf.completion_percentage}% ({leaf.status.value}).")
    return leaf

def complete_learning_block(db: Session, user_id: int, learning_block_id: int) -> UserLearningBlockProgress:
    """
    Marks a learning block completed. Every course placing the block's unit gets
    the unit's share of completed blocks as its leaf percentage, then rolls up.
    A leaf never moves backwards here, so a unit already completed stays at 100.
    """
    user_crud.get_user_or_raise(db, user_id)
    block = training_crud.get_learning_block_or_raise(db, learning_block_id)
    placements = training_crud.get_placements_for_unit(db, block.unit_id)
    if not placements:
        logger.warning(f"Learning block {learning_block_id} belongs to unit {block.unit_id}, which is not placed in any course.")
        raise NotFoundError("Course unit", message=f"Unit {block.unit_id} is not part of any course.")

    try:
        block_row = db.query(UserLearningBlockProgress).filter(
            UserLearningBlockProgress.user_id == user_id,
            UserLearningBlockProgress.learning_block_id == learning_block_id
        ).first()
        if block_row is None:
            block_row = UserLearningBlockProgress(user_id=user_id, learning_block_id=learning_block_id)
            db.add(block_row)
        if block_row.status != ProgressStatus.COMPLETED:
            block_row.status = ProgressStatus.COMPLETED
            block_row.completed_at = _now()
        db.flush()

        total_blocks = db.query(func.count(LearningBlock.id)).filter(LearningBlock.unit_id == block.unit_id).scalar() or 0
        completed_blocks = db.query(func.count(UserLearningBlockProgress.id)).join(
            LearningBlock, UserLearningBlockProgress.learning_block_id == LearningBlock.id
        ).filter(
            LearningBlock.unit_id == block.unit_id,
            UserLearningBlockProgress.user_id == user_id,
            UserLearningBlockProgress.status == ProgressStatus.COMPLETED
        ).scalar() or 0
        unit_pct = block_completion(completed_blocks, total_blocks)

        for placement in placements:
            existing = db.query(UserCourseUnitProgress.completion_percentage).filter(
                UserCourseUnitProgress.user_id == user_id,
                UserCourseUnitProgress.course_unit_id == placement.id
            ).scalar()
            _set_course_unit_percentage(db, user_id, placement, max(unit_pct, existing or 0.0))
    except Exception as e:
        db.rollback()
        logger.error(f"Completing learning block {learning_block_id} failed for user {user_id}: {e}", exc_info=True)
        raise
    commit_or_rollback(db, f"complete learning block {learning_block_id} for user {user_id}")
    db.refresh(block_row)
    logger.info(f"User {user_id} completed learning block {learning_block_id}; unit {block.unit_id} now at {unit_pct}%.")
    return block_row

def complete_course_unit_placements(db: Session, user_id: int, unit_id: int, course_id: Optional[int] = None, commit: bool = True) -> List[UserCourseUnitProgress]:
    """Marks every placement of a unit (or only the one in `course_id`) completed."""
    placements = training_crud.get_placements_for_unit(db, unit_id, course_id)
    if course_id is not None and not placements:
        raise NotFoundError("Course unit", message=f"Unit {unit_id} is not part of course {course_id}.")
    try:
        leaves = [_set_course_unit_percentage(db, user_id, placement, 100.0) for placement in placements]
    except Exception:
        if commit:
            db.rollback()
        raise
    if commit:
        commit_or_rollback(db, f"complete unit {unit_id} for user {user_id}")
    logger.info(f"Unit {unit_id} completed for user {user_id} in {len(leaves)} course(s).")
    return leaves

def complete_course_for_user(db: Session, user_id: int, course_id: int, commit: bool = True) -> UserCourseProgress:
    """Marks every unit of a course completed for the user and rolls the course chain up."""
    course = training_crud.get_course_or_raise(db, course_id)
    logger.debug(f"Completing course {course_id} for user {user_id}")
    try:
        for course_unit in training_crud.get_course_units(db, course.id):
            leaf = _get_or_create(db, UserCourseUnitProgress, user_id, course_unit_id=course_unit.id)
            _apply_percentage(leaf, 100.0)
        db.flush()
        _rollup_course_chain(db, user_id, course.id)
    except Exception:
        if commit:
            db.rollback()
        raise
    course_row = get_course_progress(db, user_id, course.id)
    if commit:
        commit_or_rollback(db, f"complete course {course_id} for user {user_id}")
        db.refresh(course_row)
    logger.info(f"Course {course_id} marked completed for user {user_id} ({course_row.completion_percentage}%).")
    return course_row

def recompute_course_progress(db: Session, user_id: int, course_id: int) -> UserCourseProgress:
    training_crud.get_course_or_raise(db, course_id)
    row = _refresh_course(db, user_id, course_id)
    commit_or_rollback(db, f"recompute course {course_id} progress for user {user_id}")
    db.refresh(row)
    return row

def recompute_module_progress(db: Session, user_id: int, module_id: int) -> UserModuleProgress:
    training_crud.get_module_or_raise(db, module_id)
    row = _refresh_module(db, user_id, module_id)
    commit_or_rollback(db, f"recompute module {module_id} progress for user {user_id}")
    db.refresh(row)
    return row

def recompute_training_area_progress(db: Session, user_id: int, training_area_id: int) -> UserTrainingAreaProgress:
    training_crud.get_training_area_or_raise(db, training_area_id)
    row = _refresh_training_area(db, user_id, training_area_id)
    commit_or_rollback(db, f"recompute training area {training_area_id} progress for user {user_id}")
    db.refresh(row)
    return row

def recalculate_user_progress(db: Session, user_id: int) -> schemas.UserProgressSnapshot:
    """Rebuilds every ancestor row above the user's course-unit rows from scratch."""
    user_crud.get_user_or_raise(db, user_id)
    course_ids: Set[int] = {
        c_id for (c_id,) in db.query(CourseUnit.course_id).join(
            UserCourseUnitProgress, UserCourseUnitProgress.course_unit_id == CourseUnit.id
        ).filter(UserCourseUnitProgress.user_id == user_id).distinct().all()
    }
    course_ids |= {c_id for (c_id,) in db.query(UserCourseProgress.course_id).filter(UserCourseProgress.user_id == user_id).all()}
    logger.debug(f"Recalculating progress for user {user_id} across {len(course_ids)} course(s)")

    try:
        module_ids: Set[int] = set()
        for course_id in sorted(course_ids):
            _refresh_course(db, user_id, course_id)
        if course_ids:
            module_ids = {m_id for (m_id,) in db.query(Course.module_id).filter(Course.id.in_(course_ids)).distinct().all()}
        for module_id in sorted(module_ids):
            _refresh_module(db, user_id, module_id)
        area_ids: Set[int] = set()
        if module_ids:
            area_ids = {a_id for (a_id,) in db.query(Module.training_area_id).filter(Module.id.in_(module_ids)).distinct().all()}
        for area_id in sorted(area_ids):
            _refresh_training_area(db, user_id, area_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Recalculating progress failed for user {user_id}: {e}", exc_info=True)
        raise
    commit_or_rollback(db, f"recalculate progress for user {user_id}")
    logger.info(f"Progress recalculated for user {user_id}: {len(course_ids)} course(s), {len(module_ids)} module(s), {len(area_ids)} training area(s).")
    return get_user_progress_snapshot(db, user_id)

def reset_user_progress(db: Session, user_id: int) -> int:
    """Deletes every progress row the user holds, at all levels. Returns the number of rows removed."""
    user_crud.get_user_or_raise(db, user_id)
    deleted = 0
    try:
        for model in (UserLearningBlockProgress, UserCourseUnitProgress, UserCourseProgress, UserModuleProgress, UserTrainingAreaProgress):
            deleted += db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"reset progress for user {user_id}")
    logger.info(f"Progress reset for user {user_id}: {deleted} row(s) deleted.")
    return deleted

def seed_course_progress(db: Session, user_id: int, course_id: int) -> UserCourseProgress:
    """Ensures a not_started course row exists. Does not commit."""
    row = db.query(UserCourseProgress).filter(
        UserCourseProgress.user_id == user_id, UserCourseProgress.course_id == course_id
    ).first()
    if row is None:
        row = UserCourseProgress(user_id=user_id, course_id=course_id, status=ProgressStatus.NOT_STARTED, completion_percentage=0.0)
        db.add(row)
    return row

# --- Reads ---
def get_course_unit_progress(db: Session, user_id: int, course_unit_id: int) -> Optional[UserCourseUnitProgress]:
    logger.debug(f"Fetching course unit progress for user {user_id}, course unit {course_unit_id}")
    return db.query(UserCourseUnitProgress).filter(
        UserCourseUnitProgress.user_id == user_id,
        UserCourseUnitProgress.course_unit_id == course_unit_id
    ).first()

def get_course_progress(db: Session, user_id: int, course_id: int) -> Optional[UserCourseProgress]:
    logger.debug(f"Fetching course progress for user {user_id}, course {course_id}")
    return db.query(UserCourseProgress).filter(
        UserCourseProgress.user_id == user_id,
        UserCourseProgress.course_id == course_id
    ).first()

def get_module_progress(db: Session, user_id: int, module_id: int) -> Optional[UserModuleProgress]:
    logger.debug(f"Fetching module progress for user {user_id}, module {module_id}")
    return db.query(UserModuleProgress).filter(
        UserModuleProgress.user_id == user_id,
        UserModuleProgress.module_id == module_id
    ).first()

def get_training_area_progress(db: Session, user_id: int, training_area_id: int) -> Optional[UserTrainingAreaProgress]:
    logger.debug(f"Fetching training area progress for user {user_id}, training area {training_area_id}")
    return db.query(UserTrainingAreaProgress).filter(
        UserTrainingAreaProgress.user_id == user_id,
        UserTrainingAreaProgress.training_area_id == training_area_id
    ).first()

def get_course_unit_progress_for_course(db: Session, user_id: int, course_id: int) -> List[UserCourseUnitProgress]:
    return db.query(UserCourseUnitProgress).join(
        CourseUnit, UserCourseUnitProgress.course_unit_id == CourseUnit.id
    ).filter(
        UserCourseUnitProgress.user_id == user_id,
        CourseUnit.course_id == course_id
    ).order_by(CourseUnit.order).all()

def get_user_progress_snapshot(db: Session, user_id: int) -> schemas.UserProgressSnapshot:
    logger.debug(f"Building progress snapshot for user {user_id}")
    return schemas.UserProgressSnapshot(
        user_id=user_id,
        learning_blocks=db.query(UserLearningBlockProgress).filter(UserLearningBlockProgress.user_id == user_id).order_by(UserLearningBlockProgress.learning_block_id).all(),
        course_units=db.query(UserCourseUnitProgress).filter(UserCourseUnitProgress.user_id == user_id).order_by(UserCourseUnitProgress.course_unit_id).all(),
        courses=db.query(UserCourseProgress).filter(UserCourseProgress.user_id == user_id).order_by(UserCourseProgress.course_id).all(),
        modules=db.query(UserModuleProgress).filter(UserModuleProgress.user_id == user_id).order_by(UserModuleProgress.module_id).all(),
        training_areas=db.query(UserTrainingAreaProgress).filter(UserTrainingAreaProgress.user_id == user_id).order_by(UserTrainingAreaProgress.training_area_id).all(),
    )

def get_user_progress_overview(db: Session, user_id: int, training_area_id: Optional[int] = None) -> List[schemas.TrainingAreaOverview]:
    """
    The content tree with the user's percentages. Entities without a progress
    row are shown as 0% / not_started.
    """
    user_crud.get_user_or_raise(db, user_id)
    area_rows: Dict[int, UserTrainingAreaProgress] = {
        r.training_area_id: r for r in db.query(UserTrainingAreaProgress).filter(UserTrainingAreaProgress.user_id == user_id).all()
    }
    module_rows: Dict[int, UserModuleProgress] = {
        r.module_id: r for r in db.query(UserModuleProgress).filter(UserModuleProgress.user_id == user_id).all()
    }
    course_rows: Dict[int, UserCourseProgress] = {
        r.course_id: r for r in db.query(UserCourseProgress).filter(UserCourseProgress.user_id == user_id).all()
    }

    def _pct(row) -> float:
        return row.completion_percentage if row is not None else 0.0

    def _status(row) -> ProgressStatus:
        return row.status if row is not None else ProgressStatus.NOT_STARTED

    query = db.query(TrainingArea)
    if training_area_id is not None:
        query = query.filter(TrainingArea.id == training_area_id)

    overview = []
    for area in query.order_by(TrainingArea.id).all():
        modules = []
        for module in area.modules:
            courses = [
                schemas.CourseOverview(
                    id=course.id, name=course.name,
                    status=_status(course_rows.get(course.id)),
                    completion_percentage=_pct(course_rows.get(course.id)),
                )
                for course in module.courses
            ]
            module_row = module_rows.get(module.id)
            modules.append(schemas.ModuleOverview(
                id=module.id, name=module.name,
                status=_status(module_row), completion_percentage=_pct(module_row),
                courses=courses,
            ))
        area_row = area_rows.get(area.id)
        overview.append(schemas.TrainingAreaOverview(
            id=area.id, name=area.name,
            status=_status(area_row), completion_percentage=_pct(area_row),
            modules=modules,
        ))
    return overview
