from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.exceptions import ConflictError, NotFoundError
from vx_academy.models.training_model import (
    TrainingArea, Module, Course, Unit, CourseUnit, LearningBlock
)
from vx_academy.schemas import training_schema as schemas
from vx_academy.crud.crud_utils import (
    update_db_object, commit_or_rollback, shift_for_insert, move_item, delete_and_close_gap
)

logger = logging.getLogger(__name__)

# --- TrainingArea CRUD ---
def create_training_area(db: Session, area_in: schemas.TrainingAreaCreate) -> TrainingArea:
    logger.debug(f"Creating training area '{area_in.name}'")
    db_area = TrainingArea(**area_in.model_dump())
    db.add(db_area)
    commit_or_rollback(db, f"create training area '{area_in.name}'")
    db.refresh(db_area)
    logger.info(f"Training area '{db_area.name}' (ID: {db_area.id}) created successfully.")
    return db_area

def get_training_area(db: Session, training_area_id: int) -> Optional[TrainingArea]:
    logger.debug(f"Fetching training area with ID: {training_area_id}")
    return db.query(TrainingArea).filter(TrainingArea.id == training_area_id).first()

def get_training_area_or_raise(db: Session, training_area_id: int) -> TrainingArea:
    db_area = get_training_area(db, training_area_id)
    if not db_area:
        logger.warning(f"Training area with ID {training_area_id} not found.")
        raise NotFoundError("Training area", training_area_id)
    return db_area

def get_training_areas(db: Session, skip: int = 0, limit: int = 100) -> List[TrainingArea]:
    logger.debug(f"Fetching training areas with skip: {skip}, limit: {limit}")
    return db.query(TrainingArea).order_by(TrainingArea.id).offset(skip).limit(limit).all()

def update_training_area(db: Session, training_area_id: int, area_in: schemas.TrainingAreaUpdate) -> TrainingArea:
    db_area = get_training_area_or_raise(db, training_area_id)
    logger.debug(f"Updating training area ID: {training_area_id} with data: {area_in.model_dump(exclude_unset=True)}")
    update_db_object(db_area, area_in)
    commit_or_rollback(db, f"update training area {training_area_id}")
    db.refresh(db_area)
    logger.info(f"Training area '{db_area.name}' (ID: {db_area.id}) updated successfully.")
    return db_area

def delete_training_area(db: Session, training_area_id: int) -> None:
    """Deletes the area with its modules, courses, placements, owned assessments and all related progress."""
    db_area = get_training_area_or_raise(db, training_area_id)
    logger.debug(f"Deleting training area ID: {training_area_id} ('{db_area.name}')")
    db.delete(db_area)
    commit_or_rollback(db, f"delete training area {training_area_id}")
    logger.info(f"Training area ID: {training_area_id} deleted with all descendants.")

# --- Module CRUD ---
def create_module(db: Session, module_in: schemas.ModuleCreate) -> Module:
    logger.debug(f"Creating module '{module_in.name}' for training_area_id {module_in.training_area_id}")
    get_training_area_or_raise(db, module_in.training_area_id)
    db_module = Module(**module_in.model_dump())
    db.add(db_module)
    commit_or_rollback(db, f"create module '{module_in.name}'")
    db.refresh(db_module)
    logger.info(f"Module '{db_module.name}' (ID: {db_module.id}) created for training area ID {db_module.training_area_id}.")
    return db_module

def get_module(db: Session, module_id: int) -> Optional[Module]:
    logger.debug(f"Fetching module with ID: {module_id}")
    return db.query(Module).filter(Module.id == module_id).first()

def get_module_or_raise(db: Session, module_id: int) -> Module:
    db_module = get_module(db, module_id)
    if not db_module:
        logger.warning(f"Module with ID {module_id} not found.")
        raise NotFoundError("Module", module_id)
    return db_module

def get_modules(db: Session, training_area_id: Optional[int] = None, skip: int = 0, limit: int = 100) -> List[Module]:
    logger.debug(f"Fetching modules for training_area_id {training_area_id} with skip: {skip}, limit: {limit}")
    query = db.query(Module)
    if training_area_id is not None:
        query = query.filter(Module.training_area_id == training_area_id)
    return query.order_by(Module.id).offset(skip).limit(limit).all()

def update_module(db: Session, module_id: int, module_in: schemas.ModuleUpdate) -> Module:
    db_module = get_module_or_raise(db, module_id)
    if module_in.training_area_id is not None and module_in.training_area_id != db_module.training_area_id:
        get_training_area_or_raise(db, module_in.training_area_id)
    logger.debug(f"Updating module ID: {module_id} with data: {module_in.model_dump(exclude_unset=True)}")
    update_db_object(db_module, module_in)
    commit_or_rollback(db, f"update module {module_id}")
    db.refresh(db_module)
    logger.info(f"Module '{db_module.name}' (ID: {db_module.id}) updated successfully.")
    return db_module

def delete_module(db: Session, module_id: int) -> None:
    db_module = get_module_or_raise(db, module_id)
    logger.debug(f"Deleting module ID: {module_id} ('{db_module.name}')")
    db.delete(db_module)
    commit_or_rollback(db, f"delete module {module_id}")
    logger.info(f"Module ID: {module_id} deleted with all descendants.")

# --- Course CRUD ---
def create_course(db: Session, course_in: schemas.CourseCreate) -> Course:
    logger.debug(f"Creating course '{course_in.name}' for module_id {course_in.module_id}")
    get_module_or_raise(db, course_in.module_id)
    db_course = Course(**course_in.model_dump())
    db.add(db_course)
    commit_or_rollback(db, f"create course '{course_in.name}'")
    db.refresh(db_course)
    logger.info(f"Course '{db_course.name}' (ID: {db_course.id}) created for module ID {db_course.module_id}.")
    return db_course

def get_course(db: Session, course_id: int) -> Optional[Course]:
    logger.debug(f"Fetching course with ID: {course_id}")
    return db.query(Course).filter(Course.id == course_id).first()

def get_course_or_raise(db: Session, course_id: int) -> Course:
    db_course = get_course(db, course_id)
    if not db_course:
        logger.warning(f"Course with ID {course_id} not found.")
        raise NotFoundError("Course", course_id)
    return db_course

def get_courses(
    db: Session,
    module_id: Optional[int] = None,
    training_area_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100
) -> List[Course]:
    logger.debug(f"Fetching courses with module_id: {module_id}, training_area_id: {training_area_id}, skip: {skip}, limit: {limit}")
    query = db.query(Course)
    if module_id is not None:
        query = query.filter(Course.module_id == module_id)
    if training_area_id is not None:
        query = query.join(Module, Course.module_id == Module.id).filter(Module.training_area_id == training_area_id)
    return query.order_by(Course.id).offset(skip).limit(limit).all()

def update_course(db: Session, course_id: int, course_in: schemas.CourseUpdate) -> Course:
    db_course = get_course_or_raise(db, course_id)
    if course_in.module_id is not None and course_in.module_id != db_course.module_id:
        get_module_or_raise(db, course_in.module_id)
    logger.debug(f"Updating course ID: {course_id} with data: {course_in.model_dump(exclude_unset=True)}")
    update_db_object(db_course, course_in)
    commit_or_rollback(db, f"update course {course_id}")
    db.refresh(db_course)
    logger.info(f"Course '{db_course.name}' (ID: {db_course.id}) updated successfully.")
    return db_course

def delete_course(db: Session, course_id: int) -> None:
    db_course = get_course_or_raise(db, course_id)
    logger.debug(f"Deleting course ID: {course_id} ('{db_course.name}')")
    db.delete(db_course)
    commit_or_rollback(db, f"delete course {course_id}")
    logger.info(f"Course ID: {course_id} deleted with its unit placements and progress.")

# --- Unit CRUD ---
def create_unit(db: Session, unit_in: schemas.UnitCreate) -> Unit:
    logger.debug(f"Creating unit '{unit_in.name}'")
    db_unit = Unit(**unit_in.model_dump())
    db.add(db_unit)
    commit_or_rollback(db, f"create unit '{unit_in.name}'")
    db.refresh(db_unit)
    logger.info(f"Unit '{db_unit.name}' (ID: {db_unit.id}) created successfully.")
    return db_unit

def get_unit(db: Session, unit_id: int) -> Optional[Unit]:
    logger.debug(f"Fetching unit with ID: {unit_id}")
    return db.query(Unit).filter(Unit.id == unit_id).first()

def get_unit_or_raise(db: Session, unit_id: int) -> Unit:
    db_unit = get_unit(db, unit_id)
    if not db_unit:
        logger.warning(f"Unit with ID {unit_id} not found.")
        raise NotFoundError("Unit", unit_id)
    return db_unit

def get_units(db: Session, course_id: Optional[int] = None, skip: int = 0, limit: int = 100) -> List[Unit]:
    """All units, or the units placed in `course_id` in placement order."""
    logger.debug(f"Fetching units for course_id {course_id} with skip: {skip}, limit: {limit}")
    if course_id is not None:
        return (
            db.query(Unit)
            .join(CourseUnit, CourseUnit.unit_id == Unit.id)
            .filter(CourseUnit.course_id == course_id)
            .order_by(CourseUnit.order)
            .offset(skip).limit(limit).all()
        )
    return db.query(Unit).order_by(Unit.order, Unit.id).offset(skip).limit(limit).all()

def update_unit(db: Session, unit_id: int, unit_in: schemas.UnitUpdate) -> Unit:
    db_unit = get_unit_or_raise(db, unit_id)
    logger.debug(f"Updating unit ID: {unit_id} with data: {unit_in.model_dump(exclude_unset=True)}")
    update_db_object(db_unit, unit_in)
    commit_or_rollback(db, f"update unit {unit_id}")
    db.refresh(db_unit)
    logger.info(f"Unit '{db_unit.name}' (ID: {db_unit.id}) updated successfully.")
    return db_unit

def delete_unit(db: Session, unit_id: int) -> None:
    """Removes the unit from every course it is placed in, closing the order gaps it leaves."""
    db_unit = get_unit_or_raise(db, unit_id)
    logger.debug(f"Deleting unit ID: {unit_id} ('{db_unit.name}') and its {len(db_unit.placements)} placement(s)")
    try:
        for placement in list(db_unit.placements):
            siblings = _course_unit_siblings(db, placement.course_id)
            delete_and_close_gap(db, placement, siblings)
        # Placements are already gone; reload so the cascade does not delete them again
        db.expire(db_unit, ["placements"])
        db.delete(db_unit)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"delete unit {unit_id}")
    logger.info(f"Unit ID: {unit_id} deleted.")

# --- CourseUnit (placement) CRUD ---
def _course_unit_siblings(db: Session, course_id: int) -> List[CourseUnit]:
    return db.query(CourseUnit).filter(CourseUnit.course_id == course_id).order_by(CourseUnit.order).all()

def get_course_unit(db: Session, course_unit_id: int) -> Optional[CourseUnit]:
    logger.debug(f"Fetching course unit with ID: {course_unit_id}")
    return db.query(CourseUnit).filter(CourseUnit.id == course_unit_id).first()

def get_course_unit_or_raise(db: Session, course_unit_id: int) -> CourseUnit:
    db_course_unit = get_course_unit(db, course_unit_id)
    if not db_course_unit:
        logger.warning(f"Course unit with ID {course_unit_id} not found.")
        raise NotFoundError("Course unit", course_unit_id)
    return db_course_unit

def get_course_units(db: Session, course_id: int) -> List[CourseUnit]:
    logger.debug(f"Fetching course units for course_id {course_id}")
    return _course_unit_siblings(db, course_id)

def get_placements_for_unit(db: Session, unit_id: int, course_id: Optional[int] = None) -> List[CourseUnit]:
    query = db.query(CourseUnit).filter(CourseUnit.unit_id == unit_id)
    if course_id is not None:
        query = query.filter(CourseUnit.course_id == course_id)
    return query.order_by(CourseUnit.course_id).all()

def create_course_unit(db: Session, course_unit_in: schemas.CourseUnitCreate) -> CourseUnit:
    """Places a unit in a course. An occupied order inserts and shifts later units; no order appends."""
    logger.debug(f"Placing unit {course_unit_in.unit_id} in course {course_unit_in.course_id} at order {course_unit_in.order}")
    db_course = get_course_or_raise(db, course_unit_in.course_id)
    db_unit = get_unit_or_raise(db, course_unit_in.unit_id)

    siblings = _course_unit_siblings(db, db_course.id)
    if any(s.unit_id == db_unit.id for s in siblings):
        logger.warning(f"Unit {db_unit.id} is already placed in course {db_course.id}.")
        raise ConflictError(f"Unit {db_unit.id} is already part of course {db_course.id}.")

    try:
        target = shift_for_insert(db, siblings, course_unit_in.order)
        db_course_unit = CourseUnit(course=db_course, unit=db_unit, order=target)
        db.add(db_course_unit)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"place unit {db_unit.id} in course {db_course.id}")
    db.refresh(db_course_unit)
    logger.info(f"Unit {db_unit.id} placed in course {db_course.id} at order {db_course_unit.order} (CourseUnit ID: {db_course_unit.id}).")
    return db_course_unit

def reorder_course_unit(db: Session, course_unit_id: int, new_order: int) -> CourseUnit:
    db_course_unit = get_course_unit_or_raise(db, course_unit_id)
    siblings = _course_unit_siblings(db, db_course_unit.course_id)
    old_order = db_course_unit.order
    try:
        move_item(db, db_course_unit, siblings, new_order)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"reorder course unit {course_unit_id}")
    db.refresh(db_course_unit)
    logger.info(f"Course unit {course_unit_id} moved from order {old_order} to {db_course_unit.order}.")
    return db_course_unit

def delete_course_unit(db: Session, course_unit_id: int) -> None:
    db_course_unit = get_course_unit_or_raise(db, course_unit_id)
    siblings = _course_unit_siblings(db, db_course_unit.course_id)
    try:
        delete_and_close_gap(db, db_course_unit, siblings)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"delete course unit {course_unit_id}")
    logger.info(f"Course unit {course_unit_id} removed from course {db_course_unit.course_id}.")

# --- LearningBlock CRUD ---
def _learning_block_siblings(db: Session, unit_id: int) -> List[LearningBlock]:
    return db.query(LearningBlock).filter(LearningBlock.unit_id == unit_id).order_by(LearningBlock.order).all()

def get_learning_block(db: Session, learning_block_id: int) -> Optional[LearningBlock]:
    logger.debug(f"Fetching learning block with ID: {learning_block_id}")
    return db.query(LearningBlock).filter(LearningBlock.id == learning_block_id).first()

def get_learning_block_or_raise(db: Session, learning_block_id: int) -> LearningBlock:
    db_block = get_learning_block(db, learning_block_id)
    if not db_block:
        logger.warning(f"Learning block with ID {learning_block_id} not found.")
        raise NotFoundError("Learning block", learning_block_id)
    return db_block

def get_learning_blocks(db: Session, unit_id: int) -> List[LearningBlock]:
    logger.debug(f"Fetching learning blocks for unit_id {unit_id}")
    return _learning_block_siblings(db, unit_id)

def create_learning_block(db: Session, block_in: schemas.LearningBlockCreate) -> LearningBlock:
    logger.debug(f"Creating learning block '{block_in.title}' for unit_id {block_in.unit_id}")
    db_unit = get_unit_or_raise(db, block_in.unit_id)
    siblings = _learning_block_siblings(db, db_unit.id)
    try:
        target = shift_for_insert(db, siblings, block_in.order)
        db_block = LearningBlock(**block_in.model_dump(exclude={"unit_id", "order"}), unit=db_unit, order=target)
        db.add(db_block)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"create learning block '{block_in.title}'")
    db.refresh(db_block)
    logger.info(f"Learning block '{db_block.title}' (ID: {db_block.id}) created in unit {db_unit.id} at order {db_block.order}.")
    return db_block

def update_learning_block(db: Session, learning_block_id: int, block_in: schemas.LearningBlockUpdate) -> LearningBlock:
    db_block = get_learning_block_or_raise(db, learning_block_id)
    logger.debug(f"Updating learning block ID: {learning_block_id} with data: {block_in.model_dump(exclude_unset=True)}")
    update_db_object(db_block, block_in)
    commit_or_rollback(db, f"update learning block {learning_block_id}")
    db.refresh(db_block)
    logger.info(f"Learning block '{db_block.title}' (ID: {db_block.id}) updated successfully.")
    return db_block

def reorder_learning_block(db: Session, learning_block_id: int, new_order: int) -> LearningBlock:
    db_block = get_learning_block_or_raise(db, learning_block_id)
    siblings = _learning_block_siblings(db, db_block.unit_id)
    try:
        move_item(db, db_block, siblings, new_order)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"reorder learning block {learning_block_id}")
    db.refresh(db_block)
    logger.info(f"Learning block {learning_block_id} moved to order {db_block.order}.")
    return db_block

def delete_learning_block(db: Session, learning_block_id: int) -> None:
    db_block = get_learning_block_or_raise(db, learning_block_id)
    siblings = _learning_block_siblings(db, db_block.unit_id)
    try:
        delete_and_close_gap(db, db_block, siblings)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"delete learning block {learning_block_id}")
    logger.info(f"Learning block {learning_block_id} deleted.")
