from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Dict, List, Optional, Tuple
import logging

from vx_academy.core.exceptions import AttemptLimitExceeded, NotFoundError, ValidationError
from vx_academy.models.enums import AssessmentOwnerType, QuestionType
from vx_academy.models.assessment_model import Assessment, Question, AssessmentAttempt, OWNER_COLUMNS
from vx_academy.schemas import assessment_schema as schemas
from vx_academy.schemas.engagement_schema import CertificateDisplay
from vx_academy.services.rollup import round_half_up
from vx_academy.services import email_service
from vx_academy.crud.crud_utils import commit_or_rollback, update_db_object, shift_for_insert, move_item, delete_and_close_gap
from vx_academy.crud import training_crud, user_crud, progress_crud, certificate_crud, engagement_crud

logger = logging.getLogger(__name__)

TRUE_FALSE_OPTIONS = ["True", "False"]

_OWNER_LOOKUPS = {
    AssessmentOwnerType.TRAINING_AREA: training_crud.get_training_area_or_raise,
    AssessmentOwnerType.MODULE: training_crud.get_module_or_raise,
    AssessmentOwnerType.COURSE: training_crud.get_course_or_raise,
    AssessmentOwnerType.UNIT: training_crud.get_unit_or_raise,
}

# --- Assessment CRUD ---
def _check_owner(db: Session, owner: schemas.AssessmentOwner) -> None:
    _OWNER_LOOKUPS[owner.type](db, owner.id)

def _check_time_limit(has_time_limit: bool, time_limit: Optional[int]) -> None:
    if has_time_limit and not time_limit:
        raise ValidationError.for_field("time_limit", "A time limit in minutes is required when has_time_limit is set.")

def create_assessment(db: Session, assessment_in: schemas.AssessmentCreate) -> Assessment:
    logger.debug(f"Creating assessment '{assessment_in.title}' for {assessment_in.owner.type.value} {assessment_in.owner.id}")
    _check_owner(db, assessment_in.owner)
    _check_time_limit(assessment_in.has_time_limit, assessment_in.time_limit)
    db_assessment = Assessment(**assessment_in.model_dump(exclude={"owner"}))
    db_assessment.set_owner(assessment_in.owner.type, assessment_in.owner.id)
    db.add(db_assessment)
    commit_or_rollback(db, f"create assessment '{assessment_in.title}'")
    db.refresh(db_assessment)
    logger.info(f"Assessment '{db_assessment.title}' (ID: {db_assessment.id}) created for {db_assessment.owner_type.value} {db_assessment.owner_id}.")
    return db_assessment

def get_assessment(db: Session, assessment_id: int) -> Optional[Assessment]:
    logger.debug(f"Fetching assessment with ID: {assessment_id}")
    return db.query(Assessment).filter(Assessment.id == assessment_id).first()

def get_assessment_or_raise(db: Session, assessment_id: int) -> Assessment:
    db_assessment = get_assessment(db, assessment_id)
    if not db_assessment:
        logger.warning(f"Assessment with ID {assessment_id} not found.")
        raise NotFoundError("Assessment", assessment_id)
    return db_assessment

def get_assessments(
    db: Session,
    owner_type: Optional[AssessmentOwnerType] = None,
    owner_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100
) -> List[Assessment]:
    query = db.query(Assessment)
    if owner_type is not None:
        column = getattr(Assessment, OWNER_COLUMNS[owner_type])
        query = query.filter(column == owner_id) if owner_id is not None else query.filter(column.isnot(None))
    return query.order_by(Assessment.id).offset(skip).limit(limit).all()

def update_assessment(db: Session, assessment_id: int, assessment_in: schemas.AssessmentUpdate) -> Assessment:
    db_assessment = get_assessment_or_raise(db, assessment_id)
    if assessment_in.owner is not None:
        _check_owner(db, assessment_in.owner)
    _check_time_limit(
        assessment_in.has_time_limit if assessment_in.has_time_limit is not None else db_assessment.has_time_limit,
        assessment_in.time_limit if assessment_in.time_limit is not None else db_assessment.time_limit,
    )
    update_db_object(db_assessment, assessment_in, exclude={"owner"})
    if assessment_in.owner is not None:
        db_assessment.set_owner(assessment_in.owner.type, assessment_in.owner.id)
    commit_or_rollback(db, f"update assessment {assessment_id}")
    db.refresh(db_assessment)
    logger.info(f"Assessment {assessment_id} updated.")
    return db_assessment

def delete_assessment(db: Session, assessment_id: int) -> None:
    db_assessment = get_assessment_or_raise(db, assessment_id)
    db.delete(db_assessment)
    commit_or_rollback(db, f"delete assessment {assessment_id}")
    logger.info(f"Assessment {assessment_id} deleted with its questions and attempts.")

# --- Question CRUD ---
def _normalise_options(question_type: QuestionType, options: Optional[List[str]], correct_answer: str) -> List[str]:
    """Validates the option list of a question and checks the correct answer is one of them."""
    if question_type == QuestionType.TRUE_FALSE and not options:
        options = list(TRUE_FALSE_OPTIONS)
    if not options or len(options) < 2:
        raise ValidationError.for_field("options", "A question needs at least two options.")
    if any(not option.strip() for option in options):
        raise ValidationError.for_field("options", "Options cannot be blank.")
    if len(set(options)) != len(options):
        raise ValidationError.for_field("options", "Options must be distinct.")
    if correct_answer not in options:
        raise ValidationError.for_field("correct_answer", "The correct answer must match one of the options exactly.")
    return list(options)

def _question_siblings(db: Session, assessment_id: int) -> List[Question]:
    return db.query(Question).filter(Question.assessment_id == assessment_id).order_by(Question.order).all()

def get_question(db: Session, question_id: int) -> Optional[Question]:
    return db.query(Question).filter(Question.id == question_id).first()

def get_question_or_raise(db: Session, question_id: int) -> Question:
    db_question = get_question(db, question_id)
    if not db_question:
        logger.warning(f"Question with ID {question_id} not found.")
        raise NotFoundError("Question", question_id)
    return db_question

def get_questions(db: Session, assessment_id: int) -> List[Question]:
    logger.debug(f"Fetching questions for assessment_id {assessment_id}")
    return _question_siblings(db, assessment_id)

def create_question(db: Session, question_in: schemas.QuestionCreate) -> Question:
    db_assessment = get_assessment_or_raise(db, question_in.assessment_id)
    options = _normalise_options(question_in.question_type, question_in.options, question_in.correct_answer)
    siblings = _question_siblings(db, db_assessment.id)
    try:
        target = shift_for_insert(db, siblings, question_in.order)
        db_question = Question(
            **question_in.model_dump(exclude={"assessment_id", "order", "options"}),
            options=options,
            assessment=db_assessment,
            order=target,
        )
        db.add(db_question)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"create question for assessment {db_assessment.id}")
    db.refresh(db_question)
    logger.info(f"Question {db_question.id} added to assessment {db_assessment.id} at order {db_question.order}.")
    return db_question

def update_question(db: Session, question_id: int, question_in: schemas.QuestionUpdate) -> Question:
    db_question = get_question_or_raise(db, question_id)
    question_type = question_in.question_type or db_question.question_type
    options = question_in.options if question_in.options is not None else db_question.options
    if question_in.question_type == QuestionType.TRUE_FALSE and question_in.options is None:
        options = None
    correct_answer = question_in.correct_answer or db_question.correct_answer
    options = _normalise_options(question_type, options, correct_answer)

    update_db_object(db_question, question_in, exclude={"options"})
    db_question.options = options
    commit_or_rollback(db, f"update question {question_id}")
    db.refresh(db_question)
    logger.info(f"Question {question_id} updated.")
    return db_question

def reorder_question(db: Session, question_id: int, new_order: int) -> Question:
    db_question = get_question_or_raise(db, question_id)
    siblings = _question_siblings(db, db_question.assessment_id)
    try:
        move_item(db, db_question, siblings, new_order)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"reorder question {question_id}")
    db.refresh(db_question)
    return db_question

def delete_question(db: Session, question_id: int) -> None:
    db_question = get_question_or_raise(db, question_id)
    siblings = _question_siblings(db, db_question.assessment_id)
    try:
        delete_and_close_gap(db, db_question, siblings)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"delete question {question_id}")
    logger.info(f"Question {question_id} deleted.")

# --- Attempts ---
def score_answers(
    questions: List[Question],
    answers: Dict[int, str],
    show_correct_answers: bool = False
) -> Tuple[int, List[schemas.QuestionResult]]:
    """Exact-text comparison of each submitted answer. Returns (correct count, per-question results)."""
    known_ids = {q.id for q in questions}
    unknown = sorted(q_id for q_id in answers if q_id not in known_ids)
    if unknown:
        logger.warning(f"Ignoring answers for questions not in the assessment: {unknown}")

    correct = 0
    results = []
    for question in questions:
        submitted = answers.get(question.id)
        is_correct = submitted is not None and submitted == question.correct_answer
        if is_correct:
            correct += 1
        results.append(schemas.QuestionResult(
            question_id=question.id,
            submitted_answer=submitted,
            selected_option_index=question.options.index(submitted) if submitted in question.options else None,
            is_correct=is_correct,
            correct_answer=question.correct_answer if show_correct_answers else None,
        ))
    return correct, results

def count_attempts(db: Session, user_id: int, assessment_id: int) -> int:
    return db.query(func.count(AssessmentAttempt.id)).filter(
        AssessmentAttempt.user_id == user_id,
        AssessmentAttempt.assessment_id == assessment_id
    ).scalar() or 0

def has_passed(db: Session, user_id: int, assessment_id: int) -> bool:
    return db.query(AssessmentAttempt.id).filter(
        AssessmentAttempt.user_id == user_id,
        AssessmentAttempt.assessment_id == assessment_id,
        AssessmentAttempt.passed.is_(True)
    ).first() is not None

def get_best_score(db: Session, user_id: int, assessment_id: int) -> Optional[int]:
    return db.query(func.max(AssessmentAttempt.score)).filter(
        AssessmentAttempt.user_id == user_id,
        AssessmentAttempt.assessment_id == assessment_id
    ).scalar()

def get_remaining_attempts(db: Session, user_id: int, assessment_id: int) -> int:
    db_assessment = get_assessment_or_raise(db, assessment_id)
    return max(0, db_assessment.max_retakes - count_attempts(db, user_id, assessment_id))

def get_attempts(db: Session, user_id: Optional[int] = None, assessment_id: Optional[int] = None) -> List[AssessmentAttempt]:
    query = db.query(AssessmentAttempt)
    if user_id is not None:
        query = query.filter(AssessmentAttempt.user_id == user_id)
    if assessment_id is not None:
        query = query.filter(AssessmentAttempt.assessment_id == assessment_id)
    return query.order_by(AssessmentAttempt.completed_at.desc(), AssessmentAttempt.id.desc()).all()

def get_attempt_summary(db: Session, user_id: int, assessment_id: int) -> schemas.AttemptSummary:
    db_assessment = get_assessment_or_raise(db, assessment_id)
    used = count_attempts(db, user_id, assessment_id)
    return schemas.AttemptSummary(
        assessment_id=assessment_id,
        attempts_used=used,
        remaining_attempts=max(0, db_assessment.max_retakes - used),
        best_score=get_best_score(db, user_id, assessment_id),
        has_passed=has_passed(db, user_id, assessment_id),
    )

def submit_attempt(
    db: Session,
    assessment_id: int,
    user_id: int,
    answers: Dict[int, str],
    course_id: Optional[int] = None
) -> schemas.AttemptResult:
    """
    Scores a submission and records the attempt.

    The retake limit is checked before anything is scored. A passing attempt
    awards XP on the first pass and completes its owner: a course-owned
    assessment completes the course and issues the certificate, a unit-owned
    one completes every placement of the unit (only the one in `course_id`
    when given). Everything is written in one transaction.
    """
    db_assessment = get_assessment_or_raise(db, assessment_id)
    db_user = user_crud.get_user_or_raise(db, user_id)

    used = count_attempts(db, user_id, assessment_id)
    if used >= db_assessment.max_retakes:
        logger.warning(f"User {user_id} has used all {db_assessment.max_retakes} attempts on assessment {assessment_id}.")
        raise AttemptLimitExceeded(assessment_id, db_assessment.max_retakes)

    questions = _question_siblings(db, assessment_id)
    if not questions:
        raise ValidationError(f"Assessment {assessment_id} has no questions and cannot be attempted.")

    owner_type = db_assessment.owner_type
    if owner_type == AssessmentOwnerType.UNIT and course_id is not None:
        if not training_crud.get_placements_for_unit(db, db_assessment.unit_id, course_id):
            raise ValidationError.for_field("course_id", f"Unit {db_assessment.unit_id} is not part of course {course_id}.")

    correct, results = score_answers(questions, answers, db_assessment.show_correct_answers)
    score = round_half_up(100 * correct / len(questions))
    passed = score >= db_assessment.passing_score
    first_pass = passed and not has_passed(db, user_id, assessment_id)
    logger.info(f"User {user_id} scored {score}% ({correct}/{len(questions)}) on assessment {assessment_id}; passed={passed}")

    certificate = None
    new_certificate = False
    try:
        db_attempt = AssessmentAttempt(
            user=db_user,
            assessment=db_assessment,
            score=score,
            passed=passed,
            answers={str(q_id): text for q_id, text in answers.items()},
        )
        db.add(db_attempt)
        db.flush()

        if first_pass:
            user_crud.add_xp(db, db_user, db_assessment.xp_points)
        if passed and owner_type == AssessmentOwnerType.COURSE:
            progress_crud.complete_course_for_user(db, user_id, db_assessment.course_id, commit=False)
            new_certificate = certificate_crud.get_certificate_for_user_course(db, user_id, db_assessment.course_id) is None
            certificate = certificate_crud.issue_certificate(db, user_id, db_assessment.course_id, commit=False)
            if new_certificate:
                engagement_crud.add_notification(
                    db, user_id, "certificate_issued",
                    title="Certificate issued",
                    message=f"You earned a certificate for {db_assessment.course.name}.",
                    extra_data={"certificate_number": certificate.certificate_number, "course_id": db_assessment.course_id},
                )
        elif passed and owner_type == AssessmentOwnerType.UNIT:
            progress_crud.complete_course_unit_placements(db, user_id, db_assessment.unit_id, course_id, commit=False)
    except Exception as e:
        db.rollback()
        logger.error(f"Recording attempt failed for user {user_id} on assessment {assessment_id}: {e}", exc_info=True)
        raise
    commit_or_rollback(db, f"record attempt on assessment {assessment_id} for user {user_id}")
    db.refresh(db_attempt)

    if new_certificate:
        db.refresh(certificate)
        email_service.send_certificate_email(
            db_user.email,
            db_user.full_name,
            certificate.course.name,
            certificate.certificate_number,
            certificate.expiry_date.date().isoformat(),
        )
    if db_assessment.is_graded:
        email_service.send_assessment_result_email(
            db_user.email, db_user.full_name, db_assessment.title, score, passed, db_assessment.passing_score
        )

    return schemas.AttemptResult(
        attempt=schemas.AttemptDisplay.model_validate(db_attempt),
        correct_count=correct,
        total_questions=len(questions),
        results=results,
        remaining_attempts=max(0, db_assessment.max_retakes - used - 1),
        certificate=CertificateDisplay.model_validate(certificate) if certificate is not None else None,
    )
