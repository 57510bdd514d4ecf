from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import get_current_user, get_current_admin_user
from vx_academy.models.enums import AssessmentOwnerType
from vx_academy.models.user_model import User
from vx_academy.schemas import assessment_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult, ReorderRequest
from vx_academy.crud import assessment_crud as crud

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assessments", tags=["Assessments"])
question_router = APIRouter(prefix="/questions", tags=["Assessment Questions"])

# --- Assessment Endpoints ---
@router.post("/", response_model=ApiResponse[schemas.AssessmentDisplay], status_code=status.HTTP_201_CREATED)
def create_assessment(
    assessment_in: schemas.AssessmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Create an assessment owned by exactly one training area, module, course or unit.
    """
    logger.info(f"User {current_user.email} creating assessment '{assessment_in.title}'")
    assessment = crud.create_assessment(db, assessment_in)
    return ApiResponse(data=schemas.AssessmentDisplay.model_validate(assessment), message="Assessment created.")

@router.get("/", response_model=ApiResponse[List[schemas.AssessmentDisplay]])
def list_assessments(
    owner_type: Optional[AssessmentOwnerType] = Query(None),
    owner_id: Optional[int] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    assessments = crud.get_assessments(db, owner_type=owner_type, owner_id=owner_id, skip=skip, limit=limit)
    return ApiResponse(data=[schemas.AssessmentDisplay.model_validate(a) for a in assessments])

@router.get("/{assessment_id}", response_model=ApiResponse[schemas.AssessmentWithQuestions])
def read_assessment(assessment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    The assessment as a learner sees it: questions in order, answers withheld.
    """
    return ApiResponse(data=schemas.AssessmentWithQuestions.model_validate(crud.get_assessment_or_raise(db, assessment_id)))

@router.put("/{assessment_id}", response_model=ApiResponse[schemas.AssessmentDisplay])
def update_assessment(
    assessment_id: int,
    assessment_in: schemas.AssessmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    assessment = crud.update_assessment(db, assessment_id, assessment_in)
    return ApiResponse(data=schemas.AssessmentDisplay.model_validate(assessment), message="Assessment updated.")

@router.delete("/{assessment_id}", response_model=ApiResponse[DeleteResult])
def delete_assessment(
    assessment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"User {current_user.email} deleting assessment {assessment_id}")
    crud.delete_assessment(db, assessment_id)
    return ApiResponse(data=DeleteResult(id=assessment_id), message="Assessment deleted.")

# --- Attempt Endpoints ---
@router.post("/{assessment_id}/attempts", response_model=ApiResponse[schemas.AttemptResult], status_code=status.HTTP_201_CREATED)
def submit_attempt(
    assessment_id: int,
    submission: schemas.AttemptSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Submit answers for the current user. Passing a course assessment completes the
    course and issues its certificate; passing a unit assessment completes the unit.
    """
    result = crud.submit_attempt(db, assessment_id, current_user.id, submission.answers, course_id=submission.course_id)
    message = "Assessment passed." if result.attempt.passed else "Assessment not passed."
    return ApiResponse(data=result, message=message)

@router.get("/{assessment_id}/attempts", response_model=ApiResponse[List[schemas.AttemptDisplay]])
def list_my_attempts(
    assessment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    crud.get_assessment_or_raise(db, assessment_id)
    attempts = crud.get_attempts(db, user_id=current_user.id, assessment_id=assessment_id)
    return ApiResponse(data=[schemas.AttemptDisplay.model_validate(a) for a in attempts])

@router.get("/{assessment_id}/attempts/summary", response_model=ApiResponse[schemas.AttemptSummary])
def read_my_attempt_summary(
    assessment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ApiResponse(data=crud.get_attempt_summary(db, current_user.id, assessment_id))

@router.get("/{assessment_id}/attempts/all", response_model=ApiResponse[List[schemas.AttemptDisplay]])
def list_all_attempts(
    assessment_id: int,
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    crud.get_assessment_or_raise(db, assessment_id)
    attempts = crud.get_attempts(db, user_id=user_id, assessment_id=assessment_id)
    return ApiResponse(data=[schemas.AttemptDisplay.model_validate(a) for a in attempts])

# --- Question Endpoints (admin) ---
@question_router.post("/", response_model=ApiResponse[schemas.QuestionDisplay], status_code=status.HTTP_201_CREATED)
def create_question(
    question_in: schemas.QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    question = crud.create_question(db, question_in)
    return ApiResponse(data=schemas.QuestionDisplay.model_validate(question), message="Question created.")

@question_router.get("/", response_model=ApiResponse[List[schemas.QuestionDisplay]])
def list_questions(
    assessment_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    crud.get_assessment_or_raise(db, assessment_id)
    return ApiResponse(data=[schemas.QuestionDisplay.model_validate(q) for q in crud.get_questions(db, assessment_id)])

@question_router.get("/{question_id}", response_model=ApiResponse[schemas.QuestionDisplay])
def read_question(question_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    return ApiResponse(data=schemas.QuestionDisplay.model_validate(crud.get_question_or_raise(db, question_id)))

@question_router.put("/{question_id}", response_model=ApiResponse[schemas.QuestionDisplay])
def update_question(
    question_id: int,
    question_in: schemas.QuestionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    question = crud.update_question(db, question_id, question_in)
    return ApiResponse(data=schemas.QuestionDisplay.model_validate(question), message="Question updated.")

@question_router.put("/{question_id}/order", response_model=ApiResponse[schemas.QuestionDisplay])
def reorder_question(
    question_id: int,
    reorder_in: ReorderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    question = crud.reorder_question(db, question_id, reorder_in.new_order)
    return ApiResponse(data=schemas.QuestionDisplay.model_validate(question), message="Question moved.")

@question_router.delete("/{question_id}", response_model=ApiResponse[DeleteResult])
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    crud.delete_question(db, question_id)
    return ApiResponse(data=DeleteResult(id=question_id), message="Question deleted.")
