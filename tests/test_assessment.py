from datetime import datetime, timedelta, timezone

import pytest

from vx_academy.core.exceptions import AttemptLimitExceeded, ValidationError
from vx_academy.crud import assessment_crud, certificate_crud, engagement_crud, progress_crud, training_crud, user_crud
from vx_academy.models.enums import AssessmentOwnerType, CertificateStatus, ProgressStatus, QuestionType
from vx_academy.schemas import assessment_schema, training_schema

from conftest import make_assessment, make_tree


def _submission(db, assessment_id: int, correct: int):
    questions = assessment_crud.get_questions(db, assessment_id)
    return {q.id: ("A" if i < correct else "B") for i, q in enumerate(questions)}


def test_four_of_five_passes_and_issues_certificate(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=2)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, has_certificate=True, xp_points=40)

    result = assessment_crud.submit_attempt(db_session, assessment.id, learner.id, _submission(db_session, assessment.id, 4))

    assert result.attempt.score == 80
    assert result.attempt.passed is True
    assert result.correct_count == 4 and result.total_questions == 5
    assert result.remaining_attempts == 2
    assert result.certificate is not None
    assert progress_crud.get_course_progress(db_session, learner.id, course.id).status == ProgressStatus.COMPLETED
    assert user_crud.get_user_or_raise(db_session, learner.id).xp == 40
    notifications = engagement_crud.get_notifications(db_session, learner.id)
    assert [n.type for n in notifications] == ["certificate_issued"]


def test_three_of_five_fails_and_changes_nothing_else(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id)

    result = assessment_crud.submit_attempt(db_session, assessment.id, learner.id, _submission(db_session, assessment.id, 3))

    assert result.attempt.score == 60
    assert result.attempt.passed is False
    assert result.certificate is None
    assert progress_crud.get_course_progress(db_session, learner.id, course.id) is None
    assert certificate_crud.get_certificates_for_user(db_session, learner.id) == []


def test_retake_limit_blocks_before_scoring(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, max_retakes=2)
    answers = _submission(db_session, assessment.id, 0)

    assessment_crud.submit_attempt(db_session, assessment.id, learner.id, answers)
    assessment_crud.submit_attempt(db_session, assessment.id, learner.id, answers)
    with pytest.raises(AttemptLimitExceeded):
        assessment_crud.submit_attempt(db_session, assessment.id, learner.id, answers)

    assert assessment_crud.count_attempts(db_session, learner.id, assessment.id) == 2
    summary = assessment_crud.get_attempt_summary(db_session, learner.id, assessment.id)
    assert summary.remaining_attempts == 0 and summary.has_passed is False


def test_second_pass_does_not_award_again(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, xp_points=25)
    answers = _submission(db_session, assessment.id, 5)

    first = assessment_crud.submit_attempt(db_session, assessment.id, learner.id, answers)
    second = assessment_crud.submit_attempt(db_session, assessment.id, learner.id, answers)

    assert first.certificate.certificate_number == second.certificate.certificate_number
    assert user_crud.get_user_or_raise(db_session, learner.id).xp == 25
    assert len(engagement_crud.get_notifications(db_session, learner.id)) == 1


def test_unit_assessment_completes_only_the_given_course(db_session, learner):
    _, _, course, placements = make_tree(db_session, units_per_course=2)
    _, _, other_course, _ = make_tree(db_session, units_per_course=0, name="Security")
    shared_unit_id = placements[0].unit_id
    other_placement = training_crud.create_course_unit(
        db_session, training_schema.CourseUnitCreate(course_id=other_course.id, unit_id=shared_unit_id)
    )
    assessment = make_assessment(db_session, AssessmentOwnerType.UNIT, shared_unit_id)

    assessment_crud.submit_attempt(
        db_session, assessment.id, learner.id, _submission(db_session, assessment.id, 5), course_id=course.id
    )

    assert progress_crud.get_course_unit_progress(db_session, learner.id, placements[0].id).status == ProgressStatus.COMPLETED
    assert progress_crud.get_course_unit_progress(db_session, learner.id, other_placement.id) is None
    assert progress_crud.get_course_progress(db_session, learner.id, course.id).completion_percentage == 50.0


def test_unit_assessment_rejects_unrelated_course(db_session, learner):
    _, _, course, placements = make_tree(db_session, units_per_course=1)
    _, _, other_course, _ = make_tree(db_session, units_per_course=1, name="Retail")
    assessment = make_assessment(db_session, AssessmentOwnerType.UNIT, placements[0].unit_id)

    with pytest.raises(ValidationError) as exc_info:
        assessment_crud.submit_attempt(
            db_session, assessment.id, learner.id, _submission(db_session, assessment.id, 5), course_id=other_course.id
        )
    assert "course_id" in exc_info.value.errors
    assert assessment_crud.count_attempts(db_session, learner.id, assessment.id) == 0


def test_assessment_without_questions_cannot_be_attempted(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, questions=0)
    with pytest.raises(ValidationError):
        assessment_crud.submit_attempt(db_session, assessment.id, learner.id, {})


def test_correct_answer_must_be_an_option(db_session):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, questions=0)
    with pytest.raises(ValidationError) as exc_info:
        assessment_crud.create_question(db_session, assessment_schema.QuestionCreate(
            assessment_id=assessment.id, question_text="Pick one", options=["A", "B"], correct_answer="C",
        ))
    assert "correct_answer" in exc_info.value.errors


def test_true_false_defaults_its_options(db_session):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, questions=0)
    question = assessment_crud.create_question(db_session, assessment_schema.QuestionCreate(
        assessment_id=assessment.id, question_text="The museum opens at 10.",
        question_type=QuestionType.TRUE_FALSE, correct_answer="True",
    ))
    assert question.options == ["True", "False"]


def test_questions_insert_and_reorder_contiguously(db_session):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, questions=3)
    inserted = assessment_crud.create_question(db_session, assessment_schema.QuestionCreate(
        assessment_id=assessment.id, question_text="First now", options=["A", "B"], correct_answer="A", order=1,
    ))
    assert inserted.order == 1

    assessment_crud.reorder_question(db_session, inserted.id, 4)
    orders = [(q.question_text, q.order) for q in assessment_crud.get_questions(db_session, assessment.id)]
    assert [o for _, o in orders] == [1, 2, 3, 4]
    assert orders[-1][0] == "First now"


def test_deleting_the_owner_deletes_its_assessments(db_session):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment_id = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id).id

    training_crud.delete_course(db_session, course.id)
    db_session.expire_all()

    assert assessment_crud.get_assessment(db_session, assessment_id) is None


def test_certificate_verification_and_expiry(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    certificate = certificate_crud.issue_certificate(db_session, learner.id, course.id)

    assert certificate_crud.verify_certificate(db_session, certificate.certificate_number).valid is True
    later = datetime.now(timezone.utc) + timedelta(days=800)
    assert certificate_crud.verify_certificate(db_session, certificate.certificate_number, now=later).valid is False

    assert certificate_crud.expire_certificates(db_session, now=later) == 1
    assert certificate_crud.get_certificate_or_raise(db_session, certificate.id).status == CertificateStatus.EXPIRED


def test_revoking_twice_is_rejected(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    certificate = certificate_crud.issue_certificate(db_session, learner.id, course.id)
    certificate_crud.revoke_certificate(db_session, certificate.id)
    with pytest.raises(ValidationError):
        certificate_crud.revoke_certificate(db_session, certificate.id)


def test_certificate_expires_after_it_is_issued(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    certificate = certificate_crud.issue_certificate(db_session, learner.id, course.id)
    assert certificate.expiry_date > certificate.issue_date
    assert certificate.certificate_number.startswith(f"VX-{course.id}-{learner.id}-")
