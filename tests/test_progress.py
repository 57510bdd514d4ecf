import pytest

from vx_academy.core.exceptions import NotFoundError, ValidationError
from vx_academy.crud import engagement_crud, progress_crud, training_crud
from vx_academy.models.enums import LearningBlockType, ProgressStatus
from vx_academy.schemas import training_schema

from conftest import make_tree


def test_completing_one_of_two_units_rolls_up_to_fifty(db_session, learner):
    area, module, course, placements = make_tree(db_session, units_per_course=2)

    leaf = progress_crud.record_course_unit_progress(
        db_session, learner.id, placements[0].id, status=ProgressStatus.COMPLETED
    )

    assert leaf.completion_percentage == 100.0
    assert leaf.completed_at is not None
    course_row = progress_crud.get_course_progress(db_session, learner.id, course.id)
    assert course_row.completion_percentage == 50.0
    assert course_row.status == ProgressStatus.IN_PROGRESS
    assert progress_crud.get_module_progress(db_session, learner.id, module.id).completion_percentage == 50.0
    assert progress_crud.get_training_area_progress(db_session, learner.id, area.id).completion_percentage == 50.0


def test_module_averages_over_all_courses(db_session, learner):
    area, module, course, placements = make_tree(db_session, units_per_course=1)
    training_crud.create_course(db_session, training_schema.CourseCreate(name="Second course", module_id=module.id))

    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, completion_percentage=100)

    assert progress_crud.get_course_progress(db_session, learner.id, course.id).status == ProgressStatus.COMPLETED
    module_row = progress_crud.get_module_progress(db_session, learner.id, module.id)
    assert module_row.completion_percentage == 50.0
    assert module_row.completed_at is None


def test_all_units_completed_completes_the_chain(db_session, learner):
    area, module, course, placements = make_tree(db_session, units_per_course=2)
    for placement in placements:
        progress_crud.record_course_unit_progress(db_session, learner.id, placement.id, status=ProgressStatus.COMPLETED)

    area_row = progress_crud.get_training_area_progress(db_session, learner.id, area.id)
    assert area_row.status == ProgressStatus.COMPLETED
    assert area_row.completed_at is not None


def test_in_progress_requires_a_percentage(db_session, learner):
    _, _, _, placements = make_tree(db_session, units_per_course=1)
    with pytest.raises(ValidationError) as exc_info:
        progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, status=ProgressStatus.IN_PROGRESS)
    assert "completion_percentage" in exc_info.value.errors


def test_status_must_agree_with_percentage(db_session, learner):
    _, _, _, placements = make_tree(db_session, units_per_course=1)
    with pytest.raises(ValidationError):
        progress_crud.record_course_unit_progress(
            db_session, learner.id, placements[0].id, status=ProgressStatus.COMPLETED, completion_percentage=40
        )


def test_unknown_course_unit_is_not_found(db_session, learner):
    with pytest.raises(NotFoundError):
        progress_crud.record_course_unit_progress(db_session, learner.id, 9999, completion_percentage=10)


def test_learning_blocks_drive_unit_progress_without_regressing(db_session, learner):
    _, _, course, placements = make_tree(db_session, units_per_course=1)
    unit_id = placements[0].unit_id
    blocks = [
        training_crud.create_learning_block(db_session, training_schema.LearningBlockCreate(
            unit_id=unit_id, type=LearningBlockType.TEXT, title=f"Block {i}"
        ))
        for i in range(4)
    ]

    progress_crud.complete_learning_block(db_session, learner.id, blocks[0].id)
    assert progress_crud.get_course_unit_progress(db_session, learner.id, placements[0].id).completion_percentage == 25.0

    # Completing the same block again changes nothing
    progress_crud.complete_learning_block(db_session, learner.id, blocks[0].id)
    assert progress_crud.get_course_unit_progress(db_session, learner.id, placements[0].id).completion_percentage == 25.0

    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, status=ProgressStatus.COMPLETED)
    progress_crud.complete_learning_block(db_session, learner.id, blocks[1].id)
    assert progress_crud.get_course_unit_progress(db_session, learner.id, placements[0].id).completion_percentage == 100.0
    assert progress_crud.get_course_progress(db_session, learner.id, course.id).status == ProgressStatus.COMPLETED


def test_enrollment_seeds_a_not_started_course_row(db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    engagement_crud.enroll_user(db_session, learner.id, course.id)

    row = progress_crud.get_course_progress(db_session, learner.id, course.id)
    assert row.status == ProgressStatus.NOT_STARTED
    assert row.completion_percentage == 0.0

    # Idempotent
    engagement_crud.enroll_user(db_session, learner.id, course.id)
    assert len(engagement_crud.get_enrollments_for_user(db_session, learner.id)) == 1


def test_recalculate_rebuilds_ancestors_after_a_new_unit(db_session, learner):
    area, module, course, placements = make_tree(db_session, units_per_course=1)
    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, status=ProgressStatus.COMPLETED)

    extra = training_crud.create_unit(db_session, training_schema.UnitCreate(name="Late addition"))
    training_crud.create_course_unit(db_session, training_schema.CourseUnitCreate(course_id=course.id, unit_id=extra.id))
    # Stored value is stale until recomputed
    assert progress_crud.get_course_progress(db_session, learner.id, course.id).completion_percentage == 100.0

    snapshot = progress_crud.recalculate_user_progress(db_session, learner.id)

    assert [c.completion_percentage for c in snapshot.courses] == [50.0]
    assert [a.completion_percentage for a in snapshot.training_areas] == [50.0]


def test_reset_removes_every_level(db_session, learner):
    _, _, _, placements = make_tree(db_session, units_per_course=1)
    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, completion_percentage=30)

    deleted = progress_crud.reset_user_progress(db_session, learner.id)

    assert deleted == 4
    snapshot = progress_crud.get_user_progress_snapshot(db_session, learner.id)
    assert snapshot.course_units == [] and snapshot.training_areas == []


def test_overview_reports_untouched_entities_as_zero(db_session, learner):
    area, module, course, _ = make_tree(db_session, units_per_course=1)

    overview = progress_crud.get_user_progress_overview(db_session, learner.id)

    assert len(overview) == 1
    assert overview[0].completion_percentage == 0.0
    assert overview[0].status == ProgressStatus.NOT_STARTED


def test_two_of_four_units_completed_is_fifty(db_session, learner):
    _, _, course, placements = make_tree(db_session, units_per_course=4)
    for placement in placements[:2]:
        progress_crud.record_course_unit_progress(db_session, learner.id, placement.id, completion_percentage=100)

    assert progress_crud.get_course_progress(db_session, learner.id, course.id).completion_percentage == 50.0


def test_recompute_is_idempotent(db_session, learner):
    _, module, course, placements = make_tree(db_session, units_per_course=3)
    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, completion_percentage=60)

    first = progress_crud.recompute_course_progress(db_session, learner.id, course.id).completion_percentage
    second = progress_crud.recompute_course_progress(db_session, learner.id, course.id).completion_percentage
    module_pct = progress_crud.recompute_module_progress(db_session, learner.id, module.id).completion_percentage

    assert first == second == 20.0
    assert module_pct == 20.0


def test_block_of_an_unplaced_unit_writes_nothing(db_session, learner):
    unit = training_crud.create_unit(db_session, training_schema.UnitCreate(name="Draft unit"))
    block = training_crud.create_learning_block(db_session, training_schema.LearningBlockCreate(
        unit_id=unit.id, type=LearningBlockType.TEXT, title="Intro"
    ))

    with pytest.raises(NotFoundError):
        progress_crud.complete_learning_block(db_session, learner.id, block.id)
    assert progress_crud.get_user_progress_snapshot(db_session, learner.id).learning_blocks == []


def test_raising_a_leaf_never_lowers_its_ancestors(db_session, learner):
    area, _, course, placements = make_tree(db_session, units_per_course=2)
    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, completion_percentage=40)
    before = progress_crud.get_course_progress(db_session, learner.id, course.id).completion_percentage

    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, completion_percentage=70)

    assert progress_crud.get_course_progress(db_session, learner.id, course.id).completion_percentage >= before
    assert progress_crud.get_training_area_progress(db_session, learner.id, area.id).completion_percentage == 35.0
