import warnings

import pytest
from sqlalchemy.exc import SAWarning

from vx_academy.core.exceptions import ConflictError, NotFoundError
from vx_academy.crud import progress_crud, training_crud
from vx_academy.crud.crud_utils import orders_are_contiguous
from vx_academy.models.enums import LearningBlockType, ProgressStatus
from vx_academy.schemas import training_schema

from conftest import make_tree


def _unit_names(db, course_id):
    return [cu.unit.name for cu in training_crud.get_course_units(db, course_id)]


def test_units_append_in_placement_order(db_session):
    _, _, course, placements = make_tree(db_session, units_per_course=3)
    assert [p.order for p in placements] == [1, 2, 3]


def test_insert_at_occupied_order_shifts_later_units(db_session):
    _, _, course, _ = make_tree(db_session, units_per_course=3, name="Ops")
    unit = training_crud.create_unit(db_session, training_schema.UnitCreate(name="Inserted"))

    placed = training_crud.create_course_unit(
        db_session, training_schema.CourseUnitCreate(course_id=course.id, unit_id=unit.id, order=2)
    )

    assert placed.order == 2
    assert _unit_names(db_session, course.id) == ["Ops unit 1", "Inserted", "Ops unit 2", "Ops unit 3"]
    assert orders_are_contiguous(training_crud.get_course_units(db_session, course.id))


def test_reorder_moves_and_clamps(db_session):
    _, _, course, placements = make_tree(db_session, units_per_course=3, name="Ops")

    training_crud.reorder_course_unit(db_session, placements[0].id, 99)
    assert _unit_names(db_session, course.id) == ["Ops unit 2", "Ops unit 3", "Ops unit 1"]

    training_crud.reorder_course_unit(db_session, placements[0].id, 2)
    assert _unit_names(db_session, course.id) == ["Ops unit 2", "Ops unit 1", "Ops unit 3"]


def test_placing_the_same_unit_twice_conflicts(db_session):
    _, _, course, placements = make_tree(db_session, units_per_course=1)
    with pytest.raises(ConflictError):
        training_crud.create_course_unit(
            db_session, training_schema.CourseUnitCreate(course_id=course.id, unit_id=placements[0].unit_id)
        )


def test_removing_a_placement_closes_the_gap(db_session):
    _, _, course, placements = make_tree(db_session, units_per_course=3, name="Ops")
    training_crud.delete_course_unit(db_session, placements[1].id)
    remaining = training_crud.get_course_units(db_session, course.id)
    assert [cu.order for cu in remaining] == [1, 2]
    assert _unit_names(db_session, course.id) == ["Ops unit 1", "Ops unit 3"]


def test_deleting_a_unit_removes_it_from_every_course(db_session):
    _, _, course, placements = make_tree(db_session, units_per_course=2, name="Ops")
    _, _, other, _ = make_tree(db_session, units_per_course=0, name="Other")
    shared = placements[0].unit_id
    training_crud.create_course_unit(db_session, training_schema.CourseUnitCreate(course_id=other.id, unit_id=shared))

    training_crud.delete_unit(db_session, shared)

    assert _unit_names(db_session, course.id) == ["Ops unit 2"]
    assert training_crud.get_course_units(db_session, other.id) == []
    assert orders_are_contiguous(training_crud.get_course_units(db_session, course.id))


def test_deleting_a_training_area_cascades_to_progress(db_session, learner):
    area, module, course, placements = make_tree(db_session, units_per_course=1)
    progress_crud.record_course_unit_progress(db_session, learner.id, placements[0].id, status=ProgressStatus.COMPLETED)
    area_id, module_id, course_id = area.id, module.id, course.id
    course_unit_id, unit_id = placements[0].id, placements[0].unit_id

    training_crud.delete_training_area(db_session, area_id)
    db_session.expire_all()

    with pytest.raises(NotFoundError):
        training_crud.get_module_or_raise(db_session, module_id)
    assert training_crud.get_course(db_session, course_id) is None
    assert progress_crud.get_course_progress(db_session, learner.id, course_id) is None
    assert progress_crud.get_course_unit_progress(db_session, learner.id, course_unit_id) is None
    assert progress_crud.get_module_progress(db_session, learner.id, module_id) is None
    assert progress_crud.get_training_area_progress(db_session, learner.id, area_id) is None
    # Units are shared content and outlive the courses that placed them
    assert training_crud.get_unit(db_session, unit_id) is not None


def test_module_requires_an_existing_training_area(db_session):
    with pytest.raises(NotFoundError):
        training_crud.create_module(db_session, training_schema.ModuleCreate(name="Orphan", training_area_id=404))


def test_learning_blocks_keep_contiguous_order(db_session):
    unit = training_crud.create_unit(db_session, training_schema.UnitCreate(name="Welcome"))
    blocks = [
        training_crud.create_learning_block(db_session, training_schema.LearningBlockCreate(
            unit_id=unit.id, type=LearningBlockType.VIDEO, title=f"Clip {i}", video_url=f"https://cdn.example.com/{i}.mp4"
        ))
        for i in range(3)
    ]

    training_crud.reorder_learning_block(db_session, blocks[2].id, 1)
    training_crud.delete_learning_block(db_session, blocks[0].id)

    titles = [b.title for b in training_crud.get_learning_blocks(db_session, unit.id)]
    assert titles == ["Clip 2", "Clip 1"]
    assert orders_are_contiguous(training_crud.get_learning_blocks(db_session, unit.id))


def test_deleting_twice_is_not_found(db_session):
    area, _, _, _ = make_tree(db_session, units_per_course=0)
    training_crud.delete_training_area(db_session, area.id)
    with pytest.raises(NotFoundError):
        training_crud.delete_training_area(db_session, area.id)


def test_deleting_a_placed_unit_deletes_each_placement_once(db_session):
    _, _, course, placements = make_tree(db_session, units_per_course=3, name="Ops")
    unit_id = placements[1].unit_id

    with warnings.catch_warnings():
        warnings.simplefilter("error", SAWarning)
        training_crud.delete_unit(db_session, unit_id)

    assert training_crud.get_unit(db_session, unit_id) is None
    assert _unit_names(db_session, course.id) == ["Ops unit 1", "Ops unit 3"]
