from vx_academy.services.table_filter import (
    COURSE_COLUMNS,
    SORT_ASC,
    SORT_DESC,
    USER_COLUMNS,
    HierarchyFilter,
    SortState,
    apply_table_state,
    search_rows,
    sort_rows,
)


COURSES = [
    {"id": 1, "name": "Guest Etiquette", "module_name": "Service", "level": "beginner", "training_area_id": 1, "module_id": 10},
    {"id": 2, "name": "arabic greetings", "module_name": "Language", "level": "advanced", "training_area_id": 1, "module_id": 11},
    {"id": 3, "name": "Crowd Safety", "module_name": "Safety", "level": "intermediate", "training_area_id": 2, "module_id": 20},
]


def test_selecting_a_higher_level_clears_the_levels_below():
    hierarchy = HierarchyFilter().select_training_area(1).select_module(10).select_course(5)
    hierarchy.select_module(11)
    assert hierarchy.course_id is None

    hierarchy.select_training_area(2)
    assert (hierarchy.training_area_id, hierarchy.module_id, hierarchy.course_id) == (2, None, None)


def test_hierarchy_matches_only_known_keys():
    hierarchy = HierarchyFilter.from_params(training_area_id=1, module_id=11)
    rows = [row for row in COURSES if hierarchy.matches(row)]
    assert [r["id"] for r in rows] == [2]
    # Rows without the key are not excluded by it
    assert hierarchy.matches({"name": "Standalone unit"})


def test_search_is_case_insensitive_substring():
    assert [r["id"] for r in search_rows(COURSES, "ARABIC", ["name"])] == [2]
    assert search_rows(COURSES, "   ", ["name"]) == COURSES


def test_name_columns_sort_case_insensitively():
    rows = sort_rows(COURSES, SortState(column="Course Name"), COURSE_COLUMNS)
    assert [r["id"] for r in rows] == [2, 3, 1]


def test_toggle_flips_direction_on_same_column():
    state = SortState().toggle("name")
    assert state.direction == SORT_ASC
    state.toggle("name")
    assert state.direction == SORT_DESC
    state.toggle("level")
    assert (state.column, state.direction) == ("level", SORT_ASC)


def test_unsortable_column_leaves_order_alone():
    rows = sort_rows(COURSES, SortState(column="duration", direction=SORT_DESC), COURSE_COLUMNS)
    assert rows == COURSES


def test_apply_table_state_filters_then_searches_then_sorts():
    rows = apply_table_state(
        COURSES,
        search="e",
        fields=["name", "module_name"],
        sort_state=SortState(column="name", direction=SORT_DESC),
        columns=COURSE_COLUMNS,
        hierarchy=HierarchyFilter.from_params(training_area_id=1),
    )
    assert [r["id"] for r in rows] == [1, 2]


def test_user_columns_sort_by_email():
    users = [{"email": "b@example.com"}, {"email": "A@example.com"}]
    assert sort_rows(users, SortState(column="email"), USER_COLUMNS)[0]["email"] == "A@example.com"
