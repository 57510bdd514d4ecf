"""
Server-side filtering for the admin tables.

The admin screens narrow lists with cascading dropdowns
(training area > module > course > unit), a free-text search box and
clickable column headers. This module holds that state and applies it to
plain row dicts so list endpoints and tests share one implementation.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass
class HierarchyFilter:
    """Cascading selection. Choosing a level clears every level below it."""
    training_area_id: Optional[int] = None
    module_id: Optional[int] = None
    course_id: Optional[int] = None
    unit_id: Optional[int] = None

    def select_training_area(self, training_area_id: Optional[int]) -> "HierarchyFilter":
        self.training_area_id = training_area_id
        self.module_id = None
        self.course_id = None
        self.unit_id = None
        return self

    def select_module(self, module_id: Optional[int]) -> "HierarchyFilter":
        self.module_id = module_id
        self.course_id = None
        self.unit_id = None
        return self

    def select_course(self, course_id: Optional[int]) -> "HierarchyFilter":
        self.course_id = course_id
        self.unit_id = None
        return self

    def select_unit(self, unit_id: Optional[int]) -> "HierarchyFilter":
        self.unit_id = unit_id
        return self

    @classmethod
    def from_params(
        cls,
        training_area_id: Optional[int] = None,
        module_id: Optional[int] = None,
        course_id: Optional[int] = None,
        unit_id: Optional[int] = None,
    ) -> "HierarchyFilter":
        """Builds the filter top-down, as the dropdowns would be chosen."""
        hierarchy = cls()
        hierarchy.select_training_area(training_area_id)
        hierarchy.select_module(module_id)
        hierarchy.select_course(course_id)
        hierarchy.select_unit(unit_id)
        return hierarchy

    def matches(self, row: Dict[str, Any]) -> bool:
        for key in ("training_area_id", "module_id", "course_id", "unit_id"):
            wanted = getattr(self, key)
            if wanted is not None and key in row and row[key] != wanted:
                return False
        return True


@dataclass(frozen=True)
class ColumnSpec:
    header: str
    field: str
    sortable: bool = False

    @property
    def is_sortable(self) -> bool:
        return self.sortable or "name" in self.header.lower()


# Column tables per admin view. Headers are display labels, fields are row keys.
TRAINING_AREA_COLUMNS = (
    ColumnSpec("Training Area Name", "name"),
    ColumnSpec("Description", "description"),
    ColumnSpec("Modules", "module_count", sortable=True),
)

MODULE_COLUMNS = (
    ColumnSpec("Module Name", "name"),
    ColumnSpec("Training Area Name", "training_area_name"),
    ColumnSpec("Courses", "course_count", sortable=True),
)

COURSE_COLUMNS = (
    ColumnSpec("Course Name", "name"),
    ColumnSpec("Module Name", "module_name"),
    ColumnSpec("Level", "level", sortable=True),
    ColumnSpec("Duration", "duration"),
)

UNIT_COLUMNS = (
    ColumnSpec("Unit Name", "name"),
    ColumnSpec("Duration", "duration"),
    ColumnSpec("XP", "xp_points"),
)

USER_COLUMNS = (
    ColumnSpec("Full Name", "full_name"),
    ColumnSpec("Email", "email", sortable=True),
    ColumnSpec("Organization", "organization", sortable=True),
    ColumnSpec("Asset", "asset", sortable=True),
    ColumnSpec("XP", "xp"),
)


def find_column(columns: Sequence[ColumnSpec], key: str) -> Optional[ColumnSpec]:
    """Looks a column up by field name or exact header."""
    for column in columns:
        if column.field == key or column.header == key:
            return column
    return None


@dataclass
class SortState:
    column: Optional[str] = None
    direction: str = SORT_ASC

    def toggle(self, column: str) -> "SortState":
        if self.column == column:
            self.direction = SORT_DESC if self.direction == SORT_ASC else SORT_ASC
        else:
            self.column = column
            self.direction = SORT_ASC
        return self


def sort_key(value: Any) -> str:
    return "" if value is None else str(value).lower()


def sort_rows(rows: Iterable[Dict[str, Any]], sort_state: SortState, columns: Sequence[ColumnSpec]) -> List[Dict[str, Any]]:
    rows = list(rows)
    if not sort_state.column:
        return rows
    column = find_column(columns, sort_state.column)
    if column is None or not column.is_sortable:
        logger.debug(f"Ignoring sort on non-sortable column '{sort_state.column}'")
        return rows
    return sorted(
        rows,
        key=lambda row: sort_key(row.get(column.field)),
        reverse=sort_state.direction == SORT_DESC,
    )


def search_rows(rows: Iterable[Dict[str, Any]], term: Optional[str], fields: Sequence[str]) -> List[Dict[str, Any]]:
    """Case-insensitive substring match on the given fields. An empty term keeps every row."""
    rows = list(rows)
    if not term or not term.strip():
        return rows
    needle = term.strip().lower()
    return [
        row for row in rows
        if any(needle in sort_key(row.get(f)) for f in fields)
    ]


def apply_table_state(
    rows: Iterable[Dict[str, Any]],
    search: Optional[str],
    fields: Sequence[str],
    sort_state: Optional[SortState],
    columns: Sequence[ColumnSpec],
    hierarchy: Optional[HierarchyFilter] = None,
) -> List[Dict[str, Any]]:
    """Hierarchy filter, then search, then sort."""
    rows = list(rows)
    if hierarchy is not None:
        rows = [row for row in rows if hierarchy.matches(row)]
    rows = search_rows(rows, search, fields)
    if sort_state is not None:
        rows = sort_rows(rows, sort_state, columns)
    return rows
