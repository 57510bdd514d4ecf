from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
import logging

from vx_academy.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

# Helper function for updating entities
def update_db_object(db_obj, update_data: BaseModel, exclude: Optional[set] = None):
    for field, value in update_data.model_dump(exclude_unset=True, exclude=exclude).items():
        setattr(db_obj, field, value)
    return db_obj

def commit_or_rollback(db: Session, action: str) -> None:
    """
    Commits the current transaction. Any failure rolls the whole transaction back;
    integrity violations surface as ConflictError, everything else is re-raised.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error while {action}: {e.orig}")
        raise ConflictError(f"Could not {action}: it conflicts with an existing record.") from e
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error while {action}: {e}", exc_info=True)
        raise

# --- Ordered children (course units, learning blocks, questions) ---
# Order values within a parent are always exactly 1..n. The order columns carry
# unique constraints, so every shift is flushed one row at a time in an order
# that never collides, with the moved row parked at 0 while others shift.

def shift_for_insert(db: Session, siblings: List[Any], requested_order: Optional[int]) -> int:
    """Opens a slot for a new item and returns the order it should take."""
    size = len(siblings)
    if requested_order is None or requested_order > size:
        return size + 1
    target = max(1, requested_order)
    for sibling in sorted((s for s in siblings if s.order >= target), key=lambda s: s.order, reverse=True):
        sibling.order += 1
        db.flush()
    return target

def move_item(db: Session, item: Any, siblings: List[Any], new_order: int) -> int:
    """Moves `item` to `new_order` (clamped to 1..n), shifting the items in between by one."""
    size = len(siblings)
    target = min(max(1, new_order), size)
    current = item.order
    if target == current:
        return current

    item.order = 0
    db.flush()
    others = [s for s in siblings if s is not item]
    if target < current:
        for sibling in sorted((s for s in others if target <= s.order < current), key=lambda s: s.order, reverse=True):
            sibling.order += 1
            db.flush()
    else:
        for sibling in sorted((s for s in others if current < s.order <= target), key=lambda s: s.order):
            sibling.order -= 1
            db.flush()
    item.order = target
    db.flush()
    return target

def delete_and_close_gap(db: Session, item: Any, siblings: List[Any]) -> None:
    removed_order = item.order
    db.delete(item)
    db.flush()
    for sibling in sorted((s for s in siblings if s is not item and s.order > removed_order), key=lambda s: s.order):
        sibling.order -= 1
        db.flush()

def orders_are_contiguous(items: List[Any]) -> bool:
    return sorted(i.order for i in items) == list(range(1, len(items) + 1))

def as_row(obj, schema_cls, **extra) -> Dict[str, Any]:
    """Serialises an ORM object through its display schema and adds table-only columns."""
    row = schema_cls.model_validate(obj).model_dump()
    row.update(extra)
    return row
