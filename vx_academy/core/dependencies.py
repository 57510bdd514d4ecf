from fastapi import Depends, HTTPException, status, Request, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from vx_academy.core.config import settings
from vx_academy.core.database import get_db # Re-export or use directly
from vx_academy.core.exceptions import ValidationError
from vx_academy.crud.user_crud import get_user_by_id
from vx_academy.models.enums import UserType
from vx_academy.models.user_model import User
from vx_academy.services.table_filter import SortState, SORT_ASC, SORT_DESC

logger = logging.getLogger(__name__)

# Dependency to get the current user from the gateway identity header
async def get_current_user(
    request: Request, db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.
    Token verification happens upstream; the gateway forwards the user's ID
    in the configured header.
    """
    raw_user_id: Optional[str] = request.headers.get(settings.USER_ID_HEADER)

    if not raw_user_id or not raw_user_id.strip().isdigit():
        logger.warning(f"Missing or invalid {settings.USER_ID_HEADER} header.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Not authenticated. {settings.USER_ID_HEADER} header required.",
        )

    user = get_user_by_id(db, int(raw_user_id))
    if user is None:
        logger.warning(f"User not found in DB for {settings.USER_ID_HEADER}: {raw_user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account not found.",
        )

    logger.debug(f"Authenticated user retrieved: {user.email} (ID: {user.id})")
    return user


# --- Role Dependencies ---
async def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Admits admins and sub-admins.
    """
    if current_user.user_type not in (UserType.ADMIN, UserType.SUB_ADMIN):
        logger.warning(f"Admin access denied for user: {current_user.email} (type: {current_user.user_type.value})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not permitted: Requires admin privileges.",
        )
    return current_user


async def get_current_super_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Admits only full admins.
    """
    if current_user.user_type != UserType.ADMIN:
        logger.warning(f"Super-admin access denied for user: {current_user.email} (type: {current_user.user_type.value})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not permitted: Requires the admin role.",
        )
    return current_user


def ensure_self_or_admin(current_user: User, user_id: int) -> None:
    """Learners may only act on their own records; admins and sub-admins on anyone's."""
    if current_user.id != user_id and current_user.user_type not in (UserType.ADMIN, UserType.SUB_ADMIN):
        logger.warning(f"User {current_user.id} tried to access records of user {user_id}.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access another user's records.",
        )


# --- Query helpers shared by list endpoints ---
def table_sort_state(
    sort_by: Optional[str] = Query(None, description="Column header or field to sort by"),
    sort_dir: str = Query(SORT_ASC, pattern=f"^({SORT_ASC}|{SORT_DESC})$"),
) -> SortState:
    return SortState(column=sort_by, direction=sort_dir)


def require_confirmation(confirm: bool = Query(False, description="Must be true to delete an entity with descendants")) -> None:
    if not confirm:
        raise ValidationError.for_field(
            "confirm",
            "This deletes the entity with all of its descendants and their progress. Repeat with confirm=true.",
        )
