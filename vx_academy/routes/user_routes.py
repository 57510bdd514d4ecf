from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import (
    get_current_user,
    get_current_admin_user,
    get_current_super_admin,
    ensure_self_or_admin,
    table_sort_state,
)
from vx_academy.models.enums import UserType
from vx_academy.models.user_model import User
from vx_academy.schemas import user_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult
from vx_academy.crud import user_crud as crud
from vx_academy.crud.crud_utils import as_row
from vx_academy.services.table_filter import SortState, apply_table_state, USER_COLUMNS

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])

def _ensure_may_manage(current_user: User, user_type: Optional[UserType]) -> None:
    # Sub-admins manage frontliners only
    if current_user.user_type != UserType.ADMIN and user_type not in (None, UserType.USER):
        logger.warning(f"Sub-admin {current_user.email} attempted to manage a '{user_type.value}' account.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can manage admin and sub-admin accounts.",
        )

@router.post("/", response_model=ApiResponse[schemas.UserDisplay], status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: schemas.UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Create a user. Sub-admins may only create frontliners (type 'user').
    """
    _ensure_may_manage(current_user, user_in.user_type)
    logger.info(f"User {current_user.email} creating {user_in.user_type.value} account for {user_in.email}")
    user = crud.create_user(db, user_in)
    return ApiResponse(data=schemas.UserDisplay.model_validate(user), message="User created.")

@router.get("/", response_model=ApiResponse[List[Dict[str, Any]]])
def list_users(
    user_type: Optional[UserType] = Query(None),
    organization: Optional[str] = Query(None),
    asset: Optional[str] = Query(None),
    sub_asset: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matches first name, last name or email"),
    sort_state: SortState = Depends(table_sort_state),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    filters = {
        "user_type": user_type,
        "organization": organization,
        "asset": asset,
        "sub_asset": sub_asset,
        "search": search,
    }
    active_filters = {k: v for k, v in filters.items() if v is not None}
    users = crud.get_users(db, skip=skip, limit=limit, filters=active_filters)
    rows = [as_row(user, schemas.UserDisplay, full_name=user.full_name) for user in users]
    # Search already applied in SQL; only sorting remains
    return ApiResponse(
        data=apply_table_state(rows, None, [], sort_state, USER_COLUMNS),
        message=f"{crud.count_users(db, filters=active_filters)} user(s) match.",
    )

@router.get("/me", response_model=ApiResponse[schemas.UserDisplay])
def read_me(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.UserDisplay.model_validate(current_user))

@router.post("/me/login", response_model=ApiResponse[schemas.UserDisplay])
def record_my_login(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    Stamps last_login for the current user; called by the client after sign-in.
    """
    user = crud.record_login(db, current_user.id)
    return ApiResponse(data=schemas.UserDisplay.model_validate(user))

@router.get("/{user_id}", response_model=ApiResponse[schemas.UserDisplay])
def read_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return ApiResponse(data=schemas.UserDisplay.model_validate(crud.get_user_or_raise(db, user_id)))

@router.put("/{user_id}", response_model=ApiResponse[schemas.UserDisplay])
def update_user(
    user_id: int,
    user_in: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    target = crud.get_user_or_raise(db, user_id)
    _ensure_may_manage(current_user, target.user_type)
    _ensure_may_manage(current_user, user_in.user_type)
    user = crud.update_user(db, user_id, user_in)
    return ApiResponse(data=schemas.UserDisplay.model_validate(user), message="User updated.")

@router.delete("/{user_id}", response_model=ApiResponse[DeleteResult])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_super_admin)
):
    logger.info(f"Admin {current_user.email} deleting user {user_id}")
    crud.delete_user(db, user_id)
    return ApiResponse(data=DeleteResult(id=user_id), message="User deleted.")
