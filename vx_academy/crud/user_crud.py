from sqlalchemy.orm import Session
from sqlalchemy import func, or_
import logging
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone

from vx_academy.core.exceptions import ConflictError, NotFoundError, ValidationError
from vx_academy.core.security import hash_password
from vx_academy.models.enums import UserType
from vx_academy.models.user_model import User, SubAdminDetail, NormalUserDetail
from vx_academy.schemas.user_schema import UserCreate, UserUpdate
from vx_academy.services import email_service # Welcome email on account creation
from vx_academy.crud.crud_utils import commit_or_rollback

logger = logging.getLogger(__name__)


# Helper function to apply filters to a query
def _apply_user_filters(query, filters: Optional[Dict[str, Any]] = None):
    if not filters:
        return query

    if filters.get("user_type"):
        query = query.filter(User.user_type == filters["user_type"])
    if filters.get("organization"):
        query = query.filter(User.organization == filters["organization"])
    if filters.get("asset"):
        query = query.filter(User.asset == filters["asset"])
    if filters.get("sub_asset"):
        query = query.filter(User.sub_asset == filters["sub_asset"])
    if filters.get("search"):
        term = f"%{filters['search']}%"
        query = query.filter(or_(
            User.first_name.ilike(term),
            User.last_name.ilike(term),
            User.email.ilike(term),
        ))
    return query

def _check_details(user_type: UserType, sub_admin_detail, normal_user_detail) -> None:
    """sub_admin carries exactly a SubAdminDetail, user exactly a NormalUserDetail, admin neither."""
    errors = {}
    if user_type == UserType.SUB_ADMIN:
        if sub_admin_detail is None:
            errors["sub_admin_detail"] = "Sub-admin details are required for a sub_admin."
        if normal_user_detail is not None:
            errors["normal_user_detail"] = "Only users of type 'user' have normal user details."
    elif user_type == UserType.USER:
        if normal_user_detail is None:
            errors["normal_user_detail"] = "Normal user details are required for a user."
        if sub_admin_detail is not None:
            errors["sub_admin_detail"] = "Only users of type 'sub_admin' have sub-admin details."
    else:
        if sub_admin_detail is not None:
            errors["sub_admin_detail"] = "Admins have no sub-admin details."
        if normal_user_detail is not None:
            errors["normal_user_detail"] = "Admins have no normal user details."
    if errors:
        raise ValidationError(f"User details do not match user type '{UserType(user_type).value}'.", errors=errors)

def _check_eid_free(db: Session, eid: str, user_id: Optional[int] = None) -> None:
    for model in (SubAdminDetail, NormalUserDetail):
        query = db.query(model).filter(model.eid == eid)
        if user_id is not None:
            query = query.filter(model.user_id != user_id)
        if query.first():
            logger.warning(f"EID {eid} is already registered.")
            raise ConflictError(f"EID '{eid}' is already registered.")

def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Fetches a user by their internal database ID."""
    logger.debug(f"Fetching user by ID: {user_id}")
    return db.query(User).filter(User.id == user_id).first()

def get_user_or_raise(db: Session, user_id: int) -> User:
    db_user = get_user_by_id(db, user_id)
    if not db_user:
        logger.warning(f"User with ID {user_id} not found.")
        raise NotFoundError("User", user_id)
    return db_user

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Fetches a user by their email address."""
    logger.debug(f"Fetching user by email: {email}")
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()

def create_user(db: Session, user_in: UserCreate, send_welcome_email: bool = True) -> User:
    """
    Creates a user with the detail record their type requires.
    Duplicate email or EID raises ConflictError.
    """
    logger.info(f"Attempting to create {user_in.user_type.value} account for email: {user_in.email}")
    _check_details(user_in.user_type, user_in.sub_admin_detail, user_in.normal_user_detail)

    if get_user_by_email(db, user_in.email):
        logger.warning(f"User creation failed: Email {user_in.email} already exists.")
        raise ConflictError(f"Email '{user_in.email}' is already registered.")
    detail_in = user_in.sub_admin_detail or user_in.normal_user_detail
    if detail_in is not None:
        _check_eid_free(db, detail_in.eid)

    db_user = User(
        **user_in.model_dump(exclude={"password", "sub_admin_detail", "normal_user_detail"}),
        password_hash=hash_password(user_in.password),
        xp=0,
    )
    if user_in.sub_admin_detail is not None:
        db_user.sub_admin_detail = SubAdminDetail(**user_in.sub_admin_detail.model_dump())
    if user_in.normal_user_detail is not None:
        db_user.normal_user_detail = NormalUserDetail(**user_in.normal_user_detail.model_dump())

    db.add(db_user)
    commit_or_rollback(db, f"create user {user_in.email}")
    db.refresh(db_user)
    logger.info(f"User created successfully: {db_user.email} (ID: {db_user.id}, type: {db_user.user_type.value}).")

    if send_welcome_email:
        email_service.send_welcome_email(db_user.email, db_user.full_name)
    return db_user

def get_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    filters: Optional[Dict[str, Any]] = None
) -> List[User]:
    """
    Retrieves a list of users with pagination and optional filtering.
    """
    logger.debug(f"Fetching users with skip: {skip}, limit: {limit}, filters: {filters}")
    query = db.query(User)
    query = _apply_user_filters(query, filters)
    return query.order_by(User.id.asc()).offset(skip).limit(limit).all()

def count_users(db: Session, filters: Optional[Dict[str, Any]] = None) -> int:
    """
    Counts users with optional filtering.
    """
    logger.debug(f"Counting users with filters: {filters}")
    query = db.query(func.count(User.id))
    query = _apply_user_filters(query, filters)
    return query.scalar() or 0

def update_user(db: Session, user_id: int, user_in: UserUpdate) -> User:
    """
    Updates a user's profile. Changing user_type requires the detail record of
    the new type; the detail of the old type is removed.
    """
    db_user = get_user_or_raise(db, user_id)
    update_data = user_in.model_dump(exclude_unset=True, exclude={"password", "sub_admin_detail", "normal_user_detail"})
    logger.info(f"Updating user ID {user_id} with fields: {sorted(update_data)}")

    new_type = user_in.user_type or db_user.user_type
    sub_admin_in = user_in.sub_admin_detail
    normal_user_in = user_in.normal_user_detail
    # Details not supplied in the update keep their stored value while the type matches
    effective_sub_admin = sub_admin_in if sub_admin_in is not None else (
        db_user.sub_admin_detail if new_type == UserType.SUB_ADMIN else None)
    effective_normal = normal_user_in if normal_user_in is not None else (
        db_user.normal_user_detail if new_type == UserType.USER else None)
    _check_details(new_type, effective_sub_admin, effective_normal)

    if "email" in update_data and update_data["email"].lower() != db_user.email.lower():
        existing = get_user_by_email(db, update_data["email"])
        if existing and existing.id != user_id:
            logger.warning(f"Update failed: email '{update_data['email']}' already in use by another user.")
            raise ConflictError(f"Email '{update_data['email']}' is already registered.")
    for detail_in in (sub_admin_in, normal_user_in):
        if detail_in is not None:
            _check_eid_free(db, detail_in.eid, user_id=user_id)

    for field, value in update_data.items():
        setattr(db_user, field, value)
    if user_in.password:
        db_user.password_hash = hash_password(user_in.password)

    if new_type == UserType.SUB_ADMIN:
        db_user.normal_user_detail = None
        if sub_admin_in is not None:
            if db_user.sub_admin_detail is None:
                db_user.sub_admin_detail = SubAdminDetail(**sub_admin_in.model_dump())
            else:
                for field, value in sub_admin_in.model_dump().items():
                    setattr(db_user.sub_admin_detail, field, value)
    elif new_type == UserType.USER:
        db_user.sub_admin_detail = None
        if normal_user_in is not None:
            if db_user.normal_user_detail is None:
                db_user.normal_user_detail = NormalUserDetail(**normal_user_in.model_dump())
            else:
                for field, value in normal_user_in.model_dump().items():
                    setattr(db_user.normal_user_detail, field, value)
    else:
        db_user.sub_admin_detail = None
        db_user.normal_user_detail = None

    commit_or_rollback(db, f"update user {user_id}")
    db.refresh(db_user)
    logger.info(f"User ID {user_id} updated successfully.")
    return db_user

def record_login(db: Session, user_id: int) -> User:
    db_user = get_user_or_raise(db, user_id)
    db_user.last_login = datetime.now(timezone.utc)
    commit_or_rollback(db, f"record login for user {user_id}")
    db.refresh(db_user)
    return db_user

def add_xp(db: Session, user: User, points: int) -> User:
    """Adds XP to a user. Does not commit."""
    if points < 0:
        raise ValidationError.for_field("xp", "XP awards cannot be negative.")
    user.xp = (user.xp or 0) + points
    logger.debug(f"Awarded {points} XP to user {user.id} (total {user.xp})")
    return user

def delete_user(db: Session, user_id: int) -> None:
    db_user = get_user_or_raise(db, user_id)
    logger.debug(f"Deleting user ID: {user_id} ({db_user.email})")
    db.delete(db_user)
    commit_or_rollback(db, f"delete user {user_id}")
    logger.info(f"User ID {user_id} deleted with their progress, attempts and certificates.")
