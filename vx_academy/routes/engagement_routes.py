from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import (
    get_current_user,
    get_current_admin_user,
    get_current_super_admin,
    ensure_self_or_admin,
)
from vx_academy.models.user_model import User
from vx_academy.schemas import engagement_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult
from vx_academy.crud import engagement_crud as crud
from vx_academy.crud import certificate_crud

logger = logging.getLogger(__name__)

enrollment_router = APIRouter(prefix="/enrollments", tags=["Enrollments"])
certificate_router = APIRouter(prefix="/certificates", tags=["Certificates"])
badge_router = APIRouter(prefix="/badges", tags=["Badges"])
notification_router = APIRouter(prefix="/notifications", tags=["Notifications"])
media_router = APIRouter(prefix="/media", tags=["Media"])

# --- Enrollment Endpoints ---
@enrollment_router.post("/", response_model=ApiResponse[schemas.EnrollmentDisplay], status_code=status.HTTP_201_CREATED)
def enroll_user(
    enrollment_in: schemas.EnrollmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    enrollment = crud.enroll_user(db, enrollment_in.user_id, enrollment_in.course_id, enrollment_in.enrollment_source)
    return ApiResponse(data=schemas.EnrollmentDisplay.model_validate(enrollment), message="User enrolled.")

@enrollment_router.get("/me", response_model=ApiResponse[List[schemas.EnrollmentDisplay]])
def list_my_enrollments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.EnrollmentDisplay.model_validate(e) for e in crud.get_enrollments_for_user(db, current_user.id)])

@enrollment_router.get("/users/{user_id}", response_model=ApiResponse[List[schemas.EnrollmentDisplay]])
def list_user_enrollments(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return ApiResponse(data=[schemas.EnrollmentDisplay.model_validate(e) for e in crud.get_enrollments_for_user(db, user_id)])

@enrollment_router.get("/courses/{course_id}", response_model=ApiResponse[List[schemas.EnrollmentDisplay]])
def list_course_enrollments(course_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    return ApiResponse(data=[schemas.EnrollmentDisplay.model_validate(e) for e in crud.get_enrollments_for_course(db, course_id)])

@enrollment_router.delete("/users/{user_id}/courses/{course_id}", response_model=ApiResponse[None])
def unenroll_user(
    user_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    crud.unenroll_user(db, user_id, course_id)
    return ApiResponse(message="User unenrolled.")

# --- Certificate Endpoints ---
@certificate_router.get("/me", response_model=ApiResponse[List[schemas.CertificateDisplay]])
def list_my_certificates(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    certificates = certificate_crud.get_certificates_for_user(db, current_user.id)
    return ApiResponse(data=[schemas.CertificateDisplay.model_validate(c) for c in certificates])

@certificate_router.get("/users/{user_id}", response_model=ApiResponse[List[schemas.CertificateDisplay]])
def list_user_certificates(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    certificates = certificate_crud.get_certificates_for_user(db, user_id)
    return ApiResponse(data=[schemas.CertificateDisplay.model_validate(c) for c in certificates])

@certificate_router.get("/courses/{course_id}", response_model=ApiResponse[List[schemas.CertificateDisplay]])
def list_course_certificates(course_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    certificates = certificate_crud.get_certificates_for_course(db, course_id)
    return ApiResponse(data=[schemas.CertificateDisplay.model_validate(c) for c in certificates])

@certificate_router.get("/verify/{certificate_number}", response_model=ApiResponse[schemas.CertificateVerification])
def verify_certificate(certificate_number: str, db: Session = Depends(get_db)):
    """
    Public verification of a certificate number.
    """
    return ApiResponse(data=certificate_crud.verify_certificate(db, certificate_number))

@certificate_router.post("/{certificate_id}/revoke", response_model=ApiResponse[schemas.CertificateDisplay])
def revoke_certificate(
    certificate_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_super_admin)
):
    logger.info(f"Admin {current_user.email} revoking certificate {certificate_id}")
    certificate = certificate_crud.revoke_certificate(db, certificate_id)
    return ApiResponse(data=schemas.CertificateDisplay.model_validate(certificate), message="Certificate revoked.")

@certificate_router.post("/expire", response_model=ApiResponse[int])
def expire_certificates(db: Session = Depends(get_db), current_user: User = Depends(get_current_super_admin)):
    """
    Marks every active certificate past its expiry date as expired. Returns how many changed.
    """
    return ApiResponse(data=certificate_crud.expire_certificates(db))

# --- Badge Endpoints ---
@badge_router.post("/", response_model=ApiResponse[schemas.BadgeDisplay], status_code=status.HTTP_201_CREATED)
def create_badge(badge_in: schemas.BadgeCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    badge = crud.create_badge(db, badge_in)
    return ApiResponse(data=schemas.BadgeDisplay.model_validate(badge), message="Badge created.")

@badge_router.get("/", response_model=ApiResponse[List[schemas.BadgeDisplay]])
def list_badges(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.BadgeDisplay.model_validate(b) for b in crud.get_badges(db)])

@badge_router.get("/me", response_model=ApiResponse[List[schemas.UserBadgeDisplay]])
def list_my_badges(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.UserBadgeDisplay.model_validate(b) for b in crud.get_user_badges(db, current_user.id)])

@badge_router.get("/{badge_id}", response_model=ApiResponse[schemas.BadgeDisplay])
def read_badge(badge_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.BadgeDisplay.model_validate(crud.get_badge_or_raise(db, badge_id)))

@badge_router.put("/{badge_id}", response_model=ApiResponse[schemas.BadgeDisplay])
def update_badge(
    badge_id: int,
    badge_in: schemas.BadgeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    badge = crud.update_badge(db, badge_id, badge_in)
    return ApiResponse(data=schemas.BadgeDisplay.model_validate(badge), message="Badge updated.")

@badge_router.delete("/{badge_id}", response_model=ApiResponse[DeleteResult])
def delete_badge(badge_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_badge(db, badge_id)
    return ApiResponse(data=DeleteResult(id=badge_id), message="Badge deleted.")

@badge_router.post("/{badge_id}/award/{user_id}", response_model=ApiResponse[schemas.UserBadgeDisplay])
def award_badge(
    badge_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    user_badge = crud.award_badge(db, user_id, badge_id)
    return ApiResponse(data=schemas.UserBadgeDisplay.model_validate(user_badge), message="Badge awarded.")

# --- Notification Endpoints ---
@notification_router.post("/", response_model=ApiResponse[schemas.NotificationDisplay], status_code=status.HTTP_201_CREATED)
def create_notification(
    notification_in: schemas.NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    notification = crud.create_notification(db, notification_in)
    return ApiResponse(data=schemas.NotificationDisplay.model_validate(notification), message="Notification sent.")

@notification_router.get("/", response_model=ApiResponse[List[schemas.NotificationDisplay]])
def list_my_notifications(
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notifications = crud.get_notifications(db, current_user.id, unread_only=unread_only)
    return ApiResponse(data=[schemas.NotificationDisplay.model_validate(n) for n in notifications])

@notification_router.post("/{notification_id}/read", response_model=ApiResponse[schemas.NotificationDisplay])
def mark_notification_read(notification_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    notification = crud.mark_notification_read(db, notification_id, current_user.id)
    return ApiResponse(data=schemas.NotificationDisplay.model_validate(notification))

@notification_router.post("/read-all", response_model=ApiResponse[int])
def mark_all_notifications_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=crud.mark_all_notifications_read(db, current_user.id))

# --- Media Endpoints ---
@media_router.post("/", response_model=ApiResponse[schemas.MediaFileDisplay], status_code=status.HTTP_201_CREATED)
def register_media_file(
    media_in: schemas.MediaFileCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Records metadata for a file already stored elsewhere; the URL is kept as given.
    """
    media = crud.register_media_file(db, media_in, uploaded_by=current_user.id)
    return ApiResponse(data=schemas.MediaFileDisplay.model_validate(media), message="Media file registered.")

@media_router.get("/", response_model=ApiResponse[List[schemas.MediaFileDisplay]])
def list_media_files(
    uploaded_by: Optional[int] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    media_files = crud.get_media_files(db, uploaded_by=uploaded_by, skip=skip, limit=limit)
    return ApiResponse(data=[schemas.MediaFileDisplay.model_validate(m) for m in media_files])

@media_router.delete("/{media_id}", response_model=ApiResponse[DeleteResult])
def delete_media_file(media_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_media_file(db, media_id)
    return ApiResponse(data=DeleteResult(id=media_id), message="Media file deleted.")
