from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from vx_academy.core.exceptions import NotFoundError
from vx_academy.models.enums import EnrollmentSource
from vx_academy.models.engagement_model import CourseEnrollment, Badge, UserBadge, Notification, MediaFile
from vx_academy.schemas import engagement_schema as schemas
from vx_academy.crud.crud_utils import commit_or_rollback, update_db_object
from vx_academy.crud import training_crud, user_crud, progress_crud

logger = logging.getLogger(__name__)

# --- Enrollments ---
def get_enrollment(db: Session, user_id: int, course_id: int) -> Optional[CourseEnrollment]:
    return db.query(CourseEnrollment).filter(
        CourseEnrollment.user_id == user_id,
        CourseEnrollment.course_id == course_id
    ).first()

def enroll_user(db: Session, user_id: int, course_id: int, source: EnrollmentSource = EnrollmentSource.MANUAL) -> CourseEnrollment:
    """Enrolls a user in a course. Enrolling twice returns the existing enrollment."""
    user_crud.get_user_or_raise(db, user_id)
    training_crud.get_course_or_raise(db, course_id)

    existing = get_enrollment(db, user_id, course_id)
    if existing:
        logger.info(f"User {user_id} is already enrolled in course {course_id} (enrollment ID: {existing.id}).")
        return existing

    try:
        enrollment = CourseEnrollment(user_id=user_id, course_id=course_id, enrollment_source=source)
        db.add(enrollment)
        progress_crud.seed_course_progress(db, user_id, course_id)
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"enroll user {user_id} in course {course_id}")
    db.refresh(enrollment)
    logger.info(f"User {user_id} enrolled in course {course_id} via {source.value}.")
    return enrollment

def get_enrollments_for_user(db: Session, user_id: int) -> List[CourseEnrollment]:
    logger.debug(f"Fetching enrollments for user_id {user_id}")
    return db.query(CourseEnrollment).filter(CourseEnrollment.user_id == user_id).order_by(CourseEnrollment.enrolled_at.desc()).all()

def get_enrollments_for_course(db: Session, course_id: int) -> List[CourseEnrollment]:
    return db.query(CourseEnrollment).filter(CourseEnrollment.course_id == course_id).all()

def unenroll_user(db: Session, user_id: int, course_id: int) -> None:
    """Removes the enrollment. Progress already recorded is kept."""
    enrollment = get_enrollment(db, user_id, course_id)
    if not enrollment:
        raise NotFoundError("Enrollment", message=f"User {user_id} is not enrolled in course {course_id}.")
    db.delete(enrollment)
    commit_or_rollback(db, f"unenroll user {user_id} from course {course_id}")
    logger.info(f"User {user_id} unenrolled from course {course_id}.")

# --- Badges ---
def create_badge(db: Session, badge_in: schemas.BadgeCreate) -> Badge:
    db_badge = Badge(**badge_in.model_dump())
    db.add(db_badge)
    commit_or_rollback(db, f"create badge '{badge_in.name}'")
    db.refresh(db_badge)
    logger.info(f"Badge '{db_badge.name}' (ID: {db_badge.id}) created.")
    return db_badge

def get_badge(db: Session, badge_id: int) -> Optional[Badge]:
    return db.query(Badge).filter(Badge.id == badge_id).first()

def get_badge_or_raise(db: Session, badge_id: int) -> Badge:
    db_badge = get_badge(db, badge_id)
    if not db_badge:
        logger.warning(f"Badge with ID {badge_id} not found.")
        raise NotFoundError("Badge", badge_id)
    return db_badge

def get_badges(db: Session) -> List[Badge]:
    return db.query(Badge).order_by(Badge.name).all()

def update_badge(db: Session, badge_id: int, badge_in: schemas.BadgeUpdate) -> Badge:
    db_badge = get_badge_or_raise(db, badge_id)
    update_db_object(db_badge, badge_in)
    commit_or_rollback(db, f"update badge {badge_id}")
    db.refresh(db_badge)
    return db_badge

def delete_badge(db: Session, badge_id: int) -> None:
    db_badge = get_badge_or_raise(db, badge_id)
    db.delete(db_badge)
    commit_or_rollback(db, f"delete badge {badge_id}")
    logger.info(f"Badge {badge_id} deleted.")

def award_badge(db: Session, user_id: int, badge_id: int) -> UserBadge:
    """Awards a badge once. The badge's XP is added on the first award only."""
    db_user = user_crud.get_user_or_raise(db, user_id)
    db_badge = get_badge_or_raise(db, badge_id)
    existing = db.query(UserBadge).filter(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id).first()
    if existing:
        logger.info(f"User {user_id} already holds badge {badge_id}.")
        return existing

    try:
        user_badge = UserBadge(user=db_user, badge=db_badge)
        db.add(user_badge)
        user_crud.add_xp(db, db_user, db_badge.xp_points)
        add_notification(
            db, user_id, "badge_awarded",
            title="Badge earned",
            message=f"You earned the '{db_badge.name}' badge.",
            extra_data={"badge_id": badge_id},
        )
    except Exception:
        db.rollback()
        raise
    commit_or_rollback(db, f"award badge {badge_id} to user {user_id}")
    db.refresh(user_badge)
    logger.info(f"Badge {badge_id} awarded to user {user_id} (+{db_badge.xp_points} XP).")
    return user_badge

def get_user_badges(db: Session, user_id: int) -> List[UserBadge]:
    return db.query(UserBadge).filter(UserBadge.user_id == user_id).order_by(UserBadge.earned_at.desc()).all()

# --- Notifications ---
def add_notification(
    db: Session,
    user_id: int,
    type: str,
    title: str,
    message: str,
    extra_data: Optional[Dict[str, Any]] = None
) -> Notification:
    """Queues a notification in the current transaction. Does not commit."""
    notification = Notification(user_id=user_id, type=type, title=title, message=message, extra_data=extra_data, read=False)
    db.add(notification)
    return notification

def create_notification(db: Session, notification_in: schemas.NotificationCreate) -> Notification:
    user_crud.get_user_or_raise(db, notification_in.user_id)
    notification = add_notification(db, **notification_in.model_dump())
    commit_or_rollback(db, f"notify user {notification_in.user_id}")
    db.refresh(notification)
    logger.info(f"Notification '{notification.type}' (ID: {notification.id}) created for user {notification.user_id}.")
    return notification

def get_notifications(db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

def mark_notification_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()
    if not notification:
        raise NotFoundError("Notification", notification_id)
    notification.read = True
    commit_or_rollback(db, f"mark notification {notification_id} read")
    db.refresh(notification)
    return notification

def mark_all_notifications_read(db: Session, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read.is_(False)
    ).update({Notification.read: True}, synchronize_session=False)
    commit_or_rollback(db, f"mark notifications read for user {user_id}")
    return updated

# --- Media ---
def register_media_file(db: Session, media_in: schemas.MediaFileCreate, uploaded_by: int) -> MediaFile:
    media = MediaFile(**media_in.model_dump(), uploaded_by=uploaded_by)
    db.add(media)
    commit_or_rollback(db, f"register media file '{media_in.filename}'")
    db.refresh(media)
    logger.info(f"Media file '{media.filename}' (ID: {media.id}) registered by user {uploaded_by}.")
    return media

def get_media_file_or_raise(db: Session, media_id: int) -> MediaFile:
    media = db.query(MediaFile).filter(MediaFile.id == media_id).first()
    if not media:
        raise NotFoundError("Media file", media_id)
    return media

def get_media_files(db: Session, uploaded_by: Optional[int] = None, skip: int = 0, limit: int = 100) -> List[MediaFile]:
    query = db.query(MediaFile)
    if uploaded_by is not None:
        query = query.filter(MediaFile.uploaded_by == uploaded_by)
    return query.order_by(MediaFile.created_at.desc(), MediaFile.id.desc()).offset(skip).limit(limit).all()

def delete_media_file(db: Session, media_id: int) -> None:
    media = get_media_file_or_raise(db, media_id)
    db.delete(media)
    commit_or_rollback(db, f"delete media file {media_id}")
    logger.info(f"Media file {media_id} deleted.")
