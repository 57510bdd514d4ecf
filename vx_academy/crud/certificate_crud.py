from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from datetime import datetime, timedelta, timezone

from vx_academy.core.config import settings
from vx_academy.core.exceptions import NotFoundError, ValidationError
from vx_academy.models.enums import CertificateStatus
from vx_academy.models.certificate_model import Certificate, generate_certificate_number
from vx_academy.schemas.engagement_schema import CertificateVerification
from vx_academy.crud.crud_utils import commit_or_rollback
from vx_academy.crud import training_crud, user_crud

logger = logging.getLogger(__name__)

def _unused_certificate_number(db: Session, user_id: int, course_id: int) -> str:
    number = generate_certificate_number(user_id, course_id)
    while get_certificate_by_number(db, number) is not None:
        number = generate_certificate_number(user_id, course_id)
    return number

def issue_certificate(db: Session, user_id: int, course_id: int, commit: bool = True) -> Certificate:
    """
    Issues a certificate for a completed course. Returns the existing certificate
    when the user already holds one for the course.
    """
    logger.debug(f"Attempting to issue certificate for user_id {user_id}, course_id {course_id}")
    user_crud.get_user_or_raise(db, user_id)
    training_crud.get_course_or_raise(db, course_id)

    existing_certificate = get_certificate_for_user_course(db, user_id, course_id)
    if existing_certificate:
        logger.info(f"Certificate already exists for user_id {user_id}, course_id {course_id} (ID: {existing_certificate.id}).")
        return existing_certificate

    issued_at = datetime.now(timezone.utc)
    new_certificate = Certificate(
        user_id=user_id,
        course_id=course_id,
        certificate_number=_unused_certificate_number(db, user_id, course_id),
        issue_date=issued_at,
        expiry_date=issued_at + timedelta(days=settings.CERTIFICATE_VALIDITY_DAYS),
        status=CertificateStatus.ACTIVE,
    )
    db.add(new_certificate)
    if commit:
        commit_or_rollback(db, f"issue certificate for user {user_id} on course {course_id}")
        db.refresh(new_certificate)
    else:
        db.flush()
    logger.info(f"Certificate {new_certificate.certificate_number} issued to user_id {user_id} for course_id {course_id}.")
    return new_certificate

def get_certificate_by_id(db: Session, certificate_id: int) -> Optional[Certificate]:
    logger.debug(f"Fetching certificate by ID: {certificate_id}")
    return db.query(Certificate).filter(Certificate.id == certificate_id).first()

def get_certificate_or_raise(db: Session, certificate_id: int) -> Certificate:
    certificate = get_certificate_by_id(db, certificate_id)
    if not certificate:
        logger.warning(f"Certificate with ID {certificate_id} not found.")
        raise NotFoundError("Certificate", certificate_id)
    return certificate

def get_certificate_by_number(db: Session, certificate_number: str) -> Optional[Certificate]:
    """Fetches a certificate by its unique certificate number."""
    logger.debug(f"Fetching certificate by number: {certificate_number}")
    return db.query(Certificate).filter(Certificate.certificate_number == certificate_number).first()

def get_certificate_for_user_course(db: Session, user_id: int, course_id: int) -> Optional[Certificate]:
    return db.query(Certificate).filter(
        Certificate.user_id == user_id,
        Certificate.course_id == course_id
    ).first()

def get_certificates_for_user(db: Session, user_id: int, skip: int = 0, limit: int = 100) -> List[Certificate]:
    """Fetches all certificates issued to a specific user, newest first."""
    logger.debug(f"Fetching certificates for user_id {user_id} with skip: {skip}, limit: {limit}")
    return db.query(Certificate).filter(Certificate.user_id == user_id).order_by(Certificate.issue_date.desc()).offset(skip).limit(limit).all()

def get_certificates_for_course(db: Session, course_id: int, skip: int = 0, limit: int = 100) -> List[Certificate]:
    """Fetches all certificates issued for a specific course, newest first."""
    logger.debug(f"Fetching certificates for course_id {course_id} with skip: {skip}, limit: {limit}")
    return db.query(Certificate).filter(Certificate.course_id == course_id).order_by(Certificate.issue_date.desc()).offset(skip).limit(limit).all()

def _as_aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)

def verify_certificate(db: Session, certificate_number: str, now: Optional[datetime] = None) -> CertificateVerification:
    """Public verification view of a certificate. A certificate is valid while active and unexpired."""
    certificate = get_certificate_by_number(db, certificate_number)
    if not certificate:
        logger.warning(f"Verification failed: certificate {certificate_number} not found.")
        raise NotFoundError("Certificate", message=f"Certificate '{certificate_number}' not found.")
    now = now or datetime.now(timezone.utc)
    valid = certificate.status == CertificateStatus.ACTIVE and _as_aware(certificate.expiry_date) > now
    return CertificateVerification(
        certificate_number=certificate.certificate_number,
        valid=valid,
        status=certificate.status,
        user_name=certificate.user.full_name,
        course_name=certificate.course.name,
        issue_date=certificate.issue_date,
        expiry_date=certificate.expiry_date,
    )

def revoke_certificate(db: Session, certificate_id: int) -> Certificate:
    certificate = get_certificate_or_raise(db, certificate_id)
    if certificate.status == CertificateStatus.REVOKED:
        raise ValidationError.for_field("status", f"Certificate {certificate.certificate_number} is already revoked.")
    certificate.status = CertificateStatus.REVOKED
    commit_or_rollback(db, f"revoke certificate {certificate_id}")
    db.refresh(certificate)
    logger.info(f"Certificate {certificate.certificate_number} (ID: {certificate_id}) revoked.")
    return certificate

def expire_certificates(db: Session, now: Optional[datetime] = None) -> int:
    """Marks active certificates whose expiry date has passed as expired. Returns how many changed."""
    now = now or datetime.now(timezone.utc)
    active = db.query(Certificate).filter(Certificate.status == CertificateStatus.ACTIVE).all()
    expired = [c for c in active if _as_aware(c.expiry_date) <= now]
    for certificate in expired:
        certificate.status = CertificateStatus.EXPIRED
    if expired:
        commit_or_rollback(db, "expire certificates")
        logger.info(f"{len(expired)} certificate(s) marked expired.")
    return len(expired)
