from sqlalchemy import (
    Column, Integer, String, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint,
    Enum as SAEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import secrets

from vx_academy.core.config import settings
from vx_academy.core.database import Base
from vx_academy.models.enums import CertificateStatus, enum_values

def generate_certificate_number(user_id: int, course_id: int) -> str:
    """Generates a certificate number such as VX-12-345-9F2C11AB."""
    return f"{settings.CERTIFICATE_NUMBER_PREFIX}-{course_id}-{user_id}-{secrets.token_hex(4).upper()}"

class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    certificate_number = Column(String(64), nullable=False, index=True)
    issue_date = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    expiry_date = Column(TIMESTAMP(timezone=True), nullable=False)
    status = Column(SAEnum(CertificateStatus, name="certificate_status_enum", values_callable=enum_values), nullable=False, default=CertificateStatus.ACTIVE)

    # Relationships
    user = relationship("User", back_populates="certificates")
    course = relationship("Course", back_populates="issued_certificates")

    __table_args__ = (
        UniqueConstraint('certificate_number', name='uq_certificate_number'),
        UniqueConstraint('user_id', 'course_id', name='uq_user_course_certificate'), # One certificate per course
        CheckConstraint('expiry_date > issue_date', name='ck_certificate_expiry_after_issue'),
    )

    def __repr__(self):
        return f"<Certificate(id={self.id}, user_id={self.user_id}, course_id={self.course_id}, number='{self.certificate_number}')>"
