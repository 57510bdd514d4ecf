from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, case
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from vx_academy.core.config import settings
from vx_academy.models.enums import CertificateStatus, ProgressStatus, UserType
from vx_academy.models.user_model import User, SubAdminDetail
from vx_academy.models.organization_model import Organization, SubOrganization
from vx_academy.models.training_model import TrainingArea, Course
from vx_academy.models.progress_model import UserCourseProgress, UserModuleProgress, UserTrainingAreaProgress
from vx_academy.models.certificate_model import Certificate
from vx_academy.schemas import report_schema as schemas
from vx_academy.crud import user_crud, training_crud

import logging
logger = logging.getLogger(__name__)

def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0

def _progress_stats(db: Session, model, key_column, key_value) -> Tuple[int, float, int]:
    """(users holding a row, mean completion over those rows, completed rows) for one entity."""
    users, average, completed = db.query(
        func.count(model.id),
        func.avg(model.completion_percentage),
        func.sum(case((model.status == ProgressStatus.COMPLETED, 1), else_=0)),
    ).filter(key_column == key_value).one()
    return users or 0, round(float(average or 0.0), 2), int(completed or 0)

def get_dashboard_stats(db: Session) -> schemas.DashboardStats:
    logger.debug("Calculating dashboard stats.")
    average_completion = db.query(func.avg(UserCourseProgress.completion_percentage)).scalar()
    return schemas.DashboardStats(
        total_users=user_crud.count_users(db),
        total_frontliners=user_crud.count_users(db, {"user_type": UserType.USER}),
        total_sub_admins=user_crud.count_users(db, {"user_type": UserType.SUB_ADMIN}),
        total_organizations=_count(db, Organization.id),
        total_sub_organizations=_count(db, SubOrganization.id),
        total_training_areas=_count(db, TrainingArea.id),
        total_courses=_count(db, Course.id),
        certificates_issued=_count(db, Certificate.id),
        average_course_completion=round(float(average_completion or 0.0), 2),
    )

def get_training_area_report(db: Session, training_area_id: int) -> schemas.TrainingAreaReport:
    """
    Completion for a training area broken down by module and course.
    Averages only cover users who hold a progress row for the entity.
    """
    logger.debug(f"Building report for training area {training_area_id}")
    area = training_crud.get_training_area_or_raise(db, training_area_id)

    module_rows: List[schemas.ModuleReportRow] = []
    for module in training_crud.get_modules(db, training_area_id=area.id, limit=None):
        course_rows = []
        for course in training_crud.get_courses(db, module_id=module.id, limit=None):
            users, average, completed = _progress_stats(db, UserCourseProgress, UserCourseProgress.course_id, course.id)
            course_rows.append(schemas.CourseReportRow(
                course_id=course.id,
                course_name=course.name,
                users_with_progress=users,
                average_completion=average,
                completed_count=completed,
            ))
        users, average, completed = _progress_stats(db, UserModuleProgress, UserModuleProgress.module_id, module.id)
        module_rows.append(schemas.ModuleReportRow(
            module_id=module.id,
            module_name=module.name,
            users_with_progress=users,
            average_completion=average,
            completed_count=completed,
            courses=course_rows,
        ))

    users, average, completed = _progress_stats(db, UserTrainingAreaProgress, UserTrainingAreaProgress.training_area_id, area.id)
    return schemas.TrainingAreaReport(
        training_area_id=area.id,
        training_area_name=area.name,
        users_with_progress=users,
        average_completion=average,
        completed_count=completed,
        modules=module_rows,
    )

def get_certificate_report(db: Session) -> schemas.CertificateReport:
    logger.debug("Building certificate report.")
    by_status: Dict[str, int] = {status.value: 0 for status in CertificateStatus}
    for status, count in db.query(Certificate.status, func.count(Certificate.id)).group_by(Certificate.status).all():
        by_status[CertificateStatus(status).value] = count

    by_course = [
        schemas.CourseCertificateCount(course_id=course_id, course_name=course_name, issued=issued)
        for course_id, course_name, issued in db.query(Course.id, Course.name, func.count(Certificate.id))
        .join(Certificate, Certificate.course_id == Course.id)
        .group_by(Course.id, Course.name)
        .order_by(Course.name)
        .all()
    ]
    return schemas.CertificateReport(total=sum(by_status.values()), by_status=by_status, by_course=by_course)

def get_users_report(db: Session, filters: Optional[schemas.UsersReportFilters] = None) -> List[schemas.UserReportRow]:
    """Per-user XP, completed courses and certificate count."""
    filter_dict = filters.model_dump(exclude_none=True) if filters else {}
    logger.debug(f"Building users report with filters: {filter_dict}")

    completed_courses = dict(
        db.query(UserCourseProgress.user_id, func.count(UserCourseProgress.id))
        .filter(UserCourseProgress.status == ProgressStatus.COMPLETED)
        .group_by(UserCourseProgress.user_id)
        .all()
    )
    certificates = dict(
        db.query(Certificate.user_id, func.count(Certificate.id)).group_by(Certificate.user_id).all()
    )

    users = user_crud._apply_user_filters(db.query(User), filter_dict).order_by(User.last_name, User.first_name, User.id).all()
    return [
        schemas.UserReportRow(
            user_id=user.id,
            full_name=user.full_name,
            email=user.email,
            user_type=user.user_type,
            organization=user.organization,
            asset=user.asset,
            xp=user.xp or 0,
            completed_courses=completed_courses.get(user.id, 0),
            certificates=certificates.get(user.id, 0),
        )
        for user in users
    ]

def get_organizations_report(db: Session, now: Optional[datetime] = None) -> List[schemas.OrganizationReportRow]:
    """
    Frontliner and sub-admin figures per registered organization, with its
    sub-organizations. Users are matched to an organization by name.
    """
    now = now or datetime.now(timezone.utc)
    active_since = now - timedelta(days=settings.ACTIVE_USER_WINDOW_DAYS)
    logger.debug(f"Building organizations report (active since {active_since.isoformat()})")

    sub_admins = {
        organization: (count, int(declared or 0))
        for organization, count, declared in db.query(
            User.organization, func.count(User.id), func.sum(SubAdminDetail.total_frontliners)
        )
        .join(SubAdminDetail, SubAdminDetail.user_id == User.id)
        .filter(User.user_type == UserType.SUB_ADMIN)
        .group_by(User.organization)
        .all()
    }
    frontliners = db.query(User.organization, func.count(User.id)).filter(User.user_type == UserType.USER)
    registered = dict(frontliners.group_by(User.organization).all())
    active = dict(frontliners.filter(User.last_login >= active_since).group_by(User.organization).all())

    organizations = (
        db.query(Organization)
        .options(joinedload(Organization.sub_organizations))
        .order_by(Organization.name)
        .all()
    )
    rows = []
    for organization in organizations:
        admin_count, declared = sub_admins.get(organization.name, (0, 0))
        active_count = active.get(organization.name, 0)
        rows.append(schemas.OrganizationReportRow(
            organization_id=organization.id,
            organization_name=organization.name,
            sub_admins=admin_count,
            declared_frontliners=declared,
            registered_frontliners=registered.get(organization.name, 0),
            active_frontliners=active_count,
            status="active" if active_count else "inactive",
            sub_organizations=[
                schemas.SubOrganizationReportRow(
                    sub_organization_id=sub.id,
                    name=sub.name,
                    asset=sub.asset.name if sub.asset else None,
                    sub_asset=sub.sub_asset.name if sub.sub_asset else None,
                )
                for sub in organization.sub_organizations
            ],
        ))
    return rows
