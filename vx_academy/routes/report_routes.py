from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import get_current_admin_user
from vx_academy.models.enums import UserType
from vx_academy.models.user_model import User
from vx_academy.schemas import report_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse
from vx_academy.crud import report_crud as crud

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reports", tags=["Reports"])

@router.get("/dashboard", response_model=ApiResponse[schemas.DashboardStats])
def read_dashboard_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    """
    Platform-wide totals for the admin dashboard.
    """
    logger.info(f"User {current_user.email} requested dashboard stats.")
    return ApiResponse(data=crud.get_dashboard_stats(db))

@router.get("/training-areas/{training_area_id}", response_model=ApiResponse[schemas.TrainingAreaReport])
def read_training_area_report(
    training_area_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return ApiResponse(data=crud.get_training_area_report(db, training_area_id))

@router.get("/certificates", response_model=ApiResponse[schemas.CertificateReport])
def read_certificate_report(db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    return ApiResponse(data=crud.get_certificate_report(db))

@router.get("/users", response_model=ApiResponse[List[schemas.UserReportRow]])
def read_users_report(
    organization: Optional[str] = Query(None),
    asset: Optional[str] = Query(None),
    user_type: Optional[UserType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    filters = schemas.UsersReportFilters(organization=organization, asset=asset, user_type=user_type)
    return ApiResponse(data=crud.get_users_report(db, filters))

@router.get("/organizations", response_model=ApiResponse[List[schemas.OrganizationReportRow]])
def read_organizations_report(db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    """
    Registered organizations with sub-admin, frontliner and activity counts.
    """
    return ApiResponse(data=crud.get_organizations_report(db))
