# This file makes the 'routes' directory a Python package.

from fastapi import APIRouter

from vx_academy.core.config import settings

from .training_routes import training_area_router, module_router, course_router
from .unit_routes import unit_router, course_unit_router, learning_block_router
from .assessment_routes import router as assessment_router, question_router
from .progress_routes import router as progress_router
from .engagement_routes import (
    enrollment_router, certificate_router, badge_router, notification_router, media_router
)
from .user_routes import router as user_router
from .organization_routes import (
    asset_router, sub_asset_router, organization_router, sub_organization_router
)
from .role_routes import (
    role_category_router, role_router, seniority_level_router, assignment_router
)
from .report_routes import router as report_router

api_router_v1 = APIRouter(prefix=settings.API_V1_STR)

# Content hierarchy
api_router_v1.include_router(training_area_router)
api_router_v1.include_router(module_router)
api_router_v1.include_router(course_router)
api_router_v1.include_router(unit_router)
api_router_v1.include_router(course_unit_router)
api_router_v1.include_router(learning_block_router)

# Assessments and learner progress
api_router_v1.include_router(assessment_router)
api_router_v1.include_router(question_router)
api_router_v1.include_router(progress_router)
api_router_v1.include_router(enrollment_router)
api_router_v1.include_router(certificate_router)
api_router_v1.include_router(badge_router)
api_router_v1.include_router(notification_router)
api_router_v1.include_router(media_router)

# People and organization
api_router_v1.include_router(user_router)
api_router_v1.include_router(organization_router)
api_router_v1.include_router(sub_organization_router)
api_router_v1.include_router(asset_router)
api_router_v1.include_router(sub_asset_router)
api_router_v1.include_router(role_category_router)
api_router_v1.include_router(role_router)
api_router_v1.include_router(seniority_level_router)
api_router_v1.include_router(assignment_router)

# Admin reporting
api_router_v1.include_router(report_router)

__all__ = [
    "api_router_v1" # Export the main router
]
