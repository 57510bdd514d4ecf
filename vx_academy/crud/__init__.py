# This file makes the 'crud' directory a Python package.
# Modules are listed in dependency order: later modules import earlier ones.

from . import crud_utils
from . import user_crud
from . import organization_crud
from . import training_crud
from . import role_crud
from . import progress_crud
from . import certificate_crud
from . import engagement_crud
from . import assessment_crud
from . import report_crud

__all__ = [
    "crud_utils",
    "user_crud",
    "organization_crud",
    "training_crud",
    "role_crud",
    "progress_crud",
    "certificate_crud",
    "engagement_crud",
    "assessment_crud",
    "report_crud",
]
