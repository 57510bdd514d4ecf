# Business logic shared by the crud layer and the routers.

from . import email_service
from . import rollup
from . import table_filter

__all__ = [
    "email_service",
    "rollup",
    "table_filter",
]
