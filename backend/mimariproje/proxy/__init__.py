"""Server-side proxy between browser callers and the backend service."""

from .backend import BackendClient
from .health_routes import configure_health_router
from .models import ErrorReceipt, ErrorReport, HealthStatus, ProjectForm
from .project_routes import configure_project_router
from .report_routes import configure_report_router
from .transform import default_specifications, normalize_project, normalize_project_detail
from .user_routes import configure_user_router

__all__ = [
    "BackendClient",
    "ErrorReceipt",
    "ErrorReport",
    "HealthStatus",
    "ProjectForm",
    "configure_health_router",
    "configure_project_router",
    "configure_report_router",
    "configure_user_router",
    "default_specifications",
    "normalize_project",
    "normalize_project_detail",
]
