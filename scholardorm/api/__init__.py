"""API route package: imports all routers for main.py."""

from scholardorm.api.health import router as health_router  # noqa: F401
from scholardorm.api.progress import router as progress_router  # noqa: F401
from scholardorm.api.courses import router as courses_router  # noqa: F401
from scholardorm.api.students import router as students_router  # noqa: F401
from scholardorm.api.admin import router as admin_router  # noqa: F401
from scholardorm.api.enrollments import router as enrollments_router  # noqa: F401
