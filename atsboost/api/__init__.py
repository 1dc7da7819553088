"""REST routers, mounted under /api by ``create_app``."""

from .admin import router as admin_router
from .ats import router as ats_router
from .auth import router as auth_router
from .employers import router as employers_router
from .health import router as health_router
from .job_matching import router as job_matching_router
from .newsletter import router as newsletter_router
from .plans import router as plans_router
from .upload import router as upload_router
from .whatsapp import router as whatsapp_router

routers = [
    health_router,
    auth_router,
    admin_router,
    upload_router,
    ats_router,
    newsletter_router,
    whatsapp_router,
    plans_router,
    employers_router,
    job_matching_router,
]

__all__ = ["routers"]
