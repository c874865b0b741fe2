from folio.web.routers.auth import router as auth_router
from folio.web.routers.health import router as health_router
from folio.web.routers.profile import router as profile_router

__all__ = [
    "auth_router",
    "health_router",
    "profile_router",
]
