"""API routers."""

from jolly_auth.routers.users import router as users_router

__all__ = ["users_router"]
