from fastapi import APIRouter

from ums.api.profiles import profile_router
from ums.api.requests import admin_requests_router, manager_requests_router
from ums.api.users import admin_users_router, manager_users_router

api_router = APIRouter()
api_router.include_router(profile_router)
api_router.include_router(manager_requests_router)
api_router.include_router(manager_users_router)
api_router.include_router(admin_requests_router)
api_router.include_router(admin_users_router)
