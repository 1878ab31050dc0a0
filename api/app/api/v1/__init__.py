"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, languages, dictionary, user_dictionary, lists, user_lists, practice, stats,
    admin_dictionary, admin_lists, admin_media, admin_users
)

api_router = APIRouter()

# Each router defines its own prefix
api_router.include_router(auth.router)
api_router.include_router(languages.router)
api_router.include_router(dictionary.router)
api_router.include_router(user_dictionary.router)
api_router.include_router(lists.router)
api_router.include_router(user_lists.router)
api_router.include_router(practice.router)
api_router.include_router(stats.router)
api_router.include_router(admin_dictionary.router)
api_router.include_router(admin_lists.router)
api_router.include_router(admin_media.router)
api_router.include_router(admin_users.router)
