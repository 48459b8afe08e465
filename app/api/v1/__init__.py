"""
API v1 routers

app/api/v1/_init_.py
"""
from fastapi import APIRouter

# Create the main API router
api_router = APIRouter()

# Import individual routers
from app.api.v1.auth import router as auth_router
from app.api.v1.songs import router as songs_router
from app.api.v1.imports import router as imports_router
from app.api.v1.categories import router as categories_router
from app.api.v1.users import router as users_router
from app.api.v1.invite import router as invite_router


# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])
api_router.include_router(songs_router, prefix="/songs", tags=["songs"])
api_router.include_router(imports_router, prefix="/imports", tags=["imports"])
api_router.include_router(categories_router, prefix="/categories", tags=["categories"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(invite_router, prefix="/invite", tags=["users"])
