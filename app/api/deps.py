#app/api/deps.py

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from app.core.config import settings
from app.core.database import get_database
from app.services.catalog import SongCatalog
from app.services.identity_admin import IdentityAdmin
from bson import ObjectId

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")

def get_catalog() -> SongCatalog:
    """Catalog data access bound to the current database"""
    return SongCatalog(get_database())

def get_identity_admin() -> IdentityAdmin:
    return IdentityAdmin(get_database())

async def get_current_user(token: str = Depends(oauth2_scheme)):
    """Get current authenticated user"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None or not ObjectId.is_valid(user_id):
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    return user_id

async def get_current_admin(current_user: str = Depends(get_current_user)):
    """Verify the user holds an active admin profile"""
    db = get_database()
    profile = await db.profiles.find_one({"_id": ObjectId(current_user)})

    if not profile or not profile.get("is_admin", False):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    if profile.get("deactivated") or profile.get("banned"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return current_user
