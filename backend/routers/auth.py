# routers/auth.py — Token issue and session introspection
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from auth import (
    ACCESS_TOKEN_EXPIRE_MINUTES, AuthService, UserLogin, TokenResponse,
    get_current_user, CurrentUser,
)
from database import get_db_session
from models import User, UserRole

logger = logging.getLogger("opsdesk.auth")

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _build_token_response(user_obj: User) -> TokenResponse:
    """Build token response from a user ORM instance"""
    return TokenResponse(
        access_token=AuthService.create_token_for(user_obj),
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user={
            "id": user_obj.id,
            "email": user_obj.email,
            "name": user_obj.name or "",
            "companyId": user_obj.company_id,
            "role": user_obj.role.value if isinstance(user_obj.role, UserRole) else user_obj.role,
        },
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db_session),
):
    """Authenticate and receive an access token"""
    user = await AuthService.authenticate_user(credentials.email, credentials.password, db)
    if not user:
        logger.info(f"Failed login for {credentials.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _build_token_response(user)


@router.get("/me")
async def get_current_user_info(user: CurrentUser = Depends(get_current_user)):
    """Get current authenticated user information"""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "companyId": user.company_id,
        "role": user.role,
        "isActive": user.is_active,
    }
