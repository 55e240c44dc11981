"""
Authentication API endpoints.
"""

from fastapi import APIRouter, HTTPException, status, Depends
from typing import Optional

from ..models import SessionMarker, Token, User, UserCreate
from ..services import EmailAlreadyRegistered, Services, get_services

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, services: Services = Depends(get_services)):
    """
    Register a new user.

    Raises:
        HTTPException: 400 if the email is already registered
    """
    try:
        return await services.auth.register(user_data.email, user_data.password)
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )


@router.post("/login", response_model=Token)
async def login(credentials: UserCreate, services: Services = Depends(get_services)):
    """Sign in and get an access token. Wrong credentials yield 401."""
    return await services.auth.sign_in(credentials.email, credentials.password)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(services: Services = Depends(get_services)):
    """Sign out: remove the session marker and clear cached sessions."""
    await services.auth.sign_out()


@router.get("/session", response_model=Optional[SessionMarker])
async def current_session(services: Services = Depends(get_services)):
    """The signed-in session marker, or null."""
    return await services.auth.current_session()
