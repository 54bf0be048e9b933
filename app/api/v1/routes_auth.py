# File: app/api/v1/routes_auth.py

"""
Auth API routes.

Login sets a signed session token in an HttpOnly cookie; the same token is
accepted as a Bearer header by every authenticated route.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.core.config import settings
from app.models.user import User
from app.schemas.user import LoginRequest, UserRead
from app.services.auth_service import authenticate_user, issue_session_token

router = APIRouter()


@router.post("/login", response_model=UserRead, summary="Log in with email and password")
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    user = authenticate_user(db, email=payload.email, password=payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    response.set_cookie(
        key=settings.session_cookie_name,
        value=issue_session_token(user),
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Clear the session cookie")
def logout():
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key=settings.session_cookie_name)
    return response


@router.get("/me", response_model=UserRead, summary="Current user")
def me(user: User = Depends(get_current_user)):
    return user
