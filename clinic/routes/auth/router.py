# clinic/routes/auth/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from clinic.database import get_db
from clinic.config import settings
from clinic.models.all_models import User, Profile, UserRole, clinic_now
from clinic.routes.auth.schemas import (
    UserSignupRequest,
    UserLoginRequest,
    UserLoginResponse,
    RefreshTokenRequest,
    CurrentUserResponse,
    ProfileResponse
)
from clinic.utils.auth import (
    AuthContext,
    create_access_token,
    verify_token,
    hash_password,
    verify_password,
    issue_tokens,
    get_auth_context,
    parse_subject
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

def _login_response(user: User, message: str) -> UserLoginResponse:
    return UserLoginResponse(
        **issue_tokens(user),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        profile=ProfileResponse.model_validate(user.profile) if user.profile else None,
        message=message
    )

# ================================
# SIGNUP / LOGIN
# ================================

@router.post("/signup", response_model=UserLoginResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserSignupRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new staff account.
    The linked profile gets the default signup role; an admin can change it later.
    """
    email = user_data.email.lower()

    if db.query(User).filter(User.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )

    try:
        new_user = User(email=email, password=hash_password(user_data.password))
        new_user.profile = Profile(
            email=email,
            full_name=user_data.full_name,
            role=UserRole(settings.DEFAULT_SIGNUP_ROLE)
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
    except Exception as e:
        db.rollback()
        logger.exception("Error creating account for %s", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating account: {str(e)}"
        )

    logger.info("New account registered: %s", email)
    return _login_response(new_user, "Account created successfully")

@router.post("/login", response_model=UserLoginResponse)
async def login(
    login_data: UserLoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return access tokens.
    """
    user = db.query(User).filter(User.email == login_data.email.lower()).first()

    if not user or not verify_password(login_data.password, user.password):
        logger.info("Failed login attempt for %s", login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if not user.is_active or (user.profile is not None and not user.profile.is_active):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated. Please contact an administrator."
        )

    user.last_login_at = clinic_now()
    db.commit()
    db.refresh(user)

    logger.info("User %s signed in", user.email)
    return _login_response(user, "Login successful")

@router.post("/refresh-token", response_model=dict)
async def refresh_token(
    token_data: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    """
    Refresh access token using refresh token.
    """
    payload = verify_token(token_data.refresh_token, token_type="refresh")
    user_id = payload.get("sub")

    user = db.query(User).filter(User.id == parse_subject(user_id)).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    claims = {"sub": str(user.id), "email": user.email}
    if user.profile is not None:
        claims["role"] = user.profile.role.value

    return {
        "access_token": create_access_token(claims),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    }

@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    ctx: AuthContext = Depends(get_auth_context)
):
    """
    Logout user (client should discard tokens).
    """
    logger.info("User %s signed out", ctx.user.email)
    return {
        "message": "Logged out successfully",
        "logged_out": True
    }

# ================================
# PROFILE ENDPOINTS
# ================================

@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_profile(
    ctx: AuthContext = Depends(get_auth_context)
):
    """
    Get the signed-in account together with its staff profile.
    """
    return ctx.user

