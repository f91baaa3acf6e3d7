# clinic/utils/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Iterable, Optional, Union
import uuid
import jwt
import bcrypt

from clinic.database import get_db
from clinic.config import settings
from clinic.models.all_models import User, Profile, UserRole, clinic_now

security = HTTPBearer(auto_error=False)

def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))

def create_access_token(data: Dict[str, str], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = clinic_now() + expires_delta
    else:
        expire = clinic_now() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_refresh_token(data: Dict[str, str], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT refresh token."""
    to_encode = data.copy()
    if expires_delta:
        expire = clinic_now() + expires_delta
    else:
        expire = clinic_now() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_token(token: str, token_type: str = "access") -> Dict:
    """Verify a JWT token and return its payload."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    if payload.get("type") != token_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token type, expected {token_type}"
        )
    return payload

def issue_tokens(user: User) -> Dict[str, str]:
    claims = {"sub": str(user.id), "email": user.email}
    if user.profile is not None:
        claims["role"] = user.profile.role.value
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token({"sub": str(user.id)}),
        "token_type": "bearer",
    }

# ================================
# AUTH CONTEXT
# ================================

@dataclass
class AuthContext:
    """The signed-in account and its staff profile, resolved once per request."""
    user: User
    profile: Optional[Profile]

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile else None

    @property
    def profile_id(self):
        return self.profile.id if self.profile else None

def has_role(profile: Optional[Profile], required_role: Union[UserRole, Iterable[UserRole]]) -> bool:
    """
    Capability check used by every role-gated route.

    `required_role` may be a single role or a collection of acceptable roles.
    An inactive or missing profile never satisfies a check.
    """
    if profile is None or not profile.is_active:
        return False
    if isinstance(required_role, UserRole):
        return profile.role == required_role
    return profile.role in set(required_role)

async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AuthContext:
    """Resolve the bearer token into an AuthContext or reject with 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )

    user = db.query(User).filter(User.id == parse_subject(user_id)).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    return AuthContext(user=user, profile=user.profile)

async def require_staff(
    ctx: AuthContext = Depends(get_auth_context)
) -> AuthContext:
    """
    Dependency for every clinic route: a signed-in user with an active staff profile.

    Usage:
    @router.get("/patients")
    async def list_patients(ctx: AuthContext = Depends(require_staff)):
        ...
    """
    if ctx.profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No staff profile linked to this account"
        )
    if not ctx.profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile is deactivated. Please contact an administrator."
        )
    return ctx

def require_role(*required_roles: UserRole):
    def role_checker(ctx: AuthContext = Depends(require_staff)) -> AuthContext:
        if not has_role(ctx.profile, required_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions. Required roles: " + ", ".join(role.value for role in required_roles)
            )
        return ctx
    return role_checker

# Admin role checker
require_admin = require_role(UserRole.ADMIN)

def parse_subject(value: str):
    """Turn a token `sub` claim back into a user id."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )
