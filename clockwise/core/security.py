# clockwise/core/security.py
# Verifies the auth provider's access tokens and provides the role-checking dependencies.
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from clockwise.core.config import settings
from clockwise.core.exceptions import AuthenticationError
from clockwise.db import models, session
from clockwise.services.roles import Role, to_display_role

logger = logging.getLogger(__name__)


@dataclass
class CurrentUser:
    id: str
    email: Optional[str]
    role: Optional[Role]
    organization_id: Optional[str]
    department_id: Optional[str]
    full_name: Optional[str] = None


def decode_access_token(token: str) -> dict:
    """Returns the token claims, raising AuthenticationError for anything unusable."""
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as exc:
        raise AuthenticationError("Unauthorized") from exc
    if not payload.get("sub"):
        raise AuthenticationError("Unauthorized")
    return payload


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Unauthorized")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise AuthenticationError("Unauthorized")
    return token


def load_current_user(db: Session, claims: dict) -> CurrentUser:
    user_id = claims["sub"]
    role_row = db.query(models.UserRole).filter(models.UserRole.user_id == user_id).first()
    profile = db.query(models.Profile).filter(models.Profile.id == user_id).first()
    return CurrentUser(
        id=user_id,
        email=claims.get("email") or None,
        role=to_display_role(role_row.role) if role_row else None,
        organization_id=role_row.organization_id if role_row else None,
        department_id=role_row.department_id if role_row else None,
        full_name=profile.full_name if profile else None,
    )


# --- Role-Checking Dependencies ---
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(session.get_db),
) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        claims = decode_access_token(credentials.credentials)
    except AuthenticationError:
        raise credentials_exception
    return load_current_user(db, claims)


def get_current_org_admin(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.role != Role.ORG_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Requires organization admin role")
    return current_user


def get_current_manager_user(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.role != Role.MANAGER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Requires manager role")
    return current_user


def get_current_member_user(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.role != Role.MEMBER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Requires member role")
    return current_user


def get_current_report_viewer(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.role not in (Role.ORG_ADMIN, Role.PROGRAM_MANAGER):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions for this resource")
    return current_user
