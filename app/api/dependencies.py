# ============================================================================
# FILE: app/api/dependencies.py
# Caller identity from the bearer token and service wiring
# ============================================================================
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import settings
from app.services.appointment.appointment_service import AppointmentService
from app.services.appointment.lead_assigner import DatabaseLeadAssigner
from app.services.appointment.notifier import CeleryVisitInviteNotifier

# ============================================================================
# Security Schemes
# ============================================================================

jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Access token issued by the identity service"
)


@dataclass
class CurrentUser:
    """Authenticated caller as asserted by the access token"""
    user_id: UUID
    organization_id: UUID
    roles: List[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return settings.ADMIN_ROLE in self.roles


# ============================================================================
# JWT Token Functions
# ============================================================================

def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _uuid_claim(payload: dict, claim: str) -> Optional[UUID]:
    value: Optional[str] = payload.get(claim)
    try:
        return UUID(str(value)) if value else None
    except ValueError:
        pass
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"Invalid '{claim}' claim in token",
        headers={"WWW-Authenticate": "Bearer"},
    )


# ============================================================================
# JWT Authentication Dependencies
# ============================================================================

async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security)
) -> CurrentUser:
    """
    Dependency resolving the caller from the JWT access token.

    The token must carry `sub` (user id) and `org` (organization id);
    `roles` is optional.

    Raises:
        HTTPException 401: If the token is invalid or a claim is missing
    """
    payload = verify_access_token(credentials.credentials)

    user_id = _uuid_claim(payload, "sub")
    organization_id = _uuid_claim(payload, "org")
    if user_id is None or organization_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]

    return CurrentUser(user_id=user_id, organization_id=organization_id, roles=list(roles))


# ============================================================================
# Services
# ============================================================================

def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    return AppointmentService(
        lead_assigner=DatabaseLeadAssigner(db),
        notifier=CeleryVisitInviteNotifier()
    )
