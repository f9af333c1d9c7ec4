# ============================================================================
# app/services/authorization.py
# Ownership rule shared by rules, overrides and appointments
# ============================================================================
from typing import Optional
from uuid import UUID

from app.core.exceptions import ForbiddenError


class AuthorizationGuard:
    """Stateless predicates deciding who may read or mutate an owned resource."""

    @staticmethod
    def can_manage(is_admin: bool, owner_id: UUID, caller_id: UUID) -> bool:
        return is_admin or owner_id == caller_id

    @staticmethod
    def ensure_can_manage(is_admin: bool, owner_id: UUID, caller_id: UUID, message: str) -> None:
        if not AuthorizationGuard.can_manage(is_admin, owner_id, caller_id):
            raise ForbiddenError(message)

    @staticmethod
    def resolve_target_user(
            caller_id: UUID,
            is_admin: bool,
            target_user_id: Optional[UUID],
            message: str = "not authorized to manage availability for this user"
    ) -> UUID:
        """Default to the caller; only admins may act on behalf of someone else."""
        if target_user_id is None:
            return caller_id
        AuthorizationGuard.ensure_can_manage(is_admin, target_user_id, caller_id, message)
        return target_user_id
