# ============================================================================
# app/api/v1/dashboard/availability.py
# Availability rules, overrides and slot lookup - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.api.dependencies import CurrentUser, get_current_user
from app.config.database import get_db
from app.schemas.availability import (
    AvailabilityRuleCreate,
    AvailabilityRuleUpdate,
    AvailabilityRuleResponse,
    AvailabilityOverrideCreate,
    AvailabilityOverrideUpdate,
    AvailabilityOverrideResponse,
    AvailableSlotsResponse,
)
from app.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/availability", tags=["availability"])


# ============================================================================
# Rules
# ============================================================================

@router.get("/rules", response_model=List[AvailabilityRuleResponse])
async def list_rules(
        user_id: Optional[UUID] = Query(None, alias="userId", description="Agent to list, defaults to you"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Weekly availability rules of an agent, ordered by weekday and start time."""
    return AvailabilityService.list_rules(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        user_id
    )


@router.post("/rules", response_model=AvailabilityRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
        request: AvailabilityRuleCreate,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.create_rule(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        request
    )


@router.put("/rules/{rule_id}", response_model=AvailabilityRuleResponse)
async def update_rule(
        request: AvailabilityRuleUpdate,
        rule_id: UUID = Path(..., description="The rule ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.update_rule(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        rule_id,
        request
    )


@router.delete("/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(
        rule_id: UUID = Path(..., description="The rule ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    AvailabilityService.delete_rule(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        rule_id
    )


# ============================================================================
# Overrides
# ============================================================================

@router.get("/overrides", response_model=List[AvailabilityOverrideResponse])
async def list_overrides(
        user_id: Optional[UUID] = Query(None, alias="userId"),
        start_date: Optional[str] = Query(None, alias="startDate", description="YYYY-MM-DD"),
        end_date: Optional[str] = Query(None, alias="endDate", description="YYYY-MM-DD"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.list_overrides(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        target_user_id=user_id,
        start_date=start_date,
        end_date=end_date
    )


@router.post("/overrides", response_model=AvailabilityOverrideResponse, status_code=status.HTTP_201_CREATED)
async def create_override(
        request: AvailabilityOverrideCreate,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Block a date or replace its hours with a custom window."""
    return AvailabilityService.create_override(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        request
    )


@router.put("/overrides/{override_id}", response_model=AvailabilityOverrideResponse)
async def update_override(
        request: AvailabilityOverrideUpdate,
        override_id: UUID = Path(..., description="The override ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.update_override(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        override_id,
        request
    )


@router.delete("/overrides/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_override(
        override_id: UUID = Path(..., description="The override ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    AvailabilityService.delete_override(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        override_id
    )


# ============================================================================
# Slots
# ============================================================================

@router.get("/slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
        start_date: str = Query(..., alias="startDate", description="First day, YYYY-MM-DD"),
        end_date: str = Query(..., alias="endDate", description="Last day (inclusive), YYYY-MM-DD"),
        slot_duration: Optional[int] = Query(None, alias="slotDuration", description="Minutes, defaults to 60"),
        user_id: Optional[UUID] = Query(None, alias="userId"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Open slots per day for an agent.
    The range may span at most 14 days.
    """
    return AvailabilityService.get_available_slots(
        db,
        current_user.user_id,
        current_user.is_admin,
        current_user.organization_id,
        start_date=start_date,
        end_date=end_date,
        slot_duration=slot_duration,
        target_user_id=user_id
    )
