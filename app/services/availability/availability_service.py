# ============================================================================
# app/services/availability/availability_service.py
# Availability rule / override management and slot lookup
# ============================================================================
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID, uuid4
import logging

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import BadRequestError
from app.models.availability import AvailabilityRule, AvailabilityOverride
from app.repositories.appointment_repository import AppointmentStore
from app.repositories.availability_repository import RuleStore, OverrideStore
from app.schemas.availability import (
    AvailabilityRuleCreate,
    AvailabilityRuleUpdate,
    AvailabilityRuleResponse,
    AvailabilityOverrideCreate,
    AvailabilityOverrideUpdate,
    AvailabilityOverrideResponse,
    AvailableSlotsResponse,
)
from app.services.authorization import AuthorizationGuard
from app.services.availability import slot_generator
from app.utils.time_utils import (
    DATE_FORMAT,
    format_time_of_day,
    is_valid_timezone,
    parse_date,
    parse_optional_date,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)
settings = get_settings()

END_AFTER_START = "endTime must be after startTime"


class AvailabilityService:
    """Manages an agent's weekly rules and date overrides, and computes open slots."""

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @staticmethod
    def list_rules(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            target_user_id: Optional[UUID] = None
    ) -> List[AvailabilityRuleResponse]:
        user_id = AuthorizationGuard.resolve_target_user(caller_id, is_admin, target_user_id)
        rules = RuleStore.list_for_user(db, organization_id, user_id)
        return [_rule_response(rule) for rule in rules]

    @staticmethod
    def create_rule(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            request: AvailabilityRuleCreate
    ) -> AvailabilityRuleResponse:
        user_id = AuthorizationGuard.resolve_target_user(caller_id, is_admin, request.user_id)
        _validate_weekday(request.weekday)
        start_time, end_time, tz_name = _parse_window(request.start_time, request.end_time, request.timezone)
        _ensure_no_rule_overlap(db, organization_id, user_id, request.weekday, start_time, end_time)

        rule = RuleStore.create(db, AvailabilityRule(
            id=uuid4(),
            organization_id=organization_id,
            user_id=user_id,
            weekday=request.weekday,
            start_time=start_time,
            end_time=end_time,
            timezone=tz_name,
        ))

        logger.info(f"Created availability rule {rule.id} for user {user_id} (weekday {rule.weekday})")
        return _rule_response(rule)

    @staticmethod
    def update_rule(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            rule_id: UUID,
            request: AvailabilityRuleUpdate
    ) -> AvailabilityRuleResponse:
        rule = RuleStore.get_by_id(db, rule_id, organization_id)
        AuthorizationGuard.ensure_can_manage(
            is_admin, rule.user_id, caller_id, "not authorized to update this availability rule"
        )

        weekday = rule.weekday if request.weekday is None else request.weekday
        _validate_weekday(weekday)

        start_time, end_time, tz_name = _parse_window(
            request.start_time if request.start_time is not None else format_time_of_day(rule.start_time),
            request.end_time if request.end_time is not None else format_time_of_day(rule.end_time),
            request.timezone if request.timezone is not None else rule.timezone,
        )
        _ensure_no_rule_overlap(db, organization_id, rule.user_id, weekday, start_time, end_time, exclude_id=rule.id)

        rule.weekday = weekday
        rule.start_time = start_time
        rule.end_time = end_time
        rule.timezone = tz_name
        rule = RuleStore.save(db, rule)

        return _rule_response(rule)

    @staticmethod
    def delete_rule(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            rule_id: UUID
    ) -> None:
        rule = RuleStore.get_by_id(db, rule_id, organization_id)
        AuthorizationGuard.ensure_can_manage(
            is_admin, rule.user_id, caller_id, "not authorized to delete this availability rule"
        )
        RuleStore.delete(db, rule)
        logger.info(f"Deleted availability rule {rule_id}")

    @staticmethod
    def list_rule_user_ids(db: Session, organization_id: UUID) -> List[UUID]:
        """Agents in the organization that have at least one rule."""
        return RuleStore.list_user_ids(db, organization_id)

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    @staticmethod
    def list_overrides(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            target_user_id: Optional[UUID] = None,
            start_date: Optional[str] = None,
            end_date: Optional[str] = None
    ) -> List[AvailabilityOverrideResponse]:
        user_id = AuthorizationGuard.resolve_target_user(caller_id, is_admin, target_user_id)

        start = parse_optional_date(start_date, "startDate")
        end = parse_optional_date(end_date, "endDate")
        if start and end and start > end:
            raise BadRequestError("startDate must be before or equal to endDate")

        overrides = OverrideStore.list_for_user(db, organization_id, user_id, start, end)
        return [_override_response(override) for override in overrides]

    @staticmethod
    def create_override(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            request: AvailabilityOverrideCreate
    ) -> AvailabilityOverrideResponse:
        user_id = AuthorizationGuard.resolve_target_user(caller_id, is_admin, request.user_id)
        override_date = parse_date(request.date, "date")
        start_time, end_time, tz_name = _parse_optional_window(request.start_time, request.end_time, request.timezone)

        override = OverrideStore.create(db, AvailabilityOverride(
            id=uuid4(),
            organization_id=organization_id,
            user_id=user_id,
            date=override_date,
            is_available=request.is_available,
            start_time=start_time,
            end_time=end_time,
            timezone=tz_name,
        ))

        logger.info(
            f"Created availability override {override.id} for user {user_id} on {override_date} "
            f"(available={override.is_available})"
        )
        return _override_response(override)

    @staticmethod
    def update_override(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            override_id: UUID,
            request: AvailabilityOverrideUpdate
    ) -> AvailabilityOverrideResponse:
        override = OverrideStore.get_by_id(db, override_id, organization_id)
        AuthorizationGuard.ensure_can_manage(
            is_admin, override.user_id, caller_id, "not authorized to update this availability override"
        )

        if request.date is not None:
            override.date = parse_date(request.date, "date")
        if request.is_available is not None:
            override.is_available = request.is_available

        # Fields sent explicitly (even as null) replace the stored value.
        provided = request.model_fields_set
        start_str = request.start_time if "start_time" in provided else format_time_of_day(override.start_time)
        end_str = request.end_time if "end_time" in provided else format_time_of_day(override.end_time)
        tz_name = request.timezone if request.timezone is not None else override.timezone

        override.start_time, override.end_time, override.timezone = _parse_optional_window(start_str, end_str, tz_name)
        override = OverrideStore.save(db, override)

        return _override_response(override)

    @staticmethod
    def delete_override(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            override_id: UUID
    ) -> None:
        override = OverrideStore.get_by_id(db, override_id, organization_id)
        AuthorizationGuard.ensure_can_manage(
            is_admin, override.user_id, caller_id, "not authorized to delete this availability override"
        )
        OverrideStore.delete(db, override)
        logger.info(f"Deleted availability override {override_id}")

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    @staticmethod
    def get_available_slots(
            db: Session,
            caller_id: UUID,
            is_admin: bool,
            organization_id: UUID,
            start_date: str,
            end_date: str,
            slot_duration: Optional[int] = None,
            target_user_id: Optional[UUID] = None
    ) -> AvailableSlotsResponse:
        """
        Bookable slots of one agent between two dates (inclusive).

        Appointments are read with a day of padding on both sides so bookings
        that cross midnight after timezone conversion still block slots.
        """
        user_id = AuthorizationGuard.resolve_target_user(
            caller_id, is_admin, target_user_id, "not authorized to view availability for this user"
        )
        start = parse_date(start_date, "startDate")
        end = parse_date(end_date, "endDate")
        slot_generator.validate_date_range(start, end, settings.MAX_SLOT_RANGE_DAYS)

        rules = RuleStore.list_for_user(db, organization_id, user_id)
        overrides = OverrideStore.list_for_user(db, organization_id, user_id, start, end)

        fetch_start = datetime.combine(start - timedelta(days=1), time.min, tzinfo=timezone.utc)
        fetch_end = datetime.combine(end + timedelta(days=2), time.min, tzinfo=timezone.utc)
        appointments = AppointmentStore.list_scheduled_in_range(db, organization_id, user_id, fetch_start, fetch_end)

        days = slot_generator.generate_slots(
            user_id,
            start,
            end,
            slot_duration,
            rules,
            overrides,
            appointments,
            max_days=settings.MAX_SLOT_RANGE_DAYS,
        )
        return AvailableSlotsResponse(days=days)


# ============================================================================
# Helpers
# ============================================================================

def _validate_weekday(weekday: int) -> None:
    if weekday < 0 or weekday > 6:
        raise BadRequestError("weekday must be between 0 (Sunday) and 6 (Saturday)")


def _ensure_no_rule_overlap(
        db: Session,
        organization_id: UUID,
        user_id: UUID,
        weekday: int,
        start_time: time,
        end_time: time,
        exclude_id: Optional[UUID] = None
) -> None:
    for existing in RuleStore.list_for_user(db, organization_id, user_id):
        if existing.id == exclude_id or existing.weekday != weekday:
            continue
        if start_time < existing.end_time and end_time > existing.start_time:
            raise BadRequestError(
                f"rule overlaps existing rule {format_time_of_day(existing.start_time)}-"
                f"{format_time_of_day(existing.end_time)} on the same weekday"
            )


def _resolve_timezone_name(name: Optional[str]) -> str:
    if not name:
        return settings.DEFAULT_TIMEZONE
    if not is_valid_timezone(name):
        raise BadRequestError(f"invalid timezone: {name}")
    return name


def _parse_window(start: str, end: str, tz_name: Optional[str]) -> Tuple[time, time, str]:
    start_time = parse_time_of_day(start, "startTime")
    end_time = parse_time_of_day(end, "endTime")
    if end_time <= start_time:
        raise BadRequestError(END_AFTER_START)
    return start_time, end_time, _resolve_timezone_name(tz_name)


def _parse_optional_window(
        start: Optional[str],
        end: Optional[str],
        tz_name: Optional[str]
) -> Tuple[Optional[time], Optional[time], str]:
    """Both-or-neither variant of _parse_window used by overrides."""
    resolved_tz = _resolve_timezone_name(tz_name)
    if start is None and end is None:
        return None, None, resolved_tz
    if start is None or end is None:
        raise BadRequestError("startTime and endTime must both be provided")
    start_time, end_time, _ = _parse_window(start, end, resolved_tz)
    return start_time, end_time, resolved_tz


def _rule_response(rule: AvailabilityRule) -> AvailabilityRuleResponse:
    return AvailabilityRuleResponse(
        id=rule.id,
        user_id=rule.user_id,
        weekday=rule.weekday,
        start_time=format_time_of_day(rule.start_time),
        end_time=format_time_of_day(rule.end_time),
        timezone=rule.timezone,
        created_at=rule.created_at,
        updated_at=rule.updated_at,
    )


def _override_response(override: AvailabilityOverride) -> AvailabilityOverrideResponse:
    return AvailabilityOverrideResponse(
        id=override.id,
        user_id=override.user_id,
        date=override.date.strftime(DATE_FORMAT),
        is_available=override.is_available,
        start_time=format_time_of_day(override.start_time),
        end_time=format_time_of_day(override.end_time),
        timezone=override.timezone,
        created_at=override.created_at,
        updated_at=override.updated_at,
    )
