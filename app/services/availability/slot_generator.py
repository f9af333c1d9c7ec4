# ============================================================================
# app/services/availability/slot_generator.py
# Pure slot computation: rules + overrides - booked intervals -> DaySlots
# ============================================================================
"""
Bookable slot generation.

Everything in this module is a pure function of its arguments: no database,
no clock, no shared state. The same inputs always give the same, identically
ordered output, so callers may evaluate dates independently or in parallel.

Weekdays follow the stored convention 0=Sunday ... 6=Saturday.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from app.core.exceptions import BadRequestError, DateRangeTooLargeError
from app.models.appointment import Appointment
from app.models.availability import AvailabilityOverride, AvailabilityRule
from app.schemas.availability import DaySlots, TimeSlot
from app.utils.time_utils import DATE_FORMAT, ensure_utc, resolve_timezone

MAX_RANGE_DAYS = 14
DEFAULT_SLOT_DURATION_MINUTES = 60
MAX_SLOT_DURATION_MINUTES = 24 * 60

Interval = Tuple[datetime, datetime]


def validate_date_range(start_date: date, end_date: date, max_days: int = MAX_RANGE_DAYS) -> None:
    """Reject inverted ranges and ranges spanning more than max_days."""
    if end_date < start_date:
        raise BadRequestError("endDate must be after startDate")
    if (end_date - start_date).days > max_days:
        raise DateRangeTooLargeError(f"date range cannot exceed {max_days} days")


def normalize_slot_duration(slot_duration_minutes: Optional[int]) -> int:
    if not slot_duration_minutes or slot_duration_minutes <= 0:
        return DEFAULT_SLOT_DURATION_MINUTES
    if slot_duration_minutes > MAX_SLOT_DURATION_MINUTES:
        raise BadRequestError(f"slotDuration cannot exceed {MAX_SLOT_DURATION_MINUTES} minutes")
    return slot_duration_minutes


def weekday_index(day: date) -> int:
    """Python's Monday=0 weekday mapped to the Sunday=0 convention."""
    return day.isoweekday() % 7


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap test; touching boundaries do not overlap."""
    return a_start < b_end and a_end > b_start


def window_to_utc(day: date, start_clock: time, end_clock: time, timezone_name: str) -> Interval:
    """Anchor a wall-clock window on a calendar date in its timezone, as UTC instants."""
    tz = resolve_timezone(timezone_name)
    window_start = datetime.combine(day, start_clock, tzinfo=tz)
    window_end = datetime.combine(day, end_clock, tzinfo=tz)
    return window_start.astimezone(timezone.utc), window_end.astimezone(timezone.utc)


def slots_in_window(
        window_start: datetime,
        window_end: datetime,
        slot_duration_minutes: int,
        busy: Sequence[Interval]
) -> List[TimeSlot]:
    """Step through the window; keep slots that fit and do not hit a busy interval."""
    slots = []
    step = timedelta(minutes=slot_duration_minutes)

    slot_start = window_start
    while slot_start + step <= window_end:
        slot_end = slot_start + step

        if not any(overlaps(slot_start, slot_end, busy_start, busy_end) for busy_start, busy_end in busy):
            slots.append(TimeSlot(start_time=slot_start, end_time=slot_end))

        slot_start = slot_end

    return slots


def generate_day_slots(
        day: date,
        rules: Sequence[AvailabilityRule],
        override: Optional[AvailabilityOverride],
        busy: Sequence[Interval],
        slot_duration_minutes: int
) -> DaySlots:
    """Slots for a single calendar date."""
    day_slots = DaySlots(date=day.strftime(DATE_FORMAT), slots=[])

    if override is not None:
        # A blocked day, and an open day without a custom window, both yield nothing.
        if not override.is_available or not override.has_window:
            return day_slots
        window_start, window_end = window_to_utc(day, override.start_time, override.end_time, override.timezone)
        day_slots.slots = slots_in_window(window_start, window_end, slot_duration_minutes, busy)
        return day_slots

    weekday = weekday_index(day)
    slots = []
    for rule in rules:
        if rule.weekday != weekday:
            continue
        window_start, window_end = window_to_utc(day, rule.start_time, rule.end_time, rule.timezone)
        slots.extend(slots_in_window(window_start, window_end, slot_duration_minutes, busy))

    slots.sort(key=lambda slot: (slot.start_time, slot.end_time))
    day_slots.slots = drop_overlapping(slots)
    return day_slots


def drop_overlapping(slots: Sequence[TimeSlot]) -> List[TimeSlot]:
    """Keep the earliest of any slots that overlap; input must be sorted by start."""
    kept = []
    for slot in slots:
        if kept and slot.start_time < kept[-1].end_time:
            continue
        kept.append(slot)
    return kept


def generate_slots(
        user_id: UUID,
        start_date: date,
        end_date: date,
        slot_duration_minutes: Optional[int],
        rules: Iterable[AvailabilityRule],
        overrides: Iterable[AvailabilityOverride],
        appointments: Iterable[Appointment],
        max_days: int = MAX_RANGE_DAYS
) -> List[DaySlots]:
    """
    Compute bookable slots for one agent over an inclusive date range.

    Args:
        user_id: Agent the slots are for; inputs belonging to other users are ignored
        start_date: First calendar date (inclusive)
        end_date: Last calendar date (inclusive), at most max_days after start_date
        slot_duration_minutes: Slot width, 60 when not positive
        rules: Recurring weekly windows
        overrides: Date-specific exceptions; when several exist for one date the last wins
        appointments: Booked intervals to keep free
        max_days: Longest allowed range

    Returns:
        One DaySlots per date in the range, in date order
    """
    validate_date_range(start_date, end_date, max_days)
    duration = normalize_slot_duration(slot_duration_minutes)

    user_rules = [rule for rule in rules if rule.user_id == user_id]
    override_by_date: Dict[date, AvailabilityOverride] = {}
    for override in overrides:
        if override.user_id == user_id:
            override_by_date[override.date] = override
    busy = [
        (ensure_utc(appt.start_time), ensure_utc(appt.end_time))
        for appt in appointments
        if appt.user_id == user_id
    ]

    days = []
    day = start_date
    while day <= end_date:
        days.append(generate_day_slots(day, user_rules, override_by_date.get(day), busy, duration))
        day += timedelta(days=1)

    return days
