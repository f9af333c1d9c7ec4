import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models import AppointmentStatus, AppointmentType
from app.schemas.appointments import AppointmentCreate, AppointmentListFilters, AppointmentUpdate
from app.services.appointment.appointment_service import AppointmentService
from tests.fakes import FakeLeadAssigner, FakeNotifier


def at(hour, minute=0, day=19):
    return datetime(2026, 10, day, hour, minute, tzinfo=timezone.utc)


def standalone(start=None, end=None, **fields):
    return AppointmentCreate(
        type=AppointmentType.STANDALONE,
        title=fields.pop("title", "Team sync"),
        start_time=start or at(9),
        end_time=end or at(10),
        **fields
    )


def lead_visit(lead_id, start=None, end=None, **fields):
    return AppointmentCreate(
        type=AppointmentType.LEAD_VISIT,
        lead_id=lead_id,
        lead_service_id=fields.pop("lead_service_id", uuid.uuid4()),
        title="Inspection",
        start_time=start or at(9),
        end_time=end or at(10),
        **fields
    )


class TestCreate:
    def test_standalone(self, db_session, org_id, agent_id, appointment_service):
        result = appointment_service.create(
            db_session, agent_id, False, org_id, standalone(title="  Team\x07 sync  ", description="  ")
        )

        assert result.user_id == agent_id
        assert result.title == "Team sync"
        assert result.description is None
        assert result.status == AppointmentStatus.SCHEDULED
        assert result.start_time == at(9)
        assert result.lead is None

    def test_end_must_be_after_start(self, db_session, org_id, agent_id, appointment_service):
        with pytest.raises(BadRequestError):
            appointment_service.create(db_session, agent_id, False, org_id, standalone(at(10), at(10)))

    def test_lead_visit_requires_lead_service(self, db_session, org_id, agent_id, appointment_service):
        request = lead_visit(uuid.uuid4(), lead_service_id=None)

        with pytest.raises(BadRequestError):
            appointment_service.create(db_session, agent_id, False, org_id, request)

    def test_lead_visit_requires_lead_assigner(self, db_session, org_id, agent_id, make_lead):
        service = AppointmentService(lead_assigner=None, notifier=FakeNotifier())

        with pytest.raises(BadRequestError):
            service.create(db_session, agent_id, False, org_id, lead_visit(make_lead().id))

    def test_lead_assigned_to_other_agent_is_forbidden(
            self, db_session, org_id, agent_id, other_agent_id, make_lead, lead_assigner, appointment_service
    ):
        lead = make_lead()
        lead_assigner.assignments[lead.id] = other_agent_id

        with pytest.raises(ForbiddenError):
            appointment_service.create(db_session, agent_id, False, org_id, lead_visit(lead.id))

    def test_unassigned_lead_is_claimed(self, db_session, org_id, agent_id, make_lead, lead_assigner,
                                        appointment_service):
        lead = make_lead()

        result = appointment_service.create(db_session, agent_id, False, org_id, lead_visit(lead.id))

        assert lead_assigner.claims == [(lead.id, agent_id)]
        assert result.lead.first_name == "Jan"
        assert result.lead.address == "Damstraat 12, Amsterdam"

    def test_admin_books_assigned_lead_without_claiming(
            self, db_session, org_id, agent_id, other_agent_id, make_lead, lead_assigner, appointment_service
    ):
        lead = make_lead()
        lead_assigner.assignments[lead.id] = other_agent_id

        appointment_service.create(db_session, agent_id, True, org_id, lead_visit(lead.id))

        assert lead_assigner.claims == []

    def test_overlap_with_own_booking_conflicts(self, db_session, org_id, agent_id, appointment_service):
        appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))

        with pytest.raises(ConflictError):
            appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9, 30), at(10, 30)))

    def test_adjacent_and_other_agent_bookings_do_not_conflict(
            self, db_session, org_id, agent_id, other_agent_id, appointment_service
    ):
        appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))

        appointment_service.create(db_session, agent_id, False, org_id, standalone(at(10), at(11)))
        appointment_service.create(db_session, other_agent_id, False, org_id, standalone(at(9), at(10)))

    def test_cancelled_booking_frees_the_slot(self, db_session, org_id, agent_id, appointment_service):
        first = appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))
        appointment_service.update_status(
            db_session, first.id, agent_id, False, org_id, AppointmentStatus.CANCELLED
        )

        appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))


class TestConfirmationEmail:
    def test_sent_when_requested(self, db_session, org_id, agent_id, make_lead, notifier, appointment_service):
        lead = make_lead()

        appointment_service.create(
            db_session, agent_id, False, org_id,
            lead_visit(lead.id, at(10), at(11), send_confirmation_email=True)
        )

        assert notifier.sent == [
            ("jan@example.com", "Jan", "Monday, October 19, 2026 at 12:00", "Damstraat 12, Amsterdam")
        ]

    def test_not_sent_without_flag(self, db_session, org_id, agent_id, make_lead, notifier, appointment_service):
        appointment_service.create(db_session, agent_id, False, org_id, lead_visit(make_lead().id))

        assert notifier.sent == []

    def test_not_sent_when_lead_has_no_email(self, db_session, org_id, agent_id, make_lead, notifier,
                                             appointment_service):
        lead = make_lead(email=None)

        appointment_service.create(
            db_session, agent_id, False, org_id, lead_visit(lead.id, send_confirmation_email=True)
        )

        assert notifier.sent == []

    def test_notifier_failure_does_not_fail_booking(self, db_session, org_id, agent_id, make_lead):
        service = AppointmentService(lead_assigner=FakeLeadAssigner(), notifier=FakeNotifier(fail=True))

        result = service.create(
            db_session, agent_id, False, org_id, lead_visit(make_lead().id, send_confirmation_email=True)
        )

        assert result.status == AppointmentStatus.SCHEDULED


class TestRead:
    def test_get_by_id_checks_ownership(self, db_session, org_id, agent_id, other_agent_id, appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone())

        assert appointment_service.get_by_id(db_session, created.id, agent_id, False, org_id).id == created.id
        assert appointment_service.get_by_id(db_session, created.id, other_agent_id, True, org_id).id == created.id
        with pytest.raises(ForbiddenError):
            appointment_service.get_by_id(db_session, created.id, other_agent_id, False, org_id)

    def test_get_by_id_in_other_organization_is_not_found(self, db_session, org_id, agent_id,
                                                          appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone())

        with pytest.raises(NotFoundError):
            appointment_service.get_by_id(db_session, created.id, agent_id, True, uuid.uuid4())

    def test_get_by_lead_service_skips_cancelled(self, db_session, org_id, agent_id, make_lead,
                                                 appointment_service):
        lead = make_lead()
        lead_service_id = uuid.uuid4()
        kept = appointment_service.create(
            db_session, agent_id, False, org_id, lead_visit(lead.id, at(9), at(10), lead_service_id=lead_service_id)
        )
        dropped = appointment_service.create(
            db_session, agent_id, False, org_id, lead_visit(lead.id, at(11), at(12), lead_service_id=lead_service_id)
        )
        appointment_service.update_status(db_session, dropped.id, agent_id, False, org_id, AppointmentStatus.CANCELLED)

        result = appointment_service.get_by_lead_service_id(db_session, lead_service_id, agent_id, False, org_id)

        assert result.id == kept.id

    def test_get_by_lead_service_without_appointment_is_not_found(self, db_session, org_id, agent_id,
                                                                  appointment_service):
        with pytest.raises(NotFoundError):
            appointment_service.get_by_lead_service_id(db_session, uuid.uuid4(), agent_id, False, org_id)

    def test_next_scheduled_visit(self, db_session, org_id, agent_id, make_lead, appointment_service):
        lead = make_lead()
        appointment_service.create(db_session, agent_id, False, org_id, lead_visit(lead.id, at(9, day=20), at(10, day=20)))
        soonest = appointment_service.create(
            db_session, agent_id, False, org_id, lead_visit(lead.id, at(9, day=21), at(10, day=21))
        )
        later = appointment_service.create(
            db_session, agent_id, False, org_id, lead_visit(lead.id, at(9, day=22), at(10, day=22))
        )

        result = appointment_service.get_next_scheduled_visit(db_session, lead.id, org_id, now=at(12, day=20))

        assert result.id == soonest.id
        assert result.id != later.id
        assert appointment_service.get_next_scheduled_visit(db_session, lead.id, org_id, now=at(0, day=23)) is None


class TestList:
    def _seed(self, service, db, org, agent, other):
        service.create(db, agent, False, org, standalone(at(9, day=19), at(10, day=19), title="Bravo"))
        service.create(db, agent, False, org, standalone(at(9, day=20), at(10, day=20), title="Alpha"))
        service.create(db, other, False, org, standalone(at(9, day=21), at(10, day=21), title="Charlie"))

    def test_non_admin_only_sees_own(self, db_session, org_id, agent_id, other_agent_id, appointment_service):
        self._seed(appointment_service, db_session, org_id, agent_id, other_agent_id)

        result = appointment_service.list(
            db_session, agent_id, False, org_id, AppointmentListFilters(user_id=other_agent_id)
        )

        assert result.total == 2
        assert {item.user_id for item in result.items} == {agent_id}

    def test_admin_sees_all_or_filters(self, db_session, org_id, agent_id, other_agent_id, appointment_service):
        self._seed(appointment_service, db_session, org_id, agent_id, other_agent_id)

        everyone = appointment_service.list(db_session, agent_id, True, org_id, AppointmentListFilters())
        filtered = appointment_service.list(
            db_session, agent_id, True, org_id, AppointmentListFilters(user_id=other_agent_id)
        )

        assert everyone.total == 3
        assert [item.title for item in filtered.items] == ["Charlie"]

    def test_sort_and_date_filters(self, db_session, org_id, agent_id, other_agent_id, appointment_service):
        self._seed(appointment_service, db_session, org_id, agent_id, other_agent_id)

        by_title = appointment_service.list(
            db_session, agent_id, True, org_id, AppointmentListFilters(sort_by="title", sort_order="desc")
        )
        same_day = appointment_service.list(
            db_session, agent_id, True, org_id, AppointmentListFilters(start_from="2026-10-20", start_to="2026-10-20")
        )

        assert [item.title for item in by_title.items] == ["Charlie", "Bravo", "Alpha"]
        assert [item.title for item in same_day.items] == ["Alpha"]

    def test_invalid_sort_is_rejected(self, db_session, org_id, agent_id, appointment_service):
        with pytest.raises(BadRequestError):
            appointment_service.list(db_session, agent_id, True, org_id, AppointmentListFilters(sort_by="lead_id"))

    def test_pagination(self, db_session, org_id, agent_id, appointment_service):
        for i in range(5):
            start = at(8) + timedelta(hours=i)
            appointment_service.create(db_session, agent_id, False, org_id, standalone(start, start + timedelta(hours=1)))

        page = appointment_service.list(
            db_session, agent_id, False, org_id, AppointmentListFilters(page=2, page_size=2)
        )
        clamped = appointment_service.list(
            db_session, agent_id, False, org_id, AppointmentListFilters(page_size=500)
        )

        assert [item.start_time for item in page.items] == [at(10), at(11)]
        assert (page.total, page.total_pages) == (5, 3)
        assert clamped.page_size == 50

    def test_items_carry_lead_summary(self, db_session, org_id, agent_id, make_lead, appointment_service):
        appointment_service.create(db_session, agent_id, False, org_id, lead_visit(make_lead().id))

        result = appointment_service.list(db_session, agent_id, False, org_id, AppointmentListFilters())

        assert result.items[0].lead.phone == "+31612345678"


class TestMutations:
    def test_update_fields_and_times(self, db_session, org_id, agent_id, appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))

        updated = appointment_service.update(
            db_session, created.id, agent_id, False, org_id,
            AppointmentUpdate(title="Moved", start_time=at(9, 30), end_time=at(10, 30))
        )

        assert updated.title == "Moved"
        assert (updated.start_time, updated.end_time) == (at(9, 30), at(10, 30))

    def test_update_rejects_inverted_times(self, db_session, org_id, agent_id, appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))

        with pytest.raises(BadRequestError):
            appointment_service.update(
                db_session, created.id, agent_id, False, org_id, AppointmentUpdate(end_time=at(8))
            )

    def test_update_into_other_booking_conflicts(self, db_session, org_id, agent_id, appointment_service):
        appointment_service.create(db_session, agent_id, False, org_id, standalone(at(11), at(12)))
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone(at(9), at(10)))

        with pytest.raises(ConflictError):
            appointment_service.update(
                db_session, created.id, agent_id, False, org_id, AppointmentUpdate(end_time=at(11, 30))
            )

    def test_update_by_other_agent_is_forbidden(self, db_session, org_id, agent_id, other_agent_id,
                                                appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone())

        with pytest.raises(ForbiddenError):
            appointment_service.update(db_session, created.id, other_agent_id, False, org_id, AppointmentUpdate(title="x"))

    def test_status_update(self, db_session, org_id, agent_id, appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone())

        same = appointment_service.update_status(
            db_session, created.id, agent_id, False, org_id, AppointmentStatus.SCHEDULED
        )
        done = appointment_service.update_status(
            db_session, created.id, agent_id, False, org_id, AppointmentStatus.COMPLETED
        )
        reopened = appointment_service.update_status(
            db_session, created.id, agent_id, False, org_id, AppointmentStatus.SCHEDULED
        )

        assert same.status == AppointmentStatus.SCHEDULED
        assert done.status == AppointmentStatus.COMPLETED
        assert reopened.status == AppointmentStatus.SCHEDULED

    def test_delete(self, db_session, org_id, agent_id, other_agent_id, appointment_service):
        created = appointment_service.create(db_session, agent_id, False, org_id, standalone())

        with pytest.raises(ForbiddenError):
            appointment_service.delete(db_session, created.id, other_agent_id, False, org_id)

        appointment_service.delete(db_session, created.id, agent_id, False, org_id)

        with pytest.raises(NotFoundError):
            appointment_service.get_by_id(db_session, created.id, agent_id, False, org_id)
