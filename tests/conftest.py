import uuid
from datetime import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_appointment_service
from app.config.database import get_db
from app.config.settings import settings
from app.main import create_app
from app.models import Base, AvailabilityRule, Lead
from app.services.appointment.appointment_service import AppointmentService
from tests.fakes import FakeLeadAssigner, FakeNotifier


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def org_id():
    return uuid.uuid4()


@pytest.fixture
def agent_id():
    return uuid.uuid4()


@pytest.fixture
def other_agent_id():
    return uuid.uuid4()


@pytest.fixture
def lead_assigner():
    return FakeLeadAssigner()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def appointment_service(lead_assigner, notifier):
    return AppointmentService(lead_assigner=lead_assigner, notifier=notifier)


@pytest.fixture
def make_lead(db_session, org_id):
    def _make_lead(assigned_agent_id=None, email="jan@example.com"):
        lead = Lead(
            id=uuid.uuid4(),
            organization_id=org_id,
            assigned_agent_id=assigned_agent_id,
            consumer_first_name="Jan",
            consumer_last_name="Jansen",
            consumer_phone="+31612345678",
            consumer_email=email,
            address_street="Damstraat",
            address_house_number="12",
            address_city="Amsterdam",
        )
        db_session.add(lead)
        db_session.commit()
        return lead

    return _make_lead


@pytest.fixture
def make_rule(db_session, org_id):
    def _make_rule(user_id, weekday=1, start=time(9, 0), end=time(12, 0), timezone="UTC"):
        rule = AvailabilityRule(
            id=uuid.uuid4(),
            organization_id=org_id,
            user_id=user_id,
            weekday=weekday,
            start_time=start,
            end_time=end,
            timezone=timezone,
        )
        db_session.add(rule)
        db_session.commit()
        return rule

    return _make_rule


def make_token(user_id, organization_id, roles=()):
    return jwt.encode(
        {"sub": str(user_id), "org": str(organization_id), "roles": list(roles)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


@pytest.fixture
def auth_headers(org_id):
    def _auth_headers(user_id, admin=False):
        roles = [settings.ADMIN_ROLE] if admin else []
        return {"Authorization": f"Bearer {make_token(user_id, org_id, roles)}"}

    return _auth_headers


@pytest.fixture
def client(db_session, appointment_service):
    app = create_app()
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_appointment_service] = lambda: appointment_service

    with TestClient(app) as test_client:
        yield test_client
