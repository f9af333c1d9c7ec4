import uuid

from jose import jwt

from app.config.settings import settings


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_requests_without_token_are_rejected(client):
    response = client.get("/api/v1/availability/rules")

    assert response.status_code in (401, 403)


def test_token_with_wrong_secret_is_rejected(client, agent_id, org_id):
    token = jwt.encode({"sub": str(agent_id), "org": str(org_id)}, "wrong-secret", algorithm=settings.JWT_ALGORITHM)

    response = client.get("/api/v1/availability/rules", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_without_organization_is_rejected(client, agent_id):
    token = jwt.encode({"sub": str(agent_id)}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    response = client.get("/api/v1/availability/rules", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


class TestAvailabilityRoutes:
    def test_rule_lifecycle(self, client, agent_id, auth_headers):
        headers = auth_headers(agent_id)

        created = client.post(
            "/api/v1/availability/rules",
            json={"weekday": 1, "startTime": "09:00", "endTime": "12:00", "timezone": "UTC"},
            headers=headers,
        )
        assert created.status_code == 201
        body = created.json()
        assert body["userId"] == str(agent_id)
        assert body["startTime"] == "09:00"

        updated = client.put(
            f"/api/v1/availability/rules/{body['id']}", json={"endTime": "11:00"}, headers=headers
        )
        assert updated.json()["endTime"] == "11:00"

        listed = client.get("/api/v1/availability/rules", headers=headers)
        assert [r["id"] for r in listed.json()] == [body["id"]]

        deleted = client.delete(f"/api/v1/availability/rules/{body['id']}", headers=headers)
        assert deleted.status_code == 204

    def test_invalid_rule_returns_bad_request(self, client, agent_id, auth_headers):
        response = client.post(
            "/api/v1/availability/rules",
            json={"weekday": 9, "startTime": "09:00", "endTime": "12:00"},
            headers=auth_headers(agent_id),
        )

        assert response.status_code == 400
        assert "weekday" in response.json()["detail"]

    def test_other_agents_rules_are_forbidden(self, client, agent_id, other_agent_id, auth_headers):
        response = client.get(
            "/api/v1/availability/rules", params={"userId": str(other_agent_id)}, headers=auth_headers(agent_id)
        )

        assert response.status_code == 403

    def test_unknown_rule_is_not_found(self, client, agent_id, auth_headers):
        response = client.delete(f"/api/v1/availability/rules/{uuid.uuid4()}", headers=auth_headers(agent_id))

        assert response.status_code == 404

    def test_override_and_slots(self, client, agent_id, auth_headers):
        headers = auth_headers(agent_id)
        client.post(
            "/api/v1/availability/rules",
            json={"weekday": 1, "startTime": "09:00", "endTime": "12:00", "timezone": "UTC"},
            headers=headers,
        )
        client.post(
            "/api/v1/availability/overrides",
            json={"date": "2026-10-20", "isAvailable": True, "startTime": "13:00", "endTime": "14:00",
                  "timezone": "UTC"},
            headers=headers,
        )

        response = client.get(
            "/api/v1/availability/slots",
            params={"startDate": "2026-10-19", "endDate": "2026-10-20", "slotDuration": 60},
            headers=headers,
        )

        assert response.status_code == 200
        days = response.json()["days"]
        assert [d["date"] for d in days] == ["2026-10-19", "2026-10-20"]
        assert len(days[0]["slots"]) == 3
        assert days[1]["slots"][0]["startTime"].startswith("2026-10-20T13:00:00")

    def test_slot_range_too_large(self, client, agent_id, auth_headers):
        response = client.get(
            "/api/v1/availability/slots",
            params={"startDate": "2026-10-01", "endDate": "2026-10-30"},
            headers=auth_headers(agent_id),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "date range cannot exceed 14 days"

    def test_huge_slot_duration_is_bad_request(self, client, agent_id, auth_headers):
        response = client.get(
            "/api/v1/availability/slots",
            params={"startDate": "2026-10-19", "endDate": "2026-10-19", "slotDuration": 10 ** 10},
            headers=auth_headers(agent_id),
        )

        assert response.status_code == 400


class TestAppointmentRoutes:
    def _book(self, client, headers, start="2026-10-19T09:00:00Z", end="2026-10-19T10:00:00Z", **extra):
        payload = {"type": "standalone", "title": "Team sync", "startTime": start, "endTime": end}
        payload.update(extra)
        return client.post("/api/v1/appointments", json=payload, headers=headers)

    def test_create_get_and_list(self, client, agent_id, auth_headers):
        headers = auth_headers(agent_id)

        created = self._book(client, headers)
        assert created.status_code == 201
        appointment_id = created.json()["id"]
        assert created.json()["status"] == "scheduled"

        fetched = client.get(f"/api/v1/appointments/{appointment_id}", headers=headers)
        assert fetched.json()["title"] == "Team sync"

        listed = client.get("/api/v1/appointments", params={"pageSize": 10}, headers=headers)
        assert listed.json()["total"] == 1
        assert listed.json()["pageSize"] == 10

    def test_overlapping_booking_conflicts(self, client, agent_id, auth_headers):
        headers = auth_headers(agent_id)
        self._book(client, headers)

        response = self._book(client, headers, start="2026-10-19T09:30:00Z", end="2026-10-19T10:30:00Z")

        assert response.status_code == 409

    def test_lead_visit_without_lead_service_is_bad_request(self, client, agent_id, auth_headers):
        response = self._book(client, auth_headers(agent_id), type="lead_visit", leadId=str(uuid.uuid4()))

        assert response.status_code == 400

    def test_missing_title_is_validation_error(self, client, agent_id, auth_headers):
        response = client.post(
            "/api/v1/appointments",
            json={"type": "standalone", "startTime": "2026-10-19T09:00:00Z", "endTime": "2026-10-19T10:00:00Z"},
            headers=auth_headers(agent_id),
        )

        assert response.status_code == 422

    def test_other_agent_cannot_touch_appointment(self, client, agent_id, other_agent_id, auth_headers):
        appointment_id = self._book(client, auth_headers(agent_id)).json()["id"]

        response = client.get(f"/api/v1/appointments/{appointment_id}", headers=auth_headers(other_agent_id))
        admin_response = client.get(
            f"/api/v1/appointments/{appointment_id}", headers=auth_headers(other_agent_id, admin=True)
        )

        assert response.status_code == 403
        assert admin_response.status_code == 200

    def test_status_update_and_delete(self, client, agent_id, auth_headers):
        headers = auth_headers(agent_id)
        appointment_id = self._book(client, headers).json()["id"]

        patched = client.patch(
            f"/api/v1/appointments/{appointment_id}/status", json={"status": "completed"}, headers=headers
        )
        assert patched.json()["status"] == "completed"

        deleted = client.delete(f"/api/v1/appointments/{appointment_id}", headers=headers)
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/appointments/{appointment_id}", headers=headers).status_code == 404

    def test_update_moves_appointment(self, client, agent_id, auth_headers):
        headers = auth_headers(agent_id)
        appointment_id = self._book(client, headers).json()["id"]

        response = client.put(
            f"/api/v1/appointments/{appointment_id}",
            json={"startTime": "2026-10-19T14:00:00Z", "endTime": "2026-10-19T15:00:00Z"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["startTime"].startswith("2026-10-19T14:00:00")

    def test_lead_service_lookup(self, client, agent_id, auth_headers, make_lead):
        headers = auth_headers(agent_id)
        lead_service_id = str(uuid.uuid4())
        self._book(
            client, headers, type="lead_visit", leadId=str(make_lead().id), leadServiceId=lead_service_id
        )

        response = client.get(f"/api/v1/appointments/lead-services/{lead_service_id}", headers=headers)

        assert response.status_code == 200
        assert response.json()["lead"]["address"] == "Damstraat 12, Amsterdam"

    def test_unknown_lead_service_is_not_found(self, client, agent_id, auth_headers):
        response = client.get(f"/api/v1/appointments/lead-services/{uuid.uuid4()}", headers=auth_headers(agent_id))

        assert response.status_code == 404
        assert response.json()["detail"] == "appointment not found"

    def test_next_visit_lookup_is_not_routed(self, client, agent_id, other_agent_id, auth_headers, make_lead):
        lead = make_lead(assigned_agent_id=agent_id)
        booked = self._book(
            client, auth_headers(agent_id), type="lead_visit", title="Private visit",
            leadId=str(lead.id), leadServiceId=str(uuid.uuid4())
        )
        assert booked.status_code == 201

        other_headers = auth_headers(other_agent_id)
        assert client.get(f"/api/v1/appointments/{booked.json()['id']}", headers=other_headers).status_code == 403
        response = client.get(f"/api/v1/appointments/leads/{lead.id}/next-visit", headers=other_headers)

        assert response.status_code == 404
        assert "Private visit" not in response.text
