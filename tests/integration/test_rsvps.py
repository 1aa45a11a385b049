"""
Integration tests for RSVP and waiting list endpoints.
Tests admission, queueing, cancellation with promotion, and event deletion.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from uuid import uuid4

from app.services.promotion import PromotionEngine


async def _create_user(client: AsyncClient, name: str) -> str:
    response = await client.post("/api/v1/users/", json={"email": f"{name}@example.com", "full_name": name})
    assert response.status_code == 201
    return response.json()["id"]


async def _create_event(client: AsyncClient, organizer_id: str, max_attendees: int) -> str:
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Meetup", "location": "Hall A", "max_attendees": max_attendees, "created_by": organizer_id},
    )
    assert response.status_code == 201
    return response.json()["id"]


async def _rsvp(client: AsyncClient, user_id: str, event_id: str, status: str = "attending"):
    return await client.post("/api/v1/rsvps/", json={"user_id": user_id, "event_id": event_id, "status": status})


@pytest.mark.integration
@pytest.mark.asyncio
class TestRSVPEndpoints:

    async def test_confirm_then_waitlist(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1, u2 = await _create_user(client, "u1"), await _create_user(client, "u2")

        first = await _rsvp(client, u1, event_id)
        second = await _rsvp(client, u2, event_id)

        assert first.status_code == 200
        assert first.json()["result"] == "confirmed"
        assert first.json()["rsvp"]["status"] == "attending"
        assert second.status_code == 200
        assert second.json()["result"] == "waitlisted"
        assert second.json()["waiting_list_entry"]["priority"] == 1

        detail = (await client.get(f"/api/v1/events/{event_id}")).json()
        assert detail["confirmed_count"] == 1
        assert detail["available_spots"] == 0
        assert detail["waiting_list_length"] == 1

    async def test_duplicate_waitlist_is_conflict(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1, u2 = await _create_user(client, "u1"), await _create_user(client, "u2")
        await _rsvp(client, u1, event_id)
        await _rsvp(client, u2, event_id)

        response = await _rsvp(client, u2, event_id)

        assert response.status_code == 409
        assert "waiting list" in response.json()["detail"]

    async def test_rsvp_unknown_event(self, client: AsyncClient):
        user = await _create_user(client, "u1")

        response = await _rsvp(client, user, str(uuid4()))

        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found"

    async def test_cancel_promotes_next_in_line(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1, u2, u3 = [await _create_user(client, n) for n in ("u1", "u2", "u3")]
        for user in (u1, u2, u3):
            await _rsvp(client, user, event_id)

        response = await client.delete(f"/api/v1/rsvps/{event_id}", params={"user_id": u1})

        assert response.status_code == 204
        waitlist = (await client.get(f"/api/v1/events/{event_id}/waitlist")).json()
        assert [(e["user_id"], e["priority"]) for e in waitlist] == [(u3, 1)]
        position = (await client.get(f"/api/v1/events/{event_id}/waitlist/position", params={"user_id": u2})).json()
        assert position["position"] == -1
        again = await _rsvp(client, u2, event_id)
        assert again.json()["result"] == "updated"

    async def test_cancel_without_rsvp_is_not_found(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)

        response = await client.delete(f"/api/v1/rsvps/{event_id}", params={"user_id": organizer})

        assert response.status_code == 404

    async def test_downgrade_and_cancel_survive_failed_promotion(self, client: AsyncClient, monkeypatch):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1, u2 = await _create_user(client, "u1"), await _create_user(client, "u2")
        await _rsvp(client, u1, event_id)
        await _rsvp(client, u2, event_id)

        async def failing_promote(self, event_id):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(PromotionEngine, "promote", failing_promote)

        downgrade = await _rsvp(client, u1, event_id, "maybe")
        assert downgrade.status_code == 200
        assert downgrade.json()["result"] == "updated"
        assert downgrade.json()["rsvp"]["status"] == "maybe"

        cancel = await client.delete(f"/api/v1/rsvps/{event_id}", params={"user_id": u1})
        assert cancel.status_code == 204
        position = (await client.get(f"/api/v1/events/{event_id}/waitlist/position", params={"user_id": u2})).json()
        assert position["position"] == 1

    async def test_promoted_user_sees_in_app_notification(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1, u2 = await _create_user(client, "u1"), await _create_user(client, "u2")
        await _rsvp(client, u1, event_id)
        await _rsvp(client, u2, event_id)

        await client.delete(f"/api/v1/rsvps/{event_id}", params={"user_id": u1})

        response = await client.get(f"/api/v1/users/{u2}/notifications", params={"unread_only": True})
        assert response.status_code == 200
        notifications = response.json()
        assert [n["title"] for n in notifications] == ["Spot Available!"]
        assert notifications[0]["event_id"] == event_id
        assert notifications[0]["is_read"] is False

    async def test_notifications_for_unknown_user(self, client: AsyncClient):
        response = await client.get(f"/api/v1/users/{uuid4()}/notifications")

        assert response.status_code == 404

    async def test_leave_waiting_list_reindexes(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        holder = await _create_user(client, "holder")
        await _rsvp(client, holder, event_id)
        u1, u2, u3 = [await _create_user(client, n) for n in ("u1", "u2", "u3")]
        for user in (u1, u2, u3):
            await _rsvp(client, user, event_id)

        response = await client.delete(f"/api/v1/events/{event_id}/waitlist", params={"user_id": u2})

        assert response.status_code == 204
        waitlist = (await client.get(f"/api/v1/events/{event_id}/waitlist")).json()
        assert [(e["user_id"], e["priority"]) for e in waitlist] == [(u1, 1), (u3, 2)]

    async def test_manual_promote_endpoint_is_idempotent(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1 = await _create_user(client, "u1")
        await _rsvp(client, u1, event_id)

        response = await client.post(f"/api/v1/events/{event_id}/waitlist/promote")

        assert response.status_code == 200
        assert response.json()["promoted"] == []

    async def test_delete_event_removes_queue(self, client: AsyncClient):
        organizer = await _create_user(client, "org")
        event_id = await _create_event(client, organizer, 1)
        u1, u2 = await _create_user(client, "u1"), await _create_user(client, "u2")
        await _rsvp(client, u1, event_id)
        await _rsvp(client, u2, event_id)

        response = await client.delete(f"/api/v1/events/{event_id}")

        assert response.status_code == 204
        assert (await client.get(f"/api/v1/events/{event_id}")).status_code == 404
        assert (await client.get(f"/api/v1/events/{event_id}/waitlist")).status_code == 404
        position = (await client.get(f"/api/v1/events/{event_id}/waitlist/position", params={"user_id": u2})).json()
        assert position["position"] == -1

    async def test_event_requires_positive_capacity(self, client: AsyncClient):
        organizer = await _create_user(client, "org")

        response = await client.post(
            "/api/v1/events/",
            json={"title": "Closed", "max_attendees": 0, "created_by": organizer},
        )

        assert response.status_code == 422

    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
