"""
Unit tests for RSVP admission.
Tests confirmation, queueing, in-place updates and failure results.
"""
import pytest
from uuid import uuid4

from app.core.errors import ErrorCode
from app.db.models import RSVPStatusEnum
from app.db.repositories import get_user_rsvp_for_event
from app.schemas import AdmissionKind
from app.services.admission import AdmissionController
from app.services.capacity import confirmed_count
from app.services.waiting_list import WaitingListStore


@pytest.mark.unit
@pytest.mark.asyncio
class TestAdmissionController:

    async def test_confirms_while_seats_remain(self, db_session, make_user, make_event):
        event = await make_event(1)
        user = await make_user("u1")

        result = await AdmissionController(db_session).request_rsvp(user.id, event.id, RSVPStatusEnum.attending, 2)
        await db_session.commit()

        assert result.kind is AdmissionKind.confirmed
        assert result.rsvp.status == RSVPStatusEnum.attending
        assert result.rsvp.guest_count == 2
        assert await confirmed_count(db_session, event.id) == 1

    async def test_queues_when_full(self, db_session, make_user, make_event, attend):
        event = await make_event(1)
        await attend(await make_user("u1"), event)
        user = await make_user("u2")

        result = await AdmissionController(db_session).request_rsvp(user.id, event.id, RSVPStatusEnum.attending)
        await db_session.commit()

        assert result.kind is AdmissionKind.waitlisted
        assert result.entry.priority == 1
        assert await get_user_rsvp_for_event(db_session, user.id, event.id) is None
        assert await confirmed_count(db_session, event.id) == 1

    async def test_duplicate_waitlist_request_fails(self, db_session, make_user, make_event, attend):
        event = await make_event(1)
        await attend(await make_user("u1"), event)
        user = await make_user("u2")
        controller = AdmissionController(db_session)
        await controller.request_rsvp(user.id, event.id, RSVPStatusEnum.attending)

        result = await controller.request_rsvp(user.id, event.id, RSVPStatusEnum.attending)

        assert result.kind is AdmissionKind.failed
        assert result.reason is ErrorCode.ALREADY_WAITLISTED
        assert "waiting list" in result.message

    async def test_existing_rsvp_is_updated_in_place(self, db_session, make_user, make_event, attend):
        """Existing attendees are never displaced, even when the event is full."""
        event = await make_event(1)
        user = await make_user("u1")
        await attend(user, event)

        result = await AdmissionController(db_session).request_rsvp(user.id, event.id, RSVPStatusEnum.attending, 3)
        await db_session.commit()

        assert result.kind is AdmissionKind.updated
        assert result.rsvp.guest_count == 3
        assert not result.released_seat
        assert await confirmed_count(db_session, event.id) == 1

    async def test_downgrade_releases_seat(self, db_session, make_user, make_event, attend):
        event = await make_event(1)
        user = await make_user("u1")
        await attend(user, event)

        result = await AdmissionController(db_session).request_rsvp(user.id, event.id, RSVPStatusEnum.maybe)

        assert result.kind is AdmissionKind.updated
        assert result.released_seat
        assert await confirmed_count(db_session, event.id) == 0

    async def test_non_attending_rsvp_never_consumes_capacity(self, db_session, make_user, make_event, attend):
        event = await make_event(1)
        await attend(await make_user("u1"), event)
        user = await make_user("u2")

        result = await AdmissionController(db_session).request_rsvp(user.id, event.id, RSVPStatusEnum.maybe)

        assert result.kind is AdmissionKind.confirmed
        assert result.rsvp.status == RSVPStatusEnum.maybe
        assert await confirmed_count(db_session, event.id) == 1

    async def test_upgrade_to_attending_on_full_event_queues(self, db_session, make_user, make_event, attend):
        """A 'maybe' that becomes 'attending' needs a seat; without one the user is queued."""
        event = await make_event(1)
        await attend(await make_user("u1"), event)
        user = await make_user("u2")
        controller = AdmissionController(db_session)
        await controller.request_rsvp(user.id, event.id, RSVPStatusEnum.maybe)

        result = await controller.request_rsvp(user.id, event.id, RSVPStatusEnum.attending)
        await db_session.commit()

        assert result.kind is AdmissionKind.waitlisted
        assert await get_user_rsvp_for_event(db_session, user.id, event.id) is None
        assert await confirmed_count(db_session, event.id) == 1

    async def test_declining_leaves_the_waiting_list(self, db_session, make_user, make_event, attend):
        """An RSVP record and a queue entry never coexist for the same user."""
        event = await make_event(1)
        await attend(await make_user("u1"), event)
        u2, u3 = await make_user("u2"), await make_user("u3")
        controller = AdmissionController(db_session)
        await controller.request_rsvp(u2.id, event.id, RSVPStatusEnum.attending)
        await controller.request_rsvp(u3.id, event.id, RSVPStatusEnum.attending)

        result = await controller.request_rsvp(u2.id, event.id, RSVPStatusEnum.not_attending)
        await db_session.commit()

        store = WaitingListStore(db_session)
        assert result.kind is AdmissionKind.confirmed
        assert await store.position_of(u2.id, event.id) == -1
        assert await store.position_of(u3.id, event.id) == 1

    async def test_zero_capacity_event_only_queues(self, db_session, make_user, make_event):
        event = await make_event(0)
        user = await make_user("u1")

        result = await AdmissionController(db_session).request_rsvp(user.id, event.id, RSVPStatusEnum.attending)

        assert result.kind is AdmissionKind.waitlisted

    async def test_unknown_event_fails(self, db_session, make_user):
        user = await make_user("u1")

        result = await AdmissionController(db_session).request_rsvp(user.id, uuid4(), RSVPStatusEnum.attending)

        assert result.kind is AdmissionKind.failed
        assert result.reason is ErrorCode.EVENT_NOT_FOUND

    async def test_unknown_user_fails(self, db_session, make_event):
        event = await make_event(1)

        result = await AdmissionController(db_session).request_rsvp(uuid4(), event.id, RSVPStatusEnum.attending)

        assert result.kind is AdmissionKind.failed
        assert result.reason is ErrorCode.USER_NOT_FOUND
