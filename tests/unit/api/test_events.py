"""Unit tests for EventManager and events."""

import asyncio
import json

import pytest

from admitflow.api.events import Event, EventManager, EventType


@pytest.fixture
def event_manager():
    """Create an EventManager instance."""
    return EventManager()


@pytest.mark.unit
class TestEventManagerSubscribe:
    """Tests for EventManager.subscribe."""

    def test_event_manager_subscribe(self, event_manager: EventManager) -> None:
        """Client can subscribe."""
        subscriber = event_manager.subscribe()

        assert subscriber.id is not None
        assert subscriber.class_id is None
        assert event_manager.subscriber_count == 1

    def test_event_manager_subscribe_with_class_filter(self, event_manager: EventManager) -> None:
        """Client can subscribe to one class."""
        subscriber = event_manager.subscribe(class_id="class-123")

        assert subscriber.class_id == "class-123"

    def test_event_manager_unsubscribe(self, event_manager: EventManager) -> None:
        """Unsubscribing removes the client; unknown IDs are ignored."""
        subscriber = event_manager.subscribe()

        event_manager.unsubscribe(subscriber.id)
        event_manager.unsubscribe("nonexistent-id")

        assert event_manager.subscriber_count == 0


@pytest.mark.unit
class TestEventManagerEmit:
    """Tests for EventManager.emit."""

    @pytest.mark.asyncio
    async def test_event_manager_emit_to_all(self, event_manager: EventManager) -> None:
        """Event reaches all subscribers."""
        sub1 = event_manager.subscribe()
        sub2 = event_manager.subscribe()

        await event_manager.emit(
            Event(
                event_type=EventType.REGISTRATION_SUBMITTED,
                class_id="class-123",
                data={"registration_id": "reg-1"},
            )
        )

        event1 = await asyncio.wait_for(sub1.queue.get(), timeout=1.0)
        event2 = await asyncio.wait_for(sub2.queue.get(), timeout=1.0)
        assert event1.data["registration_id"] == "reg-1"
        assert event2.data["registration_id"] == "reg-1"

    @pytest.mark.asyncio
    async def test_event_manager_filter_by_class(self, event_manager: EventManager) -> None:
        """Filtered subscribers get their class and class-less events only."""
        sub_all = event_manager.subscribe()
        sub_filtered = event_manager.subscribe(class_id="class-123")

        for registration_id, class_id in [
            ("reg-1", "class-123"),
            ("reg-2", "class-456"),
            ("reg-3", None),
        ]:
            await event_manager.emit(
                Event(
                    event_type=EventType.REGISTRATION_SUBMITTED,
                    class_id=class_id,
                    data={"registration_id": registration_id},
                )
            )

        assert sub_all.queue.qsize() == 3
        received = [sub_filtered.queue.get_nowait().data["registration_id"] for _ in range(2)]
        assert received == ["reg-1", "reg-3"]
        assert sub_filtered.queue.empty()

    def test_event_manager_no_subscribers(self, event_manager: EventManager) -> None:
        """Emit doesn't fail with no subscribers."""
        event_manager.emit_sync(
            Event(event_type=EventType.HEARTBEAT, data={"timestamp": "now"})
        )


@pytest.mark.unit
class TestEventFormat:
    """Tests for event formatting."""

    def test_event_format_registration_submitted(self, event_manager: EventManager) -> None:
        """Correct event structure for registration_submitted."""
        sub = event_manager.subscribe()

        event_manager.emit_registration_submitted(
            registration_id="reg-123",
            email="ada@example.com",
            class_id="class-1",
            admission_number="ELBA/25/SS3B/001",
        )

        event = sub.queue.get_nowait()
        assert event.event_type == EventType.REGISTRATION_SUBMITTED
        assert event.data["email"] == "ada@example.com"

        sse = event.to_sse()
        assert sse.startswith("event: registration_submitted\n")
        assert sse.endswith("\n\n")
        data = json.loads(sse.split("data: ")[1].strip())
        assert data["admission_number"] == "ELBA/25/SS3B/001"

    def test_event_format_registration_approved(self, event_manager: EventManager) -> None:
        sub = event_manager.subscribe()

        event_manager.emit_registration_approved(
            registration_id="reg-123",
            reviewer_id="admin-1",
            class_id=None,
            admission_number="ELBA/25/SS3B/001",
        )

        event = sub.queue.get_nowait()
        assert event.event_type == EventType.REGISTRATION_APPROVED
        assert event.data["reviewer_id"] == "admin-1"

    def test_event_format_registration_rejected(self, event_manager: EventManager) -> None:
        sub = event_manager.subscribe()

        event_manager.emit_registration_rejected(
            registration_id="reg-123",
            reviewer_id="admin-1",
            class_id=None,
            reason="Incomplete documents",
        )

        event = sub.queue.get_nowait()
        assert event.event_type == EventType.REGISTRATION_REJECTED
        assert event.data["reason"] == "Incomplete documents"

    def test_heartbeat_event(self, event_manager: EventManager) -> None:
        event = event_manager.create_heartbeat_event()

        assert event.event_type == EventType.HEARTBEAT
        assert event.class_id is None
        assert event.data["timestamp"].endswith("Z")


@pytest.mark.unit
class TestEventManagerStream:
    """Tests for EventManager.stream."""

    @pytest.mark.asyncio
    async def test_stream_yields_queued_event(self, event_manager: EventManager) -> None:
        sub = event_manager.subscribe()
        event_manager.emit_registration_submitted(
            registration_id="reg-1",
            email="ada@example.com",
            class_id=None,
            admission_number=None,
        )
        frames = event_manager.stream(sub)

        frame = await frames.__anext__()
        await frames.aclose()

        assert frame.startswith("event: registration_submitted\n")

    @pytest.mark.asyncio
    async def test_stream_heartbeat_when_idle(self) -> None:
        event_manager = EventManager(heartbeat_interval=0.01)
        frames = event_manager.stream(event_manager.subscribe())

        frame = await frames.__anext__()
        await frames.aclose()

        assert frame.startswith("event: heartbeat\n")

    @pytest.mark.asyncio
    async def test_stream_close_unsubscribes(self, event_manager: EventManager) -> None:
        frames = event_manager.stream(event_manager.subscribe())
        event_manager.emit_sync(Event(event_type=EventType.HEARTBEAT, data={}))

        await frames.__anext__()
        await frames.aclose()

        assert event_manager.subscriber_count == 0
