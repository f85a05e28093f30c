"""Event manager for Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from admitflow.registry.models import utcnow

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


class EventType(str, Enum):
    """Types of events that can be emitted."""

    REGISTRATION_SUBMITTED = "registration_submitted"
    REGISTRATION_APPROVED = "registration_approved"
    REGISTRATION_REJECTED = "registration_rejected"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    class_id: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    class_id: str | None = None  # None means subscribe to all classes

    @classmethod
    def create(cls, class_id: str | None = None) -> Subscriber:
        """Create a new subscriber."""
        return cls(id=str(uuid4()), queue=asyncio.Queue(), class_id=class_id)

    def wants(self, event: Event) -> bool:
        return self.class_id is None or event.class_id is None or self.class_id == event.class_id


@dataclass
class EventManager:
    """Manager for SSE events."""

    heartbeat_interval: float = 30.0  # seconds
    _subscribers: dict[str, Subscriber] = field(default_factory=dict)

    def subscribe(self, class_id: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            class_id: Optional class ID to filter events. None means all classes.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(class_id)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        self._subscribers.pop(subscriber_id, None)

    async def emit(self, event: Event) -> None:
        """Emit an event to all matching subscribers."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Emit an event synchronously (for use in non-async contexts)."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                subscriber.queue.put_nowait(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # Convenience methods for emitting specific event types

    def emit_registration_submitted(
        self,
        registration_id: str,
        email: str,
        class_id: str | None,
        admission_number: str | None,
    ) -> None:
        """Emit a registration_submitted event."""
        event = Event(
            event_type=EventType.REGISTRATION_SUBMITTED,
            class_id=class_id,
            data={
                "registration_id": registration_id,
                "email": email,
                "class_id": class_id,
                "admission_number": admission_number,
            },
        )
        self.emit_sync(event)

    def emit_registration_approved(
        self,
        registration_id: str,
        reviewer_id: str,
        class_id: str | None,
        admission_number: str | None,
    ) -> None:
        """Emit a registration_approved event."""
        event = Event(
            event_type=EventType.REGISTRATION_APPROVED,
            class_id=class_id,
            data={
                "registration_id": registration_id,
                "reviewer_id": reviewer_id,
                "class_id": class_id,
                "admission_number": admission_number,
            },
        )
        self.emit_sync(event)

    def emit_registration_rejected(
        self,
        registration_id: str,
        reviewer_id: str,
        class_id: str | None,
        reason: str,
    ) -> None:
        """Emit a registration_rejected event."""
        event = Event(
            event_type=EventType.REGISTRATION_REJECTED,
            class_id=class_id,
            data={
                "registration_id": registration_id,
                "reviewer_id": reviewer_id,
                "class_id": class_id,
                "reason": reason,
            },
        )
        self.emit_sync(event)

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            class_id=None,  # Heartbeat goes to all subscribers
            data={"timestamp": utcnow().isoformat() + "Z"},
        )

    async def stream(self, subscriber: Subscriber) -> AsyncGenerator[str, None]:
        """Yield SSE frames for a subscriber until the client goes away.

        A heartbeat frame is sent whenever no event arrives within
        ``heartbeat_interval`` seconds. The subscriber is always removed on exit.
        """
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(), timeout=self.heartbeat_interval
                    )
                except TimeoutError:
                    event = self.create_heartbeat_event()
                yield event.to_sse()
        finally:
            self.unsubscribe(subscriber.id)
