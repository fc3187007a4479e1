"""In-process event channels."""

from community.core.events.event_bus import Event, EventBus

__all__ = ["Event", "EventBus"]
