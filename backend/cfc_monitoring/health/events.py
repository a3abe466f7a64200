"""Fan-out of service transition events to subscribers.

Handlers are awaited in subscription order. A failing handler is logged and
does not stop the others or the probe cycle that published the event.
"""

import logging
from typing import Protocol

from cfc_monitoring.health.models import ServiceTransition

logger = logging.getLogger(__name__)


class TransitionHandler(Protocol):
    """Protocol for transition subscribers."""

    async def __call__(self, transition: ServiceTransition) -> None:
        """Handle a service transition."""
        ...


class TransitionBus:
    """Publish-subscribe for ServiceTransition events."""

    def __init__(self) -> None:
        self._subscribers: list[TransitionHandler] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: TransitionHandler) -> None:
        """Register a handler to receive transitions.

        Args:
            handler: Async callable that accepts a ServiceTransition
        """
        self._subscribers.append(handler)

    async def publish(self, transition: ServiceTransition) -> int:
        """Deliver a transition to every subscriber.

        Returns:
            Number of handlers that completed without raising
        """
        delivered = 0
        for handler in self._subscribers:
            try:
                await handler(transition)
                delivered += 1
            except Exception:
                logger.exception(
                    "Transition handler failed for %s (%s)",
                    transition.service,
                    transition.kind.value,
                )
        return delivered
