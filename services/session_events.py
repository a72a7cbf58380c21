import logging
from typing import Awaitable, Callable

from models.session import SessionChange

logger = logging.getLogger(__name__)

SessionChangeListener = Callable[[SessionChange], Awaitable[None]]


class SessionEventBus:
    """
    In-process publish/subscribe channel for session transitions.

    The identity provider publishes, every open view shell subscribes. Delivery is
    sequential in subscription order; a failing listener is logged and does not
    stop delivery to the others.
    """

    def __init__(self):
        self._listeners: list[SessionChangeListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: SessionChangeListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A callable that removes the listener again (safe to call twice)
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, change: SessionChange) -> None:
        logger.info(f"[Session] {change.event.value} for user {change.user_id}")
        # Copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                await listener(change)
            except Exception:
                logger.exception(
                    f"[Session] Listener {getattr(listener, '__qualname__', listener)} "
                    f"failed on {change.event.value}"
                )
