"""
Event emitter implementing the Observer Pattern for trade lifecycle events.

Listeners are called synchronously in subscription order. Each call runs inside
its own fault boundary: a failing listener is logged and reported in the
dispatch results, and never reaches other listeners or the bar loop.
"""

from loguru import logger

from tradereplay.core.models.events import DispatchResult, TradeEvent
from tradereplay.core.protocols import TradeEventListener, Unsubscribe


def _listener_name(listener: TradeEventListener) -> str:
    return getattr(listener, "__qualname__", type(listener).__name__)


class EventEmitter:
    """Subject holding an ordered list of lifecycle listeners.

    Listeners are held by strong reference until unsubscribed, so lambdas and
    closures stay registered.
    """

    def __init__(self) -> None:
        """Initialize with no listeners."""
        self._listeners: list[TradeEventListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: TradeEventListener) -> Unsubscribe:
        """Add a listener to the notification list.

        Args:
            listener: Callable receiving each TradeEvent

        Returns:
            Function removing this listener; calling it twice is harmless
        """
        self._listeners.append(listener)
        logger.debug(f"Added trade event listener: {_listener_name(listener)}")

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: TradeEventListener) -> None:
        """Remove a listener from the notification list, if present."""
        for index, existing in enumerate(self._listeners):
            if existing is listener:
                del self._listeners[index]
                logger.debug(f"Removed trade event listener: {_listener_name(listener)}")
                return

    def clear(self) -> None:
        """Remove every listener."""
        self._listeners.clear()

    def emit(self, event: TradeEvent) -> list[DispatchResult]:
        """Notify all listeners of a lifecycle event.

        Args:
            event: Event to deliver

        Returns:
            One DispatchResult per listener, in delivery order
        """
        results: list[DispatchResult] = []
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            name = _listener_name(listener)
            try:
                listener(event)
            except Exception as e:
                logger.exception(f"Trade event listener {name} failed on {event.type}: {e}")
                results.append(DispatchResult(listener_name=name, error=e))
            else:
                results.append(DispatchResult(listener_name=name))
        return results
