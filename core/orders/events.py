"""
Event Bus - Named-channel publish/subscribe

In-process message bus behind a transport interface. The default transport
schedules delivery on the running asyncio loop so handlers never block the
publisher; a failing handler is logged and never affects other handlers or
the state change that produced the event.

Channels:
- orders         per-user order feed
- admin          administrator feed
- notifications  new / cleared notifications
- sales          revenue series updates
- users          user directory changes
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Sequence, Union

logger = logging.getLogger(__name__)


Handler = Callable[[Any], Any]
Unsubscribe = Callable[[], None]


class Channel(Enum):
    """Named channels of the bus."""

    ORDERS = "orders"
    ADMIN = "admin"
    NOTIFICATIONS = "notifications"
    SALES = "sales"
    USERS = "users"


def _parse_channel(channel: Union[Channel, str]) -> Channel:
    if isinstance(channel, Channel):
        return channel
    try:
        return Channel(channel)
    except ValueError:
        raise ValueError(f"Unknown channel: {channel!r}") from None


def _invoke(channel: Channel, handler: Handler, payload: Any) -> None:
    """Call one handler, isolating its failure."""
    try:
        result = handler(payload)
    except Exception:
        logger.exception("Subscriber on channel %s failed", channel.value)
        return

    if inspect.isawaitable(result):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "Async subscriber on channel %s dropped: no running event loop",
                channel.value,
            )
            if inspect.iscoroutine(result):
                result.close()
            return
        task = asyncio.ensure_future(result, loop=loop)
        task.add_done_callback(lambda t: _log_task_failure(channel, t))


def _log_task_failure(channel: Channel, task: "asyncio.Future[Any]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Async subscriber on channel %s failed: %s",
            channel.value,
            exc,
            exc_info=exc,
        )


# =============================================================================
# Transports
# =============================================================================


class EventTransport(ABC):
    """Delivers one published payload to a snapshot of handlers."""

    @abstractmethod
    def dispatch(self, channel: Channel, handlers: Sequence[Handler], payload: Any) -> None:
        """Deliver `payload` to every handler in `handlers`."""
        pass


class ImmediateTransport(EventTransport):
    """Inline delivery. Deterministic; used by tests and scripts."""

    def dispatch(self, channel: Channel, handlers: Sequence[Handler], payload: Any) -> None:
        for handler in handlers:
            _invoke(channel, handler, payload)


class AsyncioTransport(EventTransport):
    """
    Schedules each handler with loop.call_soon on the running loop.

    call_soon callbacks run in FIFO order, so delivery on a channel keeps
    publish order. Without a running loop there is nothing to defer to and
    handlers run immediately (the publisher has already committed).
    """

    def dispatch(self, channel: Channel, handlers: Sequence[Handler], payload: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for handler in handlers:
            if loop is None:
                _invoke(channel, handler, payload)
            else:
                loop.call_soon(_invoke, channel, handler, payload)


# =============================================================================
# Event Bus
# =============================================================================


class EventBus:
    """
    Named-channel fan-out registry.

    Usage:
        bus = EventBus()
        unsubscribe = bus.subscribe("orders", handler)
        bus.publish("orders", {"type": "ORDER_CREATED", ...})
        unsubscribe()
    """

    def __init__(self, transport: EventTransport | None = None):
        self._transport = transport or AsyncioTransport()
        self._handlers: dict[Channel, list[Handler]] = {channel: [] for channel in Channel}

    @property
    def transport(self) -> EventTransport:
        return self._transport

    def subscribe(self, channel: Union[Channel, str], handler: Handler) -> Unsubscribe:
        """
        Register a handler on a channel.

        Returns:
            Callable that removes the handler. Calling it twice is harmless.
        """
        ch = _parse_channel(channel)
        handlers = self._handlers[ch]
        handlers.append(handler)

        active = True

        def unsubscribe() -> None:
            nonlocal active
            if active and handler in handlers:
                handlers.remove(handler)
            active = False

        return unsubscribe

    def publish(self, channel: Union[Channel, str], payload: Any) -> int:
        """
        Publish a payload to every handler currently registered on a channel.

        Callers publish only after their mutation is committed.

        Returns:
            Number of handlers the payload was dispatched to
        """
        ch = _parse_channel(channel)
        snapshot = tuple(self._handlers[ch])
        if snapshot:
            self._transport.dispatch(ch, snapshot, payload)
        return len(snapshot)

    def subscriber_count(self, channel: Union[Channel, str]) -> int:
        return len(self._handlers[_parse_channel(channel)])

    def clear(self) -> None:
        """Drop every subscription."""
        for handlers in self._handlers.values():
            handlers.clear()
