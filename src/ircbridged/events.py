"""Connection events published by the IRC session, and the dispatcher that routes them."""

from __future__ import annotations

import contextlib
import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger


@dataclass(frozen=True)
class SessionEstablished:
    """IRC registration completed (first connect or any reconnect)."""

    server: str


@dataclass(frozen=True)
class SessionLost:
    """IRC connection dropped without us asking for it."""

    server: str
    reason: str | None = None


class EventTarget(Protocol):
    def accept_event(self, source: str, evt: object) -> bool: ...

    def push_event(self, source: str, evt: object) -> None:
        """Take ownership of an accepted event. Must not block."""
        ...


def event(type_name: str) -> Callable[[Callable[..., object]], Callable[..., tuple[str, object]]]:
    """Tag an event factory: the wrapped call returns (type_name, event) and exposes .TYPE."""

    def decorator(factory: Callable[..., object]) -> Callable[..., tuple[str, object]]:
        @functools.wraps(factory)
        def wrapper(*args: Any, **kwargs: Any) -> tuple[str, object]:
            return type_name, factory(*args, **kwargs)

        wrapper.TYPE = type_name  # type: ignore[attr-defined]
        return wrapper

    return decorator


@event("session_established")
def session_established(server: str) -> SessionEstablished:
    return SessionEstablished(server=server)


@event("session_lost")
def session_lost(server: str, *, reason: str | None = None) -> SessionLost:
    return SessionLost(server=server, reason=reason)


class Dispatcher:
    """Fans events out to registered targets in registration order.

    A target that raises is logged and skipped; the remaining targets still
    receive the event.
    """

    def __init__(self) -> None:
        self._targets: list[EventTarget] = []

    def register(self, target: EventTarget) -> None:
        self._targets.append(target)

    def unregister(self, target: EventTarget) -> None:
        """Remove target; unknown targets are ignored."""
        with contextlib.suppress(ValueError):
            self._targets.remove(target)

    def dispatch(self, source: str, evt: object) -> None:
        for target in list(self._targets):
            try:
                wanted = target.accept_event(source, evt)
                if wanted:
                    target.push_event(source, evt)
            except Exception as exc:
                logger.exception("Event {} from {} not delivered to {}: {}", type(evt).__name__, source, target, exc)
