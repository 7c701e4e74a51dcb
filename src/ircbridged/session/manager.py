"""Session lifecycle: connect, reconnect on loss, restore channels, serialize dispatch.

One asyncio.Lock guards the session and the membership set. It is taken by
command dispatch, by the reconnect loop (for its whole duration, sleeps
included) and by the rejoin pass. Commands that arrive during an outage
wait on the lock and run in arrival order once the session is back.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, wait_fixed

from ircbridged.core.constants import DEFAULT_RECONNECT_INTERVAL
from ircbridged.core.errors import SessionConnectError
from ircbridged.events import SessionEstablished, SessionLost
from ircbridged.gateway.dispatcher import CommandDispatcher
from ircbridged.session.base import SessionState
from ircbridged.session.membership import ChannelMembership

if TYPE_CHECKING:
    from ircbridged.ingress.codec import Command
    from ircbridged.session.base import ChatSession


class SessionManager:
    """Owns the IRC session, its lock and the channel membership set.

    Registered on the Bus as an event target; connection events are queued
    and handled one at a time by run().
    """

    def __init__(
        self,
        session: ChatSession,
        membership: ChannelMembership | None = None,
        *,
        reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._session = session
        self._membership = membership if membership is not None else ChannelMembership()
        self._dispatcher = CommandDispatcher(session, self._membership)
        self._reconnect_interval = reconnect_interval
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._events: asyncio.Queue[object] = asyncio.Queue()
        self._state = SessionState.DISCONNECTED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def membership(self) -> ChannelMembership:
        return self._membership

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    def _set_state(self, state: SessionState) -> None:
        if state is not self._state:
            logger.debug("Session state {} -> {}", self._state.value, state.value)
        self._state = state

    def accept_event(self, source: str, evt: object) -> bool:
        """Accept connection events from the IRC client."""
        return isinstance(evt, (SessionEstablished, SessionLost))

    def push_event(self, source: str, evt: object) -> None:
        """Queue a connection event for the control loop."""
        self._events.put_nowait(evt)

    async def start(self) -> None:
        """First connection attempt. Failure is fatal and not retried."""
        self._set_state(SessionState.CONNECTING)
        try:
            await self._session.open()
        except Exception as exc:
            self._set_state(SessionState.DISCONNECTED)
            raise SessionConnectError(
                f"initial IRC connection failed: {exc}",
                code="initial_connect_failed",
                original_error=exc,
            ) from exc
        self._set_state(SessionState.CONNECTED)

    async def run(self) -> None:
        """Control loop: handle queued connection events forever."""
        while True:
            evt = await self._events.get()
            try:
                await self.handle_event(evt)
            finally:
                self._events.task_done()

    async def handle_event(self, evt: object) -> None:
        if isinstance(evt, SessionLost):
            await self._on_session_lost(evt)
        elif isinstance(evt, SessionEstablished):
            await self._on_session_established(evt)

    async def dispatch(self, cmd: Command) -> bool:
        """Run one command under the session lock."""
        async with self._lock:
            return await self._dispatcher.dispatch(cmd)

    async def _on_session_lost(self, evt: SessionLost) -> None:
        logger.warning("Disconnected from IRC server {} ({})", evt.server, evt.reason or "no reason")
        self._set_state(SessionState.DISCONNECTED)
        async with self._lock:
            await self._reconnect()
        logger.info("Reconnected to IRC server {}", evt.server)

    async def _reconnect(self) -> None:
        """Retry open() every reconnect_interval until it succeeds. Caller holds the lock."""
        retrying = AsyncRetrying(
            sleep=self._sleep,
            wait=wait_fixed(self._reconnect_interval),
            retry=retry_if_exception_type(Exception),
            before=self._before_attempt,
            before_sleep=self._after_failed_attempt,
        )
        await self._sleep(self._reconnect_interval)
        await retrying(self._session.open)
        self._set_state(SessionState.CONNECTED)

    def _before_attempt(self, retry_state: RetryCallState) -> None:
        self._set_state(SessionState.CONNECTING)
        logger.info("Reconnecting (attempt {})", retry_state.attempt_number)

    def _after_failed_attempt(self, retry_state: RetryCallState) -> None:
        self._set_state(SessionState.DISCONNECTED)
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(
            "Reconnect attempt {} failed: {}; retrying in {:.0f}s",
            retry_state.attempt_number,
            exc,
            self._reconnect_interval,
        )

    async def _on_session_established(self, evt: SessionEstablished) -> None:
        logger.info("IRC session established with {}", evt.server)
        self._set_state(SessionState.CONNECTED)
        async with self._lock:
            for channel in self._membership:
                logger.info("Rejoining {}", channel)
                try:
                    await self._session.join_channel(channel)
                except Exception as exc:
                    logger.error("Rejoin of {} failed: {}", channel, exc)
