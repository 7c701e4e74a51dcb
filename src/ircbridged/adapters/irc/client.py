"""IRC session: pydle client publishing connection events on the bus."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import pydle
from loguru import logger

from ircbridged.events import session_established, session_lost
from ircbridged.session.base import SecurityMode, ServerAddress

if TYPE_CHECKING:
    from ircbridged.gateway import Bus


class IRCSession(pydle.Client):
    """Single outbound IRC connection implementing ChatSession.

    pydle's built-in reconnect is off; SessionManager owns retries.
    """

    RECONNECT_ON_ERROR: ClassVar[bool] = False

    def __init__(
        self,
        bus: Bus,
        address: ServerAddress,
        nick: str,
        realname: str,
        security: SecurityMode = SecurityMode.NONE,
        **kwargs,
    ):
        super().__init__(nick, username=nick, realname=realname, **kwargs)
        self._bus = bus
        self._address = address
        self._security = security
        self._configured_nick = nick

    @property
    def address(self) -> ServerAddress:
        return self._address

    @property
    def security(self) -> SecurityMode:
        return self._security

    async def open(self) -> None:
        """Connect (or reconnect) with the stored address and TLS settings."""
        logger.debug(
            "IRC connecting to {} (security={}, nick={})",
            self._address,
            self._security.value,
            self._configured_nick,
        )
        await self.connect(
            hostname=self._address.host,
            port=self._address.port,
            tls=self._security.tls,
            tls_verify=self._security.tls_verify,
        )

    async def close(self) -> None:
        if self.connected:
            await self.quit()

    async def on_connect(self):
        """Registration complete: tell the manager so it can rejoin channels."""
        await super().on_connect()
        logger.info("IRC connected to {} as {}", self._address, self.nickname)
        _, evt = session_established(str(self._address))
        self._bus.publish("irc", evt)

    async def on_disconnect(self, expected: bool) -> None:
        """Publish SessionLost for unexpected disconnects only."""
        await super().on_disconnect(expected)
        if expected:
            logger.debug("IRC disconnected from {} (expected)", self._address)
            return
        _, evt = session_lost(str(self._address), reason="connection lost")
        self._bus.publish("irc", evt)

    async def send_message(self, target: str, text: str) -> None:
        await self.message(target, text)

    async def send_notice(self, target: str, text: str) -> None:
        await self.notice(target, text)

    async def join_channel(self, channel: str) -> None:
        # Raw JOIN: pydle.join() refuses channels it already tracks
        await self.rawmsg("JOIN", channel)

    async def part_channel(self, channel: str) -> None:
        await self.rawmsg("PART", channel)
