"""Command dispatch: Command -> one IRC operation (+ membership update for join/part)."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from loguru import logger

from ircbridged.core.constants import REQUIRED_PARAMS

if TYPE_CHECKING:
    from ircbridged.ingress.codec import Command
    from ircbridged.session.base import ChatSession
    from ircbridged.session.membership import ChannelMembership


class CommandDispatcher:
    """Interprets commands against the session. Caller must hold the session lock."""

    def __init__(self, session: ChatSession, membership: ChannelMembership) -> None:
        self._session = session
        self._membership = membership
        self._handlers: dict[str, Callable[..., Awaitable[None]]] = {
            "message": self._message,
            "notice": self._notice,
            "join": self._join,
            "part": self._part,
        }

    async def dispatch(self, cmd: Command) -> bool:
        """Run the command. Returns False if it was discarded.

        Every command, discarded or not, is debug-logged as handled.
        """
        handled = False
        handler = self._handlers.get(cmd.method)
        if handler is None:
            logger.warning("Discarding command with unknown method {!r}: {!r}", cmd.method, cmd)
        elif len(cmd.params) < REQUIRED_PARAMS[cmd.method]:
            logger.warning(
                "Discarding invalid command {!r}: {} needs {} params, got {}",
                cmd,
                cmd.method,
                REQUIRED_PARAMS[cmd.method],
                len(cmd.params),
            )
        else:
            await handler(*cmd.params[: REQUIRED_PARAMS[cmd.method]])
            handled = True
        logger.debug("Handled {!r}", cmd)
        return handled

    async def _call(self, what: str, op: Callable[..., Awaitable[None]], *args: str) -> None:
        """Run a session operation; failures are logged, never raised."""
        try:
            await op(*args)
        except Exception as exc:
            logger.error("IRC {} {} failed: {}", what, args[0], exc)

    async def _message(self, target: str, text: str) -> None:
        await self._call("PRIVMSG", self._session.send_message, target, text)

    async def _notice(self, target: str, text: str) -> None:
        await self._call("NOTICE", self._session.send_notice, target, text)

    async def _join(self, channel: str) -> None:
        await self._call("JOIN", self._session.join_channel, channel)
        self._membership.add(channel)

    async def _part(self, channel: str) -> None:
        await self._call("PART", self._session.part_channel, channel)
        self._membership.remove(channel)
