"""UDP listener: read one datagram, decode, dispatch, repeat."""

from __future__ import annotations

import asyncio
import socket
from collections.abc import Awaitable
from typing import Protocol

from loguru import logger

from ircbridged.core.constants import MAX_DATAGRAM_SIZE
from ircbridged.core.errors import CommandDecodeError, IngressError
from ircbridged.ingress.codec import EMPTY_COMMAND, Command, decode_command


class CommandSink(Protocol):
    """Anything that takes decoded commands (the SessionManager)."""

    def dispatch(self, cmd: Command) -> Awaitable[bool]: ...


def bind_listener(port: int, host: str = "") -> socket.socket:
    """Bind a non-blocking UDP socket. Raises IngressError on failure."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise IngressError(
            f"cannot listen on UDP port {port}: {exc}",
            code="bind_failed",
            details={"host": host, "port": port},
            original_error=exc,
        ) from exc
    sock.setblocking(False)
    logger.info("Listening for JSON commands on udp://{}:{}", host or "*", port)
    return sock


class IngressLoop:
    """Reads datagrams one at a time and hands each decoded command to the sink.

    The next datagram is not read until the previous dispatch returns, so a
    sink that blocks (session lock held during reconnect) stalls intake.
    """

    def __init__(self, sock: socket.socket, sink: CommandSink) -> None:
        self._sock = sock
        self._sink = sink

    async def _recv(self) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.sock_recv(self._sock, MAX_DATAGRAM_SIZE)

    async def receive_one(self) -> Command:
        """Read and decode one datagram. Malformed payloads yield the empty command."""
        try:
            data = await self._recv()
        except OSError as exc:
            raise IngressError(
                f"UDP read failed: {exc}",
                code="read_failed",
                original_error=exc,
            ) from exc

        logger.debug("recv: {!r}", data)
        try:
            cmd = decode_command(data)
        except CommandDecodeError as exc:
            logger.warning("Malformed command payload ({}): {}", exc.code, exc)
            cmd = EMPTY_COMMAND
        logger.debug("recv (parsed): {!r}", cmd)
        return cmd

    async def run(self) -> None:
        """Serve forever. A read error raises IngressError."""
        while True:
            cmd = await self.receive_one()
            await self._sink.dispatch(cmd)
