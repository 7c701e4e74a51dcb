"""Session collaborator interface and value types."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol


class SessionState(enum.Enum):
    """Connectivity of the single IRC session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class SecurityMode(enum.Enum):
    """Transport security for the IRC connection."""

    NONE = "none"
    TLS = "tls"
    TLS_INSECURE = "tls-insecure"

    @classmethod
    def from_flags(cls, ssl: bool, ssl_insecure: bool) -> SecurityMode:
        """Map the ssl / ssl-insecure switches to a mode. Insecure without ssl means plain."""
        if not ssl:
            return cls.NONE
        return cls.TLS_INSECURE if ssl_insecure else cls.TLS

    @property
    def tls(self) -> bool:
        return self is not SecurityMode.NONE

    @property
    def tls_verify(self) -> bool:
        return self is SecurityMode.TLS


@dataclass(frozen=True)
class ServerAddress:
    """IRC server host and port."""

    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class ChatSession(Protocol):
    """What the bridge needs from a chat-protocol session.

    Connection events are not part of this interface; implementations publish
    SessionEstablished / SessionLost on the event bus.
    """

    async def open(self) -> None:
        """Connect with the stored address, security mode and identity. Raises on failure."""
        ...

    async def send_message(self, target: str, text: str) -> None: ...

    async def send_notice(self, target: str, text: str) -> None: ...

    async def join_channel(self, channel: str) -> None: ...

    async def part_channel(self, channel: str) -> None: ...

    async def close(self) -> None:
        """Leave the server on shutdown."""
        ...
