"""Channel membership intent: which channels the bridge wants to be in."""

from __future__ import annotations

from collections.abc import Iterator


class ChannelMembership:
    """Set of channels to restore after a reconnect.

    Not synchronized. Callers hold the SessionManager lock.
    """

    def __init__(self) -> None:
        self._channels: dict[str, None] = {}

    def add(self, channel: str) -> None:
        self._channels[channel] = None

    def remove(self, channel: str) -> None:
        """Forget a channel. Unknown channels are ignored."""
        self._channels.pop(channel, None)

    def __contains__(self, channel: object) -> bool:
        return channel in self._channels

    def __iter__(self) -> Iterator[str]:
        return iter(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

    def __repr__(self) -> str:
        return f"ChannelMembership({sorted(self._channels)!r})"
