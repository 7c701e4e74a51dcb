"""Gateway: event bus and command dispatch."""

from ircbridged.gateway.bus import Bus
from ircbridged.gateway.dispatcher import CommandDispatcher

__all__ = ["Bus", "CommandDispatcher"]
