"""Protocol adapters."""

from ircbridged.adapters.irc import IRCSession

__all__ = ["IRCSession"]
