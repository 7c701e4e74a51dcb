"""IRC adapter package."""

from ircbridged.adapters.irc.client import IRCSession

__all__ = ["IRCSession"]
