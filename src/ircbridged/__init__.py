"""ircbridged: JSON-over-UDP to IRC bridge."""

__version__ = "0.2.0"
