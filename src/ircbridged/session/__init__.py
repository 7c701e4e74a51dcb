"""Session lifecycle and channel membership."""

from ircbridged.session.base import ChatSession, SecurityMode, ServerAddress, SessionState
from ircbridged.session.manager import SessionManager
from ircbridged.session.membership import ChannelMembership

__all__ = [
    "ChannelMembership",
    "ChatSession",
    "SecurityMode",
    "ServerAddress",
    "SessionManager",
    "SessionState",
]
