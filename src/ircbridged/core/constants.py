"""Protocol constants."""

from __future__ import annotations

from typing import Literal

CommandMethod = Literal["message", "notice", "join", "part"]

# Minimum params per recognized method: (target, text) or (channel,)
REQUIRED_PARAMS: dict[str, int] = {
    "message": 2,
    "notice": 2,
    "join": 1,
    "part": 1,
}
METHODS: tuple[CommandMethod, ...] = ("message", "notice", "join", "part")

MAX_DATAGRAM_SIZE = 10240

DEFAULT_SERVER = "localhost:6667"
DEFAULT_IRC_PORT = 6667
DEFAULT_NICK = "ircbridge"
DEFAULT_REALNAME = "IRC Bridge"
DEFAULT_LISTEN_PORT = 41234
DEFAULT_RECONNECT_INTERVAL = 60.0
