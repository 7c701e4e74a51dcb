"""UDP ingress: datagram listener and command codec."""

from ircbridged.ingress.codec import EMPTY_COMMAND, Command, decode_command
from ircbridged.ingress.listener import IngressLoop, bind_listener

__all__ = ["EMPTY_COMMAND", "Command", "IngressLoop", "bind_listener", "decode_command"]
