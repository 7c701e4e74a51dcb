"""Event bus between the IRC session and the session manager.

The IRC client publishes SessionEstablished / SessionLost here from inside
pydle's callbacks; the manager accepts them and queues them for its control
loop. Publishing never blocks and never raises.
"""

from ircbridged.events import Dispatcher, EventTarget

__all__ = ["Bus", "EventTarget"]


class Bus:
    def __init__(self) -> None:
        self._dispatcher = Dispatcher()

    def register(self, target: EventTarget) -> None:
        self._dispatcher.register(target)

    def unregister(self, target: EventTarget) -> None:
        self._dispatcher.unregister(target)

    def publish(self, source: str, evt: object) -> None:
        """Hand evt to every target whose accept_event() returns True."""
        self._dispatcher.dispatch(source, evt)
