"""Command codec: one UDP datagram -> Command.

Payloads look like ``{"Method": "message", "Params": ["#room", "hi"]}``.
Field names are matched case-insensitively; when several keys match, the
last one in the document wins.
Only the shape is checked here. Method names and arity are the
dispatcher's concern.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ircbridged.core.errors import CommandDecodeError


@dataclass(frozen=True)
class Command:
    """A decoded instruction. ``Command()`` is the zero value."""

    method: str = ""
    params: tuple[str, ...] = ()


EMPTY_COMMAND = Command()


class _Fields(dict):
    """JSON object that also keeps every (key, value) pair in document order."""

    def __init__(self, pairs: list[tuple[str, Any]]) -> None:
        super().__init__(pairs)
        self.pairs = pairs


def _field(data: _Fields, name: str, *, null_clears: bool) -> Any:
    """Value of the last key in the document whose case-folded name matches.

    A later null either clears an earlier value (lists) or is skipped (strings).
    """
    folded = name.casefold()
    value = None
    for key, candidate in data.pairs:
        if key.casefold() != folded:
            continue
        if candidate is None and not null_clears:
            continue
        value = candidate
    return value


def decode_command(payload: bytes) -> Command:
    """Decode a datagram payload. Raises CommandDecodeError on malformed input.

    Invalid UTF-8 inside strings is replaced with U+FFFD rather than rejected.
    """
    try:
        data = json.loads(payload.decode("utf-8", errors="replace"), object_pairs_hook=_Fields)
    except ValueError as exc:
        raise CommandDecodeError(
            f"invalid JSON: {exc}",
            code="invalid_json",
            details={"size": len(payload)},
            original_error=exc,
        ) from exc

    if data is None:
        return EMPTY_COMMAND
    if not isinstance(data, dict):
        raise CommandDecodeError(
            "payload must be a JSON object",
            code="invalid_shape",
            details={"type": type(data).__name__},
        )

    method = _field(data, "Method", null_clears=False)
    if method is None:
        method = ""
    elif not isinstance(method, str):
        raise CommandDecodeError(
            "Method must be a string",
            code="invalid_method",
            details={"type": type(method).__name__},
        )

    params = _field(data, "Params", null_clears=True)
    if params is None:
        params = []
    elif not isinstance(params, list) or not all(isinstance(p, str) for p in params):
        raise CommandDecodeError(
            "Params must be a list of strings",
            code="invalid_params",
            details={"type": type(params).__name__},
        )

    return Command(method=method, params=tuple(params))
