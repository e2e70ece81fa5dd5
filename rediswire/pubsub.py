"""Recognising pub/sub commands and replies on the wire."""

from __future__ import annotations

import enum
from typing import Optional

from .reply import Reply, ReplyType

__all__ = [
    "CommandKind",
    "split_command",
    "classify_command",
    "is_subscribe_reply",
    "is_spontaneous_push",
]

_SUBSCRIBE = b"subscribe"
_UNSUBSCRIBE = b"unsubscribe"
_MONITOR = b"monitor"
_MESSAGE = b"message"

# Reply kinds that a subscribe-related message may start with.
_SUBSCRIBE_REPLY_TYPES = (_SUBSCRIBE, _MESSAGE, _UNSUBSCRIBE)


class CommandKind(enum.Enum):
    """How an outgoing command affects callback bookkeeping."""

    REGULAR = "regular"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    MONITOR = "monitor"


def split_command(cmd: bytes) -> list[bytes]:
    """Return the bulk arguments of an encoded RESP request.

    Anything before the first ``$`` (the multi-bulk header) is skipped.
    Raises :class:`ValueError` when a bulk header or payload is malformed
    or truncated.
    """
    data = bytes(cmd)
    args: list[bytes] = []
    pos = 0
    end = len(data)
    while pos < end:
        dollar = data.find(b"$", pos)
        if dollar < 0:
            break
        cr = data.find(b"\r", dollar + 1)
        if cr < 0:
            raise ValueError(f"unterminated bulk length at offset {dollar}")
        digits = data[dollar + 1 : cr]
        if not digits.isdigit():
            raise ValueError(f"invalid bulk length {digits!r} at offset {dollar}")
        length = int(digits)
        start = cr + 2
        stop = start + length
        if stop > end:
            raise ValueError(f"bulk argument at offset {dollar} is truncated")
        args.append(data[start:stop])
        pos = stop + 2
    return args


def classify_command(cmd: bytes) -> tuple[CommandKind, bool, list[bytes]]:
    """Classify an encoded command for subscription bookkeeping.

    Returns ``(kind, pattern, names)``: ``pattern`` is true when the command
    name starts with ``p`` (as in PSUBSCRIBE), and ``names`` are the
    arguments after the command name. SUBSCRIBE without any channel counts
    as a regular command. Raises :class:`ValueError` for an empty command.
    """
    args = split_command(cmd)
    if not args:
        raise ValueError("command has no arguments")
    name, names = args[0].lower(), args[1:]
    pattern = name.startswith(b"p")
    base = name[1:] if pattern else name

    if names and base == _SUBSCRIBE:
        kind = CommandKind.SUBSCRIBE
    elif base == _UNSUBSCRIBE:
        kind = CommandKind.UNSUBSCRIBE
    elif base == _MONITOR:
        kind = CommandKind.MONITOR
    else:
        kind = CommandKind.REGULAR
    return kind, pattern, names


def _matches(text: bytes, target: bytes) -> bool:
    """Case-insensitive comparison limited to the length of ``text``.

    ``text`` matches when it is a prefix of ``target``; an embedded NUL
    ends ``text`` and then requires the prefix to be all of ``target``.
    """
    lowered = text.lower()
    nul = lowered.find(b"\0")
    if nul >= 0:
        return lowered[:nul] == target
    return target.startswith(lowered)


def is_subscribe_reply(reply: Reply) -> bool:
    """Whether ``reply`` is a subscribe, unsubscribe or message notification."""
    if not reply.elements:
        return False
    first: Optional[Reply] = reply.elements[0]
    if first is None or first.type != ReplyType.STRING or first.string is None:
        return False
    kind = first.string
    if len(kind) < len(_MESSAGE):
        return False
    if kind[:1].lower() == b"p":
        kind = kind[1:]
    return any(_matches(kind, target) for target in _SUBSCRIBE_REPLY_TYPES)


def is_spontaneous_push(reply: Reply) -> bool:
    """Whether ``reply`` is a push message unrelated to subscriptions."""
    return reply.is_push() and not is_subscribe_reply(reply)