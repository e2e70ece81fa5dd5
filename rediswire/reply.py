"""Reply objects and the factory that builds them while a reply is parsed."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

__all__ = ["ReplyType", "Reply", "ReplyFactory"]


class ReplyType(enum.IntEnum):
    """Kinds of reply a server can send."""

    STRING = 1
    ARRAY = 2
    INTEGER = 3
    NIL = 4
    STATUS = 5
    ERROR = 6
    DOUBLE = 7
    BOOL = 8
    MAP = 9
    SET = 10
    ATTR = 11
    PUSH = 12
    BIGNUM = 13
    VERB = 14


_AGGREGATES = frozenset({ReplyType.ARRAY, ReplyType.MAP, ReplyType.SET, ReplyType.PUSH})
_STRINGS = frozenset(
    {ReplyType.ERROR, ReplyType.STATUS, ReplyType.STRING, ReplyType.VERB, ReplyType.BIGNUM}
)

# A verbatim string starts with a three letter format and a colon, e.g. "txt:".
_VERB_HEADER = 4


@dataclass
class Reply:
    """One reply, possibly holding nested replies.

    ``string`` holds the payload of string-like replies and the original text
    of a double; ``integer`` holds integers and booleans (as 0 or 1); ``dval``
    holds the value of a double; ``vtype`` the format of a verbatim string;
    ``elements`` the children of an aggregate.
    """

    type: ReplyType
    integer: int = 0
    dval: float = 0.0
    string: Optional[bytes] = None
    vtype: str = ""
    elements: list[Optional[Reply]] = field(default_factory=list)

    def is_push(self) -> bool:
        """Whether this is an out-of-band push message."""
        return self.type == ReplyType.PUSH

    @property
    def len(self) -> int:
        """Length of the string payload, 0 when there is none."""
        return 0 if self.string is None else len(self.string)


class ReplyFactory:
    """Builds :class:`Reply` objects and links each one into its parent."""

    @staticmethod
    def _attach(reply: Reply, parent: Optional[Reply], index: int) -> Reply:
        if parent is not None:
            if parent.type not in _AGGREGATES:
                raise ValueError(f"parent reply of type {parent.type.name} cannot hold elements")
            parent.elements[index] = reply
        return reply

    def create_string(
        self,
        reply_type: ReplyType,
        data: bytes,
        parent: Optional[Reply] = None,
        index: int = 0,
    ) -> Reply:
        """Create a string-like reply (string, status, error, verbatim, bignum)."""
        reply_type = ReplyType(reply_type)
        if reply_type not in _STRINGS:
            raise ValueError(f"{reply_type.name} is not a string reply type")
        payload = bytes(data)
        reply = Reply(reply_type)
        if reply_type == ReplyType.VERB:
            if len(payload) < _VERB_HEADER:
                raise ValueError("verbatim string is shorter than its format header")
            reply.vtype = payload[:3].decode("ascii", errors="replace")
            reply.string = payload[_VERB_HEADER:]
        else:
            reply.string = payload
        return self._attach(reply, parent, index)

    def create_array(
        self,
        reply_type: ReplyType,
        count: int,
        parent: Optional[Reply] = None,
        index: int = 0,
    ) -> Reply:
        """Create an aggregate reply with ``count`` empty slots."""
        reply_type = ReplyType(reply_type)
        if reply_type not in _AGGREGATES:
            raise ValueError(f"{reply_type.name} is not an aggregate reply type")
        if count < 0:
            raise ValueError("element count cannot be negative")
        reply = Reply(reply_type, elements=[None] * count)
        return self._attach(reply, parent, index)

    def create_integer(
        self, value: int, parent: Optional[Reply] = None, index: int = 0
    ) -> Reply:
        """Create an integer reply."""
        return self._attach(Reply(ReplyType.INTEGER, integer=int(value)), parent, index)

    def create_double(
        self,
        value: float,
        text: bytes,
        parent: Optional[Reply] = None,
        index: int = 0,
    ) -> Reply:
        """Create a double reply that keeps the server's textual form."""
        reply = Reply(ReplyType.DOUBLE, dval=float(value), string=bytes(text))
        return self._attach(reply, parent, index)

    def create_nil(self, parent: Optional[Reply] = None, index: int = 0) -> Reply:
        """Create a nil reply."""
        return self._attach(Reply(ReplyType.NIL), parent, index)

    def create_bool(
        self, value: object, parent: Optional[Reply] = None, index: int = 0
    ) -> Reply:
        """Create a boolean reply, stored as 0 or 1 in ``integer``."""
        return self._attach(Reply(ReplyType.BOOL, integer=int(bool(value))), parent, index)