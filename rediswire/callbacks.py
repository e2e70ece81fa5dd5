"""Reply callbacks, their FIFO queues and the pub/sub subscription registry."""

from __future__ import annotations

import dataclasses
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Optional

__all__ = ["gen_hash", "Callback", "CallbackQueue", "Subscriptions"]

_HASH_SEED = 5381
_HASH_MASK = 0xFFFFFFFF


def gen_hash(data: bytes | str) -> int:
    """Bernstein's djb2 hash of ``data`` as an unsigned 32-bit value."""
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    value = _HASH_SEED
    for byte in raw:
        value = (value * 33 + byte) & _HASH_MASK
    return value


CallbackFn = Callable[[Any, Any, Any], None]


@dataclass
class Callback:
    """A reply handler with its user data and subscription bookkeeping."""

    fn: Optional[CallbackFn] = None
    privdata: Any = None
    pending_subs: int = 1
    unsubscribe_sent: bool = False


class CallbackQueue:
    """First-in first-out queue of callbacks awaiting replies.

    Callbacks are copied on the way in, so later changes to the object
    that was pushed do not affect the queued one.
    """

    def __init__(self) -> None:
        self._items: deque[Callback] = deque()

    def push(self, callback: Callback) -> None:
        """Append a copy of ``callback`` to the end of the queue."""
        self._items.append(dataclasses.replace(callback))

    def shift(self) -> Optional[Callback]:
        """Remove and return the oldest callback, or ``None`` when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[Callback]:
        return iter(self._items)


def _key(name: bytes | str) -> bytes:
    return name.encode("utf-8") if isinstance(name, str) else bytes(name)


class Subscriptions:
    """Callbacks registered for subscribed channels and patterns.

    ``pending_unsubs`` counts unsubscribe replies that are expected but
    belong to no registered callback and are to be ignored.
    """

    def __init__(self) -> None:
        self.channels: dict[bytes, Callback] = {}
        self.patterns: dict[bytes, Callback] = {}
        self.pending_unsubs = 0

    def registry(self, pattern: bool) -> dict[bytes, Callback]:
        """The pattern registry when ``pattern`` is true, else the channel one."""
        return self.patterns if pattern else self.channels

    def add(self, name: bytes | str, callback: Callback, pattern: bool = False) -> Callback:
        """Register a copy of ``callback`` for ``name`` and return the stored copy.

        When ``name`` is already registered, the new callback replaces the
        old one and its pending subscription count is one more than the
        old callback's.
        """
        table = self.registry(pattern)
        key = _key(name)
        stored = dataclasses.replace(callback)
        existing = table.get(key)
        if existing is not None:
            stored.pending_subs = existing.pending_subs + 1
        table[key] = stored
        return stored

    def mark_unsubscribe(self, names: Iterable[bytes | str], pattern: bool = False) -> None:
        """Record that an unsubscribe was sent for ``names``.

        With names given, each one that is registered and not yet marked is
        marked; every other name adds an ignorable reply. With no names,
        everything in the registry is marked, and if nothing was left to
        mark a single ignorable reply is expected.
        """
        table = self.registry(pattern)
        keys = [_key(name) for name in names]
        if keys:
            for key in keys:
                existing = table.get(key)
                if existing is not None and not existing.unsubscribe_sent:
                    existing.unsubscribe_sent = True
                else:
                    self.pending_unsubs += 1
            return

        marked_any = False
        for existing in table.values():
            if not existing.unsubscribe_sent:
                existing.unsubscribe_sent = True
                marked_any = True
        if not marked_any:
            self.pending_unsubs += 1

    def is_empty(self) -> bool:
        """Whether no subscriptions and no ignorable unsubscribe replies remain."""
        return not self.channels and not self.patterns and self.pending_unsubs == 0

    def all_callbacks(self) -> Iterator[Callback]:
        """Yield every registered callback, channels first, then patterns."""
        yield from list(self.channels.values())
        yield from list(self.patterns.values())

    def clear(self) -> None:
        """Forget every subscription and pending unsubscribe."""
        self.channels.clear()
        self.patterns.clear()
        self.pending_unsubs = 0