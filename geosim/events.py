# geosim/events.py
from __future__ import annotations
import logging
from typing import Callable, List, Set, FrozenSet, Any

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[Any, FrozenSet[str]], None]

class RefreshSink:
    """Coalesces refresh requests for external consumers (map, leaderboard).

    The core calls `schedule(reason)` as often as it likes; subscribers are
    invoked once per `flush`, with every reason gathered since the last one.
    """

    def __init__(self):
        self._subscribers: List[RefreshCallback] = []
        self._pending: Set[str] = set()

    def subscribe(self, callback: RefreshCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: RefreshCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def schedule(self, reason: str) -> None:
        self._pending.add(reason)

    @property
    def pending(self) -> FrozenSet[str]:
        return frozenset(self._pending)

    def flush(self, world) -> bool:
        if not self._pending:
            return False
        reasons = frozenset(self._pending)
        self._pending.clear()
        for cb in list(self._subscribers):
            cb(world, reasons)
        logger.debug("refresh flushed: %s", sorted(reasons))
        return True
