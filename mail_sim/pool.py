from __future__ import annotations

from typing import Dict, List, Tuple

import structlog

from .errors import OverweightError
from .models import CARRY_CLASS_CEILINGS, NUM_CARRY_CLASSES, MailItem, carry_class_for

logger = structlog.get_logger()


class WeightClassPool:
    """Three ranked queues of waiting mail, one per carry class.

    Each queue is kept sorted by ``MailItem.rank_key``: higher priority
    first, then lower destination floor, then arrival order. Class ``k``
    holds items that need a team of ``k`` robots.
    """

    def __init__(self) -> None:
        self._queues: Dict[int, List[MailItem]] = {c: [] for c in range(1, NUM_CARRY_CLASSES + 1)}

    def __len__(self) -> int:
        return sum(len(q) for q in self._queues.values())

    def __contains__(self, item: MailItem) -> bool:
        return any(item in q for q in self._queues.values())

    def insert(self, item: MailItem) -> int:
        """Queue an item in its carry class; returns the class number."""
        carry_class = carry_class_for(item.weight)
        if carry_class is None:
            raise OverweightError(item, CARRY_CLASS_CEILINGS[-1])
        queue = self._queues[carry_class]
        queue.append(item)
        # list.sort is stable and arrival_seq is the last key, so ties keep arrival order.
        queue.sort(key=MailItem.rank_key)
        logger.debug(
            "pool.inserted",
            item_id=item.item_id,
            carry_class=carry_class,
            position=queue.index(item),
            queue_len=len(queue),
        )
        return carry_class

    def peek_best_per_class(self) -> List[Tuple[int, MailItem]]:
        """(carry_class, head item) for every non-empty queue, class ascending."""
        return [(c, q[0]) for c, q in self._queues.items() if q]

    def pop_front(self, carry_class: int) -> MailItem:
        queue = self._queue(carry_class)
        if not queue:
            raise IndexError(f"carry class {carry_class} queue is empty")
        return queue.pop(0)

    def remove_at(self, carry_class: int, position: int) -> MailItem:
        queue = self._queue(carry_class)
        if not 0 <= position < len(queue):
            raise IndexError(f"no item at position {position} in carry class {carry_class} queue")
        return queue.pop(position)

    def queue_len(self, carry_class: int) -> int:
        return len(self._queue(carry_class))

    def items(self, carry_class: int) -> Tuple[MailItem, ...]:
        """Read-only view of one queue, best first."""
        return tuple(self._queue(carry_class))

    def _queue(self, carry_class: int) -> List[MailItem]:
        if carry_class not in self._queues:
            raise KeyError(f"Unknown carry class {carry_class}; expected 1..{NUM_CARRY_CLASSES}")
        return self._queues[carry_class]
