from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

import structlog

from .models import DeliveryRecord, MailItem

logger = structlog.get_logger()


@dataclass
class DeliveryLog:
    """Collects drop-off reports from robots.

    Every member of a team reports the same joint drop-off, so an item only
    counts as delivered once ``team_size`` reports for it have come in.
    """

    clock: Callable[[], int] = lambda: 0
    delivered: List[DeliveryRecord] = field(default_factory=list)

    _pending_reports: Dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _delivered_ids: Dict[str, DeliveryRecord] = field(default_factory=dict, init=False, repr=False)

    def report_delivery(self, item: MailItem, team_size: int) -> None:
        if item.item_id in self._delivered_ids:
            raise ValueError(f"Item {item.item_id} was already delivered.")
        count = self._pending_reports.get(item.item_id, 0) + 1
        if count < team_size:
            self._pending_reports[item.item_id] = count
            return
        self._pending_reports.pop(item.item_id, None)
        record = DeliveryRecord(item=item, tick=self.clock(), team_size=team_size)
        self.delivered.append(record)
        self._delivered_ids[item.item_id] = record
        logger.info("delivery.completed", item_id=item.item_id, tick=record.tick, latency=record.latency)

    def is_delivered(self, item_id: str) -> bool:
        return item_id in self._delivered_ids

    def summary(self) -> Dict[str, Any]:
        n = len(self.delivered)
        mean_latency = sum(r.latency for r in self.delivered) / n if n else 0.0
        return {
            "delivered": n,
            "team_deliveries": sum(1 for r in self.delivered if r.team_size > 1),
            "priority_deliveries": sum(1 for r in self.delivered if r.item.is_priority),
            "mean_latency": round(mean_latency, 2),
        }
