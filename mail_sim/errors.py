"""Fatal and rejectable conditions raised by the dispatch core.

Only ``OverweightError`` is recoverable: the item is refused and the run
goes on. The rest indicate a fleet/config mismatch or a scheduling bug and
are meant to abort the run.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import MailItem


class SimulationError(Exception):
    """Base class for all dispatch-core errors."""


class OverweightError(SimulationError):
    def __init__(self, item: "MailItem", max_weight: int) -> None:
        super().__init__(
            f"Item {item.item_id} weighs {item.weight}, above the carriable maximum of {max_weight}."
        )
        self.item = item
        self.max_weight = max_weight


class UnassignableItemError(SimulationError):
    def __init__(self, item: "MailItem", team_size: int, fleet_size: int) -> None:
        super().__init__(
            f"Item {item.item_id} (weight {item.weight}) needs a team of {team_size} "
            f"but the fleet only has {fleet_size} robot(s)."
        )
        self.item = item
        self.team_size = team_size
        self.fleet_size = fleet_size


class ExcessiveDeliveryError(SimulationError):
    def __init__(self, robot_id: str, deliveries: int, limit: int) -> None:
        super().__init__(
            f"Robot {robot_id} made {deliveries} deliveries in one trip (limit {limit})."
        )
        self.robot_id = robot_id
        self.deliveries = deliveries
        self.limit = limit


class SlotInvariantError(SimulationError):
    """A robot's hand/tube slots were put in an impossible configuration."""
