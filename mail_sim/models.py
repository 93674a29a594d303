from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

# Carry-class weight ceilings (grams). Class number == robots needed to carry.
INDIVIDUAL_MAX_WEIGHT = 2000
PAIR_MAX_WEIGHT = 2600
TRIPLE_MAX_WEIGHT = 3000

CARRY_CLASS_CEILINGS: Tuple[int, ...] = (INDIVIDUAL_MAX_WEIGHT, PAIR_MAX_WEIGHT, TRIPLE_MAX_WEIGHT)
NUM_CARRY_CLASSES = len(CARRY_CLASS_CEILINGS)

# Primary hand + tube.
MAX_DELIVERIES_PER_TRIP = 2

DEFAULT_PRIORITY = 1

RobotState = Literal["WAITING", "DELIVERING", "RETURNING"]

# =========================
# Domain entities
# =========================


@dataclass(frozen=True)
class MailItem:
    item_id: str
    weight: int
    destination_floor: int
    priority_level: int = DEFAULT_PRIORITY
    arrival_seq: int = 0
    arrival_tick: int = 0

    @property
    def is_priority(self) -> bool:
        return self.priority_level > DEFAULT_PRIORITY

    def rank_key(self) -> Tuple[int, int, int]:
        """Sort key: higher priority first, then lower floor, then arrival order."""
        return (-self.priority_level, self.destination_floor, self.arrival_seq)

    def __str__(self) -> str:
        s = f"{self.item_id} w={self.weight} -> {self.destination_floor}"
        if self.is_priority:
            s += f" p={self.priority_level}"
        return s


def carry_class_for(weight: int) -> Optional[int]:
    """Return the carry class (1, 2 or 3) for a weight, or None if too heavy."""
    for idx, ceiling in enumerate(CARRY_CLASS_CEILINGS):
        if weight <= ceiling:
            return idx + 1
    return None


@dataclass(frozen=True)
class Assignment:
    """One committed scheduler match."""

    item: MailItem
    robot_ids: Tuple[str, ...]
    team_size: int
    secondary_item: Optional[MailItem] = None


@dataclass(frozen=True)
class DeliveryRecord:
    item: MailItem
    tick: int
    team_size: int

    @property
    def latency(self) -> int:
        return self.tick - self.item.arrival_tick


# =========================
# Snapshot views (viewers use)
# =========================


@dataclass(frozen=True)
class RobotView:
    robot_id: str
    state: str
    current_floor: int
    destination_floor: int
    primary_item_id: Optional[str]
    secondary_item_id: Optional[str]
    team_size: int
    deliveries_this_trip: int


@dataclass(frozen=True)
class Snapshot:
    tick: int
    floors: int
    mailroom_floor: int
    robots: List[RobotView]
    queues: Dict[int, List[str]]  # carry class -> item ids, best first
    idle_robot_ids: List[str]
    delivered_item_ids: List[str]
    pending_arrivals: int
    alarms: List[str] = field(default_factory=list)
