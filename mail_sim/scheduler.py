from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Deque, List, Optional, Tuple

import structlog

from .errors import SlotInvariantError, UnassignableItemError
from .models import Assignment, MailItem
from .pool import WeightClassPool

if TYPE_CHECKING:
    from .robot import Robot

logger = structlog.get_logger()

Observer = Callable[[str, "Robot"], None]


@dataclass
class DispatchScheduler:
    """Greedy cross-class dispatcher.

    Strategy, per call to :meth:`step`:
    - Take the head of every non-empty carry-class queue.
    - Pick the best one by priority, then destination floor. Exact ties go to
      the lower carry class.
    - The item's class is the team size it needs. If the whole fleet is
      smaller than that, the item can never be carried: raise.
    - If not enough robots are idle yet, stop and retry next tick. Lower
      ranked items do not overtake a blocked head.
    - Otherwise pop the item and the first ``k`` idle robots (FIFO) and
      dispatch them. A solo robot also takes the next class-1 item in its tube.
    - Repeat until nothing else can be matched this tick.
    """

    fleet_size: int
    pool: WeightClassPool = field(default_factory=WeightClassPool)
    observer: Optional[Observer] = None

    _idle: Deque["Robot"] = field(default_factory=deque, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.fleet_size <= 0:
            raise ValueError(f"fleet_size must be positive, got {self.fleet_size}")

    # ---------------------------
    # Boundary operations
    # ---------------------------

    def insert(self, item: MailItem) -> int:
        return self.pool.insert(item)

    def register_idle(self, robot: "Robot") -> None:
        if any(r is robot for r in self._idle):
            logger.debug("scheduler.duplicate_register_ignored", robot_id=robot.robot_id)
            return
        if not robot.is_empty():
            raise SlotInvariantError(f"Robot {robot.robot_id} registered idle while still carrying mail.")
        self._idle.append(robot)
        logger.debug("scheduler.robot_idle", robot_id=robot.robot_id, idle=len(self._idle))
        self._notify("register_idle", robot)

    @property
    def idle_robots(self) -> Tuple["Robot", ...]:
        return tuple(self._idle)

    def step(self) -> List[Assignment]:
        assignments: List[Assignment] = []
        while True:
            chosen = self._choose_candidate()
            if chosen is None:
                break
            carry_class, item = chosen
            team_size = carry_class
            if team_size > self.fleet_size:
                raise UnassignableItemError(item, team_size, self.fleet_size)
            if len(self._idle) < team_size:
                logger.debug(
                    "scheduler.waiting_for_robots",
                    item_id=item.item_id,
                    team_size=team_size,
                    idle=len(self._idle),
                )
                break
            assignments.append(self._commit(carry_class, team_size))
        return assignments

    # ---------------------------
    # Internals
    # ---------------------------

    def _choose_candidate(self) -> Optional[Tuple[int, MailItem]]:
        candidates = self.pool.peek_best_per_class()
        if not candidates:
            return None
        # min() keeps the first of equal keys, and candidates are class ascending.
        return min(candidates, key=lambda c: (-c[1].priority_level, c[1].destination_floor))

    def _commit(self, carry_class: int, team_size: int) -> Assignment:
        item = self.pool.pop_front(carry_class)
        team = [self._idle.popleft() for _ in range(team_size)]

        secondary: Optional[MailItem] = None
        if team_size == 1 and self.pool.queue_len(1) > 0:
            secondary = self.pool.pop_front(1)

        for robot in team:
            robot.assign(item, secondary=secondary, team_size=team_size)
            robot.dispatch()
            self._notify("dispatch", robot)

        robot_ids = tuple(r.robot_id for r in team)
        logger.info(
            "scheduler.team_dispatched",
            item_id=item.item_id,
            team_size=team_size,
            robots=list(robot_ids),
            secondary_item_id=secondary.item_id if secondary else None,
        )
        return Assignment(item=item, robot_ids=robot_ids, team_size=team_size, secondary_item=secondary)

    def _notify(self, event: str, robot: "Robot") -> None:
        if self.observer is not None:
            self.observer(event, robot)
