from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import random

import structlog

from .config import Config, MailGenerationConfig
from .delivery import DeliveryLog
from .errors import OverweightError
from .models import (
    NUM_CARRY_CLASSES,
    Assignment,
    DeliveryRecord,
    MailItem,
    RobotView,
    Snapshot,
)
from .robot import Robot
from .scheduler import DispatchScheduler, Observer

logger = structlog.get_logger()


@dataclass
class FrameData:
    tick: int
    robot_start_floor: Dict[str, int]
    robot_end_floor: Dict[str, int]
    assignments: List[Assignment] = field(default_factory=list)
    deliveries: List[DeliveryRecord] = field(default_factory=list)
    alarms: List[str] = field(default_factory=list)

    def robot_floor_at(self, robot_id: str, progress: float) -> float:
        """Floor position of a robot part-way (0..1) through this tick."""
        progress = max(0.0, min(1.0, progress))
        f0 = self.robot_start_floor[robot_id]
        f1 = self.robot_end_floor[robot_id]
        return f0 + progress * (f1 - f0)


class MailSystem:
    """Tick driver for the mail-room simulation.

    Per tick, in a fixed order:
    - Items whose arrival time has come are inserted into the pool.
      Overweight items are refused and reported as alarms.
    - The scheduler matches idle robots to pooled items.
    - Every robot steps once, in id order.

    ``UnassignableItemError`` and ``ExcessiveDeliveryError`` are not caught
    here; they end the run.
    """

    def __init__(
        self,
        floors: int,
        robot_count: int,
        arrivals: List[Tuple[int, MailItem]],  # list of (time, item)
        *,
        mailroom_floor: int = 0,
        team_move_interval: int = 3,
        observer: Optional[Observer] = None,
    ) -> None:
        self.floors = floors
        self.mailroom_floor = mailroom_floor

        self.arrivals = sorted(arrivals, key=lambda a: (a[0], a[1].arrival_seq))
        self._arrival_idx = 0

        self.tick: int = 0
        self.alarms: List[str] = []
        self.rejected: List[MailItem] = []

        self.delivery = DeliveryLog(clock=lambda: self.tick)
        self.scheduler = DispatchScheduler(fleet_size=robot_count, observer=observer)

        self.robots: Dict[str, Robot] = {}
        for i in range(robot_count):
            rid = f"R{i}"
            self.robots[rid] = Robot(
                rid,
                self.delivery,
                self.scheduler,
                mailroom_floor=mailroom_floor,
                team_move_interval=team_move_interval,
            )
        for robot in self.robots.values():
            self.scheduler.register_idle(robot)

    # ---------------------------
    # Construction
    # ---------------------------

    @staticmethod
    def from_yaml(path: str, observer: Optional[Observer] = None) -> "MailSystem":
        return MailSystem.from_config(Config.from_yaml(path), observer=observer)

    @staticmethod
    def from_config(cfg: Config, observer: Optional[Observer] = None) -> "MailSystem":
        timed: List[Tuple[int, str, int, int, int]] = [
            (a.time, a.item_id, a.weight, a.destination, a.priority) for a in cfg.mail_arrivals
        ]
        if cfg.mail_generation is not None and cfg.mail_generation.count > 0:
            timed.extend(_generate_arrivals(cfg.mail_generation, cfg.building.floors, cfg.sim.seed))
        seen: set = set()
        for t in timed:
            if t[1] in seen:
                raise ValueError(f"Duplicate item id in arrivals: {t[1]}")
            seen.add(t[1])
        timed.sort(key=lambda t: (t[0], t[1]))

        arrivals: List[Tuple[int, MailItem]] = []
        for seq, (time, item_id, weight, dest, priority) in enumerate(timed):
            item = MailItem(
                item_id=item_id,
                weight=weight,
                destination_floor=dest,
                priority_level=priority,
                arrival_seq=seq,
                arrival_tick=time,
            )
            arrivals.append((time, item))

        return MailSystem(
            floors=cfg.building.floors,
            robot_count=cfg.fleet.robots,
            arrivals=arrivals,
            mailroom_floor=cfg.building.mailroom_floor,
            team_move_interval=cfg.fleet.team_move_interval,
            observer=observer,
        )

    # ---------------------------
    # Public API
    # ---------------------------

    def insert(self, item: MailItem) -> bool:
        """Hand an arriving item to the scheduler. False if it was refused."""
        if not 0 <= item.destination_floor < self.floors:
            raise ValueError(
                f"Item {item.item_id} destination {item.destination_floor} is outside floors 0..{self.floors - 1}"
            )
        try:
            self.scheduler.insert(item)
        except OverweightError as e:
            self.rejected.append(item)
            self._alarm(f"[tick {self.tick}] {e}")
            logger.warning("sim.item_rejected", item_id=item.item_id, weight=item.weight, tick=self.tick)
            return False
        return True

    def snapshot(self) -> Snapshot:
        robots_view = [
            RobotView(
                robot_id=r.robot_id,
                state=r.state,
                current_floor=r.current_floor,
                destination_floor=r.destination_floor,
                primary_item_id=r.primary_item.item_id if r.primary_item else None,
                secondary_item_id=r.secondary_item.item_id if r.secondary_item else None,
                team_size=r.team_size,
                deliveries_this_trip=r.deliveries_this_trip,
            )
            for r in self.robots.values()
        ]
        pool = self.scheduler.pool
        queues = {c: [i.item_id for i in pool.items(c)] for c in range(1, NUM_CARRY_CLASSES + 1)}
        return Snapshot(
            tick=self.tick,
            floors=self.floors,
            mailroom_floor=self.mailroom_floor,
            robots=robots_view,
            queues=queues,
            idle_robot_ids=[r.robot_id for r in self.scheduler.idle_robots],
            delivered_item_ids=[d.item.item_id for d in self.delivery.delivered],
            pending_arrivals=len(self.arrivals) - self._arrival_idx,
            alarms=list(self.alarms),
        )

    def step(self) -> FrameData:
        self.alarms = []

        # 0) arrivals
        while self._arrival_idx < len(self.arrivals) and self.arrivals[self._arrival_idx][0] <= self.tick:
            _, item = self.arrivals[self._arrival_idx]
            self._arrival_idx += 1
            self.insert(item)

        # 1) record start floors
        start_floor = {rid: r.current_floor for rid, r in self.robots.items()}
        delivered_before = len(self.delivery.delivered)

        # 2) match idle robots to mail
        assignments = self.scheduler.step()

        # 3) robots move / transition / drop off
        for robot in self.robots.values():
            robot.step()

        # 4) record end state
        frame = FrameData(
            tick=self.tick,
            robot_start_floor=start_floor,
            robot_end_floor={rid: r.current_floor for rid, r in self.robots.items()},
            assignments=assignments,
            deliveries=self.delivery.delivered[delivered_before:],
            alarms=list(self.alarms),
        )

        self.tick += 1
        return frame

    def is_idle(self) -> bool:
        return (
            self._arrival_idx >= len(self.arrivals)
            and len(self.scheduler.pool) == 0
            and all(r.state == "WAITING" and r.is_empty() for r in self.robots.values())
        )

    # ---------------------------
    # Internals
    # ---------------------------

    def _alarm(self, msg: str) -> None:
        self.alarms.append(msg)


def _generate_arrivals(gen: MailGenerationConfig, floors: int, seed: int) -> List[Tuple[int, str, int, int, int]]:
    rng = random.Random(seed)
    out: List[Tuple[int, str, int, int, int]] = []
    for i in range(gen.count):
        priority = 1
        if gen.priority_levels and rng.random() < gen.priority_rate:
            priority = rng.choice(gen.priority_levels)
        out.append(
            (
                rng.randint(0, max(0, gen.last_tick)),
                f"G{i:03d}",
                rng.randint(gen.min_weight, gen.max_weight),
                rng.randrange(floors),
                priority,
            )
        )
    return out
