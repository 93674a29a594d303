from __future__ import annotations

from typing import Optional, Protocol

import structlog

from .errors import ExcessiveDeliveryError, SlotInvariantError
from .models import MAX_DELIVERIES_PER_TRIP, MailItem, RobotState, carry_class_for

logger = structlog.get_logger()


class MailPool(Protocol):
    def insert(self, item: MailItem) -> int: ...

    def register_idle(self, robot: "Robot") -> None: ...


class DeliverySink(Protocol):
    def report_delivery(self, item: MailItem, team_size: int) -> None: ...


class Robot:
    """Delivery robot: WAITING -> DELIVERING -> RETURNING -> WAITING.

    The robot holds at most one item in hand (``primary_item``) and one in
    its tube (``secondary_item``). It only learns about work through
    :meth:`assign` / :meth:`dispatch` and only talks back to the pool via
    ``insert`` and ``register_idle``.

    Movement is one floor per tick. While delivering as part of a team the
    robot only advances every ``team_move_interval`` ticks, so team members
    dispatched together stay in lockstep.
    """

    def __init__(
        self,
        robot_id: str,
        delivery: DeliverySink,
        mail_pool: MailPool,
        *,
        mailroom_floor: int = 0,
        team_move_interval: int = 3,
    ) -> None:
        if team_move_interval < 1:
            raise ValueError(f"team_move_interval must be >= 1, got {team_move_interval}")
        self.robot_id = robot_id
        self.delivery = delivery
        self.mail_pool = mail_pool
        self.mailroom_floor = mailroom_floor
        self.team_move_interval = team_move_interval

        self.state: RobotState = "WAITING"
        self.current_floor = mailroom_floor
        self.destination_floor = mailroom_floor
        self.primary_item: Optional[MailItem] = None
        self.secondary_item: Optional[MailItem] = None
        self.team_size = 1
        self.deliveries_this_trip = 0

        self._received_dispatch = False
        self._move_timer = 1

    def __repr__(self) -> str:
        return f"Robot({self.robot_id}, {self.state}, floor={self.current_floor})"

    # ---------------------------
    # Scheduler-facing API
    # ---------------------------

    def is_empty(self) -> bool:
        return self.primary_item is None and self.secondary_item is None

    @property
    def in_team(self) -> bool:
        return self.team_size > 1

    def assign(self, primary: MailItem, secondary: Optional[MailItem] = None, team_size: int = 1) -> None:
        if self.state != "WAITING" or not self.is_empty():
            raise SlotInvariantError(f"Robot {self.robot_id} assigned while {self.state} and not empty.")
        carry_class = carry_class_for(primary.weight)
        if carry_class is None or carry_class > team_size:
            raise SlotInvariantError(
                f"Robot {self.robot_id} cannot carry {primary.item_id} (weight {primary.weight}) "
                f"in a team of {team_size}."
            )
        if secondary is not None:
            if team_size != 1:
                raise SlotInvariantError(f"Robot {self.robot_id} in a team of {team_size} cannot use its tube.")
            if carry_class_for(secondary.weight) != 1:
                raise SlotInvariantError(
                    f"Robot {self.robot_id} cannot carry {secondary.item_id} (weight {secondary.weight}) in its tube."
                )
        self.primary_item = primary
        self.secondary_item = secondary
        self.team_size = team_size

    def dispatch(self) -> None:
        self._received_dispatch = True

    # ---------------------------
    # Tick
    # ---------------------------

    def step(self) -> None:
        if self.state == "RETURNING":
            if self.current_floor != self.mailroom_floor:
                self._move_towards(self.mailroom_floor)
                return
            self._arrive_at_mailroom()
            # Fall through: a robot is ready for dispatch on the tick it arrives.

        if self.state == "WAITING":
            if not self.is_empty() and self._received_dispatch:
                self._received_dispatch = False
                self.deliveries_this_trip = 0
                self._move_timer = 1
                self._set_route()
                self._change_state("DELIVERING")
            return

        if self.state == "DELIVERING":
            if self.current_floor != self.destination_floor:
                self._move_towards(self.destination_floor)
                return
            self._drop_off()

    # ---------------------------
    # Internals
    # ---------------------------

    def _arrive_at_mailroom(self) -> None:
        if self.secondary_item is not None:
            logger.warning(
                "robot.tube_item_returned",
                robot_id=self.robot_id,
                item_id=self.secondary_item.item_id,
            )
            self.mail_pool.insert(self.secondary_item)
            self.secondary_item = None
        self.primary_item = None
        self.team_size = 1
        self._change_state("WAITING")
        self.mail_pool.register_idle(self)

    def _drop_off(self) -> None:
        item = self.primary_item
        if item is None:
            raise SlotInvariantError(f"Robot {self.robot_id} reached floor {self.current_floor} with nothing in hand.")
        self.delivery.report_delivery(item, self.team_size)
        self.deliveries_this_trip += 1
        logger.info(
            "robot.delivered",
            robot_id=self.robot_id,
            item_id=item.item_id,
            floor=self.current_floor,
            team_size=self.team_size,
        )
        self.primary_item = None

        if self.secondary_item is None or self.in_team:
            self._change_state("RETURNING")
            return
        self.primary_item = self.secondary_item
        self.secondary_item = None
        self._set_route()
        self._change_state("DELIVERING")

    def _set_route(self) -> None:
        if self.primary_item is None:
            raise SlotInvariantError(f"Robot {self.robot_id} has no item in hand to route.")
        self.destination_floor = self.primary_item.destination_floor

    def _move_towards(self, destination: int) -> None:
        if self.state == "DELIVERING" and self.in_team and self._move_timer < self.team_move_interval:
            self._move_timer += 1
            return
        self._move_timer = 1
        if self.current_floor < destination:
            self.current_floor += 1
        elif self.current_floor > destination:
            self.current_floor -= 1
        logger.debug("robot.moved", robot_id=self.robot_id, floor=self.current_floor, destination=destination)

    def _change_state(self, next_state: RobotState) -> None:
        if self.primary_item is None and self.secondary_item is not None:
            raise SlotInvariantError(f"Robot {self.robot_id} holds a tube item with an empty hand.")
        if self.deliveries_this_trip > MAX_DELIVERIES_PER_TRIP:
            raise ExcessiveDeliveryError(self.robot_id, self.deliveries_this_trip, MAX_DELIVERIES_PER_TRIP)
        if self.state != next_state:
            logger.info(
                "robot.state_changed",
                robot_id=self.robot_id,
                from_state=self.state,
                to_state=next_state,
                floor=self.current_floor,
            )
        self.state = next_state
