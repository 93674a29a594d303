"""Shared pytest fixtures."""

import itertools

import pytest

from mail_sim.delivery import DeliveryLog
from mail_sim.models import MailItem
from mail_sim.robot import Robot
from mail_sim.scheduler import DispatchScheduler


@pytest.fixture
def make_item():
    """Factory for mail items with increasing arrival sequence numbers."""
    seq = itertools.count()

    def _make(weight=1000, dest=3, priority=1, item_id=None):
        n = next(seq)
        return MailItem(
            item_id=item_id or f"M{n:03d}",
            weight=weight,
            destination_floor=dest,
            priority_level=priority,
            arrival_seq=n,
        )

    return _make


@pytest.fixture
def fleet():
    """Factory returning (scheduler, robots, delivery log).

    ``idle`` robots are registered with the scheduler, the rest are not.
    """

    def _make(size=3, idle=None, team_move_interval=3):
        log = DeliveryLog()
        sched = DispatchScheduler(fleet_size=size)
        robots = [
            Robot(f"R{i}", log, sched, team_move_interval=team_move_interval)
            for i in range(size)
        ]
        for robot in robots[: size if idle is None else idle]:
            sched.register_idle(robot)
        return sched, robots, log

    return _make
