"""Mail room delivery-robot tick-based simulator.

Public entrypoints:
- MailSystem (from mail_sim.sim)
- DispatchScheduler (from mail_sim.scheduler)
- WeightClassPool (from mail_sim.pool)
- Robot (from mail_sim.robot)
"""
from .sim import MailSystem, FrameData
from .scheduler import DispatchScheduler
from .pool import WeightClassPool
from .robot import Robot
from .models import MailItem, Assignment
from .errors import (
    SimulationError,
    OverweightError,
    UnassignableItemError,
    ExcessiveDeliveryError,
    SlotInvariantError,
)
