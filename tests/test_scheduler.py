"""Tests for the dispatch scheduler."""

import pytest

from mail_sim.errors import SlotInvariantError, UnassignableItemError
from mail_sim.scheduler import DispatchScheduler


class TestDispatchScheduler:
    """Matching idle robots to pooled mail."""

    def test_empty_pool_does_nothing(self, fleet):
        sched, robots, _ = fleet(size=2)
        assert sched.step() == []
        assert len(sched.idle_robots) == 2

    def test_solo_assignment(self, fleet, make_item):
        sched, robots, _ = fleet(size=1)
        item = make_item(weight=1500, dest=5)
        sched.insert(item)

        [assignment] = sched.step()

        assert assignment.item is item
        assert assignment.robot_ids == ("R0",)
        assert assignment.team_size == 1
        assert robots[0].primary_item is item
        assert robots[0].team_size == 1
        assert sched.idle_robots == ()
        assert len(sched.pool) == 0

    def test_team_waits_for_enough_idle_robots(self, fleet, make_item):
        sched, robots, _ = fleet(size=3, idle=1)
        item = make_item(weight=2800, priority=2, dest=3)
        sched.insert(item)

        assert sched.step() == []
        assert sched.pool.items(3) == (item,)

        sched.register_idle(robots[1])
        assert sched.step() == []
        assert sched.pool.items(3) == (item,)

        sched.register_idle(robots[2])
        [assignment] = sched.step()
        assert assignment.team_size == 3
        assert set(assignment.robot_ids) == {"R0", "R1", "R2"}
        for robot in robots:
            assert robot.primary_item is item
            assert robot.secondary_item is None
            assert robot.team_size == 3
        assert len(sched.pool) == 0

    def test_team_larger_than_fleet_is_fatal(self, fleet, make_item):
        sched, _, _ = fleet(size=2)
        item = make_item(weight=2700)
        sched.insert(item)

        with pytest.raises(UnassignableItemError) as exc:
            sched.step()

        assert exc.value.item is item
        assert exc.value.team_size == 3
        assert exc.value.fleet_size == 2

    def test_best_item_chosen_across_classes(self, fleet, make_item):
        sched, robots, _ = fleet(size=2)
        light = make_item(weight=500, priority=1, dest=1)
        urgent_pair = make_item(weight=2400, priority=10, dest=6)
        sched.insert(light)
        sched.insert(urgent_pair)

        assignments = sched.step()

        assert assignments[0].item is urgent_pair
        assert assignments[0].team_size == 2
        # both robots went to the pair, the light item waits
        assert len(assignments) == 1
        assert sched.pool.items(1) == (light,)

    def test_exact_tie_prefers_lower_class(self, fleet, make_item):
        sched, _, _ = fleet(size=2)
        pair = make_item(weight=2400, dest=4)
        light = make_item(weight=800, dest=4)
        sched.insert(pair)
        sched.insert(light)

        assignments = sched.step()

        assert assignments[0].item is light
        assert assignments[0].team_size == 1

    def test_lower_floor_wins_across_classes(self, fleet, make_item):
        sched, _, _ = fleet(size=2)
        light = make_item(weight=800, dest=6)
        pair = make_item(weight=2400, dest=2)
        sched.insert(light)
        sched.insert(pair)

        assert sched.step()[0].item is pair

    def test_solo_robot_takes_second_item_in_tube(self, fleet, make_item):
        sched, robots, _ = fleet(size=1)
        low = make_item(priority=1, dest=2)
        high = make_item(priority=10, dest=7)
        sched.insert(low)
        sched.insert(high)

        [assignment] = sched.step()

        assert robots[0].primary_item is high
        assert robots[0].secondary_item is low
        assert assignment.secondary_item is low
        assert len(sched.pool) == 0

    def test_team_never_uses_tube(self, fleet, make_item):
        sched, robots, _ = fleet(size=2)
        pair = make_item(weight=2500, priority=5)
        light = make_item(weight=300)
        sched.insert(pair)
        sched.insert(light)

        sched.step()

        assert all(r.secondary_item is None for r in robots)
        assert sched.pool.items(1) == (light,)

    def test_drains_all_satisfiable_matches(self, fleet, make_item):
        sched, robots, _ = fleet(size=3)
        items = [make_item(dest=d) for d in (1, 2, 3)]
        for item in items:
            sched.insert(item)

        assignments = sched.step()

        assert [a.robot_ids for a in assignments] == [("R0",), ("R1",)]
        assert robots[0].primary_item is items[0]
        assert robots[0].secondary_item is items[1]
        assert robots[1].primary_item is items[2]
        assert sched.idle_robots == (robots[2],)

    def test_blocked_head_is_not_overtaken(self, fleet, make_item):
        sched, _, _ = fleet(size=3, idle=2)
        triple = make_item(weight=2900, priority=5)
        light = make_item(weight=100)
        sched.insert(triple)
        sched.insert(light)

        assert sched.step() == []
        assert len(sched.pool) == 2

    def test_idle_registry_is_fifo(self, make_item):
        from mail_sim.delivery import DeliveryLog
        from mail_sim.robot import Robot

        sched = DispatchScheduler(fleet_size=3)
        log = DeliveryLog()
        robots = [Robot(f"R{i}", log, sched) for i in range(3)]
        for idx in (2, 0, 1):
            sched.register_idle(robots[idx])
        sched.insert(make_item())

        [assignment] = sched.step()

        assert assignment.robot_ids == ("R2",)
        assert sched.idle_robots == (robots[0], robots[1])

    def test_duplicate_registration_ignored(self, fleet):
        sched, robots, _ = fleet(size=2)
        sched.register_idle(robots[0])
        assert sched.idle_robots == (robots[0], robots[1])

    def test_cannot_register_loaded_robot(self, fleet, make_item):
        sched, robots, _ = fleet(size=1, idle=0)
        robots[0].assign(make_item())
        with pytest.raises(SlotInvariantError):
            sched.register_idle(robots[0])

    def test_observer_sees_register_and_dispatch(self, make_item):
        from mail_sim.delivery import DeliveryLog
        from mail_sim.robot import Robot

        events = []
        sched = DispatchScheduler(fleet_size=1, observer=lambda e, r: events.append((e, r.robot_id)))
        robot = Robot("R0", DeliveryLog(), sched)
        sched.register_idle(robot)
        sched.insert(make_item())
        sched.step()

        assert events == [("register_idle", "R0"), ("dispatch", "R0")]

    def test_fleet_size_must_be_positive(self):
        with pytest.raises(ValueError):
            DispatchScheduler(fleet_size=0)
