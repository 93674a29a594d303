"""Tests for viewer helpers that do not need a display."""

import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

from mail_sim.config import Config  # noqa: E402
from mail_sim.sim import MailSystem  # noqa: E402
from mail_sim.viz import STATE_COLORS, robot_positions  # noqa: E402


class TestRobotPositions:
    def test_positions_follow_frame(self):
        cfg = Config.from_dict(
            {
                "fleet": {"robots": 2},
                "mail_arrivals": [{"time": 0, "id": "M1", "weight": 100, "destination": 4}],
            }
        )
        system = MailSystem.from_config(cfg)

        xs, ys, colors = robot_positions(system, None, 0.0)
        assert xs == [0.0, 1.0]
        assert ys == [0.0, 0.0]
        assert colors == [STATE_COLORS["WAITING"]] * 2

        system.step()
        frame = system.step()
        xs, ys, colors = robot_positions(system, frame, 0.5)
        assert ys == [0.5, 0.0]
        assert colors == [STATE_COLORS["DELIVERING"], STATE_COLORS["WAITING"]]
