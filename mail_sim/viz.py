from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from .sim import FrameData, MailSystem

STATE_COLORS: Dict[str, str] = {
    "WAITING": "tab:gray",
    "DELIVERING": "tab:orange",
    "RETURNING": "tab:blue",
}


def robot_positions(
    system: MailSystem, frame: Optional[FrameData], progress: float
) -> Tuple[List[float], List[float], List[str]]:
    """Scatter data (x=robot column, y=floor) for all robots at a point within a tick."""
    xs: List[float] = []
    ys: List[float] = []
    colors: List[str] = []
    for col, (rid, robot) in enumerate(system.robots.items()):
        xs.append(float(col))
        if frame is not None:
            ys.append(frame.robot_floor_at(rid, progress))
        else:
            ys.append(float(robot.current_floor))
        colors.append(STATE_COLORS.get(robot.state, "black"))
    return xs, ys, colors


def run_visualization(
    system: MailSystem,
    max_ticks: int = 500,
    subframes: int = 8,
    interval_ms: int = 50,
) -> None:
    """Run a realtime matplotlib animation.

    - subframes: how many animation frames per simulation tick.
    - interval_ms: milliseconds per animation frame.
    """
    n_robots = len(system.robots)

    fig, ax = plt.subplots(figsize=(6, 8))
    ax.set_title("Mail Room Simulator (tick-based)")
    ax.set_xlim(-1, max(n_robots, 1))
    ax.set_ylim(-0.5, system.floors - 0.5)
    ax.set_yticks(range(system.floors))
    ax.set_xticks(range(n_robots))
    ax.set_xticklabels(list(system.robots.keys()))
    ax.set_ylabel("floor")

    # Floors as thin lines, mailroom highlighted
    for floor in range(system.floors):
        lw = 2.0 if floor == system.mailroom_floor else 0.5
        ax.axhline(floor, linewidth=lw, alpha=0.3, color="black")

    xs, ys, colors = robot_positions(system, None, 0.0)
    robot_sc = ax.scatter(xs, ys, s=200, c=colors, marker="o", zorder=3)
    status_text = ax.text(0.02, 0.98, "", transform=ax.transAxes, ha="left", va="top", fontsize=9)

    current_frame: Optional[FrameData] = None

    def update(frame_idx: int):
        nonlocal current_frame

        tick_idx = frame_idx // subframes
        sub = frame_idx % subframes

        # Run sim step at the first subframe of each tick
        if sub == 0:
            if tick_idx >= max_ticks:
                return (robot_sc, status_text)
            current_frame = system.step()

        alpha = (sub + 1) / subframes
        xs, ys, colors = robot_positions(system, current_frame, alpha)
        robot_sc.set_offsets(list(zip(xs, ys)))
        robot_sc.set_color(colors)

        snap = system.snapshot()
        lines = [
            f"tick={system.tick}  delivered={len(snap.delivered_item_ids)}",
            "pool: " + "  ".join(f"C{c}={len(ids)}" for c, ids in snap.queues.items()),
        ]
        if current_frame is not None and current_frame.alarms:
            lines.extend(current_frame.alarms[-3:])
        status_text.set_text("\n".join(lines))
        return (robot_sc, status_text)

    total_frames = max_ticks * subframes
    anim = FuncAnimation(fig, update, frames=total_frames, interval=interval_ms, blit=False, repeat=False)
    plt.show()
