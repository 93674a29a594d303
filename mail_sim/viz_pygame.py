from __future__ import annotations

"""pygame based realtime visualization.

Same decoupling as the matplotlib viewer:

- The *simulator* (`MailSystem`) owns all state and tick progression.
- The *viewer* only renders frames and calls `system.snapshot()` / `system.step()`.

The building is drawn as a column of floors with the mail room highlighted.
Each robot gets its own shaft; its disc is coloured by state and shows the
ids of the items in hand and tube.
"""

from dataclasses import dataclass
from typing import Deque, Dict, Optional, Tuple
import time
from collections import deque

from .sim import FrameData, MailSystem

STATE_COLORS: Dict[str, Tuple[int, int, int]] = {
    "WAITING": (150, 150, 150),
    "DELIVERING": (255, 170, 60),
    "RETURNING": (90, 160, 255),
}


@dataclass
class PygameVizConfig:
    floor_height: int = 36
    shaft_width: int = 70
    margin: int = 50
    log_height: int = 120


def run_visualization_pygame(
    system: MailSystem,
    *,
    max_ticks: int = 500,
    tick_ms: int = 400,
    fps: int = 60,
    cfg: Optional[PygameVizConfig] = None,
    window_title: str = "Mail Room Simulator (pygame)",
) -> None:
    """Run a realtime pygame animation.

    Parameters
    ----------
    system:
        The simulator instance.
    max_ticks:
        Max simulation ticks to run (close window earlier to stop).
    tick_ms:
        Real-time duration of one simulation tick.
    fps:
        Target frames-per-second for rendering.
    cfg:
        Visual config (sizes, margins, ...).
    """

    try:
        import pygame  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError(
            "pygame is required for the pygame visualization. "
            "Install it with: pip install pygame"
        ) from e

    cfg = cfg or PygameVizConfig()
    fh = cfg.floor_height
    sw = cfg.shaft_width
    margin = cfg.margin
    log_h = cfg.log_height

    pygame.init()

    robot_ids = list(system.robots.keys())
    screen_w = max(400, len(robot_ids) * sw + margin * 2)
    screen_h = system.floors * fh + margin * 2 + log_h
    screen = pygame.display.set_mode((screen_w, screen_h))
    pygame.display.set_caption(window_title)

    clock = pygame.time.Clock()
    font = pygame.font.SysFont("Arial", 14)
    font_small = pygame.font.SysFont("Arial", 11)

    tick_duration = max(1, tick_ms) / 1000.0
    alarms_history: Deque[str] = deque(maxlen=8)

    frame: Optional[FrameData] = None
    tick_start_time = time.time()
    paused = False

    def _floor_y(floor: float) -> float:
        # floor 0 at the bottom
        return margin + (system.floors - 1 - floor) * fh + fh / 2.0

    def _advance() -> FrameData:
        f = system.step()
        if f.alarms:
            alarms_history.extend(f.alarms)
        return f

    running = True
    while running:
        now = time.time()

        # ---- events ----
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
                elif event.key == pygame.K_n:
                    # single-step when paused
                    if paused and frame is not None and frame.tick < max_ticks:
                        frame = _advance()
                        tick_start_time = now

        # ---- tick update ----
        if frame is None:
            frame = _advance()
            tick_start_time = now

        if not paused:
            elapsed = now - tick_start_time
            if elapsed >= tick_duration:
                if frame.tick >= max_ticks - 1:
                    running = False
                    continue
                frame = _advance()
                tick_start_time = now
                elapsed = 0.0
        else:
            elapsed = now - tick_start_time

        progress = max(0.0, min(1.0, elapsed / tick_duration)) if tick_duration > 1e-9 else 0.0

        # ---- render ----
        screen.fill((30, 30, 30))

        for floor in range(system.floors):
            y = int(_floor_y(floor))
            color = (100, 200, 255) if floor == system.mailroom_floor else (60, 60, 60)
            pygame.draw.line(screen, color, (margin - 20, y), (screen_w - margin + 20, y), 1)
            label = font_small.render(str(floor), True, (160, 160, 160))
            screen.blit(label, (8, y - 7))

        for col, rid in enumerate(robot_ids):
            robot = system.robots[rid]
            px = margin + col * sw + sw // 2
            py = _floor_y(frame.robot_floor_at(rid, progress))
            pygame.draw.circle(screen, STATE_COLORS.get(robot.state, (255, 255, 255)), (int(px), int(py)), 13)
            if robot.team_size > 1:
                pygame.draw.circle(screen, (255, 80, 80), (int(px), int(py)), 16, 2)

            hand = robot.primary_item.item_id if robot.primary_item else ""
            tube = robot.secondary_item.item_id if robot.secondary_item else ""
            txt = hand if not tube else f"{hand}+{tube}"
            if txt:
                surf = font_small.render(txt, True, (230, 230, 230))
                screen.blit(surf, surf.get_rect(center=(int(px), int(py) - 22)))
            id_surf = font_small.render(rid, True, (0, 0, 0))
            screen.blit(id_surf, id_surf.get_rect(center=(int(px), int(py))))

        # UI text
        snap = system.snapshot()
        info = (
            f"Tick: {frame.tick} | "
            f"Idle: {len(snap.idle_robot_ids)} | "
            f"Pool: {'/'.join(str(len(q)) for q in snap.queues.values())} | "
            f"Delivered: {len(snap.delivered_item_ids)}"
        )
        if paused:
            info += " | PAUSED (SPACE resume, N step)"
        screen.blit(font.render(info, True, (255, 255, 255)), (10, screen_h - log_h + 10))

        # alarms/logs
        y0 = screen_h - log_h + 32
        for i, line in enumerate(list(alarms_history)[-6:]):
            surf = font_small.render(line, True, (150, 150, 150))
            screen.blit(surf, (10, y0 + i * 16))

        pygame.display.flip()
        clock.tick(max(1, fps))

    pygame.quit()
