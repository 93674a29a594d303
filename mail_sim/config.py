from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import yaml

from .models import DEFAULT_PRIORITY, TRIPLE_MAX_WEIGHT


@dataclass
class BuildingConfig:
    floors: int = 10
    mailroom_floor: int = 0


@dataclass
class FleetConfig:
    robots: int = 3
    team_move_interval: int = 3


@dataclass
class SimConfig:
    seed: int = 0


@dataclass
class MailArrivalConfig:
    time: int
    item_id: str
    weight: int
    destination: int
    priority: int = DEFAULT_PRIORITY


@dataclass
class MailGenerationConfig:
    count: int = 0
    last_tick: int = 0
    min_weight: int = 200
    max_weight: int = TRIPLE_MAX_WEIGHT
    priority_rate: float = 0.0
    priority_levels: List[int] = field(default_factory=lambda: [10, 100])


@dataclass
class Config:
    building: BuildingConfig
    fleet: FleetConfig
    sim: SimConfig
    mail_arrivals: List[MailArrivalConfig]
    mail_generation: Optional[MailGenerationConfig] = None

    @staticmethod
    def from_yaml(path: str) -> "Config":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return Config.from_dict(data or {})

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Config":
        b = data.get("building", {})
        building = BuildingConfig(
            floors=int(b.get("floors", 10)),
            mailroom_floor=int(b.get("mailroom_floor", 0)),
        )
        if building.floors <= 0:
            raise ValueError(f"building.floors must be positive, got {building.floors}")
        if not 0 <= building.mailroom_floor < building.floors:
            raise ValueError(
                f"building.mailroom_floor={building.mailroom_floor} is outside floors 0..{building.floors - 1}"
            )

        fl = data.get("fleet", {})
        fleet = FleetConfig(
            robots=int(fl.get("robots", 3)),
            team_move_interval=int(fl.get("team_move_interval", 3)),
        )
        if fleet.robots <= 0:
            raise ValueError(f"fleet.robots must be positive, got {fleet.robots}")
        if fleet.team_move_interval < 1:
            raise ValueError(f"fleet.team_move_interval must be >= 1, got {fleet.team_move_interval}")

        sim_data = data.get("simulation", {})
        sim = SimConfig(seed=int(sim_data.get("seed", 0)))

        arrivals: List[MailArrivalConfig] = []
        seen: set = set()
        for a in data.get("mail_arrivals", []) or []:
            arrival = MailArrivalConfig(
                time=int(a["time"]),
                item_id=str(a["id"]),
                weight=int(a["weight"]),
                destination=int(a["destination"]),
                priority=int(a.get("priority", DEFAULT_PRIORITY)),
            )
            if arrival.item_id in seen:
                raise ValueError(f"Duplicate item id in mail_arrivals: {arrival.item_id}")
            seen.add(arrival.item_id)
            if not 0 <= arrival.destination < building.floors:
                raise ValueError(
                    f"Item {arrival.item_id} destination {arrival.destination} is outside floors 0..{building.floors - 1}"
                )
            arrivals.append(arrival)
        arrivals.sort(key=lambda x: (x.time, x.item_id))

        generation = None
        g = data.get("mail_generation")
        if g:
            generation = MailGenerationConfig(
                count=int(g.get("count", 0)),
                last_tick=int(g.get("last_tick", 0)),
                min_weight=int(g.get("min_weight", 200)),
                max_weight=int(g.get("max_weight", TRIPLE_MAX_WEIGHT)),
                priority_rate=float(g.get("priority_rate", 0.0)),
                priority_levels=[int(p) for p in g.get("priority_levels", [10, 100])],
            )
            if generation.min_weight > generation.max_weight:
                raise ValueError("mail_generation.min_weight exceeds max_weight")

        return Config(
            building=building,
            fleet=fleet,
            sim=sim,
            mail_arrivals=arrivals,
            mail_generation=generation,
        )
