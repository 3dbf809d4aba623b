"""Enemy archetypes — base stats before wave and sector scaling."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EnemyDef:
    """Base stats for one enemy archetype."""

    id: str
    base_hp: float
    base_scrap: float
    speed: float
    width: int
    height: int
    can_shoot: bool = False
    shoot_interval_ms: float | None = None
    # Relative weight when picking a random type for a wave
    spawn_weight: int = 10


ALL_ENEMIES: dict[str, EnemyDef] = {
    e.id: e
    for e in [
        EnemyDef("grunt", base_hp=25, base_scrap=2.0, speed=30, width=32, height=24,
                 can_shoot=True, shoot_interval_ms=3000, spawn_weight=40),
        EnemyDef("swarmer", base_hp=12, base_scrap=1.2, speed=50, width=20, height=16,
                 spawn_weight=25),
        EnemyDef("tank", base_hp=90, base_scrap=6.0, speed=15, width=40, height=32,
                 can_shoot=True, shoot_interval_ms=2500, spawn_weight=10),
        EnemyDef("shielded", base_hp=55, base_scrap=4.0, speed=25, width=34, height=26,
                 can_shoot=True, shoot_interval_ms=3500, spawn_weight=12),
        EnemyDef("bomber", base_hp=45, base_scrap=3.5, speed=20, width=36, height=28,
                 can_shoot=True, shoot_interval_ms=2000, spawn_weight=10),
        EnemyDef("jammer", base_hp=40, base_scrap=3.5, speed=25, width=30, height=24,
                 spawn_weight=8),
        EnemyDef("splitter", base_hp=35, base_scrap=2.5, speed=28, width=28, height=22,
                 spawn_weight=10),
        # Spawned by a dying splitter, never picked for a wave directly
        EnemyDef("splitter_mini", base_hp=14, base_scrap=1.0, speed=45, width=16, height=12),
        EnemyDef("diver", base_hp=28, base_scrap=2.5, speed=80, width=24, height=20,
                 spawn_weight=12),
        EnemyDef("collector", base_hp=30, base_scrap=2.0, speed=35, width=26, height=22,
                 spawn_weight=8),
    ]
}

# New enemy types introduced by each sector (grunt is always available)
SECTOR_ENEMY_UNLOCKS: dict[int, tuple[str, ...]] = {
    0: ("grunt",),
    1: ("swarmer",),
    2: ("jammer",),
    3: ("tank", "shielded", "splitter"),
    4: ("diver", "bomber", "collector"),
    5: (),  # no new types, just harder versions
}
