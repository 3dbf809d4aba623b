"""Balance constants — all tuning knobs in one place.

Tweak these to adjust pacing, difficulty curves and upgrade pricing.
Difficulty follows: D(g) = difficulty_base ^ (g - 1)
Upgrade costs follow: base_cost * (cost_growth ^ (level - 1)) * tier_jump(level)
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DifficultyBalance:
    """Tuning for enemy scaling across the campaign."""

    # Global difficulty multiplier base: D(g) = base ^ (g - 1)
    difficulty_base: float = 1.13

    # Scrap grows slower than HP so damage upgrades stay necessary
    scrap_exponent: float = 0.75

    # Spawn count: base + floor((g - 1) / divisor), capped
    base_spawn_count: int = 10
    spawn_ramp_divisor: int = 2
    max_spawn_count: int = 45

    # Spawn interval (ms): max(min, base - g * step)
    base_spawn_interval_ms: float = 800.0
    min_spawn_interval_ms: float = 200.0
    spawn_interval_step_ms: float = 8.0

    # Boss HP = boss_hp_factor * grunt base HP * D(g) * sector boost
    boss_hp_factor: float = 35.0
    boss_base_scrap: float = 120.0
    boss_scrap_exponent: float = 0.65
    boss_enemy_type: str = "grunt"

    # Boss time-to-kill window (seconds): [min_base + min_per_sector * s,
    # max_base + max_per_sector * s]
    boss_ttk_min_base_s: float = 18.0
    boss_ttk_min_per_sector_s: float = 2.0
    boss_ttk_max_base_s: float = 40.0
    boss_ttk_max_per_sector_s: float = 3.0

    # Enemy fire pressure per global wave
    enemy_fire_rate_per_wave: float = 0.012
    enemy_bullet_speed_per_wave: float = 0.006
    enemy_base_bullet_speed: float = 150.0
    enemy_default_shoot_interval_ms: float = 3000.0
    enemy_default_spawn_weight: int = 10


@dataclass(frozen=True)
class SectorBalance:
    """Campaign layout: sectors of regular waves followed by a boss."""

    sector_count: int = 6
    waves_per_sector: int = 12

    # HP multiplier per sector (index = sector); out of range falls back to 1.0
    hp_boost: tuple[float, ...] = (1.00, 1.15, 1.35, 1.60, 1.90, 2.30)

    names: tuple[str, ...] = (
        "Boot Sequence",
        "Scrapfield Lanes",
        "Signal Noise",
        "Armor Doctrine",
        "Rowfall Pattern",
        "Final Descent",
    )

    # Cores awarded for each boss kill
    cores_per_boss: int = 1

    @property
    def total_waves(self) -> int:
        return self.sector_count * self.waves_per_sector


@dataclass(frozen=True)
class EconomyBalance:
    """Tuning for upgrade pricing."""

    # Smooth growth per level: cost = base * (growth ^ (level - 1))
    upgrade_cost_growth: float = 1.18

    # Cost walls: (max_level_inclusive, multiplier). Levels past the last
    # threshold use final_tier_jump.
    tier_jumps: tuple[tuple[int, float], ...] = (
        (5, 1.0),
        (10, 1.6),
        (15, 2.7),
        (20, 4.3),
    )
    final_tier_jump: float = 6.0

    # Shop heuristic: checked in order before falling back to cheapest
    recommended_priority: tuple[str, ...] = (
        "autoFire",
        "autopilot",
        "targetingFirmware",
        "damage",
        "fireRate",
        "salvageYield",
        "hull",
    )


@dataclass(frozen=True)
class PlayerBalance:
    """Base player ship stats before upgrades."""

    base_hp: float = 100.0
    base_damage: float = 10.0
    base_fire_interval_ms: float = 200.0  # between shots with auto-fire
    base_bullet_speed: float = 400.0

    # Critical hits
    base_crit_multiplier: float = 1.5


@dataclass(frozen=True)
class SaveBalance:
    """Persistence and offline-progress tuning."""

    save_key: str = "autoInvaders_save"
    settings_key: str = "autoInvaders_settings"
    version: int = 1

    autosave_interval_s: float = 15.0

    # Offline progress: nothing under a minute away, capped at N hours
    min_offline_seconds: float = 60.0
    max_offline_hours: float = 8.0


@dataclass(frozen=True)
class GameBalance:
    """Top-level container for all balance constants."""

    difficulty: DifficultyBalance = field(default_factory=DifficultyBalance)
    sectors: SectorBalance = field(default_factory=SectorBalance)
    economy: EconomyBalance = field(default_factory=EconomyBalance)
    player: PlayerBalance = field(default_factory=PlayerBalance)
    save: SaveBalance = field(default_factory=SaveBalance)


# Singleton, import this everywhere
BALANCE = GameBalance()
