"""Difficulty model — closed-form scaling of enemies, bosses and upgrade costs.

Everything here is a pure function of its arguments. The single driver of
scaling is the global wave index ``g = sector * waves_per_sector + wave``.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence

from autoinvaders.data.balance import BALANCE
from autoinvaders.engine.catalog import enemy_definition


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves toward positive infinity (JS Math.round)."""
    return math.floor(x + 0.5)


def global_wave(sector: int, wave: int) -> int:
    """Campaign-wide wave index for a (sector, wave-in-sector) cursor."""
    return sector * BALANCE.sectors.waves_per_sector + wave


def boss_global_wave(sector: int) -> int:
    """Global wave a sector's boss scales with (right after its last wave)."""
    return (sector + 1) * BALANCE.sectors.waves_per_sector


def difficulty_multiplier(g: int) -> float:
    """D(g) = base ^ (g - 1). Exactly 1.0 on the first wave, no ceiling."""
    return BALANCE.difficulty.difficulty_base ** (g - 1)


def sector_hp_boost(sector: int) -> float:
    boosts = BALANCE.sectors.hp_boost
    if 0 <= sector < len(boosts):
        return boosts[sector]
    return 1.0


# ── Enemies ──────────────────────────────────────────────────────


def enemy_hp(enemy_id: str, sector: int, g: int) -> int:
    base_hp = enemy_definition(enemy_id).base_hp
    return round_half_up(base_hp * difficulty_multiplier(g) * sector_hp_boost(sector))


def scrap_drop(enemy_id: str, g: int) -> float:
    """Scrap for one kill. Sub-linear in D so income trails enemy toughness."""
    base_scrap = enemy_definition(enemy_id).base_scrap
    return base_scrap * difficulty_multiplier(g) ** BALANCE.difficulty.scrap_exponent


def spawn_count(g: int) -> int:
    bal = BALANCE.difficulty
    count = bal.base_spawn_count + (g - 1) // bal.spawn_ramp_divisor
    return min(count, bal.max_spawn_count)


def spawn_interval_ms(g: int) -> float:
    """Delay between spawns; later waves spawn faster, down to a floor."""
    bal = BALANCE.difficulty
    return max(bal.min_spawn_interval_ms, bal.base_spawn_interval_ms - g * bal.spawn_interval_step_ms)


def enemy_fire_rate_multiplier(g: int) -> float:
    return 1 + BALANCE.difficulty.enemy_fire_rate_per_wave * (g - 1)


def enemy_bullet_speed_multiplier(g: int) -> float:
    return 1 + BALANCE.difficulty.enemy_bullet_speed_per_wave * (g - 1)


def enemy_fire_interval_ms(enemy_id: str, g: int) -> float | None:
    """Milliseconds between shots, or None for enemies that never fire."""
    edef = enemy_definition(enemy_id)
    if not edef.can_shoot:
        return None
    interval = edef.shoot_interval_ms or BALANCE.difficulty.enemy_default_shoot_interval_ms
    return interval / enemy_fire_rate_multiplier(g)


def enemy_bullet_speed(g: int) -> float:
    return BALANCE.difficulty.enemy_base_bullet_speed * enemy_bullet_speed_multiplier(g)


def pick_enemy_type(available: Sequence[str], rng: random.Random | None = None) -> str:
    """Weighted random pick among ``available`` enemy ids."""
    if not available:
        return BALANCE.difficulty.boss_enemy_type
    rng = rng or random
    weights = [enemy_definition(eid).spawn_weight or BALANCE.difficulty.enemy_default_spawn_weight
               for eid in available]
    return rng.choices(list(available), weights=weights, k=1)[0]


# ── Bosses ───────────────────────────────────────────────────────


def boss_hp(sector: int, g: int) -> int:
    bal = BALANCE.difficulty
    grunt_hp = enemy_definition(bal.boss_enemy_type).base_hp
    return round_half_up(bal.boss_hp_factor * grunt_hp * difficulty_multiplier(g) * sector_hp_boost(sector))


def boss_ttk_window(sector: int) -> tuple[float, float]:
    """(min, max) seconds a boss fight should last in ``sector``."""
    bal = BALANCE.difficulty
    return (
        bal.boss_ttk_min_base_s + bal.boss_ttk_min_per_sector_s * sector,
        bal.boss_ttk_max_base_s + bal.boss_ttk_max_per_sector_s * sector,
    )


def clamp_boss_hp(hp: int, sector: int, estimated_dps: float) -> int:
    """Re-clamp a boss HP pool into the sector's time-to-kill window.

    Without a DPS estimate there is nothing to clamp against, so ``hp`` is
    returned unchanged.
    """
    if estimated_dps <= 0:
        return hp
    min_s, max_s = boss_ttk_window(sector)
    low = round_half_up(estimated_dps * min_s)
    high = round_half_up(estimated_dps * max_s)
    return max(low, min(hp, high))


def boss_scrap(g: int) -> float:
    bal = BALANCE.difficulty
    return bal.boss_base_scrap * difficulty_multiplier(g) ** bal.boss_scrap_exponent


# ── Upgrade pricing ──────────────────────────────────────────────


def tier_jump(level: int) -> float:
    """Step multiplier that puts cost walls at levels 6, 11, 16 and 21."""
    bal = BALANCE.economy
    for max_level, jump in bal.tier_jumps:
        if level <= max_level:
            return jump
    return bal.final_tier_jump


def upgrade_cost(base_cost: float, level: int) -> int:
    """Scrap price of buying ``level`` (1-based) of a leveled upgrade."""
    growth = BALANCE.economy.upgrade_cost_growth ** (level - 1)
    return round_half_up(base_cost * growth * tier_jump(level))
