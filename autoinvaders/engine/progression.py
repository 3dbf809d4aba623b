"""Wave progression — advancing the sector/wave cursor and planning waves.

A sector is ``waves_per_sector`` regular waves followed by one boss wave.
The cursor's ``current_wave == waves_per_sector + 1`` marks the boss as
pending. Beating a boss moves to wave 1 of the next sector and raises
``highest_sector``, which is what gates upgrades.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from autoinvaders.data.balance import BALANCE
from autoinvaders.engine.catalog import sector_enemy_unlocks
from autoinvaders.engine.difficulty import (
    boss_global_wave,
    boss_hp,
    boss_scrap,
    clamp_boss_hp,
    enemy_bullet_speed_multiplier,
    enemy_fire_rate_multiplier,
    global_wave,
    spawn_count,
    spawn_interval_ms,
)
from autoinvaders.engine.economy import UpgradeResolver
from autoinvaders.engine.save import SaveStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaveInfo:
    """What the HUD shows for the current cursor."""

    sector: int
    wave: int            # capped at waves_per_sector while the boss is pending
    sector_name: str
    is_boss: bool


@dataclass(frozen=True)
class WavePlan:
    """Everything the spawner needs to run the current wave."""

    global_wave: int
    is_boss: bool
    spawn_count: int
    enemy_types: tuple[str, ...]
    spawn_interval_ms: float
    fire_rate_multiplier: float
    bullet_speed_multiplier: float
    boss_hp: int | None = None
    boss_scrap: float | None = None


@dataclass(frozen=True)
class BossOutcome:
    sector_cleared: int
    cores_awarded: int
    campaign_complete: bool


def sector_name(sector: int) -> str:
    names = BALANCE.sectors.names
    return names[sector] if 0 <= sector < len(names) else "Unknown"


def wave_info(store: SaveStore) -> WaveInfo:
    s = store.get_current()
    return WaveInfo(
        sector=s.current_sector,
        wave=min(s.current_wave, BALANCE.sectors.waves_per_sector),
        sector_name=sector_name(s.current_sector),
        is_boss=s.is_boss_pending,
    )


def plan_wave(store: SaveStore, resolver: UpgradeResolver | None = None) -> WavePlan:
    """Scaled stats for the wave at the store's cursor.

    With a resolver, the boss HP pool is clamped to the player's estimated
    DPS so the fight lasts within the sector's time-to-kill window.
    """
    s = store.get_current()
    sector = s.current_sector
    types = tuple(sector_enemy_unlocks(sector))

    if s.is_boss_pending:
        g = boss_global_wave(sector)
        hp = boss_hp(sector, g)
        if resolver is not None:
            hp = clamp_boss_hp(hp, sector, resolver.loadout_dps())
        return WavePlan(
            global_wave=g,
            is_boss=True,
            spawn_count=1,
            enemy_types=types,
            spawn_interval_ms=spawn_interval_ms(g),
            fire_rate_multiplier=enemy_fire_rate_multiplier(g),
            bullet_speed_multiplier=enemy_bullet_speed_multiplier(g),
            boss_hp=hp,
            boss_scrap=boss_scrap(g),
        )

    g = global_wave(sector, s.current_wave)
    return WavePlan(
        global_wave=g,
        is_boss=False,
        spawn_count=spawn_count(g),
        enemy_types=types,
        spawn_interval_ms=spawn_interval_ms(g),
        fire_rate_multiplier=enemy_fire_rate_multiplier(g),
        bullet_speed_multiplier=enemy_bullet_speed_multiplier(g),
    )


def complete_wave(store: SaveStore) -> int:
    """Advance past a cleared regular wave. Returns the new wave number."""
    s = store.get_current()
    wps = BALANCE.sectors.waves_per_sector
    if s.is_boss_pending:
        return s.current_wave
    next_wave = wps + 1 if s.current_wave >= wps else s.current_wave + 1
    store.set_cursor(s.current_sector, next_wave)
    if next_wave > wps:
        log.info("sector %d boss incoming", s.current_sector)
    return next_wave


def defeat_boss(store: SaveStore) -> BossOutcome:
    """Award the boss kill and move to the next sector.

    After the final sector's boss the cursor stays on that sector (wave 1)
    and the outcome reports the campaign as complete.
    """
    s = store.get_current()
    sectors = BALANCE.sectors
    store.record_boss_defeat()
    store.add_cores(sectors.cores_per_boss)

    next_sector = s.current_sector + 1
    complete = next_sector >= sectors.sector_count
    store.set_cursor(s.current_sector if complete else next_sector, 1)
    log.info("sector %d cleared (+%d cores)%s", s.current_sector, sectors.cores_per_boss,
             ", campaign complete" if complete else "")
    return BossOutcome(
        sector_cleared=s.current_sector,
        cores_awarded=sectors.cores_per_boss,
        campaign_complete=complete,
    )
