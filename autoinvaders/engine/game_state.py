"""The authoritative economy record for one player, plus settings."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from autoinvaders.data.balance import BALANCE
from autoinvaders.data.loadouts import (
    DEFAULT_BEHAVIOR_SCRIPT,
    DEFAULT_TARGET_MODE,
    DEFAULT_WEAPON_MOD,
)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class GameStats:
    """Lifetime counters. Only ever incremented."""

    total_kills: int = 0
    total_scrap_earned: float = 0.0
    total_damage_dealt: float = 0.0
    play_time: float = 0.0  # seconds
    bosses_defeated: int = 0


@dataclass
class SaveState:
    """Complete mutable economy state."""

    # ── Currency ─────────────────────────────────────────
    scrap: float = 0.0
    cores: int = 0

    # ── Progression cursor ───────────────────────────────
    current_sector: int = 0
    current_wave: int = 1          # waves_per_sector + 1 = boss pending
    highest_sector: int = 0        # never lowered by normal play

    # ── Player vitals snapshot ───────────────────────────
    player_hp: float = BALANCE.player.base_hp
    player_max_hp: float = BALANCE.player.base_hp

    # ── Upgrades: id → level (absent = 0) ────────────────
    upgrades: dict[str, int] = field(default_factory=dict)

    # ── Active selections ────────────────────────────────
    active_weapon_mod: str = DEFAULT_WEAPON_MOD
    active_behavior_script: str = DEFAULT_BEHAVIOR_SCRIPT
    active_target_mode: str = DEFAULT_TARGET_MODE.value

    # ── Stats ────────────────────────────────────────────
    stats: GameStats = field(default_factory=GameStats)

    # ── Offline progress inputs ──────────────────────────
    last_save_time: int = field(default_factory=now_ms)  # epoch millis
    scrap_per_second: float = 0.0

    version: int = BALANCE.save.version

    @property
    def is_boss_pending(self) -> bool:
        return self.current_wave > BALANCE.sectors.waves_per_sector


@dataclass
class GameSettings:
    """Player preferences, stored separately from the save."""

    sound: bool = True
    volume: float = 1.0
    reduced_motion: bool = False
    ui_scale: float = 1.0
