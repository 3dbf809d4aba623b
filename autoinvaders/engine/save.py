"""Save store — owns the save state and persists it between sessions.

One ``SaveStore`` is created at startup and handed to whatever needs it.
Reads go through ``get_current()`` (an independent snapshot); writes go
through ``update``/``save`` or the dedicated mutators below, so nothing
outside the store holds a live reference to the state.
"""

from __future__ import annotations

import base64
import copy
import json
import logging
import math
import time
from collections.abc import Callable, Mapping
from dataclasses import fields

from autoinvaders.data.balance import BALANCE
from autoinvaders.data.loadouts import (
    DEFAULT_BEHAVIOR_SCRIPT,
    DEFAULT_TARGET_MODE,
    DEFAULT_WEAPON_MOD,
)
from autoinvaders.data.upgrades import ALL_UPGRADES
from autoinvaders.engine.catalog import (
    behavior_script,
    target_mode,
    upgrade_definition,
    weapon_mod,
)
from autoinvaders.engine.game_state import GameSettings, GameStats, SaveState
from autoinvaders.engine.storage import Storage, StorageError

log = logging.getLogger(__name__)

_STATE_FIELDS = {f.name for f in fields(SaveState)}
_STATS_FIELDS = {f.name for f in fields(GameStats)}
_SETTINGS_FIELDS = {f.name for f in fields(GameSettings)}

# Unlocks that open up the non-default loadout choices
_WEAPON_MOD_UNLOCK = "weaponModSlot"
_BEHAVIOR_SCRIPT_UNLOCK = "behaviorScripts"
_TARGET_MODE_UNLOCK = "targetingFirmware"


# ── Serialisation helpers ────────────────────────────────────────


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _state_to_dict(state: SaveState) -> dict:
    s = state
    return {
        "scrap": s.scrap,
        "cores": s.cores,
        "currentSector": s.current_sector,
        "currentWave": s.current_wave,
        "highestSector": s.highest_sector,
        "playerHP": s.player_hp,
        "playerMaxHP": s.player_max_hp,
        "upgrades": dict(s.upgrades),
        "activeWeaponMod": s.active_weapon_mod,
        "activeBehaviorScript": s.active_behavior_script,
        "activeTargetMode": s.active_target_mode,
        "stats": {
            "totalKills": s.stats.total_kills,
            "totalScrapEarned": s.stats.total_scrap_earned,
            "totalDamageDealt": s.stats.total_damage_dealt,
            "playTime": s.stats.play_time,
            "bossesDefeated": s.stats.bosses_defeated,
        },
        "lastSaveTime": s.last_save_time,
        "scrapPerSecond": s.scrap_per_second,
        "version": s.version,
    }


def _merge_record(defaults: dict, data: Mapping) -> dict:
    """Shallow-merge ``data`` over ``defaults``; deep-merge upgrades and stats.

    Upgrades and stats are merged key by key so that a save written before a
    stat or upgrade existed still gets the default for it.
    """
    merged = {**defaults, **data}
    for key in ("upgrades", "stats"):
        incoming = data.get(key, {})
        if not isinstance(incoming, Mapping):
            raise TypeError(f"{key} must be an object, got {type(incoming).__name__}")
        merged[key] = {**defaults[key], **incoming}
    return merged


def _finite_float(value: object) -> float:
    """float(value), rejecting NaN, infinities and ints too large for a float."""
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"number out of range: {value!r}") from e
    if not math.isfinite(number):
        raise ValueError(f"non-finite number: {value!r}")
    return number


def _finite_int(value: object) -> int:
    if isinstance(value, int):
        return int(value)
    return int(_finite_float(value))


def _clamp_int(value: int, low: int, high: int) -> int:
    return max(low, min(_finite_int(value), high))


def _dict_to_state(d: Mapping) -> SaveState:
    """Build a SaveState from a fully merged record.

    Raises ValueError/TypeError for values that can't be coerced.
    """
    stats_d = d["stats"]
    stats = GameStats(
        total_kills=_finite_int(stats_d["totalKills"]),
        total_scrap_earned=_finite_float(stats_d["totalScrapEarned"]),
        total_damage_dealt=_finite_float(stats_d["totalDamageDealt"]),
        play_time=_finite_float(stats_d["playTime"]),
        bosses_defeated=_finite_int(stats_d["bossesDefeated"]),
    )

    upgrades: dict[str, int] = {}
    for uid, level in d["upgrades"].items():
        level = max(0, _finite_int(level))
        udef = ALL_UPGRADES.get(uid)
        if udef is not None and level > udef.max_level:
            log.warning("clamping %s from level %d to max %d", uid, level, udef.max_level)
            level = udef.max_level
        upgrades[str(uid)] = level

    sectors = BALANCE.sectors
    current_sector = _clamp_int(d["currentSector"], 0, sectors.sector_count - 1)
    highest_sector = _clamp_int(d["highestSector"], 0, sectors.sector_count - 1)

    return SaveState(
        scrap=max(0.0, _finite_float(d["scrap"])),
        cores=max(0, _finite_int(d["cores"])),
        current_sector=current_sector,
        current_wave=_clamp_int(d["currentWave"], 1, sectors.waves_per_sector + 1),
        highest_sector=max(highest_sector, current_sector),
        player_hp=_finite_float(d["playerHP"]),
        player_max_hp=_finite_float(d["playerMaxHP"]),
        upgrades=upgrades,
        active_weapon_mod=str(d["activeWeaponMod"]),
        active_behavior_script=str(d["activeBehaviorScript"]),
        active_target_mode=str(d["activeTargetMode"]),
        stats=stats,
        last_save_time=_finite_int(d["lastSaveTime"]),
        scrap_per_second=max(0.0, _finite_float(d["scrapPerSecond"])),
        version=_finite_int(d["version"]),
    )


def _settings_to_dict(settings: GameSettings) -> dict:
    return {
        "sound": settings.sound,
        "volume": settings.volume,
        "reducedMotion": settings.reduced_motion,
        "uiScale": settings.ui_scale,
    }


def _dict_to_settings(d: Mapping) -> GameSettings:
    return GameSettings(
        sound=bool(d["sound"]),
        volume=min(1.0, max(0.0, _finite_float(d["volume"]))),
        reduced_motion=bool(d["reducedMotion"]),
        ui_scale=_finite_float(d["uiScale"]),
    )


def merge_upgrades(current: dict[str, int], incoming: Mapping[str, int]) -> dict[str, int]:
    """Key-wise merge; ids present in ``current`` are never dropped."""
    return {**current, **incoming}


def merge_stats(current: GameStats, incoming: GameStats | Mapping) -> GameStats:
    """Field-wise merge of a partial stats update."""
    if isinstance(incoming, GameStats):
        return copy.copy(incoming)
    unknown = set(incoming) - _STATS_FIELDS
    if unknown:
        raise TypeError(f"GameStats has no field(s) {sorted(unknown)}")
    merged = copy.copy(current)
    for name, value in incoming.items():
        setattr(merged, name, value)
    return merged


# ── Store ────────────────────────────────────────────────────────


class SaveStore:
    """The single owner of the player's SaveState.

    ``clock`` returns wall-clock seconds since the epoch; it is injectable so
    offline progress can be tested without waiting.
    """

    def __init__(self, storage: Storage, clock: Callable[[], float] = time.time) -> None:
        self._storage = storage
        self._clock = clock
        self._state = self._defaults()

    # ── Internals ────────────────────────────────────────

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _defaults(self) -> SaveState:
        return SaveState(last_save_time=self._now_ms())

    def _write(self) -> None:
        key = BALANCE.save.save_key
        try:
            self._storage.put(key, json.dumps(_state_to_dict(self._state)))
        except (OSError, TypeError, ValueError):
            # In-memory state stays current; the next autosave retries
            log.exception("failed to write save %r", key)

    def _apply(self, partial: Mapping) -> None:
        """Merge ``partial`` into the state, normalised the same way as a load.

        Currencies and income are floored at 0, known upgrade levels capped
        at their max level and the cursor clamped into range. Values that
        can't be coerced raise before anything changes.
        """
        unknown = set(partial) - _STATE_FIELDS
        if unknown:
            raise TypeError(f"SaveState has no field(s) {sorted(unknown)}")
        candidate = copy.deepcopy(self._state)
        for name, value in partial.items():
            if name == "upgrades":
                candidate.upgrades = merge_upgrades(candidate.upgrades, value)
            elif name == "stats":
                candidate.stats = merge_stats(candidate.stats, value)
            else:
                setattr(candidate, name, value)
        self._state = _dict_to_state(_state_to_dict(candidate))

    # ── Lifecycle ────────────────────────────────────────

    def has_save(self) -> bool:
        """True if a save record exists in storage."""
        return self._storage.has(BALANCE.save.save_key)

    def load(self) -> SaveState:
        """Load the stored save, falling back to a fresh one if absent or corrupt."""
        key = BALANCE.save.save_key
        try:
            raw = self._storage.get(key)
        except StorageError:
            log.warning("could not read save %r, starting fresh", key, exc_info=True)
            raw = None

        if raw is None:
            self._state = self._defaults()
            return self.get_current()

        try:
            data = json.loads(raw)
            if not isinstance(data, Mapping):
                raise TypeError(f"save root must be an object, got {type(data).__name__}")
            self._state = _dict_to_state(_merge_record(_state_to_dict(self._defaults()), data))
        except (ValueError, TypeError, KeyError, OverflowError):
            log.warning("corrupt save %r, starting fresh", key, exc_info=True)
            self._state = self._defaults()
        return self.get_current()

    def save(self, **partial) -> None:
        """Merge ``partial`` into memory, stamp the save time and persist.

        Storage failures are logged, never raised.
        """
        self._apply(partial)
        self._state.last_save_time = self._now_ms()
        self._write()

    def get_current(self) -> SaveState:
        """A snapshot of the current state; mutating it does not affect the store."""
        return copy.deepcopy(self._state)

    def update(self, **partial) -> None:
        """Merge ``partial`` into memory without persisting."""
        self._apply(partial)

    def reset(self) -> None:
        """Replace the save with a fresh one and persist it immediately.

        Irreversible; callers must confirm with the player first.
        """
        self._state = self._defaults()
        self._write()
        log.info("save reset")

    # ── Export / import ──────────────────────────────────

    def export_save(self) -> str:
        """The current save as base64-encoded JSON, for copy-paste transport."""
        raw = json.dumps(_state_to_dict(self._state))
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    def import_save(self, text: str) -> bool:
        """Replace the save with an exported one.

        Returns False and leaves the current save untouched if the text is not
        valid base64 JSON or lacks a numeric ``scrap``/``currentWave``.
        """
        if not isinstance(text, str):
            return False
        try:
            data = json.loads(base64.b64decode(text.strip(), validate=True).decode("utf-8"))
        except ValueError:
            log.warning("rejected import: not base64-encoded JSON")
            return False

        if not isinstance(data, Mapping):
            log.warning("rejected import: root is not an object")
            return False
        if not _is_number(data.get("scrap")) or not _is_number(data.get("currentWave")):
            log.warning("rejected import: missing or non-numeric scrap/currentWave")
            return False

        try:
            state = _dict_to_state(_merge_record(_state_to_dict(self._defaults()), data))
        except (ValueError, TypeError, KeyError, OverflowError):
            log.warning("rejected import: malformed fields", exc_info=True)
            return False

        self._state = state
        self._write()
        log.info("imported save: %.0f scrap, sector %d wave %d",
                 state.scrap, state.current_sector, state.current_wave)
        return True

    # ── Offline progress ─────────────────────────────────

    def calculate_offline_progress(self) -> float:
        """Credit scrap earned while the game was closed. Returns the amount.

        Nothing is credited for absences under a minute or when there was no
        passive income; longer absences are capped. A save time in the future
        (clock changed) counts as no time away.
        """
        bal = BALANCE.save
        s = self._state
        elapsed = max(0.0, (self._now_ms() - s.last_save_time) / 1000)

        if elapsed < bal.min_offline_seconds or s.scrap_per_second <= 0:
            return 0.0

        capped = min(elapsed, bal.max_offline_hours * 3600)
        earned = s.scrap_per_second * capped
        self.save(scrap=s.scrap + earned)
        log.info("offline for %.0fs (%.0fs credited): +%.1f scrap", elapsed, capped, earned)
        return earned

    # ── Currency ─────────────────────────────────────────

    def add_scrap(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"cannot add negative scrap: {amount}")
        self._state.scrap += amount
        self._state.stats.total_scrap_earned += amount

    def spend_scrap(self, amount: float) -> bool:
        """Deduct scrap. False (and no change) if the balance is short."""
        return self.spend(scrap=amount)

    def add_cores(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"cannot add negative cores: {amount}")
        self._state.cores += amount

    def spend_cores(self, amount: int) -> bool:
        """Deduct cores. False (and no change) if the balance is short."""
        return self.spend(cores=amount)

    def spend(self, scrap: float = 0.0, cores: int = 0) -> bool:
        """Deduct both currencies or neither."""
        if scrap < 0 or cores < 0:
            raise ValueError(f"cannot spend negative amounts: scrap={scrap}, cores={cores}")
        s = self._state
        if s.scrap < scrap or s.cores < cores:
            return False
        s.scrap -= scrap
        s.cores -= cores
        return True

    # ── Upgrades ─────────────────────────────────────────

    def get_upgrade_level(self, upgrade_id: str) -> int:
        return self._state.upgrades.get(upgrade_id, 0)

    def has_upgrade(self, upgrade_id: str) -> bool:
        return self.get_upgrade_level(upgrade_id) > 0

    def add_upgrade_level(self, upgrade_id: str) -> None:
        """Raise an upgrade by exactly one level.

        Callers check availability first; going past max level is a bug.
        """
        udef = upgrade_definition(upgrade_id)
        level = self.get_upgrade_level(upgrade_id)
        if level >= udef.max_level:
            raise ValueError(f"{upgrade_id} is already at max level {udef.max_level}")
        self._state.upgrades[upgrade_id] = level + 1

    # ── Stats ────────────────────────────────────────────

    def record_kill(self) -> None:
        self._state.stats.total_kills += 1

    def record_damage(self, amount: float) -> None:
        if amount > 0:
            self._state.stats.total_damage_dealt += amount

    def record_boss_defeat(self) -> None:
        self._state.stats.bosses_defeated += 1

    def add_play_time(self, seconds: float) -> None:
        if seconds > 0:
            self._state.stats.play_time += seconds

    # ── Cursor, vitals, income ───────────────────────────

    def set_cursor(self, sector: int, wave: int) -> None:
        """Move the sector/wave cursor; highest_sector follows it upward."""
        sectors = BALANCE.sectors
        if not 0 <= sector < sectors.sector_count:
            raise ValueError(f"sector {sector} out of range")
        if not 1 <= wave <= sectors.waves_per_sector + 1:
            raise ValueError(f"wave {wave} out of range")
        s = self._state
        s.current_sector = sector
        s.current_wave = wave
        s.highest_sector = max(s.highest_sector, sector)

    def sync_player_hp(self, hp: float, max_hp: float) -> None:
        self._state.player_hp = max(0.0, min(hp, max_hp))
        self._state.player_max_hp = max_hp

    def set_scrap_per_second(self, rate: float) -> None:
        self._state.scrap_per_second = max(0.0, rate)

    # ── Loadout ──────────────────────────────────────────

    def select_weapon_mod(self, mod_id: str) -> bool:
        """False if the weapon mod slot isn't unlocked yet."""
        weapon_mod(mod_id)
        if mod_id != DEFAULT_WEAPON_MOD and not self.has_upgrade(_WEAPON_MOD_UNLOCK):
            return False
        self._state.active_weapon_mod = mod_id
        return True

    def select_behavior_script(self, script_id: str) -> bool:
        """False if behavior scripts aren't unlocked yet."""
        behavior_script(script_id)
        if script_id != DEFAULT_BEHAVIOR_SCRIPT and not self.has_upgrade(_BEHAVIOR_SCRIPT_UNLOCK):
            return False
        self._state.active_behavior_script = script_id
        return True

    def select_target_mode(self, mode_id: str) -> bool:
        """False if targeting firmware isn't installed yet."""
        mode = target_mode(mode_id)
        if mode is not DEFAULT_TARGET_MODE and not self.has_upgrade(_TARGET_MODE_UNLOCK):
            return False
        self._state.active_target_mode = mode.value
        return True

    # ── Settings ─────────────────────────────────────────

    def get_settings(self) -> GameSettings:
        """Stored settings merged over defaults; defaults if absent or corrupt."""
        key = BALANCE.save.settings_key
        defaults = _settings_to_dict(GameSettings())
        try:
            raw = self._storage.get(key)
            if raw is None:
                return GameSettings()
            data = json.loads(raw)
            if not isinstance(data, Mapping):
                raise TypeError("settings root must be an object")
            known = {k: v for k, v in data.items() if k in defaults}
            return _dict_to_settings({**defaults, **known})
        except (OSError, ValueError, TypeError):
            log.warning("could not load settings %r, using defaults", key, exc_info=True)
            return GameSettings()

    def save_settings(self, **partial) -> None:
        """Merge ``partial`` into the stored settings and persist them."""
        unknown = set(partial) - _SETTINGS_FIELDS
        if unknown:
            raise TypeError(f"GameSettings has no field(s) {sorted(unknown)}")
        settings = self.get_settings()
        for name, value in partial.items():
            setattr(settings, name, value)
        key = BALANCE.save.settings_key
        try:
            self._storage.put(key, json.dumps(_settings_to_dict(settings)))
        except (OSError, TypeError, ValueError):
            log.exception("failed to write settings %r", key)
