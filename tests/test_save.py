"""Tests for the save store: persistence, merge rules, import/export, offline progress."""

from __future__ import annotations

import base64
import json

import pytest

from autoinvaders.data.balance import BALANCE
from autoinvaders.engine.game_state import GameSettings, GameStats, SaveState
from autoinvaders.engine.save import SaveStore, merge_stats, merge_upgrades
from autoinvaders.engine.storage import FileStorage, MemoryStorage, StorageError

SAVE_KEY = BALANCE.save.save_key
SETTINGS_KEY = BALANCE.save.settings_key
START = 1_700_000_000.0


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, t: float = START) -> None:
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class BrokenStorage(MemoryStorage):
    def put(self, key: str, value: str) -> None:
        raise StorageError("disk full")


def _make_store(records: dict[str, str] | None = None) -> tuple[SaveStore, MemoryStorage, FakeClock]:
    storage = MemoryStorage(records)
    clock = FakeClock()
    return SaveStore(storage, clock=clock), storage, clock


def _encode(data: dict) -> str:
    return base64.b64encode(json.dumps(data).encode()).decode()


# ── Defaults & load ──────────────────────────────────────────────


def test_fresh_store_has_defaults():
    store, storage, _ = _make_store()
    assert not store.has_save()
    state = store.load()
    assert state.scrap == 0
    assert state.cores == 0
    assert state.current_sector == 0
    assert state.current_wave == 1
    assert state.highest_sector == 0
    assert state.upgrades == {}
    assert state.active_weapon_mod == "standard"
    assert state.active_behavior_script == "balanced"
    assert state.active_target_mode == "closest"
    assert state.last_save_time == int(START * 1000)
    assert state.version == 1
    # Loading without a save doesn't write one
    assert SAVE_KEY not in storage.records


def test_save_then_load_in_new_store():
    store, storage, clock = _make_store()
    store.add_scrap(250)
    store.save()

    fresh = SaveStore(storage, clock=clock)
    assert fresh.has_save()
    state = fresh.load()
    assert state.scrap == 250
    assert state.stats.total_scrap_earned == 250


def test_saved_record_uses_camel_case_fields():
    store, storage, _ = _make_store()
    store.save(current_wave=4)
    data = json.loads(storage.records[SAVE_KEY])
    assert data["currentWave"] == 4
    assert data["stats"]["totalKills"] == 0
    assert "lastSaveTime" in data and "scrapPerSecond" in data


def test_load_corrupt_record_falls_back_to_defaults():
    store, _, _ = _make_store({SAVE_KEY: "{not json"})
    state = store.load()
    assert state == SaveState(last_save_time=int(START * 1000))


def test_load_non_object_record_falls_back_to_defaults():
    store, _, _ = _make_store({SAVE_KEY: "[1, 2, 3]"})
    assert store.load().scrap == 0


@pytest.mark.parametrize(
    "raw",
    [
        '{"lastSaveTime": Infinity}',
        '{"scrap": 5, "cores": 1e999}',
        '{"scrap": NaN}',
        '{"scrap": 1' + "0" * 400 + "}",
        '{"upgrades": {"damage": -Infinity}}',
    ],
)
def test_load_non_finite_numbers_falls_back_to_defaults(raw):
    store, _, _ = _make_store({SAVE_KEY: raw})
    assert store.load() == SaveState(last_save_time=int(START * 1000))


def test_load_undecodable_file_falls_back_to_defaults(tmp_path, caplog):
    (tmp_path / f"{SAVE_KEY}.json").write_bytes(b'{"scrap": \xff\xfe}')
    store = SaveStore(FileStorage(tmp_path), clock=FakeClock())
    assert store.load().scrap == 0
    assert "could not read save" in caplog.text


def test_file_storage_wraps_decode_errors(tmp_path):
    (tmp_path / "broken.json").write_bytes(b"\xff\xfe")
    with pytest.raises(StorageError):
        FileStorage(tmp_path).get("broken")


def test_load_fills_missing_fields_from_defaults():
    old = {"scrap": 75, "currentWave": 3, "upgrades": {"damage": 2}, "stats": {"totalKills": 9}}
    store, _, _ = _make_store({SAVE_KEY: json.dumps(old)})
    state = store.load()
    assert state.scrap == 75
    assert state.current_wave == 3
    assert state.cores == 0
    assert state.upgrades == {"damage": 2}
    # Missing stats come from defaults instead of vanishing
    assert state.stats == GameStats(total_kills=9)


def test_load_clamps_out_of_range_values():
    bad = {"scrap": -5, "cores": -1, "currentWave": 99, "upgrades": {"autoFire": 4, "legacyThing": 3}}
    store, _, _ = _make_store({SAVE_KEY: json.dumps(bad)})
    state = store.load()
    assert state.scrap == 0
    assert state.cores == 0
    assert state.current_wave == BALANCE.sectors.waves_per_sector + 1
    assert state.upgrades["autoFire"] == 1
    # Ids the catalog no longer knows are kept as-is
    assert state.upgrades["legacyThing"] == 3


def test_load_is_idempotent():
    store, _, clock = _make_store()
    store.add_scrap(40)
    store.update(upgrades={"damage": 3})
    store.save()
    clock.advance(500)
    first = store.load()
    second = store.load()
    assert first == second


def test_get_current_is_a_snapshot():
    store, _, _ = _make_store()
    snap = store.get_current()
    snap.scrap = 9999
    snap.upgrades["damage"] = 5
    assert store.get_current().scrap == 0
    assert store.get_upgrade_level("damage") == 0


# ── Update / save / reset ────────────────────────────────────────


def test_update_does_not_persist():
    store, storage, _ = _make_store()
    store.update(scrap=10.0)
    assert store.get_current().scrap == 10.0
    assert SAVE_KEY not in storage.records


def test_update_deep_merges_upgrades_and_stats():
    store, _, _ = _make_store()
    store.update(upgrades={"damage": 2})
    store.update(upgrades={"fireRate": 1})
    store.record_kill()
    store.update(stats={"play_time": 30.0})
    state = store.get_current()
    assert state.upgrades == {"damage": 2, "fireRate": 1}
    assert state.stats.total_kills == 1
    assert state.stats.play_time == 30.0


def test_update_rejects_unknown_fields():
    store, _, _ = _make_store()
    with pytest.raises(TypeError):
        store.update(gold=5)
    with pytest.raises(TypeError):
        store.update(stats={"deaths": 1})


def test_update_caps_upgrade_levels():
    store, _, _ = _make_store()
    store.update(upgrades={"autoFire": 7, "damage": -2, "legacyThing": 9})
    assert store.get_upgrade_level("autoFire") == 1
    assert store.get_upgrade_level("damage") == 0
    assert store.get_upgrade_level("legacyThing") == 9


def test_update_floors_currencies_and_income():
    store, _, _ = _make_store()
    store.update(cores=-3, scrap_per_second=-2.0)
    state = store.get_current()
    assert state.cores == 0
    assert state.scrap_per_second == 0


def test_save_never_persists_negative_scrap():
    store, storage, _ = _make_store()
    store.save(scrap=-50.0)
    assert store.get_current().scrap == 0
    assert json.loads(storage.records[SAVE_KEY])["scrap"] == 0


def test_update_clamps_cursor_and_raises_highest_sector():
    store, _, _ = _make_store()
    store.update(current_sector=2)
    assert store.get_current().highest_sector == 2

    store.update(current_sector=99, current_wave=0)
    state = store.get_current()
    assert state.current_sector == BALANCE.sectors.sector_count - 1
    assert state.current_wave == 1
    assert state.highest_sector == BALANCE.sectors.sector_count - 1


@pytest.mark.parametrize("value", ["lots", float("inf"), float("nan")])
def test_update_rejects_bad_numbers_without_mutating(value):
    store, _, _ = _make_store()
    store.add_scrap(10)
    before = store.get_current()
    with pytest.raises(ValueError):
        store.update(scrap=value, cores=4)
    assert store.get_current() == before


def test_save_stamps_time():
    store, storage, clock = _make_store()
    clock.advance(120)
    store.save(scrap=3.0)
    assert store.get_current().last_save_time == int((START + 120) * 1000)
    assert json.loads(storage.records[SAVE_KEY])["scrap"] == 3.0


def test_save_survives_storage_failure(caplog):
    store = SaveStore(BrokenStorage(), clock=FakeClock())
    store.save(scrap=12.0)
    assert store.get_current().scrap == 12.0
    assert "failed to write save" in caplog.text


def test_reset_overwrites_storage():
    store, storage, clock = _make_store()
    store.add_scrap(500)
    store.add_cores(2)
    store.save()
    clock.advance(10)
    store.reset()
    state = store.get_current()
    assert state.scrap == 0
    assert state.cores == 0
    assert state.last_save_time == int((START + 10) * 1000)
    assert json.loads(storage.records[SAVE_KEY])["scrap"] == 0


def test_file_storage_round_trip(tmp_path):
    clock = FakeClock()
    store = SaveStore(FileStorage(tmp_path / "saves"), clock=clock)
    store.add_scrap(33)
    store.save()
    assert (tmp_path / "saves" / f"{SAVE_KEY}.json").exists()

    reloaded = SaveStore(FileStorage(tmp_path / "saves"), clock=clock)
    assert reloaded.load().scrap == 33


# ── Export / import ──────────────────────────────────────────────


def test_export_import_round_trip():
    store, _, _ = _make_store()
    store.add_scrap(321.5)
    store.add_cores(2)
    store.update(upgrades={"damage": 4, "autoFire": 1})
    store.set_cursor(2, 7)
    store.record_kill()
    store.add_play_time(61)
    store.set_scrap_per_second(3.5)
    original = store.get_current()
    text = store.export_save()

    other, storage, _ = _make_store()
    assert other.import_save(text)
    assert other.get_current() == original
    # Import persists immediately
    assert SAVE_KEY in storage.records


def test_export_is_base64_json():
    store, _, _ = _make_store()
    store.add_scrap(5)
    data = json.loads(base64.b64decode(store.export_save()))
    assert data["scrap"] == 5


@pytest.mark.parametrize(
    "text",
    [
        "%%% not base64 %%%",
        base64.b64encode(b"{not json").decode(),
        _encode([1, 2]),
        _encode({"currentWave": 3}),
        _encode({"scrap": "100", "currentWave": 3}),
        _encode({"scrap": 100}),
        _encode({"scrap": 100, "currentWave": True}),
        _encode({"scrap": 100, "currentWave": 3, "upgrades": ["damage"]}),
        _encode({"scrap": 1, "currentWave": float("inf")}),
        _encode({"scrap": float("nan"), "currentWave": 3}),
        _encode({"scrap": 100, "currentWave": 3, "lastSaveTime": float("-inf")}),
        base64.b64encode(b'{"scrap": 100, "currentWave": 3, "cores": 1e999}').decode(),
    ],
)
def test_import_rejects_bad_input_without_mutating(text):
    store, storage, _ = _make_store()
    store.add_scrap(42)
    store.save()
    before = store.get_current()
    stored = storage.records[SAVE_KEY]

    assert not store.import_save(text)
    assert store.get_current() == before
    assert storage.records[SAVE_KEY] == stored


def test_import_merges_onto_defaults():
    store, _, _ = _make_store()
    store.add_cores(5)
    assert store.import_save(_encode({"scrap": 10, "currentWave": 2}))
    state = store.get_current()
    assert state.scrap == 10
    assert state.current_wave == 2
    # Fields absent from the import come from defaults, not the old save
    assert state.cores == 0


# ── Offline progress ─────────────────────────────────────────────


def _away(seconds: float, rate: float) -> tuple[SaveStore, FakeClock]:
    store, _, clock = _make_store()
    store.set_scrap_per_second(rate)
    store.save()
    clock.advance(seconds)
    return store, clock


def test_offline_under_a_minute_pays_nothing():
    store, _ = _away(59, rate=1000.0)
    assert store.calculate_offline_progress() == 0
    assert store.get_current().scrap == 0


def test_offline_without_income_pays_nothing():
    store, _ = _away(3600, rate=0.0)
    assert store.calculate_offline_progress() == 0


def test_offline_pays_rate_times_elapsed():
    store, _ = _away(600, rate=2.0)
    earned = store.calculate_offline_progress()
    assert earned == pytest.approx(1200.0)
    assert store.get_current().scrap == pytest.approx(1200.0)


def test_offline_is_capped():
    store, _ = _away(48 * 3600, rate=1.5)
    earned = store.calculate_offline_progress()
    assert earned == 1.5 * BALANCE.save.max_offline_hours * 3600


def test_offline_credit_is_persisted_and_not_repeated():
    store, storage, clock = _make_store()
    store.set_scrap_per_second(1.0)
    store.save()
    clock.advance(300)
    assert store.calculate_offline_progress() == pytest.approx(300.0)
    assert json.loads(storage.records[SAVE_KEY])["scrap"] == pytest.approx(300.0)
    # The save time was restamped, so asking again pays nothing
    assert store.calculate_offline_progress() == 0


def test_offline_with_future_save_time_pays_nothing():
    store, clock = _away(0, rate=5.0)
    clock.advance(-7200)
    assert store.calculate_offline_progress() == 0


# ── Currency & counters ──────────────────────────────────────────


def test_spend_scrap_fails_closed():
    store, _, _ = _make_store()
    store.add_scrap(50)
    assert not store.spend_scrap(51)
    assert store.get_current().scrap == 50
    assert store.spend_scrap(20)
    assert store.get_current().scrap == 30


def test_spend_cores_fails_closed():
    store, _, _ = _make_store()
    store.add_cores(1)
    assert not store.spend_cores(2)
    assert store.get_current().cores == 1
    assert store.spend_cores(1)
    assert store.get_current().cores == 0


def test_spend_both_is_all_or_nothing():
    store, _, _ = _make_store()
    store.add_scrap(100)
    assert not store.spend(scrap=50, cores=1)
    assert store.get_current().scrap == 100


def test_negative_amounts_are_rejected():
    store, _, _ = _make_store()
    with pytest.raises(ValueError):
        store.add_scrap(-1)
    with pytest.raises(ValueError):
        store.spend_scrap(-1)


def test_upgrade_levels():
    store, _, _ = _make_store()
    assert store.get_upgrade_level("damage") == 0
    assert not store.has_upgrade("damage")
    store.add_upgrade_level("damage")
    store.add_upgrade_level("damage")
    assert store.get_upgrade_level("damage") == 2
    assert store.has_upgrade("damage")


def test_add_upgrade_level_refuses_past_max():
    store, _, _ = _make_store()
    store.add_upgrade_level("autoFire")
    with pytest.raises(ValueError):
        store.add_upgrade_level("autoFire")
    assert store.get_upgrade_level("autoFire") == 1


def test_stat_counters():
    store, _, _ = _make_store()
    store.add_scrap(10)
    store.record_kill()
    store.record_kill()
    store.record_damage(45.5)
    store.record_boss_defeat()
    store.add_play_time(3)
    stats = store.get_current().stats
    assert stats == GameStats(
        total_kills=2,
        total_scrap_earned=10,
        total_damage_dealt=45.5,
        play_time=3,
        bosses_defeated=1,
    )


def test_set_cursor_raises_highest_sector_only_upward():
    store, _, _ = _make_store()
    store.set_cursor(3, 1)
    store.set_cursor(1, 5)
    state = store.get_current()
    assert (state.current_sector, state.current_wave, state.highest_sector) == (1, 5, 3)
    with pytest.raises(ValueError):
        store.set_cursor(6, 1)
    with pytest.raises(ValueError):
        store.set_cursor(0, 14)


def test_sync_player_hp():
    store, _, _ = _make_store()
    store.sync_player_hp(140, 120)
    state = store.get_current()
    assert (state.player_hp, state.player_max_hp) == (120, 120)


# ── Loadout selection ────────────────────────────────────────────


def test_loadout_selection_is_gated_by_unlocks():
    store, _, _ = _make_store()
    assert not store.select_weapon_mod("scatter")
    assert not store.select_behavior_script("farmer")
    assert not store.select_target_mode("valuable")
    assert store.select_weapon_mod("standard")

    store.update(upgrades={"weaponModSlot": 1, "behaviorScripts": 1, "targetingFirmware": 1})
    assert store.select_weapon_mod("scatter")
    assert store.select_behavior_script("farmer")
    assert store.select_target_mode("valuable")
    state = store.get_current()
    assert (state.active_weapon_mod, state.active_behavior_script, state.active_target_mode) == (
        "scatter", "farmer", "valuable",
    )


def test_loadout_selection_unknown_id_raises():
    store, _, _ = _make_store()
    with pytest.raises(KeyError):
        store.select_weapon_mod("laser")


# ── Settings ─────────────────────────────────────────────────────


def test_settings_default_and_merge():
    store, storage, _ = _make_store()
    assert store.get_settings() == GameSettings()
    store.save_settings(sound=False)
    store.save_settings(ui_scale=1.25)
    assert store.get_settings() == GameSettings(sound=False, ui_scale=1.25)
    assert json.loads(storage.records[SETTINGS_KEY])["uiScale"] == 1.25
    # Settings live under their own key
    assert SAVE_KEY not in storage.records


def test_settings_from_old_record_and_corrupt_record():
    store, _, _ = _make_store({SETTINGS_KEY: json.dumps({"sound": False, "theme": "dark"})})
    assert store.get_settings() == GameSettings(sound=False)

    broken, _, _ = _make_store({SETTINGS_KEY: "nope"})
    assert broken.get_settings() == GameSettings()


def test_save_settings_rejects_unknown_field():
    store, _, _ = _make_store()
    with pytest.raises(TypeError):
        store.save_settings(brightness=3)


# ── Merge helpers ────────────────────────────────────────────────


def test_merge_helpers():
    assert merge_upgrades({"a": 1, "b": 2}, {"b": 3, "c": 1}) == {"a": 1, "b": 3, "c": 1}
    merged = merge_stats(GameStats(total_kills=4), {"bosses_defeated": 1})
    assert merged == GameStats(total_kills=4, bosses_defeated=1)
