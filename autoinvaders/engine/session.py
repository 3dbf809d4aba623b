"""Per-second session metering: play time, income sampling and autosave.

The game loop feeds kills and damage in as they happen and calls
``tick(dt)`` every frame. Once per second the meter adds play time and
stores the last second's scrap income as ``scrap_per_second``, the rate
offline progress pays out at next session.
"""

from __future__ import annotations

import logging

from autoinvaders.data.balance import BALANCE
from autoinvaders.engine.save import SaveStore

log = logging.getLogger(__name__)


class SessionMeter:
    def __init__(self, store: SaveStore, autosave_interval_s: float | None = None) -> None:
        self.store = store
        self.autosave_interval_s = (
            BALANCE.save.autosave_interval_s if autosave_interval_s is None else autosave_interval_s
        )
        self.scrap_this_second = 0.0
        self.damage_this_second = 0.0
        self.last_sps = 0.0
        self.last_dps = 0.0
        self._second_timer = 0.0
        self._autosave_timer = 0.0

    def start(self) -> float:
        """Load the save and credit offline progress. Returns offline scrap."""
        self.store.load()
        earned = self.store.calculate_offline_progress()
        self._second_timer = 0.0
        self._autosave_timer = 0.0
        return earned

    def on_kill(self, scrap: float) -> None:
        """Credit a kill that paid out ``scrap`` (after salvage bonuses)."""
        self.store.add_scrap(scrap)
        self.store.record_kill()
        self.scrap_this_second += scrap

    def on_damage(self, amount: float) -> None:
        self.store.record_damage(amount)
        self.damage_this_second += amount

    def tick(self, dt: float) -> None:
        """Advance by ``dt`` seconds of play."""
        self._second_timer += dt
        while self._second_timer >= 1.0:
            self._second_timer -= 1.0
            self._sample()

        self._autosave_timer += dt
        if self.autosave_interval_s > 0 and self._autosave_timer >= self.autosave_interval_s:
            self._autosave_timer = 0.0
            self.store.save()
            log.debug("autosaved")

    def _sample(self) -> None:
        self.store.add_play_time(1)
        self.last_sps = self.scrap_this_second
        self.last_dps = self.damage_this_second
        self.store.set_scrap_per_second(self.last_sps)
        self.scrap_this_second = 0.0
        self.damage_this_second = 0.0
