"""Economy engine — upgrade pricing, purchase rules and effective ship stats.

``UpgradeResolver`` combines catalog data with the levels held by a
``SaveStore``. It keeps no state of its own and never raises for unknown
ids or unaffordable purchases; those come back as return values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from autoinvaders.data.balance import BALANCE
from autoinvaders.data.upgrades import ALL_UPGRADES, UpgradeCategory, UpgradeDef
from autoinvaders.engine.catalog import (
    UnknownIdError,
    behavior_script,
    upgrades_by_category,
    weapon_mod,
)
from autoinvaders.engine.difficulty import round_half_up, upgrade_cost
from autoinvaders.engine.save import SaveStore

log = logging.getLogger(__name__)

_WEAPON_MOD_UNLOCK = "weaponModSlot"


@dataclass(frozen=True)
class UpgradeCost:
    scrap: float = 0
    cores: int = 0


@dataclass(frozen=True)
class Availability:
    available: bool
    reason: str = ""


@dataclass(frozen=True)
class ShopRow:
    """Everything a shop entry needs to render one upgrade."""

    upgrade: UpgradeDef
    level: int
    cost: UpgradeCost
    availability: Availability
    affordable: bool

    @property
    def maxed(self) -> bool:
        return self.level >= self.upgrade.max_level


class UpgradeResolver:
    """Answers shop questions ("what does X cost", "can I buy X") for a store."""

    def __init__(self, store: SaveStore) -> None:
        self.store = store

    def _definition(self, upgrade_id: str) -> UpgradeDef | None:
        udef = ALL_UPGRADES.get(upgrade_id)
        if udef is None:
            log.warning("unknown upgrade id %r", upgrade_id)
        return udef

    # ── Levels & cost ────────────────────────────────────

    def level_of(self, upgrade_id: str) -> int:
        return self.store.get_upgrade_level(upgrade_id)

    def cost_of(self, upgrade_id: str) -> UpgradeCost:
        """Price of the next level. Zero once maxed (check availability too)."""
        udef = self._definition(upgrade_id)
        if udef is None:
            return UpgradeCost()

        level = self.level_of(upgrade_id)
        if level >= udef.max_level:
            return UpgradeCost()

        if udef.base_cost <= 0:
            scrap = 0
        elif udef.is_unlock:
            scrap = udef.base_cost
        else:
            scrap = upgrade_cost(udef.base_cost, level + 1)
        return UpgradeCost(scrap=scrap, cores=udef.cores_cost)

    def is_available(self, upgrade_id: str) -> Availability:
        udef = self._definition(upgrade_id)
        if udef is None:
            return Availability(False, "Unknown upgrade")

        if self.level_of(upgrade_id) >= udef.max_level:
            return Availability(False, "Max level reached")

        # Gated on the furthest sector ever reached, not the current one
        state = self.store.get_current()
        if udef.sector_required is not None and state.highest_sector < udef.sector_required:
            return Availability(False, f"Requires Sector {udef.sector_required}")

        if udef.prerequisite and not self.store.has_upgrade(udef.prerequisite):
            prereq = ALL_UPGRADES.get(udef.prerequisite)
            name = prereq.name if prereq else udef.prerequisite
            return Availability(False, f"Requires {name}")

        return Availability(True)

    def can_afford(self, upgrade_id: str) -> bool:
        cost = self.cost_of(upgrade_id)
        state = self.store.get_current()
        return state.scrap >= cost.scrap and state.cores >= cost.cores

    def purchase(self, upgrade_id: str) -> bool:
        """Buy the next level. Re-checks everything; all-or-nothing."""
        if not self.is_available(upgrade_id).available:
            return False
        cost = self.cost_of(upgrade_id)
        if not self.store.spend(scrap=cost.scrap, cores=cost.cores):
            return False
        self.store.add_upgrade_level(upgrade_id)
        log.debug("bought %s level %d for %s", upgrade_id, self.level_of(upgrade_id), cost)
        return True

    # ── Shop helpers ─────────────────────────────────────

    def shop_rows(self) -> dict[UpgradeCategory, list[ShopRow]]:
        rows: dict[UpgradeCategory, list[ShopRow]] = {}
        for category, udefs in upgrades_by_category().items():
            rows[category] = [
                ShopRow(
                    upgrade=udef,
                    level=self.level_of(udef.id),
                    cost=self.cost_of(udef.id),
                    availability=self.is_available(udef.id),
                    affordable=self.can_afford(udef.id),
                )
                for udef in udefs
            ]
        return rows

    def recommended(self) -> str | None:
        """Suggest the next purchase.

        First affordable entry in the priority list, otherwise the cheapest
        available scrap-only upgrade (affordable or not).
        """
        for upgrade_id in BALANCE.economy.recommended_priority:
            if self.is_available(upgrade_id).available and self.can_afford(upgrade_id):
                return upgrade_id

        cheapest: str | None = None
        cheapest_cost = float("inf")
        for upgrade_id in ALL_UPGRADES:
            if not self.is_available(upgrade_id).available:
                continue
            cost = self.cost_of(upgrade_id)
            if cost.cores == 0 and cost.scrap < cheapest_cost:
                cheapest, cheapest_cost = upgrade_id, cost.scrap
        return cheapest

    # ── Effective stats ──────────────────────────────────

    def _compound(self, upgrade_id: str) -> float:
        """(1 + effect_per_level) ^ level for a multiplicative upgrade."""
        udef = ALL_UPGRADES[upgrade_id]
        return (1 + udef.effect_per_level) ** self.level_of(upgrade_id)

    def _linear(self, upgrade_id: str) -> float:
        """effect_per_level * level for an additive upgrade."""
        return ALL_UPGRADES[upgrade_id].effect_per_level * self.level_of(upgrade_id)

    def damage(self) -> float:
        return BALANCE.player.base_damage * self._compound("damage")

    def fire_rate(self) -> float:
        """Shots per second."""
        base_rate = 1000 / BALANCE.player.base_fire_interval_ms
        return base_rate * self._compound("fireRate")

    def bullet_speed(self) -> float:
        return BALANCE.player.base_bullet_speed * self._compound("projectileSpeed")

    def salvage_multiplier(self) -> float:
        return self._compound("salvageYield")

    def crit_chance(self) -> float:
        return self._linear("critChance")

    def crit_multiplier(self) -> float:
        return BALANCE.player.base_crit_multiplier + self._linear("critMultiplier")

    def max_hp(self) -> int:
        return round_half_up(BALANCE.player.base_hp * (1 + self._linear("hull")))

    def estimated_dps(self) -> float:
        """Damage x fire rate, with crits folded in as expected value."""
        crit_bonus = self.crit_chance() * (self.crit_multiplier() - 1)
        return self.damage() * self.fire_rate() * (1 + crit_bonus)

    def loadout_dps(self) -> float:
        """Estimated DPS after the active weapon mod and behavior script."""
        state = self.store.get_current()
        mod_multiplier = 1.0
        if self.store.has_upgrade(_WEAPON_MOD_UNLOCK):
            try:
                mod = weapon_mod(state.active_weapon_mod)
                mod_multiplier = mod.damage_multiplier * mod.shots_per_volley
            except UnknownIdError:
                log.warning("save has unknown weapon mod %r", state.active_weapon_mod)
        return self.estimated_dps() * mod_multiplier * self._behavior_damage_modifier(state.active_behavior_script)

    def kill_reward(self, base_scrap: float) -> float:
        """Scrap actually credited for a kill worth ``base_scrap``."""
        state = self.store.get_current()
        try:
            salvage_mod = behavior_script(state.active_behavior_script).salvage_modifier
        except UnknownIdError:
            salvage_mod = 1.0
        return base_scrap * self.salvage_multiplier() * salvage_mod

    def _behavior_damage_modifier(self, script_id: str) -> float:
        try:
            return behavior_script(script_id).damage_modifier
        except UnknownIdError:
            log.warning("save has unknown behavior script %r", script_id)
            return 1.0
