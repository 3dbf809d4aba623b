"""Economy catalog — read-only lookups over the static game data.

The registries in ``autoinvaders.data`` are validated once, when this module
is imported. A broken prerequisite graph is a packaging bug, so it fails
loudly at startup instead of surfacing later as an infinite loop in an
availability check.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from autoinvaders.data.enemies import ALL_ENEMIES, SECTOR_ENEMY_UNLOCKS, EnemyDef
from autoinvaders.data.loadouts import (
    BEHAVIOR_SCRIPTS,
    WEAPON_MODS,
    BehaviorScriptDef,
    TargetMode,
    WeaponModDef,
)
from autoinvaders.data.upgrades import ALL_UPGRADES, UpgradeCategory, UpgradeDef

log = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Static game data violates a structural invariant."""


class UnknownIdError(KeyError):
    """An id that does not exist in the catalog was looked up."""

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(item_id)
        self.kind = kind
        self.item_id = item_id

    def __str__(self) -> str:
        return f"unknown {self.kind} id: {self.item_id!r}"


# ── Lookups ──────────────────────────────────────────────────────


def enemy_definition(enemy_id: str) -> EnemyDef:
    try:
        return ALL_ENEMIES[enemy_id]
    except KeyError:
        raise UnknownIdError("enemy", enemy_id) from None


def upgrade_definition(upgrade_id: str) -> UpgradeDef:
    try:
        return ALL_UPGRADES[upgrade_id]
    except KeyError:
        raise UnknownIdError("upgrade", upgrade_id) from None


def weapon_mod(mod_id: str) -> WeaponModDef:
    try:
        return WEAPON_MODS[mod_id]
    except KeyError:
        raise UnknownIdError("weapon mod", mod_id) from None


def behavior_script(script_id: str) -> BehaviorScriptDef:
    try:
        return BEHAVIOR_SCRIPTS[script_id]
    except KeyError:
        raise UnknownIdError("behavior script", script_id) from None


def target_mode(mode_id: str) -> TargetMode:
    try:
        return TargetMode(mode_id)
    except ValueError:
        raise UnknownIdError("target mode", mode_id) from None


def sector_enemy_unlocks(sector: int) -> list[str]:
    """All enemy type ids available by ``sector`` (cumulative, grunt first)."""
    available = ["grunt"]
    for s in range(sector + 1):
        for enemy_id in SECTOR_ENEMY_UNLOCKS.get(s, ()):
            if enemy_id not in available:
                available.append(enemy_id)
    return available


def upgrades_by_category() -> dict[UpgradeCategory, list[UpgradeDef]]:
    """Upgrades grouped by shop tab, in catalog order."""
    result: dict[UpgradeCategory, list[UpgradeDef]] = {}
    for udef in ALL_UPGRADES.values():
        result.setdefault(udef.category, []).append(udef)
    return result


def prerequisite_chain(upgrade_id: str) -> list[str]:
    """Ancestors of ``upgrade_id``, nearest prerequisite first."""
    chain = []
    current = upgrade_definition(upgrade_id).prerequisite
    while current is not None:
        chain.append(current)
        current = upgrade_definition(current).prerequisite
    return chain


# ── Validation ───────────────────────────────────────────────────


def validate_catalog(
    upgrades: Mapping[str, UpgradeDef] = ALL_UPGRADES,
    enemies: Mapping[str, EnemyDef] = ALL_ENEMIES,
) -> None:
    """Raise CatalogError if the static data is structurally broken.

    Checks: registry keys match ids, unlocks have max level 1, every
    prerequisite exists, and the prerequisite graph has no cycles.
    """
    for key, udef in upgrades.items():
        if key != udef.id:
            raise CatalogError(f"upgrade registered as {key!r} has id {udef.id!r}")
        if udef.max_level < 1:
            raise CatalogError(f"upgrade {udef.id!r} has max_level {udef.max_level}")
        if udef.is_unlock and udef.max_level != 1:
            raise CatalogError(f"unlock {udef.id!r} must have max_level 1")
        if udef.prerequisite is not None and udef.prerequisite not in upgrades:
            raise CatalogError(
                f"upgrade {udef.id!r} requires unknown upgrade {udef.prerequisite!r}"
            )

    # Each node has at most one outgoing edge, so walking the chain from every
    # node and tracking what we've seen on this walk finds any cycle.
    cleared: set[str] = set()
    for start in upgrades:
        path: list[str] = []
        current: str | None = start
        while current is not None and current not in cleared:
            if current in path:
                cycle = " -> ".join(path[path.index(current):] + [current])
                raise CatalogError(f"prerequisite cycle: {cycle}")
            path.append(current)
            current = upgrades[current].prerequisite
        cleared.update(path)

    for key, edef in enemies.items():
        if key != edef.id:
            raise CatalogError(f"enemy registered as {key!r} has id {edef.id!r}")
        if edef.can_shoot and not edef.shoot_interval_ms:
            raise CatalogError(f"enemy {edef.id!r} can shoot but has no interval")

    for sector, unlocks in SECTOR_ENEMY_UNLOCKS.items():
        for enemy_id in unlocks:
            if enemy_id not in enemies:
                raise CatalogError(f"sector {sector} unlocks unknown enemy {enemy_id!r}")

    log.debug("catalog ok: %d upgrades, %d enemies", len(upgrades), len(enemies))


validate_catalog()
