"""Loadout definitions — weapon mods, behavior scripts and target modes.

Weapon mods require the ``weaponModSlot`` unlock and behavior scripts the
``behaviorScripts`` unlock; the defaults ("standard", "balanced") are always
usable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TargetMode(Enum):
    """How the ship (and behavior scripts) choose what to shoot."""

    CLOSEST = "closest"
    VALUABLE = "valuable"
    RANDOM = "random"


@dataclass(frozen=True)
class WeaponModDef:
    """A weapon modification slotted into the main gun."""

    id: str
    name: str
    description: str
    damage_multiplier: float
    shots_per_volley: int = 1


@dataclass(frozen=True)
class BehaviorScriptDef:
    """An AI behavior mode for autopilot and targeting."""

    id: str
    name: str
    description: str
    targeting_bias: TargetMode
    damage_modifier: float = 1.0
    salvage_modifier: float = 1.0
    evasion_modifier: float = 1.0


WEAPON_MODS: dict[str, WeaponModDef] = {
    m.id: m
    for m in [
        WeaponModDef(
            id="standard",
            name="Standard",
            description="Standard single-shot bullets.",
            damage_multiplier=1.0,
        ),
        WeaponModDef(
            id="pierce",
            name="Pierce",
            description="Bullets pierce through enemies. -10% damage.",
            damage_multiplier=0.9,
        ),
        WeaponModDef(
            id="scatter",
            name="Scatter",
            description="Fires 3 bullets in a cone. -40% damage per bullet.",
            damage_multiplier=0.6,
            shots_per_volley=3,
        ),
    ]
}

BEHAVIOR_SCRIPTS: dict[str, BehaviorScriptDef] = {
    s.id: s
    for s in [
        BehaviorScriptDef(
            id="balanced",
            name="Balanced",
            description="Standard behavior with no bonuses or penalties.",
            targeting_bias=TargetMode.CLOSEST,
        ),
        BehaviorScriptDef(
            id="guardian",
            name="Guardian",
            description="Prioritizes threats closest to base. +20% evasion, -10% damage.",
            targeting_bias=TargetMode.CLOSEST,
            damage_modifier=0.9,
            evasion_modifier=1.2,
        ),
        BehaviorScriptDef(
            id="assassin",
            name="Assassin",
            description="Faster lock-on, higher single-target DPS. -10% evasion.",
            targeting_bias=TargetMode.CLOSEST,
            damage_modifier=1.15,
            evasion_modifier=0.9,
        ),
        BehaviorScriptDef(
            id="farmer",
            name="Farmer",
            description="Prioritizes valuable targets. +15% salvage, -15% damage.",
            targeting_bias=TargetMode.VALUABLE,
            damage_modifier=0.85,
            salvage_modifier=1.15,
        ),
        BehaviorScriptDef(
            id="chaos",
            name="Chaos",
            description="Unpredictable multi-targeting. Chance for extra shots.",
            targeting_bias=TargetMode.RANDOM,
        ),
    ]
}

DEFAULT_WEAPON_MOD = "standard"
DEFAULT_BEHAVIOR_SCRIPT = "balanced"
DEFAULT_TARGET_MODE = TargetMode.CLOSEST
