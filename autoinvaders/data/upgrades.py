"""Upgrade definitions — all purchasable upgrades and their effects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UpgradeCategory(Enum):
    """Shop tab an upgrade is listed under."""

    CORE = "core"                # One-shot system unlocks
    WEAPONS = "weapons"
    AUTOPILOT = "autopilot"
    TARGETING = "targeting"
    DRONES = "drones"
    ECONOMY = "economy"
    SURVIVAL = "survival"
    CORE_UNLOCK = "coreUnlock"   # Special purchases paid with Cores


@dataclass(frozen=True)
class UpgradeDef:
    """Definition of a single upgrade."""

    id: str
    name: str
    description: str
    category: UpgradeCategory
    base_cost: float
    max_level: int
    # True = one-time purchase at a flat base_cost, False = leveled
    is_unlock: bool = False
    cores_cost: int = 0
    # Highest sector the player must have reached
    sector_required: int | None = None
    # Another upgrade that must be owned first
    prerequisite: str | None = None
    # Fractional gain per level (0.08 = +8%)
    effect_per_level: float = 0.0
    effect_description: str = ""


# ── Core systems (unlocks) ───────────────────────────────────────

AUTO_FIRE = UpgradeDef(
    id="autoFire",
    name="Auto-Fire Module",
    description="Enables automatic shooting. Your ship will continuously fire at enemies.",
    category=UpgradeCategory.CORE,
    base_cost=120,
    max_level=1,
    is_unlock=True,
    effect_description="Enables automatic shooting",
)

AUTOPILOT = UpgradeDef(
    id="autopilot",
    name="Autopilot Module",
    description="Enables automatic horizontal movement. Your ship will dodge and position itself.",
    category=UpgradeCategory.CORE,
    base_cost=250,
    max_level=1,
    is_unlock=True,
    prerequisite="autoFire",
    effect_description="Enables automatic movement",
)

TARGETING_FIRMWARE = UpgradeDef(
    id="targetingFirmware",
    name="Targeting Firmware",
    description="Enables target selection modes and reduces target switching time.",
    category=UpgradeCategory.CORE,
    base_cost=180,
    max_level=1,
    is_unlock=True,
    prerequisite="autoFire",
    effect_description="Enables targeting AI",
)

# ── Weapons (repeatable) ─────────────────────────────────────────

DAMAGE = UpgradeDef(
    id="damage",
    name="Weapon Amplifier",
    description="Increases bullet damage.",
    category=UpgradeCategory.WEAPONS,
    base_cost=25,
    max_level=20,
    effect_per_level=0.08,
    effect_description="+8% damage per level",
)

FIRE_RATE = UpgradeDef(
    id="fireRate",
    name="Rapid Cycling",
    description="Increases fire rate.",
    category=UpgradeCategory.WEAPONS,
    base_cost=30,
    max_level=20,
    effect_per_level=0.06,
    effect_description="+6% fire rate per level",
)

PROJECTILE_SPEED = UpgradeDef(
    id="projectileSpeed",
    name="Accelerator Rails",
    description="Increases bullet speed.",
    category=UpgradeCategory.WEAPONS,
    base_cost=20,
    max_level=20,
    effect_per_level=0.05,
    effect_description="+5% projectile speed per level",
)

CRIT_CHANCE = UpgradeDef(
    id="critChance",
    name="Precision Optics",
    description="Increases critical hit chance.",
    category=UpgradeCategory.WEAPONS,
    base_cost=40,
    max_level=15,
    effect_per_level=0.02,
    effect_description="+2% crit chance per level",
)

CRIT_MULTIPLIER = UpgradeDef(
    id="critMultiplier",
    name="Overcharge Cells",
    description="Increases critical hit damage.",
    category=UpgradeCategory.WEAPONS,
    base_cost=50,
    max_level=10,
    effect_per_level=0.15,
    effect_description="+15% crit damage per level",
)

# ── Autopilot (requires the autopilot unlock) ────────────────────

THRUSTER_SPEED = UpgradeDef(
    id="thrusterSpeed",
    name="Thruster Boost",
    description="Increases movement speed.",
    category=UpgradeCategory.AUTOPILOT,
    base_cost=25,
    max_level=20,
    prerequisite="autopilot",
    effect_per_level=0.05,
    effect_description="+5% movement speed per level",
)

AUTOPILOT_V2 = UpgradeDef(
    id="autopilotV2",
    name="Autopilot v2: Threat Analysis",
    description="Autopilot now considers enemy positions and incoming fire.",
    category=UpgradeCategory.AUTOPILOT,
    base_cost=500,
    max_level=1,
    is_unlock=True,
    prerequisite="autopilot",
    sector_required=3,
    effect_description="Smarter evasion AI",
)

AUTOPILOT_V3 = UpgradeDef(
    id="autopilotV3",
    name="Autopilot v3: Opportunist",
    description="Autopilot positions for optimal target acquisition.",
    category=UpgradeCategory.AUTOPILOT,
    base_cost=0,
    max_level=1,
    is_unlock=True,
    cores_cost=2,
    prerequisite="autopilotV2",
    sector_required=5,
    effect_description="Optimal positioning AI",
)

# ── Targeting (requires targeting firmware) ──────────────────────

TRACKING = UpgradeDef(
    id="tracking",
    name="Tracking Enhancement",
    description="Improves target tracking accuracy.",
    category=UpgradeCategory.TARGETING,
    base_cost=25,
    max_level=20,
    prerequisite="targetingFirmware",
    effect_per_level=0.06,
    effect_description="+6% tracking per level",
)

FOCUS = UpgradeDef(
    id="focus",
    name="Focus Lens",
    description="Reduces target switching delay.",
    category=UpgradeCategory.TARGETING,
    base_cost=30,
    max_level=15,
    prerequisite="targetingFirmware",
    effect_per_level=0.06,
    effect_description="+6% focus per level",
)

LOCK_ON = UpgradeDef(
    id="lockOn",
    name="Lock-On System",
    description="Enables lock-on to priority targets for bonus damage.",
    category=UpgradeCategory.TARGETING,
    base_cost=0,
    max_level=1,
    is_unlock=True,
    cores_cost=1,
    prerequisite="targetingFirmware",
    sector_required=2,
    effect_description="Lock-on ability",
)

LOCK_ON_SPEED = UpgradeDef(
    id="lockOnSpeed",
    name="Lock-On Accelerator",
    description="Faster lock-on acquisition.",
    category=UpgradeCategory.TARGETING,
    base_cost=35,
    max_level=10,
    prerequisite="lockOn",
    effect_per_level=0.07,
    effect_description="+7% lock-on speed per level",
)

# ── Drones ───────────────────────────────────────────────────────

DRONE_SLOT_1 = UpgradeDef(
    id="droneSlot1",
    name="Drone Bay I",
    description="Deploys an autonomous combat drone.",
    category=UpgradeCategory.DRONES,
    base_cost=400,
    max_level=1,
    is_unlock=True,
    sector_required=1,
    effect_description="First drone slot",
)

DRONE_SLOT_2 = UpgradeDef(
    id="droneSlot2",
    name="Drone Bay II",
    description="Deploys a second combat drone.",
    category=UpgradeCategory.DRONES,
    base_cost=0,
    max_level=1,
    is_unlock=True,
    cores_cost=2,
    prerequisite="droneSlot1",
    sector_required=4,
    effect_description="Second drone slot",
)

DRONE_DAMAGE = UpgradeDef(
    id="droneDamage",
    name="Drone Weapons",
    description="Increases drone damage.",
    category=UpgradeCategory.DRONES,
    base_cost=35,
    max_level=15,
    prerequisite="droneSlot1",
    effect_per_level=0.08,
    effect_description="+8% drone damage per level",
)

DRONE_FIRE_RATE = UpgradeDef(
    id="droneFireRate",
    name="Drone Cycling",
    description="Increases drone fire rate.",
    category=UpgradeCategory.DRONES,
    base_cost=40,
    max_level=15,
    prerequisite="droneSlot1",
    effect_per_level=0.06,
    effect_description="+6% drone fire rate per level",
)

# ── Economy ──────────────────────────────────────────────────────

SALVAGE_YIELD = UpgradeDef(
    id="salvageYield",
    name="Salvage Enhancement",
    description="Increases scrap gained from kills.",
    category=UpgradeCategory.ECONOMY,
    base_cost=35,
    max_level=20,
    effect_per_level=0.05,
    effect_description="+5% scrap per level",
)

SCRAP_MAGNET = UpgradeDef(
    id="scrapMagnet",
    name="Scrap Magnet",
    description="Automatically collects scrap from further away.",
    category=UpgradeCategory.ECONOMY,
    base_cost=150,
    max_level=1,
    is_unlock=True,
    effect_description="Auto-collect scrap",
)

# ── Survival ─────────────────────────────────────────────────────

HULL = UpgradeDef(
    id="hull",
    name="Hull Plating",
    description="Increases maximum HP.",
    category=UpgradeCategory.SURVIVAL,
    base_cost=30,
    max_level=20,
    effect_per_level=0.10,
    effect_description="+10% HP per level",
)

STABILITY = UpgradeDef(
    id="stability",
    name="Stability Matrix",
    description="Reduces accuracy penalties from jammers.",
    category=UpgradeCategory.SURVIVAL,
    base_cost=22,
    max_level=15,
    sector_required=2,
    effect_per_level=0.07,
    effect_description="+7% stability per level",
)

HEAT_CAPACITY = UpgradeDef(
    id="heatCapacity",
    name="Heat Capacity",
    description="Increases heat capacity before overheat.",
    category=UpgradeCategory.SURVIVAL,
    base_cost=60,
    max_level=10,
    sector_required=5,
    effect_per_level=0.10,
    effect_description="+10% heat capacity per level",
)

COOLING_RATE = UpgradeDef(
    id="coolingRate",
    name="Cooling Systems",
    description="Increases heat dissipation rate.",
    category=UpgradeCategory.SURVIVAL,
    base_cost=60,
    max_level=10,
    sector_required=5,
    effect_per_level=0.08,
    effect_description="+8% cooling per level",
)

# ── Core unlocks (paid with Cores) ───────────────────────────────

WEAPON_MOD_SLOT = UpgradeDef(
    id="weaponModSlot",
    name="Weapon Mod Slot",
    description="Unlocks weapon modifications: Pierce, Scatter.",
    category=UpgradeCategory.CORE_UNLOCK,
    base_cost=0,
    max_level=1,
    is_unlock=True,
    cores_cost=1,
    sector_required=3,
    effect_description="Weapon mod system",
)

BEHAVIOR_SCRIPTS = UpgradeDef(
    id="behaviorScripts",
    name="Behavior Scripts",
    description="Unlocks AI behavior modes: Guardian, Assassin, Farmer, Chaos.",
    category=UpgradeCategory.CORE_UNLOCK,
    base_cost=0,
    max_level=1,
    is_unlock=True,
    cores_cost=1,
    sector_required=4,
    effect_description="AI behavior selection",
)

# ── All upgrades registry ────────────────────────────────────────

ALL_UPGRADES: dict[str, UpgradeDef] = {
    u.id: u
    for u in [
        AUTO_FIRE,
        AUTOPILOT,
        TARGETING_FIRMWARE,
        DAMAGE,
        FIRE_RATE,
        PROJECTILE_SPEED,
        CRIT_CHANCE,
        CRIT_MULTIPLIER,
        THRUSTER_SPEED,
        AUTOPILOT_V2,
        AUTOPILOT_V3,
        TRACKING,
        FOCUS,
        LOCK_ON,
        LOCK_ON_SPEED,
        DRONE_SLOT_1,
        DRONE_SLOT_2,
        DRONE_DAMAGE,
        DRONE_FIRE_RATE,
        SALVAGE_YIELD,
        SCRAP_MAGNET,
        HULL,
        STABILITY,
        HEAT_CAPACITY,
        COOLING_RATE,
        WEAPON_MOD_SLOT,
        BEHAVIOR_SCRIPTS,
    ]
}
