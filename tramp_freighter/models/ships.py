"""Ship quirks, upgrades and condition rules for Tramp Freighter.

Quirks are personality traits rolled when the ship is created; they never
change. Upgrades are bought at stations and are permanent. Both are expressed
as data: quirks as attribute multipliers, upgrades as tagged effects that are
folded over a set of base capabilities.
"""

from __future__ import annotations

import enum
import random
import re
from dataclasses import dataclass, field, replace

from ..constants import (
    CORE_SYSTEM_IDS,
    DEFAULT_SHIP_NAME,
    ENGINE_WARNING_THRESHOLD,
    FUEL_INNER_DISTANCE,
    FUEL_MID_DISTANCE,
    FUEL_PRICE_CORE,
    FUEL_PRICE_INNER,
    FUEL_PRICE_MID,
    FUEL_PRICE_OUTER,
    HULL_WARNING_THRESHOLD,
    LIFE_SUPPORT_WARNING_THRESHOLD,
    LY_PER_UNIT,
    MAX_SHIP_NAME_LENGTH,
    REFUEL_EPSILON,
    REPAIR_COST_PER_PERCENT,
    SHIP_CONDITION_MAX,
    SHIP_CONDITION_MIN,
    STARTING_CARGO_CAPACITY,
)
from .galaxy import StarSystem, distance_from_sol


# ---------------------------------------------------------------------------
# Quirks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Quirk:
    """A fixed personality trait of the ship."""

    id: str
    name: str
    description: str
    modifiers: dict[str, float] = field(default_factory=dict)
    flavor: str = ""


SHIP_QUIRKS: dict[str, Quirk] = {
    q.id: q
    for q in [
        Quirk(
            "sticky_seal",
            "Sticky Cargo Seal",
            "The main cargo hatch sticks. Every. Single. Time.",
            {"loading_time": 1.1, "theft_risk": 0.95},
            "Slower loading, but harder to break into.",
        ),
        Quirk(
            "hot_thruster",
            "Hot Thruster",
            "Port thruster runs hot. Burns a bit more fuel but responsive.",
            {"fuel_consumption": 1.05},
            "Slightly higher fuel consumption.",
        ),
        Quirk(
            "sensitive_sensors",
            "Sensitive Sensors",
            "Sensor array picks up everything. Including false positives.",
            {"salvage_detection": 1.15, "false_alarms": 1.1},
            "Better salvage detection, more false alarms.",
        ),
        Quirk(
            "cramped_quarters",
            "Cramped Quarters",
            "Living space is... cozy. Very cozy.",
            {"life_support_drain": 0.9},
            "Less space to keep breathable.",
        ),
        Quirk(
            "lucky_ship",
            "Lucky Ship",
            "This ship has a history of beating the odds. Crew swears by it.",
            {"negate_event_chance": 0.05},
            "Occasionally dodges trouble.",
        ),
        Quirk(
            "fuel_sipper",
            "Fuel Sipper",
            "Efficient drive core. Previous owner was meticulous about maintenance.",
            {"fuel_consumption": 0.85},
            "Noticeably better fuel economy.",
        ),
        Quirk(
            "leaky_seals",
            "Leaky Seals",
            "Hull seals aren't quite right. Slow degradation.",
            {"hull_degradation": 1.5},
            "Hull wears faster between repairs.",
        ),
        Quirk(
            "smooth_talker",
            "Smooth Talker's Ride",
            "Previous owner had a reputation. Some of it rubbed off on the ship.",
            {"npc_rep_gain": 1.05},
            "People warm to you a little faster.",
        ),
    ]
}


def get_quirk(quirk_id: str) -> Quirk:
    try:
        return SHIP_QUIRKS[quirk_id]
    except KeyError:
        raise KeyError(f"Unknown quirk: {quirk_id}") from None


def assign_ship_quirks(rng: random.Random | None = None) -> list[str]:
    """Pick 2 or 3 distinct quirks for a new ship."""
    if rng is None:
        rng = random.Random()
    count = 2 if rng.random() < 0.5 else 3
    return rng.sample(sorted(SHIP_QUIRKS), count)


def apply_quirk_modifiers(base_value: float, attribute: str, quirks: list[str]) -> float:
    """Multiply *base_value* by every quirk modifier for *attribute*."""
    result = base_value
    for quirk_id in quirks:
        result *= get_quirk(quirk_id).modifiers.get(attribute, 1.0)
    return result


# ---------------------------------------------------------------------------
# Upgrades
# ---------------------------------------------------------------------------

class EffectKind(enum.Enum):
    """How an upgrade effect combines with the current value."""

    ABSOLUTE = "absolute"      # Replaces the value
    MULTIPLIER = "multiplier"  # Scales the value


@dataclass(frozen=True)
class Effect:
    """A single capability change granted by an upgrade."""

    kind: EffectKind
    field: str
    value: float


@dataclass(frozen=True)
class Upgrade:
    """A permanent station-installed modification."""

    id: str
    name: str
    cost: int
    description: str
    effects: tuple[Effect, ...]
    tradeoff: str = ""


@dataclass(frozen=True)
class ShipCapabilities:
    """Capacities and rates after upgrades are applied."""

    fuel_capacity: float = 100.0
    cargo_capacity: int = STARTING_CARGO_CAPACITY
    hidden_cargo_capacity: int = 0
    fuel_consumption: float = 1.0
    hull_degradation: float = 1.0
    life_support_drain: float = 1.0
    event_visibility: int = 0


def _abs(name: str, value: float) -> Effect:
    return Effect(EffectKind.ABSOLUTE, name, value)


def _mul(name: str, value: float) -> Effect:
    return Effect(EffectKind.MULTIPLIER, name, value)


SHIP_UPGRADES: dict[str, Upgrade] = {
    u.id: u
    for u in [
        Upgrade(
            "extended_tank",
            "Extended Fuel Tank",
            3000,
            "Increases fuel capacity to 150%.",
            (_abs("fuel_capacity", 150),),
            "Larger tank is more vulnerable to weapons fire.",
        ),
        Upgrade(
            "reinforced_hull",
            "Reinforced Hull Plating",
            5000,
            "Halves hull degradation.",
            (_mul("hull_degradation", 0.5), _abs("cargo_capacity", 45)),
            "Extra plating reduces cargo space.",
        ),
        Upgrade(
            "efficient_drive",
            "Efficient Drive System",
            4000,
            "Cuts fuel consumption by 20%.",
            (_mul("fuel_consumption", 0.8),),
            "Optimized for efficiency, not speed.",
        ),
        Upgrade(
            "expanded_hold",
            "Expanded Cargo Hold",
            6000,
            "Increases cargo capacity to 75 units.",
            (_abs("cargo_capacity", 75),),
            "Heavier ship is less maneuverable.",
        ),
        Upgrade(
            "smuggler_panels",
            "Smuggler's Panels",
            4500,
            "Hidden compartment for 10 units of cargo.",
            (_abs("hidden_cargo_capacity", 10),),
            "Discovery means confiscation and a fine.",
        ),
        Upgrade(
            "advanced_sensors",
            "Advanced Sensor Array",
            3500,
            "Shows economic events one jump ahead.",
            (_abs("event_visibility", 1),),
            "None.",
        ),
        Upgrade(
            "medical_bay",
            "Medical Bay",
            2500,
            "Slows life support degradation.",
            (_mul("life_support_drain", 0.7), _abs("cargo_capacity", 45)),
            "Takes up cargo space.",
        ),
    ]
}


def get_upgrade(upgrade_id: str) -> Upgrade:
    try:
        return SHIP_UPGRADES[upgrade_id]
    except KeyError:
        raise KeyError(f"Unknown upgrade: {upgrade_id}") from None


def apply_effect(caps: ShipCapabilities, effect: Effect) -> ShipCapabilities:
    current = getattr(caps, effect.field)
    if effect.kind == EffectKind.ABSOLUTE:
        new_value = effect.value
    else:
        new_value = current * effect.value
    if isinstance(current, int) and effect.kind == EffectKind.ABSOLUTE:
        new_value = int(new_value)
    return replace(caps, **{effect.field: new_value})


def calculate_capabilities(upgrades: list[str]) -> ShipCapabilities:
    """Fold every installed upgrade's effects, in install order, over the defaults."""
    caps = ShipCapabilities()
    for upgrade_id in upgrades:
        for effect in get_upgrade(upgrade_id).effects:
            caps = apply_effect(caps, effect)
    return caps


# ---------------------------------------------------------------------------
# Condition
# ---------------------------------------------------------------------------

def clamp_condition(value: float) -> float:
    return max(SHIP_CONDITION_MIN, min(SHIP_CONDITION_MAX, value))


@dataclass(frozen=True)
class ConditionWarning:
    """A ship system that has dropped below its safe threshold."""

    system: str  # "hull", "engine" or "lifeSupport"
    message: str
    severity: str = "warning"  # "warning" or "critical"


def check_condition_warnings(hull: float, engine: float, life_support: float) -> list[ConditionWarning]:
    warnings: list[ConditionWarning] = []
    if hull < HULL_WARNING_THRESHOLD:
        warnings.append(ConditionWarning("hull", "Risk of cargo loss during jumps"))
    if engine < ENGINE_WARNING_THRESHOLD:
        warnings.append(
            ConditionWarning("engine", "Jump failure risk - immediate repairs recommended")
        )
    if life_support < LIFE_SUPPORT_WARNING_THRESHOLD:
        warnings.append(
            ConditionWarning("lifeSupport", "Critical condition - urgent repairs required", "critical")
        )
    return warnings


def get_repair_cost(current: float, amount: float) -> int:
    """Credits to repair *amount* percent. Zero when already at full condition."""
    if amount <= 0 or current >= SHIP_CONDITION_MAX:
        return 0
    return int(round(amount * REPAIR_COST_PER_PERCENT))


# ---------------------------------------------------------------------------
# Fuel
# ---------------------------------------------------------------------------

def get_fuel_price(system: StarSystem, ly_per_unit: float = LY_PER_UNIT) -> int:
    """Credits per percent of fuel. Fuel is cheapest in the core."""
    if system.id in CORE_SYSTEM_IDS:
        return FUEL_PRICE_CORE
    distance = distance_from_sol(system, ly_per_unit)
    if distance < FUEL_INNER_DISTANCE:
        return FUEL_PRICE_INNER
    if distance < FUEL_MID_DISTANCE:
        return FUEL_PRICE_MID
    return FUEL_PRICE_OUTER


def validate_refuel(
    current_fuel: float,
    amount: float,
    credits: int,
    price_per_percent: int,
    fuel_capacity: float,
) -> tuple[bool, str, int]:
    """Return (valid, reason, total_cost) for a refuel request."""
    total_cost = int(round(amount * price_per_percent))
    if amount <= 0:
        return False, "Refuel amount must be positive", total_cost
    if current_fuel + amount > fuel_capacity + REFUEL_EPSILON:
        return False, f"Cannot refuel beyond {fuel_capacity:g}% capacity", total_cost
    if total_cost > credits:
        return False, "Insufficient credits for refuel", total_cost
    return True, "", total_cost


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

_TAG_RE = re.compile(r"<[^>]*>")


def sanitize_ship_name(name: str | None) -> str:
    """Strip markup, cap the length and fall back to the default name."""
    if not name:
        return DEFAULT_SHIP_NAME
    cleaned = _TAG_RE.sub("", str(name)).replace("<", "").replace(">", "")
    cleaned = cleaned[:MAX_SHIP_NAME_LENGTH].strip()
    return cleaned or DEFAULT_SHIP_NAME
