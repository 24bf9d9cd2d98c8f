"""Save-format migrations for Tramp Freighter.

Old saves are upgraded one version at a time through a fixed chain of pure
functions, then a defaults pass fills whatever is still missing, then the
result is validated. Every step works on plain JSON-shaped dicts.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Callable

from ..constants import (
    DEFAULT_SHIP_NAME,
    GAME_VERSION,
    SHIP_CONDITION_MAX,
    SOL_SYSTEM_ID,
    STARTING_CARGO_CAPACITY,
    STARTING_CREDITS,
    STARTING_DEBT,
    STARTING_FUEL,
)
from .galaxy import StarCatalog
from .pricing import calculate_system_prices
from .ships import SHIP_QUIRKS, SHIP_UPGRADES
from .state import EconomicEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    source_version: str
    target_version: str
    description: str
    apply: Callable[[dict], dict]


# ── Steps ─────────────────────────────────────────────────────────────

_LEGACY_CARGO_KEYS = {
    "purchasePrice": "buyPrice",
    "purchaseSystem": "buySystem",
    "purchaseDay": "buyDate",
}


def _rename_cargo_keys(stack: dict) -> dict:
    out = dict(stack)
    for old, new in _LEGACY_CARGO_KEYS.items():
        if old in out:
            value = out.pop(old)
            out.setdefault(new, value)
    return out


def _migrate_1_0_0(raw: dict) -> dict:
    data = copy.deepcopy(raw)
    ship = data.setdefault("ship", {})
    for key in ("hull", "engine", "lifeSupport"):
        ship.setdefault(key, SHIP_CONDITION_MAX)
    ship["cargo"] = [_rename_cargo_keys(s) for s in ship.get("cargo", [])]
    ship.setdefault("quirks", [])
    ship.setdefault("upgrades", [])
    ship.setdefault("hiddenCargo", [])
    ship.setdefault("hiddenCargoCapacity", 0)
    ship.setdefault("name", DEFAULT_SHIP_NAME)

    world = data.setdefault("world", {})
    world.setdefault("activeEvents", [])

    data.setdefault("meta", {})["version"] = "2.0.0"
    return data


def _migrate_2_0_0(raw: dict) -> dict:
    data = copy.deepcopy(raw)
    data.setdefault("world", {}).setdefault("marketConditions", {})
    data.setdefault("meta", {})["version"] = "2.1.0"
    return data


def _migrate_2_1_0(raw: dict) -> dict:
    data = copy.deepcopy(raw)
    data.setdefault("npcs", {})
    data.setdefault("meta", {})["version"] = "4.0.0"
    return data


def _migrations() -> list[Migration]:
    return [
        Migration("1.0.0", "2.0.0", "ship condition, renamed cargo fields, ship personality", _migrate_1_0_0),
        Migration("2.0.0", "2.1.0", "market conditions", _migrate_2_0_0),
        Migration("2.1.0", "4.0.0", "NPC relationships", _migrate_2_1_0),
    ]


SUPPORTED_VERSIONS = frozenset([m.source_version for m in _migrations()] + [GAME_VERSION])


def is_version_compatible(version: str | None) -> bool:
    return isinstance(version, str) and version in SUPPORTED_VERSIONS


def get_version(raw: dict) -> str | None:
    meta = raw.get("meta")
    if isinstance(meta, dict):
        return meta.get("version")
    return None


def migrate_state(raw: dict) -> dict:
    """Run every migration from the save's version up to the current one."""
    version = get_version(raw)
    if not is_version_compatible(version):
        raise ValueError(f"Incompatible save version: {version!r}")
    data = raw
    for migration in _migrations():
        if version == migration.source_version:
            logger.info(
                "Migrating save %s -> %s (%s)",
                migration.source_version, migration.target_version, migration.description,
            )
            data = migration.apply(data)
            version = migration.target_version
    return data


# ── Defaults ──────────────────────────────────────────────────────────

def _filter_known(ids: list, known: dict, label: str) -> list[str]:
    kept: list[str] = []
    for item in ids:
        if item in known:
            if item not in kept:
                kept.append(item)
        else:
            logger.warning("Dropping unknown %s from save: %r", label, item)
    return kept


def _repair_stack(stack, current_system: int, catalog: StarCatalog, label: str):
    """Rename legacy keys and fill purchase metadata a partial save left out."""
    if not isinstance(stack, dict):
        return stack
    out = _rename_cargo_keys(stack)
    if not isinstance(out.get("good"), str) or not _is_int(out.get("qty")):
        return out
    if not _is_number(out.get("buyPrice")):
        logger.warning("%s stack of %s has no buy price, using 0", label, out["good"])
        out["buyPrice"] = 0
    if not _is_int(out.get("buySystem")):
        out["buySystem"] = current_system
    if not isinstance(out.get("buySystemName"), str):
        has_system = catalog.has_system(out["buySystem"])
        out["buySystemName"] = catalog.get_system(out["buySystem"]).name if has_system else "Unknown"
    if not _is_int(out.get("buyDate")):
        out["buyDate"] = 0
    return out


def _market_prices(world: dict, system, day: int, catalog: StarCatalog) -> dict[str, int]:
    events = [
        EconomicEvent(
            id=e.get("id", ""),
            type=e.get("type", ""),
            system_id=e.get("systemId", -1),
            start_day=e.get("startDay", 0),
            end_day=e.get("endDay", 0),
            modifiers=e.get("modifiers", {}),
        )
        for e in world["activeEvents"]
        if isinstance(e, dict)
    ]
    conditions = {
        int(k): v for k, v in world["marketConditions"].items() if isinstance(v, dict)
    }
    return calculate_system_prices(system, day, events, conditions, catalog.ly_per_unit)


def add_state_defaults(raw: dict, catalog: StarCatalog) -> dict:
    """Fill anything still missing. Applying it twice changes nothing."""
    data = copy.deepcopy(raw)

    player = data.setdefault("player", {})
    player.setdefault("credits", STARTING_CREDITS)
    player.setdefault("debt", STARTING_DEBT)
    player.setdefault("currentSystem", SOL_SYSTEM_ID)
    player.setdefault("daysElapsed", 0)
    current = player["currentSystem"]

    ship = data.setdefault("ship", {})
    ship.setdefault("name", DEFAULT_SHIP_NAME)
    ship.setdefault("fuel", STARTING_FUEL)
    for key in ("hull", "engine", "lifeSupport"):
        ship.setdefault(key, SHIP_CONDITION_MAX)
    ship.setdefault("cargoCapacity", STARTING_CARGO_CAPACITY)
    ship.setdefault("hiddenCargoCapacity", 0)
    for key, label in (("cargo", "Cargo"), ("hiddenCargo", "Hidden cargo")):
        stacks = ship.setdefault(key, [])
        if isinstance(stacks, list):
            ship[key] = [_repair_stack(s, current, catalog, label) for s in stacks]
    ship["quirks"] = _filter_known(ship.get("quirks", []), SHIP_QUIRKS, "quirk")
    ship["upgrades"] = _filter_known(ship.get("upgrades", []), SHIP_UPGRADES, "upgrade")

    world = data.setdefault("world", {})
    visited = world.setdefault("visitedSystems", [])
    if isinstance(visited, list) and current not in visited:
        visited.append(current)
    knowledge = world.setdefault("priceKnowledge", {})
    world.setdefault("activeEvents", [])
    world.setdefault("marketConditions", {})
    if catalog.has_system(current):
        system = catalog.get_system(current)
        if "currentSystemPrices" not in world:
            world["currentSystemPrices"] = _market_prices(world, system, player["daysElapsed"], catalog)
        # Docked at a market means knowing it.
        if isinstance(knowledge, dict) and str(current) not in knowledge and current not in knowledge:
            knowledge[str(current)] = {
                "lastVisit": 0,
                "prices": _market_prices(world, system, player["daysElapsed"], catalog),
                "source": "visit",
            }

    data.setdefault("meta", {}).setdefault("version", GAME_VERSION)
    data["meta"].setdefault("timestamp", 0)
    data.setdefault("npcs", {})
    return data


# ── Validation ────────────────────────────────────────────────────────

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_stack(stack) -> bool:
    return (
        isinstance(stack, dict)
        and isinstance(stack.get("good"), str)
        and _is_int(stack.get("qty"))
        and stack["qty"] > 0
        and _is_number(stack.get("buyPrice"))
    )


def validate_state_structure(raw: dict, catalog: StarCatalog | None = None) -> bool:
    """True when *raw* has every field the state tree needs, with sane types."""
    if not isinstance(raw, dict):
        return False
    player = raw.get("player")
    ship = raw.get("ship")
    world = raw.get("world")
    meta = raw.get("meta")
    if not all(isinstance(x, dict) for x in (player, ship, world, meta)):
        return False
    if not isinstance(raw.get("npcs"), dict):
        return False

    if not all(_is_int(player.get(k)) for k in ("credits", "debt", "currentSystem", "daysElapsed")):
        return False
    if player["daysElapsed"] < 0:
        return False
    if catalog is not None and not catalog.has_system(player["currentSystem"]):
        return False

    if not isinstance(ship.get("name"), str):
        return False
    if not all(_is_number(ship.get(k)) for k in ("fuel", "hull", "engine", "lifeSupport")):
        return False
    if not all(_is_int(ship.get(k)) for k in ("cargoCapacity", "hiddenCargoCapacity")):
        return False
    for key in ("cargo", "hiddenCargo"):
        stacks = ship.get(key)
        if not isinstance(stacks, list) or not all(_valid_stack(s) for s in stacks):
            return False
    if not isinstance(ship.get("quirks"), list) or not isinstance(ship.get("upgrades"), list):
        return False

    if not isinstance(world.get("visitedSystems"), list):
        return False
    for key in ("priceKnowledge", "marketConditions", "currentSystemPrices"):
        if not isinstance(world.get(key), dict):
            return False
    for entry in world["priceKnowledge"].values():
        if not isinstance(entry, dict) or not _is_int(entry.get("lastVisit")):
            return False
        if not isinstance(entry.get("prices"), dict):
            return False
    if not isinstance(world.get("activeEvents"), list):
        return False
    for event in world["activeEvents"]:
        if not isinstance(event, dict):
            return False
        if not all(k in event for k in ("id", "type", "systemId", "startDay", "endDay")):
            return False

    return isinstance(meta.get("version"), str)
