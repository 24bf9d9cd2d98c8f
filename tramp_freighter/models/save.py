"""Save / load game state to JSON.

Uses platformdirs for cross-platform save location (see ``config.py``).
The galaxy is static data; only the mutable state tree is persisted.

Loading runs: read -> version check -> migration chain -> defaults ->
validation -> state tree. Any failure along the way means "no save".
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from ..config import SAVE_DEBOUNCE, SAVE_FILE
from .galaxy import StarCatalog
from .inventory import CargoStack
from .migrations import (
    add_state_defaults,
    get_version,
    is_version_compatible,
    migrate_state,
    validate_state_structure,
)
from .npcs import NpcState
from .state import (
    EconomicEvent,
    GameState,
    MetaState,
    PlayerState,
    PriceKnowledge,
    ShipState,
    WorldState,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


# ── Serialise helpers ─────────────────────────────────────────────────

def _player_to_dict(p: PlayerState) -> dict:
    return {
        "credits": p.credits,
        "debt": p.debt,
        "currentSystem": p.current_system,
        "daysElapsed": p.days_elapsed,
    }


def _player_from_dict(d: dict) -> PlayerState:
    return PlayerState(
        credits=d["credits"],
        debt=d["debt"],
        current_system=d["currentSystem"],
        days_elapsed=d["daysElapsed"],
    )


def _ship_to_dict(s: ShipState) -> dict:
    return {
        "name": s.name,
        "quirks": list(s.quirks),
        "upgrades": list(s.upgrades),
        "fuel": s.fuel,
        "hull": s.hull,
        "engine": s.engine,
        "lifeSupport": s.life_support,
        "cargoCapacity": s.cargo_capacity,
        "hiddenCargoCapacity": s.hidden_cargo_capacity,
        "cargo": [c.to_dict() for c in s.cargo],
        "hiddenCargo": [c.to_dict() for c in s.hidden_cargo],
    }


def _ship_from_dict(d: dict) -> ShipState:
    return ShipState(
        name=d["name"],
        quirks=list(d.get("quirks", [])),
        upgrades=list(d.get("upgrades", [])),
        fuel=float(d["fuel"]),
        hull=float(d["hull"]),
        engine=float(d["engine"]),
        life_support=float(d["lifeSupport"]),
        cargo_capacity=d["cargoCapacity"],
        hidden_cargo_capacity=d.get("hiddenCargoCapacity", 0),
        cargo=[CargoStack.from_dict(c) for c in d.get("cargo", [])],
        hidden_cargo=[CargoStack.from_dict(c) for c in d.get("hiddenCargo", [])],
    )


def _event_to_dict(e: EconomicEvent) -> dict:
    return {
        "id": e.id,
        "type": e.type,
        "systemId": e.system_id,
        "startDay": e.start_day,
        "endDay": e.end_day,
        "modifiers": dict(e.modifiers),
    }


def _event_from_dict(d: dict) -> EconomicEvent:
    return EconomicEvent(
        id=d["id"],
        type=d["type"],
        system_id=int(d["systemId"]),
        start_day=int(d["startDay"]),
        end_day=int(d["endDay"]),
        modifiers={k: float(v) for k, v in d.get("modifiers", {}).items()},
    )


def _world_to_dict(w: WorldState) -> dict:
    return {
        "visitedSystems": list(w.visited_systems),
        "priceKnowledge": {
            str(sid): {"lastVisit": k.last_visit, "prices": dict(k.prices), "source": k.source}
            for sid, k in w.price_knowledge.items()
        },
        "activeEvents": [_event_to_dict(e) for e in w.active_events],
        "marketConditions": {
            str(sid): dict(goods) for sid, goods in w.market_conditions.items()
        },
        "currentSystemPrices": dict(w.current_system_prices),
    }


def _world_from_dict(d: dict) -> WorldState:
    return WorldState(
        visited_systems=[int(s) for s in d.get("visitedSystems", [])],
        price_knowledge={
            int(sid): PriceKnowledge(
                last_visit=int(k["lastVisit"]),
                prices={g: int(p) for g, p in k.get("prices", {}).items()},
                source=k.get("source", "visit"),
            )
            for sid, k in d.get("priceKnowledge", {}).items()
        },
        active_events=[_event_from_dict(e) for e in d.get("activeEvents", [])],
        market_conditions={
            int(sid): {g: float(v) for g, v in goods.items()}
            for sid, goods in d.get("marketConditions", {}).items()
        },
        current_system_prices={g: int(p) for g, p in d.get("currentSystemPrices", {}).items()},
    )


def state_to_dict(state: GameState) -> dict:
    return {
        "player": _player_to_dict(state.player),
        "ship": _ship_to_dict(state.ship),
        "world": _world_to_dict(state.world),
        "meta": {"version": state.meta.version, "timestamp": state.meta.timestamp},
        "npcs": {npc_id: npc.to_dict() for npc_id, npc in state.npcs.items()},
    }


def state_from_dict(d: dict) -> GameState:
    meta = d.get("meta", {})
    return GameState(
        player=_player_from_dict(d["player"]),
        ship=_ship_from_dict(d["ship"]),
        world=_world_from_dict(d["world"]),
        meta=MetaState(version=meta["version"], timestamp=int(meta.get("timestamp", 0))),
        npcs={npc_id: NpcState.from_dict(n) for npc_id, n in d.get("npcs", {}).items()},
    )


def serialize(state: GameState) -> str:
    return json.dumps(state_to_dict(state))


def deserialize(text: str | bytes | None) -> dict | None:
    """Parse saved JSON. Returns None instead of raising on bad input."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return data


# ── Storage ───────────────────────────────────────────────────────────

@dataclass
class SaveResult:
    saved: bool
    timestamp: int  # Time of this save, or of the last save when skipped
    path: Path | None = None


def save_game(
    state: GameState,
    last_save_ms: int | None = None,
    path: Path = SAVE_FILE,
    now: int | None = None,
    debounce_ms: int = SAVE_DEBOUNCE,
) -> SaveResult:
    """Write *state* unless the previous save was under *debounce_ms* ago.

    A skipped save is dropped, not queued. The written copy is stamped with
    the save time; *state* itself is left untouched.
    """
    current = now_ms() if now is None else now
    if last_save_ms is not None and current - last_save_ms < debounce_ms:
        logger.debug("Save skipped: %d ms since last save", current - last_save_ms)
        return SaveResult(False, last_save_ms)

    data = state_to_dict(state)
    data["meta"]["timestamp"] = current
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))
    except OSError:
        logger.warning("Could not write save file %s", path, exc_info=True)
        return SaveResult(False, last_save_ms if last_save_ms is not None else 0)
    return SaveResult(True, current, path)


def read_save(path: Path = SAVE_FILE) -> dict | None:
    """Raw saved dict, or None if missing or unreadable."""
    if not path.exists():
        return None
    try:
        text = path.read_text()
    except OSError:
        logger.warning("Could not read save file %s", path, exc_info=True)
        return None
    data = deserialize(text)
    if data is None:
        logger.warning("Save file %s is corrupt", path)
    return data


def restore_state(raw: dict, catalog: StarCatalog) -> GameState | None:
    """Turn a raw save dict into a state tree, or None if it cannot be trusted."""
    version = get_version(raw)
    if not is_version_compatible(version):
        logger.warning("Save version %r is not supported", version)
        return None
    try:
        data = migrate_state(raw)
        data = add_state_defaults(data, catalog)
        if not validate_state_structure(data, catalog):
            logger.warning("Save failed validation")
            return None
        return state_from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError):
        logger.warning("Save could not be restored", exc_info=True)
        return None


def load_game(catalog: StarCatalog, path: Path = SAVE_FILE) -> GameState | None:
    """Deserialize game state from JSON. Returns None if no usable save exists."""
    raw = read_save(path)
    if raw is None:
        return None
    return restore_state(raw, catalog)


def has_saved_game(path: Path = SAVE_FILE) -> bool:
    """Check if a save file exists."""
    return path.exists()


def clear_save(path: Path = SAVE_FILE) -> None:
    """Remove the save file if it exists."""
    if path.exists():
        path.unlink()
