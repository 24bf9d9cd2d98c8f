"""The game state tree.

One ``GameState`` holds everything that changes during play. Only the state
store mutates it; serialization lives in ``save.py``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

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
from .inventory import CargoStack
from .npcs import NpcState


@dataclass
class PriceKnowledge:
    """What the player believes prices are at one system."""

    last_visit: int  # Days since the data was fresh
    prices: dict[str, int] = field(default_factory=dict)
    source: str = "visit"  # "visit" or "broker"


@dataclass
class EconomicEvent:
    """A temporary market disruption at one system."""

    id: str
    type: str  # EconomicEventType value
    system_id: int
    start_day: int
    end_day: int
    modifiers: dict[str, float] = field(default_factory=dict)


@dataclass
class PlayerState:
    credits: int = STARTING_CREDITS
    debt: int = STARTING_DEBT
    current_system: int = SOL_SYSTEM_ID
    days_elapsed: int = 0


@dataclass
class ShipState:
    name: str = DEFAULT_SHIP_NAME
    quirks: list[str] = field(default_factory=list)
    upgrades: list[str] = field(default_factory=list)
    fuel: float = STARTING_FUEL
    hull: float = SHIP_CONDITION_MAX
    engine: float = SHIP_CONDITION_MAX
    life_support: float = SHIP_CONDITION_MAX
    cargo_capacity: int = STARTING_CARGO_CAPACITY
    hidden_cargo_capacity: int = 0
    cargo: list[CargoStack] = field(default_factory=list)
    hidden_cargo: list[CargoStack] = field(default_factory=list)

    def condition(self) -> dict[str, float]:
        return {"hull": self.hull, "engine": self.engine, "lifeSupport": self.life_support}


@dataclass
class WorldState:
    visited_systems: list[int] = field(default_factory=list)
    price_knowledge: dict[int, PriceKnowledge] = field(default_factory=dict)
    active_events: list[EconomicEvent] = field(default_factory=list)
    market_conditions: dict[int, dict[str, float]] = field(default_factory=dict)
    current_system_prices: dict[str, int] = field(default_factory=dict)


@dataclass
class MetaState:
    version: str = GAME_VERSION
    timestamp: int = 0  # Milliseconds since the epoch


@dataclass
class GameState:
    player: PlayerState = field(default_factory=PlayerState)
    ship: ShipState = field(default_factory=ShipState)
    world: WorldState = field(default_factory=WorldState)
    meta: MetaState = field(default_factory=MetaState)
    npcs: dict[str, NpcState] = field(default_factory=dict)


@dataclass
class ActionResult:
    """Outcome of a player action that can fail for game reasons."""

    success: bool
    reason: str = ""
    cost: int = 0
    revenue: int = 0
    profit_margin: int = 0
    message: str = ""
