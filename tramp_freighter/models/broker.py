"""The information broker: market intelligence for a price.

Brokers sell the current prices at any system, priced by how stale the
player's own knowledge is. Not every broker is honest: some prices come back
shaded low to lure traders in. Rumours are cheaper and vaguer.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from ..constants import (
    COMMODITY_TYPES,
    INTEL_COST_NEVER_VISITED,
    INTEL_COST_RECENT,
    INTEL_COST_STALE,
    INTEL_MANIPULATION_CHANCE,
    INTEL_MANIPULATION_MAX,
    INTEL_MANIPULATION_MIN,
    INTEL_MAX_AGE,
    INTEL_RECENT_THRESHOLD,
    PRICE_FLOOR,
)
from .events import get_event_type
from .galaxy import StarCatalog
from .pricing import calculate_system_prices
from .state import GameState, PriceKnowledge


@dataclass
class IntelligencePurchase:
    """Result of buying intelligence. ``knowledge`` is set only on success."""

    success: bool
    reason: str = ""
    cost: int = 0
    knowledge: PriceKnowledge | None = None


@dataclass
class IntelligenceOption:
    """One row of the broker's menu."""

    system_id: int
    system_name: str
    cost: int
    last_visit: int | None  # None when never visited


def get_intelligence_cost(system_id: int, price_knowledge: dict[int, PriceKnowledge]) -> int:
    knowledge = price_knowledge.get(system_id)
    if knowledge is None:
        return INTEL_COST_NEVER_VISITED
    if knowledge.last_visit <= INTEL_RECENT_THRESHOLD:
        return INTEL_COST_RECENT
    return INTEL_COST_STALE


def manipulate_prices(prices: dict[str, int], rng: random.Random) -> dict[str, int]:
    """Shade some prices down by 15-30%."""
    result: dict[str, int] = {}
    for good, price in prices.items():
        if rng.random() < INTEL_MANIPULATION_CHANCE:
            factor = rng.uniform(INTEL_MANIPULATION_MIN, INTEL_MANIPULATION_MAX)
            price = max(PRICE_FLOOR, int(round(price * factor)))
        result[good] = price
    return result


def purchase_intelligence(
    state: GameState,
    system_id: int,
    catalog: StarCatalog,
    rng: random.Random | None = None,
) -> IntelligencePurchase:
    """Price a system's market for the player. Does not touch *state*."""
    cost = get_intelligence_cost(system_id, state.world.price_knowledge)
    if state.player.credits < cost:
        return IntelligencePurchase(False, "Insufficient credits for intelligence", cost)
    if not catalog.has_system(system_id):
        return IntelligencePurchase(False, "System not found", cost)

    day = state.player.days_elapsed
    real = calculate_system_prices(
        catalog.get_system(system_id),
        day,
        state.world.active_events,
        state.world.market_conditions,
        catalog.ly_per_unit,
    )
    if rng is None:
        rng = random.Random(f"intel_{system_id}_{day}")
    knowledge = PriceKnowledge(last_visit=0, prices=manipulate_prices(real, rng), source="broker")
    return IntelligencePurchase(True, "", cost, knowledge)


def generate_rumor(state: GameState, catalog: StarCatalog) -> str:
    """A hint about today's market. Same day, same rumour."""
    day = state.player.days_elapsed
    rng = random.Random(f"rumor_{day}")
    events = state.world.active_events

    if events and rng.random() < 0.5:
        event = events[rng.randrange(len(events))]
        system = catalog.get_system(event.system_id)
        phrase = get_event_type(event.type).rumor_phrase
        return f"I heard {system.name} is experiencing {phrase}. Might be worth checking out."

    good = rng.choice(COMMODITY_TYPES)
    best_name = ""
    best_price: int | None = None
    for system in catalog.systems:
        price = calculate_system_prices(
            system, day, events, state.world.market_conditions, catalog.ly_per_unit
        )[good]
        if best_price is None or price < best_price:
            best_price = price
            best_name = system.name
    return f"Word on the street is that {good} prices are pretty good at {best_name} right now."


def list_available_intelligence(
    price_knowledge: dict[int, PriceKnowledge],
    catalog: StarCatalog,
    current_system_id: int,
    connected: list[int],
) -> list[IntelligenceOption]:
    """Menu of connected systems plus here.

    Never-visited systems first, then the stalest data, the current system last.
    """
    ids = [sid for sid in connected if sid != current_system_id] + [current_system_id]
    options: list[IntelligenceOption] = []
    for sid in ids:
        knowledge = price_knowledge.get(sid)
        options.append(
            IntelligenceOption(
                system_id=sid,
                system_name=catalog.get_system(sid).name,
                cost=get_intelligence_cost(sid, price_knowledge),
                last_visit=knowledge.last_visit if knowledge else None,
            )
        )

    def sort_key(opt: IntelligenceOption) -> tuple:
        is_current = opt.system_id == current_system_id
        never = opt.last_visit is None
        return (is_current, not never, -(opt.last_visit or 0), opt.system_id)

    options.sort(key=sort_key)
    return options


def cleanup_old_intelligence(price_knowledge: dict[int, PriceKnowledge]) -> int:
    """Forget entries older than the maximum age. Returns how many went."""
    expired = [sid for sid, k in price_knowledge.items() if k.last_visit > INTEL_MAX_AGE]
    for sid in expired:
        del price_knowledge[sid]
    return len(expired)
