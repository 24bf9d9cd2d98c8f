"""Commodity pricing for Tramp Freighter.

Every price is a pure function of (good, system, day, active events, market
conditions). The factors multiply together:

    base * tech * temporal * daily * event * local

and the result is rounded and held above the price floor. The same inputs
always give the same price, so prices can be recomputed on demand instead of
stored.
"""

from __future__ import annotations

import math
import random

from ..constants import (
    BASE_PRICES,
    COMMODITY_TYPES,
    DAILY_FLUCTUATION_MIN,
    DAILY_FLUCTUATION_RANGE,
    LOCAL_MODIFIER_MAX,
    LOCAL_MODIFIER_MIN,
    LY_PER_UNIT,
    MARKET_CAPACITY,
    MAX_COORD_DISTANCE,
    MAX_TECH_LEVEL,
    MIN_TECH_LEVEL,
    PRICE_FLOOR,
    TECH_BIASES,
    TECH_LEVEL_MIDPOINT,
    TECH_MODIFIER_INTENSITY,
    TEMPORAL_AMPLITUDE,
    TEMPORAL_PHASE_OFFSET,
    TEMPORAL_WAVE_PERIOD,
)
from .galaxy import StarSystem, distance_from_sol
from .state import EconomicEvent


def _check_good(good: str) -> None:
    if good not in BASE_PRICES:
        raise ValueError(f"Unknown commodity: {good}")


def calculate_tech_level(system: StarSystem, ly_per_unit: float = LY_PER_UNIT) -> float:
    """Catalog tech level, or one interpolated from distance to Sol (10 at Sol, 1 at 21 ly+)."""
    if system.tech_level is not None:
        return float(system.tech_level)
    distance = min(distance_from_sol(system, ly_per_unit), MAX_COORD_DISTANCE)
    return MAX_TECH_LEVEL - (MAX_TECH_LEVEL - MIN_TECH_LEVEL) * distance / MAX_COORD_DISTANCE


def calculate_tech_modifier(good: str, tech_level: float) -> float:
    """Exactly 1.0 at the tech midpoint; bias decides the direction elsewhere."""
    _check_good(good)
    bias = TECH_BIASES[good]
    return 1.0 + bias * (TECH_LEVEL_MIDPOINT - tech_level) * TECH_MODIFIER_INTENSITY


def calculate_temporal_modifier(day: int, system_id: int) -> float:
    """Slow sine wave per system, phase-shifted by id so markets don't move in lockstep."""
    phase = 2 * math.pi * day / TEMPORAL_WAVE_PERIOD + system_id * TEMPORAL_PHASE_OFFSET
    return 1.0 + TEMPORAL_AMPLITUDE * math.sin(phase)


def calculate_daily_fluctuation(good: str, system_id: int, day: int) -> float:
    """Deterministic jitter keyed by (system, good, day)."""
    rng = random.Random(f"{system_id}_{good}_{day}")
    return DAILY_FLUCTUATION_MIN + rng.random() * DAILY_FLUCTUATION_RANGE


def calculate_event_modifier(
    good: str,
    system_id: int,
    active_events: list[EconomicEvent] | None,
) -> float:
    for event in active_events or []:
        if event.system_id == system_id:
            return event.modifiers.get(good, 1.0)
    return 1.0


def calculate_local_modifier(
    good: str,
    system_id: int,
    market_conditions: dict[int, dict[str, float]] | None,
) -> float:
    """Player-driven pressure: selling (surplus) lowers the price, buying raises it."""
    surplus = (market_conditions or {}).get(system_id, {}).get(good, 0.0)
    modifier = 1.0 - surplus / MARKET_CAPACITY
    return max(LOCAL_MODIFIER_MIN, min(LOCAL_MODIFIER_MAX, modifier))


def calculate_price(
    good: str,
    system: StarSystem,
    day: int,
    active_events: list[EconomicEvent] | None = None,
    market_conditions: dict[int, dict[str, float]] | None = None,
    ly_per_unit: float = LY_PER_UNIT,
) -> int:
    """Integer price of *good* at *system* on *day*."""
    _check_good(good)
    price = (
        BASE_PRICES[good]
        * calculate_tech_modifier(good, calculate_tech_level(system, ly_per_unit))
        * calculate_temporal_modifier(day, system.id)
        * calculate_daily_fluctuation(good, system.id, day)
        * calculate_event_modifier(good, system.id, active_events)
        * calculate_local_modifier(good, system.id, market_conditions)
    )
    return max(PRICE_FLOOR, int(round(price)))


def calculate_system_prices(
    system: StarSystem,
    day: int,
    active_events: list[EconomicEvent] | None = None,
    market_conditions: dict[int, dict[str, float]] | None = None,
    ly_per_unit: float = LY_PER_UNIT,
) -> dict[str, int]:
    """Prices for every commodity at one system."""
    return {
        good: calculate_price(good, system, day, active_events, market_conditions, ly_per_unit)
        for good in COMMODITY_TYPES
    }
