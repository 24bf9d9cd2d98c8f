"""Wormhole navigation for Tramp Freighter.

Ships can only jump between systems joined by a wormhole. Each jump costs
fuel and days according to distance, worse when the engine is worn, and
wears the ship down a little.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from ..constants import (
    BASE_FUEL_COST,
    ENGINE_FUEL_PENALTY,
    ENGINE_PENALTY_THRESHOLD,
    ENGINE_TIME_PENALTY_DAYS,
    ENGINE_WEAR_PER_JUMP,
    FUEL_COST_PER_LY,
    HULL_WEAR_PER_JUMP,
    JUMP_TIME_PER_LY,
    LIFE_SUPPORT_DRAIN_PER_DAY,
)
from ..states import JumpPhase
from .galaxy import StarCatalog, StarSystem, distance_between, distance_from_sol
from .ships import ShipCapabilities, apply_quirk_modifiers, clamp_condition
from .state import ShipState

if TYPE_CHECKING:
    from ..game import StateStore

logger = logging.getLogger(__name__)

ModifierFn = Callable[[float, str, list[str]], float]


@dataclass
class JumpValidation:
    """Whether a jump may proceed. Numbers are filled in whenever the route exists."""

    valid: bool
    error: str | None = None
    distance: float = 0.0
    fuel_cost: float = 0.0
    jump_time: int = 0


@dataclass
class JumpResult:
    """Outcome of an executed (or refused) jump."""

    success: bool
    error: str | None = None
    distance: float = 0.0
    fuel_cost: float = 0.0
    jump_time: int = 0


def calculate_fuel_cost(distance: float) -> float:
    return BASE_FUEL_COST + FUEL_COST_PER_LY * distance


def calculate_jump_time(distance: float) -> int:
    return max(1, math.ceil(distance * JUMP_TIME_PER_LY))


def calculate_fuel_cost_with_condition(
    distance: float,
    engine: float | None = None,
    quirks: list[str] | None = None,
    consumption: float = 1.0,
    modifier_fn: ModifierFn = apply_quirk_modifiers,
) -> float:
    """Fuel cost after engine wear, quirks and upgrade efficiency."""
    cost = calculate_fuel_cost(distance)
    if engine is not None and engine < ENGINE_PENALTY_THRESHOLD:
        cost *= ENGINE_FUEL_PENALTY
    if quirks:
        cost = modifier_fn(cost, "fuel_consumption", quirks)
    return cost * consumption


def calculate_jump_time_with_condition(distance: float, engine: float | None = None) -> int:
    days = calculate_jump_time(distance)
    if engine is not None and engine < ENGINE_PENALTY_THRESHOLD:
        days += ENGINE_TIME_PENALTY_DAYS
    return max(1, days)


def calculate_jump_degradation(
    ship: ShipState,
    jump_days: int,
    capabilities: ShipCapabilities,
    modifier_fn: ModifierFn = apply_quirk_modifiers,
) -> dict[str, float]:
    """Condition after a jump: hull and engine wear per jump, life support per day."""
    hull_wear = modifier_fn(HULL_WEAR_PER_JUMP, "hull_degradation", ship.quirks)
    hull_wear *= capabilities.hull_degradation
    drain = modifier_fn(LIFE_SUPPORT_DRAIN_PER_DAY * jump_days, "life_support_drain", ship.quirks)
    drain *= capabilities.life_support_drain
    return {
        "hull": clamp_condition(ship.hull - hull_wear),
        "engine": clamp_condition(ship.engine - ENGINE_WEAR_PER_JUMP),
        "lifeSupport": clamp_condition(ship.life_support - drain),
    }


class NavigationSystem:
    """Wormhole graph over a star catalog, plus the jump sequence."""

    def __init__(self, catalog: StarCatalog) -> None:
        self.catalog = catalog
        self.phase = JumpPhase.IDLE
        self._adjacency: dict[int, list[int]] = {s.id: [] for s in catalog.systems}
        for a, b in catalog.wormholes:
            if a == b:
                continue
            if b not in self._adjacency[a]:
                self._adjacency[a].append(b)
            if a not in self._adjacency[b]:
                self._adjacency[b].append(a)
        for neighbours in self._adjacency.values():
            neighbours.sort()

    # ------------------------------------------------------------------
    # Graph queries
    # ------------------------------------------------------------------

    def get_connected_systems(self, system_id: int) -> list[int]:
        return list(self._adjacency.get(system_id, []))

    def are_systems_connected(self, a: int, b: int) -> bool:
        return b in self._adjacency.get(a, [])

    def calculate_distance_between(self, a: int | StarSystem, b: int | StarSystem) -> float:
        sys_a = a if isinstance(a, StarSystem) else self.catalog.get_system(a)
        sys_b = b if isinstance(b, StarSystem) else self.catalog.get_system(b)
        return distance_between(sys_a, sys_b, self.catalog.ly_per_unit)

    def calculate_distance_from_sol(self, system: int | StarSystem) -> float:
        star = system if isinstance(system, StarSystem) else self.catalog.get_system(system)
        return distance_from_sol(star, self.catalog.ly_per_unit)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_jump(
        self,
        from_id: int,
        to_id: int,
        fuel: float,
        engine: float | None = None,
        quirks: list[str] | None = None,
        consumption: float = 1.0,
        modifier_fn: ModifierFn = apply_quirk_modifiers,
    ) -> JumpValidation:
        """Check a jump without touching any state."""
        if not self.catalog.has_system(from_id) or not self.catalog.has_system(to_id):
            return JumpValidation(False, "Invalid system ID")
        if not self.are_systems_connected(from_id, to_id):
            return JumpValidation(False, "No wormhole connection")

        distance = self.calculate_distance_between(from_id, to_id)
        fuel_cost = calculate_fuel_cost_with_condition(distance, engine, quirks, consumption, modifier_fn)
        jump_time = calculate_jump_time_with_condition(distance, engine)
        if fuel < fuel_cost:
            return JumpValidation(False, "Insufficient fuel for jump", distance, fuel_cost, jump_time)
        return JumpValidation(True, None, distance, fuel_cost, jump_time)

    # ------------------------------------------------------------------
    # Jump sequence
    # ------------------------------------------------------------------

    def execute_jump(
        self,
        store: StateStore,
        target_id: int,
        animation_hook: Callable[[int, int], None] | None = None,
        ui_hook: Callable[[JumpResult], None] | None = None,
    ) -> JumpResult:
        """Validate, then commit fuel, time and location in that order.

        Hooks run after the state is committed and saved. A failing hook is
        logged and leaves the completed jump in place.
        """
        self.phase = JumpPhase.VALIDATING
        state = store.get_state()
        ship = state.ship
        origin = state.player.current_system
        caps = store.calculate_ship_capabilities()
        check = self.validate_jump(
            origin, target_id, ship.fuel, ship.engine, ship.quirks, caps.fuel_consumption
        )
        if not check.valid:
            self.phase = JumpPhase.REJECTED
            logger.info("Jump %s -> %s refused: %s", origin, target_id, check.error)
            self.phase = JumpPhase.IDLE
            return JumpResult(False, check.error, check.distance, check.fuel_cost, check.jump_time)

        self.phase = JumpPhase.COMMITTING
        try:
            store.update_fuel(max(0.0, ship.fuel - check.fuel_cost))
            store.update_time(state.player.days_elapsed + check.jump_time)
            store.update_location(target_id)
            condition = calculate_jump_degradation(store.get_ship(), check.jump_time, caps)
            store.update_ship_condition(condition["hull"], condition["engine"], condition["lifeSupport"])
            store.save_game()
        finally:
            self.phase = JumpPhase.IDLE

        result = JumpResult(True, None, check.distance, check.fuel_cost, check.jump_time)
        logger.info(
            "Jumped %s -> %s: %.2f ly, %.1f fuel, %d days",
            origin, target_id, check.distance, check.fuel_cost, check.jump_time,
        )

        if animation_hook is not None:
            try:
                animation_hook(origin, target_id)
            except Exception:
                logger.exception("Jump animation hook failed")
        if ui_hook is not None:
            try:
                ui_hook(result)
            except Exception:
                logger.exception("Jump UI hook failed")
        return result
