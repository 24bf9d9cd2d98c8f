"""Tramp Freighter: the state store.

``StateStore`` owns the single game state tree. Every change goes through one
of its methods, which applies the change, notifies subscribers on the
matching ``StateEvent`` channel and, for player actions, persists the game.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Callable

from .config import SAVE_DEBOUNCE, SAVE_FILE
from .constants import (
    DAILY_RECOVERY_FACTOR,
    GAME_VERSION,
    INTEL_COST_RUMOR,
    MARKET_CONDITION_PRUNE_THRESHOLD,
    REFUEL_EPSILON,
    SHIP_CONDITION_MAX,
    SHIP_SYSTEMS,
    SOL_SYSTEM_ID,
    STARTING_FUEL,
    STARTING_GRAIN,
)
from .models import broker, save
from .models.events import get_active_event_for_system, update_events
from .models.galaxy import StarCatalog, StarSystem, create_default_catalog
from .models.inventory import CargoStack, add_cargo, cargo_used, find_stack, remove_from_stack
from .models.navigation import JumpResult, NavigationSystem
from .models.npcs import (
    NpcState,
    RepTier,
    clamp_rep,
    get_npc,
    get_rep_tier,
    scaled_rep_change,
)
from .models.pricing import calculate_system_prices
from .models.ships import (
    SHIP_UPGRADES,
    ConditionWarning,
    ShipCapabilities,
    apply_quirk_modifiers,
    assign_ship_quirks,
    calculate_capabilities,
    check_condition_warnings,
    clamp_condition,
    get_fuel_price,
    get_quirk,
    get_repair_cost,
    sanitize_ship_name,
    validate_refuel,
)
from .models.state import (
    ActionResult,
    EconomicEvent,
    GameState,
    MetaState,
    PlayerState,
    PriceKnowledge,
    ShipState,
    WorldState,
)
from .states import StateEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]

_CONDITION_FIELDS = {"hull": "hull", "engine": "engine", "lifeSupport": "life_support"}


class StateStore:
    """Single owner of the game state, with a synchronous event bus."""

    def __init__(
        self,
        catalog: StarCatalog | None = None,
        save_path: Path | str = SAVE_FILE,
        clock: Callable[[], int] | None = None,
        debounce_ms: int = SAVE_DEBOUNCE,
    ) -> None:
        self.catalog = catalog or create_default_catalog()
        self.navigation = NavigationSystem(self.catalog)
        self.save_path = Path(save_path)
        self.debounce_ms = debounce_ms
        self._clock = clock or save.now_ms
        self.last_save_ms: int | None = None
        self.state: GameState | None = None
        self.animation_system: Any = None
        self._subscribers: dict[StateEvent, list[Subscriber]] = {e: [] for e in StateEvent}

    # ------------------------------------------------------------------
    # Event bus
    # ------------------------------------------------------------------

    @staticmethod
    def _check_channel(channel: StateEvent) -> None:
        if not isinstance(channel, StateEvent):
            raise TypeError(f"Unknown event channel: {channel!r}")

    def subscribe(self, channel: StateEvent, callback: Subscriber) -> None:
        self._check_channel(channel)
        self._subscribers[channel].append(callback)

    def unsubscribe(self, channel: StateEvent, callback: Subscriber) -> None:
        self._check_channel(channel)
        if callback in self._subscribers[channel]:
            self._subscribers[channel].remove(callback)

    def emit(self, channel: StateEvent, payload: Any = None) -> None:
        """Deliver *payload* to every subscriber, in registration order.

        A subscriber that raises is logged and skipped; the rest still run.
        """
        self._check_channel(channel)
        for callback in list(self._subscribers[channel]):
            try:
                callback(payload)
            except Exception:
                logger.exception("Subscriber on %s failed", channel.value)

    def _emit_all(self) -> None:
        state = self.state
        self.emit(StateEvent.CREDITS_CHANGED, state.player.credits)
        self.emit(StateEvent.DEBT_CHANGED, state.player.debt)
        self.emit(StateEvent.FUEL_CHANGED, state.ship.fuel)
        self.emit(StateEvent.CARGO_CHANGED, state.ship.cargo)
        self.emit(StateEvent.HIDDEN_CARGO_CHANGED, state.ship.hidden_cargo)
        self.emit(StateEvent.LOCATION_CHANGED, state.player.current_system)
        self.emit(StateEvent.TIME_CHANGED, state.player.days_elapsed)
        self.emit(StateEvent.PRICE_KNOWLEDGE_CHANGED, state.world.price_knowledge)
        self.emit(StateEvent.ACTIVE_EVENTS_CHANGED, state.world.active_events)
        self.emit(StateEvent.SHIP_CONDITION_CHANGED, state.ship.condition())
        self.emit(StateEvent.SHIP_NAME_CHANGED, state.ship.name)
        self.emit(StateEvent.UPGRADES_CHANGED, state.ship.upgrades)
        self.emit(StateEvent.QUIRKS_CHANGED, state.ship.quirks)
        self.emit(StateEvent.NPCS_CHANGED, state.npcs)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _require_state(self, operation: str) -> GameState:
        if self.state is None:
            raise RuntimeError(f"Invalid state: {operation} called before game initialization")
        return self.state

    def get_state(self) -> GameState:
        return self._require_state("get_state")

    def get_player(self) -> PlayerState:
        return self._require_state("get_player").player

    def get_ship(self) -> ShipState:
        return self._require_state("get_ship").ship

    def get_current_system(self) -> StarSystem:
        state = self._require_state("get_current_system")
        return self.catalog.get_system(state.player.current_system)

    def get_cargo_used(self) -> int:
        return cargo_used(self._require_state("get_cargo_used").ship.cargo)

    def get_cargo_remaining(self) -> int:
        ship = self._require_state("get_cargo_remaining").ship
        return ship.cargo_capacity - cargo_used(ship.cargo)

    def get_hidden_cargo_used(self) -> int:
        return cargo_used(self._require_state("get_hidden_cargo_used").ship.hidden_cargo)

    def calculate_ship_capabilities(self) -> ShipCapabilities:
        return calculate_capabilities(self._require_state("calculate_ship_capabilities").ship.upgrades)

    def get_fuel_capacity(self) -> float:
        return self.calculate_ship_capabilities().fuel_capacity

    def get_ship_condition(self) -> dict[str, float]:
        return self._require_state("get_ship_condition").ship.condition()

    def check_condition_warnings(self) -> list[ConditionWarning]:
        ship = self._require_state("check_condition_warnings").ship
        return check_condition_warnings(ship.hull, ship.engine, ship.life_support)

    def get_price_knowledge(self) -> dict[int, PriceKnowledge]:
        return self._require_state("get_price_knowledge").world.price_knowledge

    def get_known_prices(self, system_id: int) -> dict[str, int] | None:
        knowledge = self.get_price_knowledge().get(system_id)
        return dict(knowledge.prices) if knowledge else None

    def has_visited_system(self, system_id: int) -> bool:
        return system_id in self._require_state("has_visited_system").world.visited_systems

    is_system_visited = has_visited_system

    def get_current_system_prices(self) -> dict[str, int]:
        return dict(self._require_state("get_current_system_prices").world.current_system_prices)

    def get_active_events(self) -> list[EconomicEvent]:
        return self._require_state("get_active_events").world.active_events

    def get_active_event_for_system(self, system_id: int) -> EconomicEvent | None:
        return get_active_event_for_system(self.get_active_events(), system_id)

    def get_fuel_price(self, system_id: int | None = None) -> int:
        state = self._require_state("get_fuel_price")
        sid = state.player.current_system if system_id is None else system_id
        return get_fuel_price(self.catalog.get_system(sid), self.catalog.ly_per_unit)

    def get_repair_cost(self, system: str, amount: float) -> int:
        ship = self._require_state("get_repair_cost").ship
        return get_repair_cost(getattr(ship, _CONDITION_FIELDS[system]), amount)

    def get_npc_state(self, npc_id: str) -> NpcState:
        """State for *npc_id*, created from the NPC's starting reputation on first use."""
        state = self._require_state("get_npc_state")
        npc = get_npc(npc_id)
        if npc_id not in state.npcs:
            state.npcs[npc_id] = NpcState(
                rep=float(npc.initial_rep),
                last_interaction=state.player.days_elapsed,
            )
        return state.npcs[npc_id]

    def get_rep_tier(self, npc_id: str) -> RepTier:
        return get_rep_tier(self.get_npc_state(npc_id).rep)

    def set_animation_system(self, animation_system: Any) -> None:
        self.animation_system = animation_system

    def is_animating(self) -> bool:
        flag = getattr(self.animation_system, "is_animating", False)
        return bool(flag() if callable(flag) else flag)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init_new_game(
        self,
        quirks: list[str] | None = None,
        rng: random.Random | None = None,
    ) -> GameState:
        """Start over at Sol with a loan, a little grain and a used freighter."""
        if quirks is None:
            quirks = assign_ship_quirks(rng)
        for quirk_id in quirks:
            get_quirk(quirk_id)

        sol = self.catalog.get_system(SOL_SYSTEM_ID)
        prices = calculate_system_prices(sol, 0, [], {}, self.catalog.ly_per_unit)
        ship = ShipState(
            quirks=list(quirks),
            fuel=STARTING_FUEL,
            cargo=[
                CargoStack(
                    good="grain",
                    qty=STARTING_GRAIN,
                    buy_price=prices["grain"],
                    buy_system=sol.id,
                    buy_system_name=sol.name,
                    buy_date=0,
                )
            ],
        )
        self.state = GameState(
            player=PlayerState(current_system=sol.id),
            ship=ship,
            world=WorldState(
                visited_systems=[sol.id],
                price_knowledge={sol.id: PriceKnowledge(last_visit=0, prices=dict(prices))},
                current_system_prices=dict(prices),
            ),
            meta=MetaState(version=GAME_VERSION, timestamp=self._clock()),
        )
        logger.info("New game started with quirks %s", ", ".join(quirks))
        self._emit_all()
        self.save_game()
        return self.state

    # ------------------------------------------------------------------
    # Core mutations
    # ------------------------------------------------------------------

    def update_credits(self, credits: int) -> None:
        self._require_state("update_credits").player.credits = credits
        self.emit(StateEvent.CREDITS_CHANGED, credits)

    def update_debt(self, debt: int) -> None:
        self._require_state("update_debt").player.debt = debt
        self.emit(StateEvent.DEBT_CHANGED, debt)

    def update_fuel(self, fuel: float) -> None:
        state = self._require_state("update_fuel")
        capacity = self.get_fuel_capacity()
        if fuel < 0 or fuel > capacity:
            raise ValueError(f"Fuel {fuel} outside [0, {capacity:g}]")
        state.ship.fuel = fuel
        self.emit(StateEvent.FUEL_CHANGED, fuel)

    def update_cargo(self, cargo: list[CargoStack]) -> None:
        self._require_state("update_cargo").ship.cargo = list(cargo)
        self.emit(StateEvent.CARGO_CHANGED, self.state.ship.cargo)

    def update_hidden_cargo(self, cargo: list[CargoStack]) -> None:
        self._require_state("update_hidden_cargo").ship.hidden_cargo = list(cargo)
        self.emit(StateEvent.HIDDEN_CARGO_CHANGED, self.state.ship.hidden_cargo)

    def update_location(self, system_id: int) -> None:
        """Arrive at *system_id* and lock in today's prices there."""
        state = self._require_state("update_location")
        system = self.catalog.get_system(system_id)
        state.player.current_system = system_id
        if system_id not in state.world.visited_systems:
            state.world.visited_systems.append(system_id)
        state.world.current_system_prices = calculate_system_prices(
            system,
            state.player.days_elapsed,
            state.world.active_events,
            state.world.market_conditions,
            self.catalog.ly_per_unit,
        )
        self.emit(StateEvent.LOCATION_CHANGED, system_id)

    def update_time(self, days_elapsed: int) -> None:
        """Move the calendar forward.

        On an advance, in order: age price knowledge and drop expired
        intelligence, decay market conditions, refresh events, recompute
        known prices. The docked price snapshot is left alone.
        """
        state = self._require_state("update_time")
        previous = state.player.days_elapsed
        if days_elapsed < previous:
            raise ValueError(f"Time cannot run backwards ({previous} -> {days_elapsed})")
        state.player.days_elapsed = days_elapsed
        advanced = days_elapsed - previous

        if advanced > 0:
            self.increment_price_knowledge_staleness(advanced)
            removed = broker.cleanup_old_intelligence(state.world.price_knowledge)
            if removed:
                logger.debug("Forgot %d stale intelligence entries", removed)
            self.apply_market_recovery(advanced)
            self.update_active_events()
            self.recalculate_prices_for_known_systems()
            self.emit(StateEvent.PRICE_KNOWLEDGE_CHANGED, state.world.price_knowledge)
            self.emit(StateEvent.ACTIVE_EVENTS_CHANGED, state.world.active_events)
        self.emit(StateEvent.TIME_CHANGED, days_elapsed)

    def update_ship_name(self, name: str | None) -> str:
        clean = sanitize_ship_name(name)
        self._require_state("update_ship_name").ship.name = clean
        self.emit(StateEvent.SHIP_NAME_CHANGED, clean)
        return clean

    def update_ship_condition(self, hull: float, engine: float, life_support: float) -> None:
        """Set condition, clamped to [0, 100], then announce any warnings."""
        ship = self._require_state("update_ship_condition").ship
        ship.hull = clamp_condition(hull)
        ship.engine = clamp_condition(engine)
        ship.life_support = clamp_condition(life_support)
        self.emit(StateEvent.SHIP_CONDITION_CHANGED, ship.condition())
        for warning in check_condition_warnings(ship.hull, ship.engine, ship.life_support):
            self.emit(StateEvent.CONDITION_WARNING, warning)

    def update_market_conditions(self, system_id: int, good: str, delta: float) -> None:
        """Add player trade pressure: +qty when selling, -qty when buying."""
        conditions = self._require_state("update_market_conditions").world.market_conditions
        goods = conditions.setdefault(system_id, {})
        goods[good] = goods.get(good, 0.0) + delta

    def apply_market_recovery(self, days: int) -> None:
        """Decay trade pressure 10% per day and prune what has faded."""
        world = self._require_state("apply_market_recovery").world
        factor = DAILY_RECOVERY_FACTOR ** days
        recovered: dict[int, dict[str, float]] = {}
        for system_id, goods in world.market_conditions.items():
            kept = {
                good: value * factor
                for good, value in goods.items()
                if abs(value * factor) >= MARKET_CONDITION_PRUNE_THRESHOLD
            }
            if kept:
                recovered[system_id] = kept
        world.market_conditions = recovered

    def update_price_knowledge(
        self,
        system_id: int,
        prices: dict[str, int],
        last_visit: int = 0,
        source: str = "visit",
    ) -> None:
        world = self._require_state("update_price_knowledge").world
        world.price_knowledge[system_id] = PriceKnowledge(last_visit, dict(prices), source)
        self.emit(StateEvent.PRICE_KNOWLEDGE_CHANGED, world.price_knowledge)

    def increment_price_knowledge_staleness(self, days: int = 1) -> None:
        for knowledge in self._require_state("increment_price_knowledge_staleness").world.price_knowledge.values():
            knowledge.last_visit += days

    def recalculate_prices_for_known_systems(self) -> None:
        """Refresh every remembered market to today's prices, keeping its source."""
        state = self._require_state("recalculate_prices_for_known_systems")
        for system_id, knowledge in state.world.price_knowledge.items():
            if not self.catalog.has_system(system_id):
                continue
            knowledge.prices = calculate_system_prices(
                self.catalog.get_system(system_id),
                state.player.days_elapsed,
                state.world.active_events,
                state.world.market_conditions,
                self.catalog.ly_per_unit,
            )

    def update_active_events(self) -> None:
        state = self._require_state("update_active_events")
        state.world.active_events = update_events(state, self.catalog)

    # ------------------------------------------------------------------
    # Docking
    # ------------------------------------------------------------------

    def dock(self) -> None:
        """Record the current market as fresh knowledge."""
        state = self._require_state("dock")
        self.update_price_knowledge(
            state.player.current_system, state.world.current_system_prices, 0, "visit"
        )
        self.save_game()

    def undock(self) -> None:
        self._require_state("undock")
        self.save_game()

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def buy_good(self, good: str, qty: int, price: int) -> ActionResult:
        state = self._require_state("buy_good")
        if qty <= 0:
            return ActionResult(False, "Quantity must be positive")
        total = qty * price
        if state.player.credits < total:
            return ActionResult(False, "Insufficient credits", cost=total)
        if self.get_cargo_remaining() < qty:
            return ActionResult(False, "Not enough cargo space", cost=total)

        system = self.get_current_system()
        self.update_credits(state.player.credits - total)
        self.update_cargo(
            add_cargo(
                state.ship.cargo, good, qty, price,
                system.id, system.name, state.player.days_elapsed,
            )
        )
        self.update_market_conditions(system.id, good, -qty)
        self.save_game()
        return ActionResult(True, cost=total)

    def sell_good(self, stack_index: int, qty: int, price: int) -> ActionResult:
        state = self._require_state("sell_good")
        cargo = state.ship.cargo
        if not 0 <= stack_index < len(cargo):
            return ActionResult(False, "Invalid cargo stack")
        if qty <= 0:
            return ActionResult(False, "Quantity must be positive")
        stack = cargo[stack_index]
        if stack.qty < qty:
            return ActionResult(False, "Not enough quantity in stack")

        revenue = qty * price
        margin = price - stack.buy_price
        self.update_credits(state.player.credits + revenue)
        self.update_cargo(remove_from_stack(cargo, stack_index, qty))
        self.update_market_conditions(state.player.current_system, stack.good, qty)
        self.save_game()
        return ActionResult(True, revenue=revenue, profit_margin=margin)

    # ------------------------------------------------------------------
    # Refuel, repair, upgrades
    # ------------------------------------------------------------------

    def refuel(self, amount: float) -> ActionResult:
        state = self._require_state("refuel")
        capacity = self.get_fuel_capacity()
        valid, reason, cost = validate_refuel(
            state.ship.fuel, amount, state.player.credits, self.get_fuel_price(), capacity
        )
        if not valid:
            return ActionResult(False, reason, cost=cost)
        self.update_credits(state.player.credits - cost)
        self.update_fuel(min(capacity, state.ship.fuel + amount))
        self.save_game()
        return ActionResult(True, cost=cost)

    def repair_ship_system(self, system: str, amount: float) -> ActionResult:
        state = self._require_state("repair_ship_system")
        if system not in SHIP_SYSTEMS:
            return ActionResult(False, "Invalid system type")
        if amount <= 0:
            return ActionResult(False, "Repair amount must be positive")
        current = getattr(state.ship, _CONDITION_FIELDS[system])
        if current >= SHIP_CONDITION_MAX:
            return ActionResult(False, "System already at maximum condition")
        cost = get_repair_cost(current, amount)
        if state.player.credits < cost:
            return ActionResult(False, "Insufficient credits for repair", cost=cost)
        if current + amount > SHIP_CONDITION_MAX + REFUEL_EPSILON:
            return ActionResult(False, "Repair would exceed maximum condition", cost=cost)

        condition = state.ship.condition()
        condition[system] = current + amount
        self.update_credits(state.player.credits - cost)
        self.update_ship_condition(condition["hull"], condition["engine"], condition["lifeSupport"])
        self.save_game()
        return ActionResult(True, cost=cost)

    def purchase_upgrade(self, upgrade_id: str) -> ActionResult:
        state = self._require_state("purchase_upgrade")
        upgrade = SHIP_UPGRADES.get(upgrade_id)
        if upgrade is None:
            return ActionResult(False, "Unknown upgrade")
        if upgrade_id in state.ship.upgrades:
            return ActionResult(False, "Upgrade already installed")
        if state.player.credits < upgrade.cost:
            return ActionResult(False, f"Insufficient credits (need ₡{upgrade.cost})", cost=upgrade.cost)

        state.player.credits -= upgrade.cost
        state.ship.upgrades.append(upgrade_id)
        caps = self.calculate_ship_capabilities()
        state.ship.cargo_capacity = caps.cargo_capacity
        state.ship.hidden_cargo_capacity = caps.hidden_cargo_capacity
        logger.info("Installed %s", upgrade.name)
        self.emit(StateEvent.CREDITS_CHANGED, state.player.credits)
        self.emit(StateEvent.UPGRADES_CHANGED, state.ship.upgrades)
        self.save_game()
        return ActionResult(True, cost=upgrade.cost)

    # ------------------------------------------------------------------
    # Hidden cargo
    # ------------------------------------------------------------------

    def move_to_hidden_cargo(self, good: str, qty: int) -> ActionResult:
        ship = self._require_state("move_to_hidden_cargo").ship
        if ship.hidden_cargo_capacity <= 0:
            return ActionResult(False, "No hidden cargo compartment")
        if qty <= 0:
            return ActionResult(False, "Quantity must be positive")
        index = find_stack(ship.cargo, good)
        if index < 0:
            return ActionResult(False, "Cargo not found")
        stack = ship.cargo[index]
        if stack.qty < qty:
            return ActionResult(False, "Insufficient quantity")
        available = ship.hidden_cargo_capacity - cargo_used(ship.hidden_cargo)
        if qty > available:
            return ActionResult(False, f"Hidden cargo full ({available} units available)")

        self.update_cargo(remove_from_stack(ship.cargo, index, qty))
        self.update_hidden_cargo(
            add_cargo(
                ship.hidden_cargo, good, qty, stack.buy_price,
                stack.buy_system, stack.buy_system_name, stack.buy_date,
            )
        )
        self.save_game()
        return ActionResult(True)

    def move_to_regular_cargo(self, good: str, qty: int) -> ActionResult:
        ship = self._require_state("move_to_regular_cargo").ship
        if qty <= 0:
            return ActionResult(False, "Quantity must be positive")
        index = find_stack(ship.hidden_cargo, good)
        if index < 0:
            return ActionResult(False, "Cargo not found in hidden compartment")
        stack = ship.hidden_cargo[index]
        if stack.qty < qty:
            return ActionResult(False, "Insufficient quantity")
        available = ship.cargo_capacity - cargo_used(ship.cargo)
        if qty > available:
            return ActionResult(False, f"Cargo hold full ({available} units available)")

        self.update_hidden_cargo(remove_from_stack(ship.hidden_cargo, index, qty))
        self.update_cargo(
            add_cargo(
                ship.cargo, good, qty, stack.buy_price,
                stack.buy_system, stack.buy_system_name, stack.buy_date,
            )
        )
        self.save_game()
        return ActionResult(True)

    # ------------------------------------------------------------------
    # Information broker
    # ------------------------------------------------------------------

    def purchase_intelligence(self, system_id: int) -> ActionResult:
        state = self._require_state("purchase_intelligence")
        result = broker.purchase_intelligence(state, system_id, self.catalog)
        if not result.success:
            return ActionResult(False, result.reason, cost=result.cost)
        self.update_credits(state.player.credits - result.cost)
        state.world.price_knowledge[system_id] = result.knowledge
        self.emit(StateEvent.PRICE_KNOWLEDGE_CHANGED, state.world.price_knowledge)
        self.save_game()
        return ActionResult(True, cost=result.cost)

    def generate_rumor(self) -> str:
        return broker.generate_rumor(self._require_state("generate_rumor"), self.catalog)

    def purchase_rumor(self) -> ActionResult:
        state = self._require_state("purchase_rumor")
        if state.player.credits < INTEL_COST_RUMOR:
            return ActionResult(False, "Insufficient credits for intelligence", cost=INTEL_COST_RUMOR)
        self.update_credits(state.player.credits - INTEL_COST_RUMOR)
        self.save_game()
        return ActionResult(True, cost=INTEL_COST_RUMOR, message=self.generate_rumor())

    def list_available_intelligence(self) -> list[broker.IntelligenceOption]:
        state = self._require_state("list_available_intelligence")
        current = state.player.current_system
        return broker.list_available_intelligence(
            state.world.price_knowledge,
            self.catalog,
            current,
            self.navigation.get_connected_systems(current),
        )

    # ------------------------------------------------------------------
    # NPC relations
    # ------------------------------------------------------------------

    def modify_rep(self, npc_id: str, delta: float, reason: str = "") -> float:
        """Change reputation with an NPC. Gains are scaled; the result stays in [-100, 100]."""
        state = self._require_state("modify_rep")
        npc = get_npc(npc_id)
        npc_state = self.get_npc_state(npc_id)
        gain_modifier = apply_quirk_modifiers(1.0, "npc_rep_gain", state.ship.quirks)
        change = scaled_rep_change(delta, npc, gain_modifier)
        npc_state.rep = clamp_rep(npc_state.rep + change)
        npc_state.last_interaction = state.player.days_elapsed
        npc_state.interactions += 1
        logger.debug("%s rep %+.2f (%s) -> %.2f", npc.name, change, reason or "unspecified", npc_state.rep)
        self.emit(StateEvent.NPCS_CHANGED, state.npcs)
        self.save_game()
        return npc_state.rep

    def set_npc_flag(self, npc_id: str, flag: str) -> bool:
        """Set a story flag once. Returns False if it was already set."""
        state = self._require_state("set_npc_flag")
        added = self.get_npc_state(npc_id).add_flag(flag)
        if added:
            self.emit(StateEvent.NPCS_CHANGED, state.npcs)
            self.save_game()
        return added

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def execute_jump(
        self,
        target_id: int,
        animation_hook: Callable[[int, int], None] | None = None,
        ui_hook: Callable[[JumpResult], None] | None = None,
    ) -> JumpResult:
        self._require_state("execute_jump")
        if self.is_animating():
            return JumpResult(False, "Jump already in progress")
        return self.navigation.execute_jump(self, target_id, animation_hook, ui_hook)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_game(self) -> bool:
        """Persist now unless a save happened within the debounce window."""
        state = self._require_state("save_game")
        result = save.save_game(
            state,
            self.last_save_ms,
            self.save_path,
            now=self._clock(),
            debounce_ms=self.debounce_ms,
        )
        if result.saved:
            self.last_save_ms = result.timestamp
        return result.saved

    def load_game(self) -> GameState | None:
        """Replace the state with the saved game, or return None and change nothing."""
        try:
            loaded = save.load_game(self.catalog, self.save_path)
        except Exception:
            logger.exception("Unexpected error loading %s", self.save_path)
            return None
        if loaded is None:
            logger.info("No usable save at %s", self.save_path)
            return None
        self.state = loaded
        caps = self.calculate_ship_capabilities()
        loaded.ship.cargo_capacity = caps.cargo_capacity
        loaded.ship.hidden_cargo_capacity = caps.hidden_cargo_capacity
        logger.info("Loaded save from day %d", loaded.player.days_elapsed)
        self._emit_all()
        return loaded

    def has_saved_game(self) -> bool:
        return save.has_saved_game(self.save_path)

    def clear_save(self) -> None:
        save.clear_save(self.save_path)
        self.last_save_ms = None
