"""
Navigation tests: wormhole graph, fuel/time rules and the jump sequence.
"""

import pytest

from tramp_freighter.models.galaxy import create_default_catalog
from tramp_freighter.models.navigation import (
    NavigationSystem,
    calculate_fuel_cost,
    calculate_fuel_cost_with_condition,
    calculate_jump_time,
    calculate_jump_time_with_condition,
)
from tramp_freighter.models.pricing import calculate_system_prices
from tramp_freighter.states import JumpPhase, StateEvent


# ── Graph ────────────────────────────────────────────────────────────────

class TestWormholeGraph:
    def test_connections_are_symmetric(self):
        nav = NavigationSystem(create_default_catalog())
        for system in nav.catalog:
            for other in nav.get_connected_systems(system.id):
                assert system.id in nav.get_connected_systems(other)
                assert nav.are_systems_connected(other, system.id)

    def test_no_self_loops_or_duplicates(self):
        nav = NavigationSystem(create_default_catalog())
        for system in nav.catalog:
            connected = nav.get_connected_systems(system.id)
            assert system.id not in connected
            assert len(connected) == len(set(connected))

    def test_every_default_system_is_reachable(self):
        nav = NavigationSystem(create_default_catalog())
        seen = {0}
        frontier = [0]
        while frontier:
            current = frontier.pop()
            for nxt in nav.get_connected_systems(current):
                if nxt not in seen:
                    seen.add(nxt)
                    frontier.append(nxt)
        assert seen == {s.id for s in nav.catalog}

    def test_distance(self, catalog):
        nav = NavigationSystem(catalog)
        assert nav.calculate_distance_between(0, 1) == pytest.approx(2.5)
        assert nav.calculate_distance_between(1, 0) == pytest.approx(2.5)
        assert nav.calculate_distance_from_sol(3) == pytest.approx(30.0)


# ── Costs ────────────────────────────────────────────────────────────────

class TestJumpCosts:
    def test_base_formulas(self):
        assert calculate_fuel_cost(2.5) == pytest.approx(15.0)
        assert calculate_jump_time(2.5) == 2
        assert calculate_jump_time(0.1) == 1

    def test_worn_engine_penalty(self):
        assert calculate_fuel_cost_with_condition(2.5, engine=50) == pytest.approx(18.0)
        assert calculate_jump_time_with_condition(2.5, engine=50) == 3
        assert calculate_fuel_cost_with_condition(2.5, engine=60) == pytest.approx(15.0)
        assert calculate_jump_time_with_condition(2.5, engine=60) == 2

    def test_quirks_and_upgrades_scale_fuel(self):
        assert calculate_fuel_cost_with_condition(2.5, quirks=["fuel_sipper"]) == pytest.approx(15.0 * 0.85)
        assert calculate_fuel_cost_with_condition(2.5, consumption=0.8) == pytest.approx(12.0)


# ── Validation ───────────────────────────────────────────────────────────

class TestValidateJump:
    def test_exact_fuel_is_enough(self, catalog):
        nav = NavigationSystem(catalog)
        check = nav.validate_jump(0, 1, fuel=15.0)
        assert check.valid
        assert check.fuel_cost == pytest.approx(15.0)

    def test_insufficient_fuel_reports_numbers(self, catalog):
        nav = NavigationSystem(catalog)
        check = nav.validate_jump(0, 1, fuel=14.99)
        assert not check.valid
        assert check.error == "Insufficient fuel for jump"
        assert check.distance == pytest.approx(2.5)
        assert check.fuel_cost == pytest.approx(15.0)
        assert check.jump_time == 2

    def test_no_connection(self, catalog):
        nav = NavigationSystem(catalog)
        check = nav.validate_jump(0, 3, fuel=100.0)
        assert not check.valid
        assert check.error == "No wormhole connection"
        assert check.distance == 0
        assert check.fuel_cost == 0
        assert check.jump_time == 0

    def test_invalid_system(self, catalog):
        nav = NavigationSystem(catalog)
        assert nav.validate_jump(0, 42, fuel=100.0).error == "Invalid system ID"

    def test_custom_quirk_modifier(self, catalog):
        nav = NavigationSystem(catalog)
        calls = []

        def halve(value, attribute, quirks):
            calls.append((attribute, list(quirks)))
            return value * 0.5

        check = nav.validate_jump(0, 1, fuel=8.0, quirks=["fuel_sipper"], modifier_fn=halve)
        assert check.valid
        assert check.fuel_cost == pytest.approx(7.5)
        assert calls == [("fuel_consumption", ["fuel_sipper"])]


# ── Execution ────────────────────────────────────────────────────────────

class TestExecuteJump:
    def test_jump_to_neighbour_with_worn_engine(self, game):
        game.update_ship_condition(100, 50, 100)

        result = game.execute_jump(1)

        assert result.success
        state = game.get_state()
        assert state.ship.fuel == pytest.approx(82.0)
        assert state.player.days_elapsed == 3
        assert state.player.current_system == 1
        assert 1 in state.world.visited_systems
        expected = calculate_system_prices(
            game.catalog.get_system(1), 3, state.world.active_events, state.world.market_conditions
        )
        assert state.world.current_system_prices == expected

    def test_jump_wears_the_ship(self, game):
        game.update_ship_condition(100, 50, 100)
        game.execute_jump(1)
        condition = game.get_ship_condition()
        assert condition["hull"] == pytest.approx(98.0)
        assert condition["engine"] == pytest.approx(49.0)
        assert condition["lifeSupport"] == pytest.approx(98.5)

    def test_commit_order_is_fuel_time_location(self, game):
        seen = []
        game.subscribe(StateEvent.FUEL_CHANGED, lambda _: seen.append("fuel"))
        game.subscribe(StateEvent.TIME_CHANGED, lambda _: seen.append("time"))
        game.subscribe(StateEvent.LOCATION_CHANGED, lambda _: seen.append("location"))
        game.execute_jump(1)
        assert seen == ["fuel", "time", "location"]

    def test_rejected_jump_changes_nothing(self, game):
        before = game.get_state().ship.fuel
        events = []
        game.subscribe(StateEvent.LOCATION_CHANGED, events.append)

        result = game.execute_jump(3)

        assert not result.success
        assert result.error == "No wormhole connection"
        assert game.get_state().ship.fuel == before
        assert game.get_player().current_system == 0
        assert game.get_player().days_elapsed == 0
        assert events == []
        assert game.navigation.phase == JumpPhase.IDLE

    def test_failing_hook_does_not_roll_back(self, game):
        def broken_animation(origin, target):
            raise RuntimeError("renderer gone")

        ui_results = []
        result = game.execute_jump(1, animation_hook=broken_animation, ui_hook=ui_results.append)

        assert result.success
        assert game.get_player().current_system == 1
        assert ui_results == [result]
        assert game.navigation.phase == JumpPhase.IDLE

    def test_no_jump_while_animating(self, game):
        class Animation:
            is_animating = True

        game.set_animation_system(Animation())
        result = game.execute_jump(1)
        assert not result.success
        assert game.get_player().current_system == 0
