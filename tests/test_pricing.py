"""
Pricing engine tests: determinism and the individual price factors.
"""

import pytest

from tramp_freighter.constants import (
    BASE_PRICES,
    COMMODITY_TYPES,
    LOCAL_MODIFIER_MAX,
    LOCAL_MODIFIER_MIN,
    PRICE_FLOOR,
)
from tramp_freighter.models.galaxy import StarSystem, create_default_catalog
from tramp_freighter.models.pricing import (
    calculate_daily_fluctuation,
    calculate_event_modifier,
    calculate_local_modifier,
    calculate_price,
    calculate_system_prices,
    calculate_tech_level,
    calculate_tech_modifier,
    calculate_temporal_modifier,
)
from tramp_freighter.models.state import EconomicEvent


# ── Determinism ──────────────────────────────────────────────────────────

class TestDeterminism:
    @pytest.mark.parametrize("day", [0, 1, 17, 365])
    def test_same_inputs_same_price(self, day):
        catalog = create_default_catalog()
        events = [EconomicEvent("festival_0_3", "festival", 0, 3, 6, {"electronics": 1.75})]
        conditions = {0: {"grain": 120.0}, 4: {"ore": -40.0}}
        for system in catalog:
            for good in COMMODITY_TYPES:
                first = calculate_price(good, system, day, events, conditions)
                second = calculate_price(good, system, day, list(events), dict(conditions))
                assert first == second

    def test_daily_fluctuation_is_stable_and_bounded(self):
        for day in range(50):
            value = calculate_daily_fluctuation("ore", 3, day)
            assert value == calculate_daily_fluctuation("ore", 3, day)
            assert 0.95 <= value <= 1.05

    def test_prices_are_integers_above_floor(self):
        catalog = create_default_catalog()
        for system in catalog:
            prices = calculate_system_prices(system, 12)
            assert set(prices) == set(COMMODITY_TYPES)
            for price in prices.values():
                assert isinstance(price, int)
                assert price >= PRICE_FLOOR

    def test_unknown_good_raises(self, catalog):
        with pytest.raises(ValueError):
            calculate_price("unobtainium", catalog.get_system(0), 0)


# ── Tech level ───────────────────────────────────────────────────────────

class TestTechLevel:
    @pytest.mark.parametrize("good", COMMODITY_TYPES)
    def test_midpoint_modifier_is_exactly_one(self, good):
        assert calculate_tech_modifier(good, 5.0) == 1.0

    def test_sol_is_max_tech(self, catalog):
        assert calculate_tech_level(catalog.get_system(0)) == pytest.approx(10.0)

    def test_far_systems_bottom_out(self, catalog):
        assert calculate_tech_level(catalog.get_system(3)) == pytest.approx(1.0)

    def test_explicit_tech_level_wins(self, catalog):
        assert calculate_tech_level(catalog.get_system(2)) == 5.0

    def test_bias_direction(self):
        # Electronics are cheap where tech is high, grain where it is low.
        assert calculate_tech_modifier("electronics", 10.0) < 1.0
        assert calculate_tech_modifier("electronics", 1.0) > 1.0
        assert calculate_tech_modifier("grain", 10.0) > 1.0
        assert calculate_tech_modifier("grain", 1.0) < 1.0


# ── Other factors ────────────────────────────────────────────────────────

class TestModifiers:
    def test_temporal_wave_amplitude(self):
        for day in range(60):
            value = calculate_temporal_modifier(day, 7)
            assert 0.85 - 1e-9 <= value <= 1.15 + 1e-9

    def test_temporal_wave_repeats_every_period(self):
        assert calculate_temporal_modifier(4, 2) == pytest.approx(calculate_temporal_modifier(34, 2))

    def test_event_modifier_only_at_event_system(self):
        events = [EconomicEvent("mining_strike_4_0", "mining_strike", 4, 0, 7, {"ore": 1.5})]
        assert calculate_event_modifier("ore", 4, events) == 1.5
        assert calculate_event_modifier("grain", 4, events) == 1.0
        assert calculate_event_modifier("ore", 5, events) == 1.0
        assert calculate_event_modifier("ore", 4, None) == 1.0

    def test_surplus_lowers_and_deficit_raises(self):
        assert calculate_local_modifier("grain", 0, {0: {"grain": 100.0}}) == pytest.approx(0.9)
        assert calculate_local_modifier("grain", 0, {0: {"grain": -100.0}}) == pytest.approx(1.1)
        assert calculate_local_modifier("grain", 0, {}) == 1.0

    def test_local_modifier_is_clamped(self):
        assert calculate_local_modifier("ore", 1, {1: {"ore": 5000.0}}) == LOCAL_MODIFIER_MIN
        assert calculate_local_modifier("ore", 1, {1: {"ore": -5000.0}}) == LOCAL_MODIFIER_MAX

    def test_selling_pressure_lowers_price(self, catalog):
        system = catalog.get_system(1)
        baseline = calculate_price("parts", system, 9)
        flooded = calculate_price("parts", system, 9, None, {1: {"parts": 500.0}})
        assert flooded < baseline

    def test_price_floor(self):
        # Deep surplus on a cheap good in a poor market still costs something.
        system = StarSystem(99, "Dump", 0.0, 0.0, 0.0, "G2V", tech_level=10.0)
        events = [EconomicEvent("x", "supply_glut", 99, 0, 5, {"grain": 0.01})]
        assert calculate_price("grain", system, 0, events, {99: {"grain": 900.0}}) == PRICE_FLOOR

    def test_base_prices_cover_all_goods(self):
        assert set(BASE_PRICES) == set(COMMODITY_TYPES)
