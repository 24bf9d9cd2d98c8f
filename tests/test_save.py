"""
Save/load tests: serialization, debounced storage and the migration chain.

Catches:
  - Fields lost or retyped on a save round trip
  - Corrupt or foreign saves leaking exceptions
  - Migrations that drop unrelated data or mutate their input
"""

import copy
import json
import logging

import pytest

from tramp_freighter.constants import GAME_VERSION
from tramp_freighter.game import StateStore
from tramp_freighter.models.migrations import (
    add_state_defaults,
    is_version_compatible,
    migrate_state,
    validate_state_structure,
)
from tramp_freighter.models.save import (
    clear_save,
    deserialize,
    has_saved_game,
    read_save,
    restore_state,
    save_game,
    serialize,
    state_from_dict,
    state_to_dict,
)
from tramp_freighter.models.state import EconomicEvent
from tramp_freighter.states import StateEvent

from conftest import NEUTRAL_QUIRKS


def _v1_save() -> dict:
    return {
        "player": {"credits": 800, "debt": 9000, "currentSystem": 1, "daysElapsed": 5},
        "ship": {
            "name": "Old Bucket",
            "fuel": 60,
            "cargoCapacity": 50,
            "cargo": [
                {"good": "ore", "qty": 5, "purchasePrice": 14, "purchaseSystem": 0, "purchaseDay": 2},
            ],
        },
        "world": {"visitedSystems": [0, 1]},
        "meta": {"version": "1.0.0", "timestamp": 123},
    }


def _v2_save() -> dict:
    return {
        "player": {"credits": 650, "debt": 9500, "currentSystem": 1, "daysElapsed": 12},
        "ship": {"name": "Second Wind", "fuel": 70, "cargoCapacity": 50, "cargo": []},
        "world": {"visitedSystems": [0, 1], "activeEvents": []},
        "meta": {"version": "2.0.0", "timestamp": 456},
    }


# ── Serialization ───────────────────────────────────────────────────────

class TestSerialization:
    def test_round_trip(self, game):
        game.update_credits(777)
        game.update_market_conditions(1, "ore", -12.0)
        game.update_price_knowledge(2, {"grain": 9, "ore": 20}, 14, "broker")
        game.set_npc_flag("chen_barnards", "met")
        game.modify_rep("chen_barnards", 10)
        state = game.get_state()
        state.world.active_events.append(
            EconomicEvent("festival_0_0", "festival", 0, 0, 3, {"electronics": 1.75, "grain": 1.2})
        )

        restored = state_from_dict(deserialize(serialize(state)))

        assert restored == state

    def test_keys_are_camel_case(self, game):
        data = json.loads(serialize(game.get_state()))
        assert "daysElapsed" in data["player"]
        assert "lifeSupport" in data["ship"]
        assert "currentSystemPrices" in data["world"]
        assert data["ship"]["cargo"][0]["buyPrice"] > 0

    @pytest.mark.parametrize("text", ["", "{", "null", "[1, 2]", "not json", None, b"\xff\xfe"])
    def test_bad_input_gives_none(self, text):
        assert deserialize(text) is None


# ── Storage ──────────────────────────────────────────────────────────────

class TestStorage:
    def test_debounce_drops_close_saves(self, game, tmp_path):
        path = tmp_path / "s.json"
        state = game.get_state()
        first = save_game(state, None, path, now=10_000)
        assert first.saved
        skipped = save_game(state, first.timestamp, path, now=10_500)
        assert not skipped.saved
        assert skipped.timestamp == 10_000
        later = save_game(state, first.timestamp, path, now=11_000)
        assert later.saved

    def test_saved_copy_gets_timestamp(self, game, tmp_path):
        path = tmp_path / "s.json"
        before = game.get_state().meta.timestamp
        save_game(game.get_state(), None, path, now=55_555)
        assert read_save(path)["meta"]["timestamp"] == 55_555
        assert game.get_state().meta.timestamp == before

    def test_store_debounce_uses_clock(self, game, clock):
        assert not game.save_game()
        clock.advance(1000)
        assert game.save_game()

    def test_has_and_clear(self, game, save_path):
        assert game.has_saved_game()
        game.clear_save()
        assert not game.has_saved_game()
        assert not has_saved_game(save_path)
        clear_save(save_path)


# ── Loading ──────────────────────────────────────────────────────────────

class TestLoad:
    def test_load_round_trip_through_store(self, game, catalog, save_path, clock):
        game.buy_good("grain", 3, 1)
        clock.advance(5000)
        game.save_game()

        other = StateStore(catalog=catalog, save_path=save_path, clock=clock)
        loaded = other.load_game()

        assert loaded is not None
        assert loaded.player == game.get_player()
        assert loaded.ship == game.get_ship()
        assert loaded.world == game.get_state().world

    def test_load_emits(self, game, catalog, save_path, clock):
        other = StateStore(catalog=catalog, save_path=save_path, clock=clock)
        credits = []
        other.subscribe(StateEvent.CREDITS_CHANGED, credits.append)
        other.load_game()
        assert credits == [500]

    def test_missing_file(self, store):
        assert store.load_game() is None
        with pytest.raises(RuntimeError):
            store.get_state()

    def test_corrupt_file(self, store, save_path):
        save_path.write_text("{ this is not json")
        assert store.load_game() is None

    def test_incompatible_version(self, game, save_path):
        data = json.loads(save_path.read_text())
        data["meta"]["version"] = "3.0.0"
        save_path.write_text(json.dumps(data))
        assert game.load_game() is None

    def test_failed_validation_keeps_current_state(self, game, save_path):
        data = json.loads(save_path.read_text())
        data["player"]["credits"] = "lots"
        save_path.write_text(json.dumps(data))
        before = game.get_state()
        assert game.load_game() is None
        assert game.get_state() is before

    def test_unknown_ids_are_dropped(self, game, save_path, caplog):
        data = json.loads(save_path.read_text())
        data["ship"]["quirks"] = NEUTRAL_QUIRKS + ["haunted_galley"]
        data["ship"]["upgrades"] = ["warp_drive"]
        save_path.write_text(json.dumps(data))
        with caplog.at_level(logging.WARNING):
            loaded = game.load_game()
        assert loaded.ship.quirks == NEUTRAL_QUIRKS
        assert loaded.ship.upgrades == []
        assert "haunted_galley" in caplog.text


# ── Migrations ───────────────────────────────────────────────────────────

class TestMigrations:
    @pytest.mark.parametrize("version", ["1.0.0", "2.0.0", "2.1.0", GAME_VERSION])
    def test_supported_versions(self, version):
        assert is_version_compatible(version)

    @pytest.mark.parametrize("version", [None, "", "0.9.0", "3.0.0", "5.0.0", 2])
    def test_unsupported_versions(self, version):
        assert not is_version_compatible(version)

    def test_v1_upgrade(self, catalog):
        state = restore_state(_v1_save(), catalog)
        assert state is not None
        assert state.meta.version == GAME_VERSION
        assert state.player.credits == 800
        assert state.player.current_system == 1
        assert state.ship.name == "Old Bucket"
        assert state.ship.fuel == 60
        assert state.ship.hull == 100
        assert state.ship.life_support == 100
        stack = state.ship.cargo[0]
        assert (stack.good, stack.qty, stack.buy_price, stack.buy_system, stack.buy_date) == ("ore", 5, 14, 0, 2)
        assert state.world.market_conditions == {}
        assert state.world.current_system_prices
        known = state.world.price_knowledge[1]
        assert known.last_visit == 0
        assert known.source == "visit"
        assert known.prices == state.world.current_system_prices
        assert state.npcs == {}

    @pytest.mark.parametrize("key", ["cargo", "hiddenCargo"])
    def test_partial_v2_stacks_are_renamed(self, catalog, key):
        raw = _v2_save()
        raw["ship"][key] = [
            {"good": "ore", "qty": 5, "purchasePrice": 14, "purchaseSystem": 2, "purchaseDay": 3},
        ]
        state = restore_state(raw, catalog)
        assert state is not None
        stack = getattr(state.ship, "cargo" if key == "cargo" else "hidden_cargo")[0]
        assert (stack.good, stack.qty, stack.buy_price) == ("ore", 5, 14)
        assert (stack.buy_system, stack.buy_system_name, stack.buy_date) == (2, "Midway", 3)

    def test_partial_v2_stacks_get_missing_metadata(self, catalog, caplog):
        raw = _v2_save()
        raw["ship"]["cargo"] = [{"good": "ore", "qty": 5}]
        with caplog.at_level(logging.WARNING):
            state = restore_state(raw, catalog)
        assert state is not None
        stack = state.ship.cargo[0]
        assert (stack.good, stack.qty, stack.buy_price) == ("ore", 5, 0)
        assert (stack.buy_system, stack.buy_system_name, stack.buy_date) == (1, "Proxima", 0)
        assert "buy price" in caplog.text

    def test_existing_knowledge_is_kept(self, catalog):
        raw = _v2_save()
        raw["world"]["priceKnowledge"] = {"1": {"lastVisit": 4, "prices": {"ore": 30}}}
        state = restore_state(raw, catalog)
        assert state.world.price_knowledge[1].last_visit == 4
        assert state.world.price_knowledge[1].prices == {"ore": 30}

    def test_migration_does_not_mutate_input(self):
        raw = _v1_save()
        original = copy.deepcopy(raw)
        migrate_state(raw)
        assert raw == original

    def test_unrelated_fields_survive(self):
        raw = _v1_save()
        raw["world"]["notes"] = ["keep me"]
        migrated = migrate_state(raw)
        assert migrated["world"]["notes"] == ["keep me"]
        assert migrated["meta"]["version"] == GAME_VERSION

    def test_chain_from_each_version(self):
        raw = {"meta": {"version": "2.1.0"}, "world": {"marketConditions": {"1": {"ore": 5.0}}}}
        migrated = migrate_state(raw)
        assert migrated["npcs"] == {}
        assert migrated["world"]["marketConditions"] == {"1": {"ore": 5.0}}

    def test_migrate_rejects_unknown_version(self):
        with pytest.raises(ValueError):
            migrate_state({"meta": {"version": "9.9.9"}})

    def test_defaults_are_idempotent(self, catalog):
        once = add_state_defaults(migrate_state(_v1_save()), catalog)
        twice = add_state_defaults(once, catalog)
        assert once == twice
        assert validate_state_structure(once, catalog)

    def test_validation_runs_after_defaults(self, catalog):
        migrated = migrate_state(_v1_save())
        assert not validate_state_structure(migrated, catalog)
        assert validate_state_structure(add_state_defaults(migrated, catalog), catalog)

    def test_validation_rejects_unknown_location(self, catalog):
        data = add_state_defaults(migrate_state(_v1_save()), catalog)
        data["player"]["currentSystem"] = 99
        assert not validate_state_structure(data, catalog)

    def test_state_to_dict_passes_validation(self, game, catalog):
        assert validate_state_structure(state_to_dict(game.get_state()), catalog)
