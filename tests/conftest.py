"""
Shared pytest fixtures for Tramp Freighter tests.

Provides:
  - A small hand-built star catalog with round-number distances
  - A controllable millisecond clock for save debouncing
  - State stores writing to a per-test temp directory
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so the package imports uninstalled
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep any save written without an explicit path out of the real data dir.
os.environ["TRAMP_FREIGHTER_SAVE_DIR"] = tempfile.mkdtemp(prefix="tramp_freighter_test_")

from tramp_freighter.game import StateStore  # noqa: E402
from tramp_freighter.models.galaxy import StarCatalog, StarSystem  # noqa: E402

# Quirks with no effect on fuel, wear or reputation.
NEUTRAL_QUIRKS = ["sticky_seal", "sensitive_sensors"]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

def build_test_catalog() -> StarCatalog:
    """Sol, a neighbour 2.5 ly away, a midpoint-tech system and a far outpost."""
    return StarCatalog(
        systems=[
            StarSystem(0, "Sol", 0.0, 0.0, 0.0, "G2V"),
            StarSystem(1, "Proxima", 2.5, 0.0, 0.0, "M5V"),
            StarSystem(2, "Midway", 0.0, 5.0, 0.0, "K1V", tech_level=5.0),
            StarSystem(3, "Faraway", 30.0, 0.0, 0.0, "M8V"),
        ],
        wormholes=[(0, 1), (0, 2), (1, 2), (2, 3)],
    )


@pytest.fixture()
def catalog() -> StarCatalog:
    return build_test_catalog()


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

@pytest.fixture()
def save_path(tmp_path) -> Path:
    return tmp_path / "trampFreighterSave.json"


@pytest.fixture()
def store(catalog, save_path, clock) -> StateStore:
    """Uninitialized store on the test catalog."""
    return StateStore(catalog=catalog, save_path=save_path, clock=clock)


@pytest.fixture()
def game(store) -> StateStore:
    """Store with a fresh game and predictable quirks."""
    store.init_new_game(quirks=NEUTRAL_QUIRKS)
    return store
