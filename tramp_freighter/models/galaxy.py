"""Static star catalog for Tramp Freighter.

The catalog is read-only input: star systems with positions and spectral
classes, plus the wormhole pairs that connect them. Everything mutable lives
in the game state tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..constants import LY_PER_UNIT, SOL_SYSTEM_ID


@dataclass(frozen=True)
class StarSystem:
    """A single star system in the catalog."""

    id: int
    name: str
    x: float  # Catalog-space position
    y: float
    z: float
    spectral_type: str  # e.g. "G2V", "M4V"
    station_count: int = 1
    tech_level: float | None = None  # Derived from distance to Sol when absent

    @property
    def spectral_class(self) -> str:
        """Leading letter of the spectral type ("M" for "M4V")."""
        return self.spectral_type[:1].upper()


def distance_between(a: StarSystem, b: StarSystem, ly_per_unit: float = LY_PER_UNIT) -> float:
    """Euclidean distance in light-years."""
    return math.hypot(a.x - b.x, a.y - b.y, a.z - b.z) * ly_per_unit


def distance_from_sol(system: StarSystem, ly_per_unit: float = LY_PER_UNIT) -> float:
    """Distance from the origin, where Sol sits."""
    return math.hypot(system.x, system.y, system.z) * ly_per_unit


@dataclass
class StarCatalog:
    """Systems and wormhole pairs. Lookups by id raise KeyError on miss."""

    systems: list[StarSystem]
    wormholes: list[tuple[int, int]] = field(default_factory=list)
    ly_per_unit: float = LY_PER_UNIT

    def __post_init__(self) -> None:
        self._by_id = {s.id: s for s in self.systems}
        if len(self._by_id) != len(self.systems):
            raise ValueError("Star catalog contains duplicate system ids")
        for a, b in self.wormholes:
            if a not in self._by_id or b not in self._by_id:
                raise ValueError(f"Wormhole ({a}, {b}) references an unknown system")

    def get_system(self, system_id: int) -> StarSystem:
        try:
            return self._by_id[system_id]
        except KeyError:
            raise KeyError(f"Unknown star system id: {system_id}") from None

    def has_system(self, system_id: int) -> bool:
        return system_id in self._by_id

    @property
    def sol(self) -> StarSystem:
        return self.get_system(SOL_SYSTEM_ID)

    def __len__(self) -> int:
        return len(self.systems)

    def __iter__(self):
        return iter(self.systems)


# ---------------------------------------------------------------------------
# Default catalog: the Sol neighbourhood
# ---------------------------------------------------------------------------

_DEFAULT_SYSTEMS: list[StarSystem] = [
    StarSystem(0, "Sol", 0.0, 0.0, 0.0, "G2V", station_count=4),
    StarSystem(1, "Alpha Centauri A", -1.64, -1.37, -3.84, "G2V", station_count=3),
    StarSystem(2, "Luhman 16", -2.9, -5.1, -3.3, "L8", station_count=1),
    StarSystem(3, "Wolf 359", -7.4, 2.1, 1.0, "M6V", station_count=1),
    StarSystem(4, "Barnard's Star", -0.06, -5.94, 0.49, "M4V", station_count=2),
    StarSystem(5, "Lalande 21185", -6.5, 1.6, 4.9, "M2V", station_count=1),
    StarSystem(6, "Sirius A", -1.6, 8.1, -2.5, "A1V", station_count=3),
    StarSystem(7, "Epsilon Eridani", 6.2, 8.3, -1.7, "K2V", station_count=2),
    StarSystem(8, "Procyon A", -4.8, 10.3, 1.0, "F5IV", station_count=2),
    StarSystem(9, "61 Cygni A", 6.5, -6.1, 7.1, "K5V", station_count=1),
    StarSystem(10, "Tau Ceti", 10.3, 5.0, -3.3, "G8V", station_count=2),
    StarSystem(11, "Ross 154", 1.9, -8.6, -3.9, "M3.5V", station_count=1),
    StarSystem(12, "Epsilon Indi A", 5.7, -3.2, -9.9, "K5V", station_count=1),
    StarSystem(13, "Groombridge 34", 8.3, 0.7, 8.1, "M1V", station_count=1),
]

_DEFAULT_WORMHOLES: list[tuple[int, int]] = [
    (0, 1),
    (0, 3),
    (0, 4),
    (0, 6),
    (1, 2),
    (1, 12),
    (2, 4),
    (3, 5),
    (4, 11),
    (5, 8),
    (5, 13),
    (6, 7),
    (6, 8),
    (7, 10),
    (9, 11),
    (9, 13),
    (10, 12),
]


def create_default_catalog() -> StarCatalog:
    """Build the stock catalog used by new games."""
    return StarCatalog(systems=list(_DEFAULT_SYSTEMS), wormholes=list(_DEFAULT_WORMHOLES))
