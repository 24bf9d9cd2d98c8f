"""NPC relationships for Tramp Freighter.

Each named NPC lives at a station in one system and remembers how the player
has treated them. Reputation runs from -100 to +100 and maps onto named
tiers. Dialogue content is owned elsewhere; this module only keeps score.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from ..constants import REP_MAX, REP_MIN


class Trust(float, enum.Enum):
    """How readily an NPC believes good things about the player."""

    VERY_LOW = 0.1
    LOW = 0.3
    MEDIUM = 0.5
    HIGH = 0.7


INITIAL_REP_HOSTILE = -20
INITIAL_REP_NEUTRAL = 0
INITIAL_REP_FRIENDLY = 10


@dataclass(frozen=True)
class NpcDefinition:
    """Static data about an NPC."""

    id: str
    name: str
    role: str
    system: int  # StarSystem ID
    station: str
    trust: Trust
    initial_rep: int
    description: str = ""


NPCS: dict[str, NpcDefinition] = {
    n.id: n
    for n in [
        NpcDefinition(
            "chen_barnards",
            "Wei Chen",
            "Dock Worker",
            4,
            "Bore Station 7",
            Trust.LOW,
            INITIAL_REP_NEUTRAL,
            "Former captain working the docks after losing her ship in a bad deal.",
        ),
        NpcDefinition(
            "cole_sol",
            "Marcus Cole",
            "Loan Shark",
            0,
            "Sol Central",
            Trust.VERY_LOW,
            INITIAL_REP_HOSTILE,
            "Holds your debt and never lets you forget it.",
        ),
        NpcDefinition(
            "okonkwo_ross154",
            "Father Okonkwo",
            "Chaplain",
            11,
            "Ross 154 Medical",
            Trust.HIGH,
            INITIAL_REP_FRIENDLY,
            "Runs the medical station chapel and looks after stranded spacers.",
        ),
    ]
}


def get_npc(npc_id: str) -> NpcDefinition:
    try:
        return NPCS[npc_id]
    except KeyError:
        raise KeyError(f"Unknown NPC: {npc_id}") from None


def get_npcs_at_system(system_id: int) -> list[NpcDefinition]:
    return [n for n in NPCS.values() if n.system == system_id]


# ---------------------------------------------------------------------------
# Reputation tiers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RepTier:
    name: str
    min: int
    max: int


REP_TIERS: list[RepTier] = [
    RepTier("Hostile", -100, -50),
    RepTier("Cold", -49, -10),
    RepTier("Neutral", -9, 9),
    RepTier("Warm", 10, 29),
    RepTier("Friendly", 30, 59),
    RepTier("Trusted", 60, 89),
    RepTier("Family", 90, 100),
]


def clamp_rep(value: float) -> float:
    """Clamp a reputation to [-100, +100]."""
    return max(REP_MIN, min(REP_MAX, value))


def get_rep_tier(rep: float) -> RepTier:
    """Tier containing *rep* (clamped first)."""
    value = round(clamp_rep(rep))
    for tier in REP_TIERS:
        if tier.min <= value <= tier.max:
            return tier
    return REP_TIERS[-1]


# ---------------------------------------------------------------------------
# Per-NPC state
# ---------------------------------------------------------------------------

@dataclass
class NpcState:
    """What one NPC remembers about the player."""

    rep: float = 0.0
    last_interaction: int = 0  # Day of last interaction
    flags: list[str] = field(default_factory=list)
    interactions: int = 0

    def add_flag(self, flag: str) -> bool:
        """Record a story flag once. Returns False when already set."""
        if flag in self.flags:
            return False
        self.flags.append(flag)
        return True

    def to_dict(self) -> dict:
        return {
            "rep": self.rep,
            "lastInteraction": self.last_interaction,
            "flags": list(self.flags),
            "interactions": self.interactions,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "NpcState":
        flags: list[str] = []
        for f in d.get("flags", []):
            if f not in flags:
                flags.append(f)
        return cls(
            rep=clamp_rep(float(d.get("rep", 0))),
            last_interaction=int(d.get("lastInteraction", 0)),
            flags=flags,
            interactions=int(d.get("interactions", 0)),
        )


def scaled_rep_change(delta: float, npc: NpcDefinition, rep_gain_modifier: float = 1.0) -> float:
    """Positive changes are tempered by trust; losses always land in full."""
    if delta > 0:
        return delta * npc.trust.value * rep_gain_modifier
    return delta
