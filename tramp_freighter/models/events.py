"""Economic events for Tramp Freighter.

Strikes, outbreaks, festivals and gluts temporarily push prices around at a
single system. Events are rolled once per day advance from seeded RNGs, so a
given day always produces the same events for the same world.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field

from ..constants import COMMODITY_TYPES, CORE_SYSTEM_IDS
from .galaxy import StarCatalog, StarSystem
from .state import EconomicEvent, GameState

logger = logging.getLogger(__name__)


class EconomicEventType(enum.Enum):
    """Kinds of market disruption."""

    MINING_STRIKE = "mining_strike"
    MEDICAL_EMERGENCY = "medical_emergency"
    FESTIVAL = "festival"
    SUPPLY_GLUT = "supply_glut"


class EventTarget(enum.Enum):
    """Which systems an event type may strike."""

    ANY = "any"
    CORE = "core"        # Sol and Alpha Centauri
    MINING = "mining"    # Cool dwarfs: M, L and T spectral classes


_MINING_SPECTRAL_CLASSES = ("M", "L", "T")

# Supply glut drops one random commodity to this multiplier
SUPPLY_GLUT_MODIFIER = 0.6


@dataclass(frozen=True)
class EventTypeDefinition:
    """Static description of an event type."""

    type: EconomicEventType
    name: str
    description: str
    duration: tuple[int, int]  # Inclusive day range
    modifiers: dict[str, float] = field(default_factory=dict)
    chance: float = 0.0  # Per eligible system per day
    target: EventTarget = EventTarget.ANY
    rumor_phrase: str = ""


ECONOMIC_EVENTS: dict[EconomicEventType, EventTypeDefinition] = {
    EconomicEventType.MINING_STRIKE: EventTypeDefinition(
        EconomicEventType.MINING_STRIKE,
        "Mining Strike",
        "Workers demand better conditions",
        (5, 10),
        {"ore": 1.5, "tritium": 1.3},
        chance=0.05,
        target=EventTarget.MINING,
        rumor_phrase="labor troubles",
    ),
    EconomicEventType.MEDICAL_EMERGENCY: EventTypeDefinition(
        EconomicEventType.MEDICAL_EMERGENCY,
        "Medical Emergency",
        "Outbreak requires urgent supplies",
        (3, 5),
        {"medicine": 2.0, "grain": 0.9, "ore": 0.9},
        chance=0.03,
        target=EventTarget.ANY,
        rumor_phrase="a health crisis",
    ),
    EconomicEventType.FESTIVAL: EventTypeDefinition(
        EconomicEventType.FESTIVAL,
        "Cultural Festival",
        "Celebration drives luxury demand",
        (2, 4),
        {"electronics": 1.75, "grain": 1.2},
        chance=0.04,
        target=EventTarget.CORE,
        rumor_phrase="celebrations",
    ),
    EconomicEventType.SUPPLY_GLUT: EventTypeDefinition(
        EconomicEventType.SUPPLY_GLUT,
        "Supply Glut",
        "Oversupply crashes prices",
        (3, 7),
        {},
        chance=0.06,
        target=EventTarget.ANY,
        rumor_phrase="oversupply issues",
    ),
}


def get_event_type(event_type: str | EconomicEventType) -> EventTypeDefinition:
    return ECONOMIC_EVENTS[EconomicEventType(event_type)]


def is_system_eligible(system: StarSystem, target: EventTarget) -> bool:
    if target == EventTarget.CORE:
        return system.id in CORE_SYSTEM_IDS
    if target == EventTarget.MINING:
        return system.spectral_class in _MINING_SPECTRAL_CLASSES
    return True


def create_event(event_type: EconomicEventType, system_id: int, current_day: int) -> EconomicEvent:
    """Build an event whose duration (and glut commodity) are seeded from its id."""
    definition = ECONOMIC_EVENTS[event_type]
    event_id = f"{event_type.value}_{system_id}_{current_day}"

    lo, hi = definition.duration
    duration = random.Random(f"duration_{event_id}").randint(lo, hi)

    modifiers = dict(definition.modifiers)
    if event_type == EconomicEventType.SUPPLY_GLUT:
        good = random.Random(f"commodity_{event_id}").choice(COMMODITY_TYPES)
        modifiers = {good: SUPPLY_GLUT_MODIFIER}

    return EconomicEvent(
        id=event_id,
        type=event_type.value,
        system_id=system_id,
        start_day=current_day,
        end_day=current_day + duration,
        modifiers=modifiers,
    )


def remove_expired_events(events: list[EconomicEvent], current_day: int) -> list[EconomicEvent]:
    """Keep events still running on *current_day* (end_day is inclusive)."""
    return [e for e in events if e.end_day >= current_day]


def get_active_event_for_system(events: list[EconomicEvent], system_id: int) -> EconomicEvent | None:
    for event in events:
        if event.system_id == system_id:
            return event
    return None


def update_events(state: GameState, catalog: StarCatalog) -> list[EconomicEvent]:
    """Expire finished events and roll new ones for today.

    Each system hosts at most one event. Each event type fires at most once
    per day, at the first eligible system (in catalog order) whose roll lands.
    """
    day = state.player.days_elapsed
    events = remove_expired_events(state.world.active_events, day)
    occupied = {e.system_id for e in events}

    for event_type, definition in ECONOMIC_EVENTS.items():
        for system in catalog.systems:
            if system.id in occupied or not is_system_eligible(system, definition.target):
                continue
            roll = random.Random(f"event_{event_type.value}_{system.id}_{day}").random()
            if roll < definition.chance:
                event = create_event(event_type, system.id, day)
                events.append(event)
                occupied.add(system.id)
                logger.info("%s began at %s (until day %d)", definition.name, system.name, event.end_day)
                break

    return events
