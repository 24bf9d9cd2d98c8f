"""Event channels and jump phases for Tramp Freighter."""

import enum


class StateEvent(enum.Enum):
    """Channels published by the state store."""

    CREDITS_CHANGED = "creditsChanged"
    DEBT_CHANGED = "debtChanged"
    FUEL_CHANGED = "fuelChanged"
    CARGO_CHANGED = "cargoChanged"
    HIDDEN_CARGO_CHANGED = "hiddenCargoChanged"
    LOCATION_CHANGED = "locationChanged"
    TIME_CHANGED = "timeChanged"
    PRICE_KNOWLEDGE_CHANGED = "priceKnowledgeChanged"
    ACTIVE_EVENTS_CHANGED = "activeEventsChanged"
    SHIP_CONDITION_CHANGED = "shipConditionChanged"
    CONDITION_WARNING = "conditionWarning"
    SHIP_NAME_CHANGED = "shipNameChanged"
    UPGRADES_CHANGED = "upgradesChanged"
    QUIRKS_CHANGED = "quirksChanged"
    NPCS_CHANGED = "npcsChanged"


class JumpPhase(enum.Enum):
    """Jump lifecycle. No phase leaves the store half-jumped."""

    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMMITTING = "committing"
