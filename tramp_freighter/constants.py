"""Game-wide constants for Tramp Freighter."""

# --- Game Metadata ---
GAME_TITLE = "TRAMP FREIGHTER BLUES"
GAME_VERSION = "4.0.0"
SAVE_KEY = "trampFreighterSave"
SAVE_DEBOUNCE_MS = 1000

# --- Catalog anchors ---
SOL_SYSTEM_ID = 0
ALPHA_CENTAURI_SYSTEM_ID = 1
CORE_SYSTEM_IDS = (SOL_SYSTEM_ID, ALPHA_CENTAURI_SYSTEM_ID)

# --- Commodities ---
COMMODITY_TYPES: tuple[str, ...] = (
    "grain",
    "ore",
    "tritium",
    "parts",
    "medicine",
    "electronics",
)

BASE_PRICES: dict[str, int] = {
    "grain": 10,
    "ore": 15,
    "tritium": 50,
    "parts": 30,
    "medicine": 40,
    "electronics": 35,
}

# Positive: cheaper at high tech. Negative: cheaper at low tech.
TECH_BIASES: dict[str, float] = {
    "grain": -0.6,
    "ore": -0.8,
    "tritium": -0.3,
    "parts": 0.5,
    "medicine": 0.7,
    "electronics": 1.0,
}

# --- Economy tuning ---
MAX_COORD_DISTANCE = 21.0  # Light-years beyond which tech bottoms out
MAX_TECH_LEVEL = 10.0
MIN_TECH_LEVEL = 1.0
TECH_LEVEL_MIDPOINT = 5.0
TECH_MODIFIER_INTENSITY = 0.08

TEMPORAL_WAVE_PERIOD = 30  # Days
TEMPORAL_AMPLITUDE = 0.15
TEMPORAL_PHASE_OFFSET = 0.15

DAILY_FLUCTUATION_MIN = 0.95
DAILY_FLUCTUATION_RANGE = 0.10

MARKET_CAPACITY = 1000
DAILY_RECOVERY_FACTOR = 0.9
LOCAL_MODIFIER_MIN = 0.25
LOCAL_MODIFIER_MAX = 2.0
MARKET_CONDITION_PRUNE_THRESHOLD = 1.0

PRICE_FLOOR = 1

# --- Navigation ---
LY_PER_UNIT = 1.0  # Catalog coordinates are stored in light-years
BASE_FUEL_COST = 10.0
FUEL_COST_PER_LY = 2.0
JUMP_TIME_PER_LY = 0.5
ENGINE_PENALTY_THRESHOLD = 60.0
ENGINE_FUEL_PENALTY = 1.2
ENGINE_TIME_PENALTY_DAYS = 1

# Wear per jump, before quirk/upgrade multipliers
HULL_WEAR_PER_JUMP = 2.0
ENGINE_WEAR_PER_JUMP = 1.0
LIFE_SUPPORT_DRAIN_PER_DAY = 0.5

# --- Ship ---
DEFAULT_SHIP_NAME = "Serendipity"
MAX_SHIP_NAME_LENGTH = 50
SHIP_NAME_SUGGESTIONS = [
    "Serendipity",
    "Lucky Break",
    "Second Chance",
    "Wanderer",
    "Free Spirit",
    "Horizon's Edge",
    "Stardust Runner",
    "Cosmic Drifter",
]
SHIP_CONDITION_MIN = 0.0
SHIP_CONDITION_MAX = 100.0
SHIP_SYSTEMS = ("hull", "engine", "lifeSupport")

HULL_WARNING_THRESHOLD = 50.0
ENGINE_WARNING_THRESHOLD = 30.0
LIFE_SUPPORT_WARNING_THRESHOLD = 20.0

REPAIR_COST_PER_PERCENT = 5
REFUEL_EPSILON = 0.01

# Credits per percent of fuel
FUEL_PRICE_CORE = 2
FUEL_PRICE_INNER = 3
FUEL_PRICE_MID = 3
FUEL_PRICE_OUTER = 5
FUEL_INNER_DISTANCE = 4.5
FUEL_MID_DISTANCE = 10.0

# --- New game ---
STARTING_CREDITS = 500
STARTING_DEBT = 10_000
STARTING_CARGO_CAPACITY = 50
STARTING_GRAIN = 20
STARTING_FUEL = 100.0

# --- Information broker ---
INTEL_COST_RECENT = 50
INTEL_COST_STALE = 75
INTEL_COST_NEVER_VISITED = 100
INTEL_COST_RUMOR = 25
INTEL_RECENT_THRESHOLD = 30  # Days
INTEL_MAX_AGE = 100  # Days before stored intelligence is discarded
INTEL_MANIPULATION_CHANCE = 0.1
INTEL_MANIPULATION_MIN = 0.70
INTEL_MANIPULATION_MAX = 0.85

# --- NPC relations ---
REP_MIN = -100
REP_MAX = 100
