"""All tunable constants for the balance simulation.

Every magic number in the codebase must reference this file. Balance values
that also live in the catalog (wave counts, enemy and boss stats) are kept here
only as fallbacks for catalog records that omit them.
"""

# =============================================================================
# TIME
# =============================================================================
MINUTES_PER_HOUR: int = 60
MINUTES_PER_DAY: int = 1440
DAYS_PER_WEEK: int = 7
WEEKEND_DAYS: tuple[int, ...] = (5, 6)   # zero-based day-of-week indices
DEFAULT_TICK_MINUTES: float = 1.0

NIGHT_START_HOUR: int = 22
NIGHT_END_HOUR: int = 6
NIGHT_RULE_GRACE_MINUTES: int = 600      # night rule ignored before this

# =============================================================================
# RUN
# =============================================================================
DEFAULT_MAX_DAYS: int = 35
DEFAULT_STUCK_DAYS: int = 3
DEFAULT_SEED: int = 42
DEFAULT_VICTORY: list[str] = ["hero_level>=10"]
FIXED_MODE_VICTORY: list[str] = ["day>=35"]

# =============================================================================
# STARTING CONDITIONS
# =============================================================================
STARTING_ENERGY: float = 3.0
STARTING_WATER: float = 20.0
STARTING_GOLD: float = 75.0
STARTING_PLOTS: int = 3
STARTING_SEEDS: dict[str, int] = {"carrot": 1, "radish": 1}
STARTING_MATERIALS: dict[str, int] = {}
STARTING_TOOLS: list[str] = []

# =============================================================================
# BOUNDED RESOURCE CAPACITIES
# =============================================================================
# (upgrade_id, capacity) in ascending tier order; highest unlocked wins
BASE_CAPACITY: dict[str, float] = {
    "energy": 100.0,
    "water": 40.0,
    "gold": 10_000.0,
}
CAPACITY_UPGRADES: dict[str, list[tuple[str, float]]] = {
    "energy": [
        ("energy_storage_i", 150.0),
        ("energy_storage_ii", 250.0),
        ("energy_storage_iii", 500.0),
    ],
    "water": [
        ("water_tank_i", 80.0),
        ("water_tank_ii", 150.0),
        ("water_tower", 300.0),
    ],
    "gold": [
        ("gold_vault_i", 50_000.0),
        ("gold_vault_ii", 250_000.0),
    ],
}

# =============================================================================
# STORAGE CAPS (keyed quantities)
# =============================================================================
MATERIAL_STORAGE_UPGRADES: list[str] = [
    "material_crate_i",
    "material_crate_ii",
    "material_warehouse",
    "material_depot",
    "material_silo",
    "grand_warehouse",
    "infinite_vault",
]

# material -> (base cap, cap per upgrade tier in MATERIAL_STORAGE_UPGRADES order)
MATERIAL_STORAGE: dict[str, tuple[int, list[int]]] = {
    "wood": (50, [100, 250, 500, 1000, 2500, 10000, 10000]),
    "stone": (50, [100, 250, 500, 1000, 2500, 10000, 10000]),
    "copper": (25, [50, 100, 250, 500, 1000, 5000, 5000]),
    "iron": (25, [50, 100, 250, 500, 1000, 5000, 5000]),
    "silver": (10, [25, 50, 100, 250, 500, 2500, 2500]),
    "crystal": (5, [10, 25, 50, 100, 250, 1000, 1000]),
    "mythril": (3, [5, 10, 25, 50, 100, 500, 500]),
    "obsidian": (2, [3, 5, 10, 25, 50, 250, 250]),
}
SPECIAL_MATERIALS: tuple[str, ...] = (
    "slime_gel", "beetle_shell", "wolf_pelt", "serpent_scale",
    "spider_silk", "frost_core", "lava_heart",
)
UNLIMITED_STORAGE: int = 999_999
DEFAULT_MATERIAL_CAP: int = 50
RAW_MATERIAL_PREFIX: str = "raw_"

SEED_STORAGE_BASE: int = 30
SEED_STORAGE_UPGRADES: list[tuple[str, int]] = [
    ("seed_pouch", 60),
    ("seed_chest", 150),
    ("seed_vault", 500),
]

# =============================================================================
# FARM
# =============================================================================
GROWTH_WATER_THRESHOLD: float = 0.3      # plot water above this grows at full rate
GROWTH_DRY_RATE: float = 0.25
DEFAULT_GROWTH_STAGES: int = 3
PLOT_WATER_DRAIN_PER_HOUR: float = 0.1
PLOT_DRY_THRESHOLD: float = 0.2
WATER_RETENTION_UPGRADES: list[tuple[str, float]] = [
    ("mulch_beds", 1.25),
    ("irrigation_channels", 1.5),
    ("crystal_irrigation", 1.75),
]
PUMP_AMOUNT: float = 20.0
PUMP_UPGRADES: list[tuple[str, float]] = [
    ("hand_pump_ii", 30.0),
    ("windmill_pump", 50.0),
]
PUMP_THRESHOLD: float = 0.3              # pump offered below this fraction of capacity

PLANT_BASE_SCORE: float = 300.0
PLANT_PER_FREE_PLOT: float = 50.0
WATER_BASE_SCORE: float = 400.0
WATER_PER_DRY_PLOT: float = 100.0
HARVEST_BASE_SCORE: float = 500.0
HARVEST_PER_READY_PLOT: float = 100.0
HARVEST_GOLD_PER_CROP: float = 5.0
PUMP_SCORE: float = 350.0
CLEARING_BASE_SCORE: float = 250.0
CLEARING_PER_PLOT: float = 20.0

# =============================================================================
# MINING
# =============================================================================
MINING_MIN_ENERGY: float = 10.0
MINING_DEPTH_PER_MINUTE: float = 10.0
MINING_TIER_DEPTH: float = 500.0
MINING_DROP_INTERVAL: float = 0.5        # minutes between drop rolls
MINING_MAX_TIER: int = 10
SHARPEN_ENERGY_COST: float = 5.0
SHARPEN_BONUS: float = 0.25
SHARPEN_MINUTES: float = 5.0
MINING_STOP_FRACTION: float = 0.3        # stop offered below this energy fraction

MINING_TIER_MATERIALS: list[list[str]] = [
    ["stone"],
    ["copper", "stone"],
    ["iron", "copper"],
    ["iron"],
    ["silver", "iron"],
    ["silver"],
    ["crystal", "silver"],
    ["crystal"],
    ["mythril", "crystal"],
    ["obsidian", "mythril"],
]
MINING_TIER_NAMES: list[str] = [
    "Surface Layer", "Copper Seam", "Iron Veins", "Deep Iron", "Silver Hollows",
    "Silver Depths", "Crystal Caverns", "Crystal Heart", "Mythril Reach", "The Abyss",
]
MINING_SCORE: float = 200.0
MINING_ENERGY_SCORE: float = 600.0      # x current energy fraction
MINING_RISK: float = 0.1
SHARPEN_SCORE: float = 150.0
STOP_MINING_SCORE: float = 450.0

# =============================================================================
# COMBAT (fallback tables; catalog records are authoritative)
# =============================================================================
HERO_BASE_HP: int = 100
HERO_HP_PER_LEVEL: int = 20
HERO_XP_PER_LEVEL: int = 100              # level n -> n+1 costs n * this
ARMOR_REDUCTION_CAP: float = 0.8

ADVANTAGE_MULTIPLIER: float = 1.5
RESISTED_MULTIPLIER: float = 0.5
NEUTRAL_MULTIPLIER: float = 1.0

WEAPON_ADVANTAGES: dict[str, str] = {
    "spear": "armored_insects",
    "sword": "predatory_beasts",
    "bow": "flying_predators",
    "crossbow": "venomous_crawlers",
    "wand": "living_plants",
}
WEAPON_RESISTANCES: dict[str, str] = {
    "spear": "living_plants",
    "sword": "flying_predators",
    "bow": "predatory_beasts",
    "crossbow": "armored_insects",
    "wand": "venomous_crawlers",
}

# enemy type -> (hp, damage, attack speed)
ENEMY_STATS: dict[str, tuple[float, float, float]] = {
    "slimes": (20, 3, 1.0),
    "armored_insects": (30, 4, 0.8),
    "predatory_beasts": (25, 6, 1.2),
    "flying_predators": (20, 5, 1.5),
    "venomous_crawlers": (35, 4, 1.0),
    "living_plants": (40, 3, 0.7),
}

# boss -> (hp, damage, attack speed)
BOSS_STATS: dict[str, tuple[float, float, float]] = {
    "giant_slime": (150, 8, 0.5),
    "beetle_lord": (200, 10, 0.4),
    "alpha_wolf": (250, 12, 0.8),
    "sky_serpent": (300, 10, 1.0),
    "crystal_spider": (400, 12, 0.6),
    "frost_wyrm": (500, 15, 0.7),
    "lava_titan": (600, 18, 0.5),
}

# route -> (short, medium, long) wave counts
ROUTE_WAVES: dict[str, tuple[int, int, int]] = {
    "meadow_path": (3, 5, 8),
    "pine_vale": (4, 6, 10),
    "dark_forest": (4, 7, 12),
    "mountain_pass": (5, 8, 14),
    "crystal_caves": (5, 9, 16),
    "frozen_tundra": (6, 10, 18),
    "volcano_core": (6, 11, 20),
}
ROUTE_LENGTHS: tuple[str, ...] = ("short", "medium", "long")
ROUTE_MINUTES: dict[str, float] = {"short": 10.0, "medium": 20.0, "long": 30.0}
ROUTE_ENERGY_MULTIPLIER: dict[str, float] = {"short": 1.0, "medium": 1.8, "long": 2.5}
DEFAULT_WAVE_BASE: int = 2
MAX_WAVE_SIZE: int = 5

ENEMY_GOLD_RANGE: tuple[int, int] = (2, 6)
ENEMY_XP: int = 2
BOSS_GOLD: int = 50
BOSS_XP: int = 20

REGENERATION_HP_PER_WAVE: int = 3
VAMPIRIC_HP_PER_KILL: int = 1
VAMPIRIC_MAX_PER_WAVE: int = 5
GOLD_MAGNET_MULTIPLIER: float = 1.25
EVASION_DAMAGE_FACTOR: float = 0.9
REFLECTION_TIME_FACTOR: float = 0.9

ADVENTURE_BASE_SCORE: float = 180.0
ADVENTURE_PER_LEVEL: float = 10.0
ADVENTURE_ENERGY_SCORE: float = 600.0   # x current energy fraction
ADVENTURE_SAFE_HP_FRACTION: float = 0.25  # expected HP left below this counts as risky

# =============================================================================
# FORGE / CRAFTING
# =============================================================================
FORGE_MAX_HEAT: float = 100.0
FORGE_COOLING_PER_MINUTE: float = 1.0
FORGE_HEAT_PER_WOOD: float = 10.0
FORGE_WOOD_PER_STOKE: int = 5
FORGE_STOKE_THRESHOLD: float = 30.0
DEFAULT_HEAT_REQUIREMENT: float = 50.0
CRAFT_BASE_SUCCESS: float = 0.6
CRAFT_HEAT_SUCCESS_WEIGHT: float = 0.4
CRAFT_SCORE: float = 220.0
STOKE_SCORE: float = 160.0

# =============================================================================
# HELPERS
# =============================================================================
HELPER_ROLES: list[str] = [
    "waterer", "pump_operator", "sower", "harvester", "miners_friend",
    "adventure_fighter", "seed_catcher", "forager", "refiner",
]
# role -> (base effect, effect per level)
HELPER_ROLE_SCALING: dict[str, tuple[float, float]] = {
    "waterer": (5, 1),
    "pump_operator": (20, 5),
    "sower": (3, 1),
    "harvester": (4, 1),
    "miners_friend": (0.15, 0.03),
    "adventure_fighter": (5, 2),
    "seed_catcher": (0.10, 0.02),
    "forager": (5, 2),
    "refiner": (0.05, 0.01),
}
HELPER_WORK_INTERVAL: float = 60.0       # minutes between automation passes
HELPER_MAX_LEVEL: int = 10
TRAINING_MINUTES_PER_LEVEL: float = 30.0
TRAINING_GOLD_PER_LEVEL: float = 50.0
HIRE_SCORE: float = 260.0
ASSIGN_SCORE: float = 240.0
TRAIN_SCORE: float = 120.0

# =============================================================================
# TOWER / SEEDS
# =============================================================================
# wind level -> (difficulty, seed pool)
WIND_LEVELS: dict[int, tuple[float, list[str]]] = {
    1: (1.0, ["carrot", "radish", "turnip"]),
    2: (1.25, ["carrot", "radish", "turnip", "potato"]),
    3: (1.5, ["potato", "cabbage", "corn"]),
    4: (1.75, ["cabbage", "corn", "tomato"]),
    5: (2.0, ["tomato", "strawberry", "spinach"]),
    6: (2.25, ["strawberry", "spinach", "onion"]),
    7: (2.5, ["onion", "garlic", "cucumber"]),
    8: (2.75, ["cucumber", "leek", "wheat"]),
    9: (3.0, ["wheat", "asparagus", "cauliflower"]),
    10: (3.25, ["cauliflower", "caisim", "pumpkin"]),
    11: (3.5, ["pumpkin", "watermelon"]),
}
NET_EFFICIENCY_NONE: float = 1.0
SEED_CATCH_MINUTES: float = 10.0
SEED_TARGET_PER_PLOT: int = 2
SEED_TARGET_MIN: int = 6
CATCH_SCORE: float = 300.0
CATCH_SHORTAGE_BONUS: float = 100.0

# =============================================================================
# TOWN
# =============================================================================
BUY_SCORES: dict[str, float] = {
    "tool": 280.0,
    "weapon": 230.0,
    "armor": 170.0,
    "net": 190.0,
    "upgrade": 210.0,
    "auto_catcher": 200.0,
    "housing": 200.0,
}
SELL_FULL_FRACTION: float = 0.8
SELL_SCORE: float = 180.0
MATERIAL_SELL_PRICES: dict[str, float] = {
    "wood": 1.0,
    "stone": 1.0,
    "copper": 4.0,
    "iron": 8.0,
    "silver": 20.0,
    "crystal": 50.0,
    "mythril": 120.0,
    "obsidian": 300.0,
}
RAW_SELL_FACTOR: float = 0.5

# =============================================================================
# DECISION ENGINE
# =============================================================================
BOTTLENECK_BONUS: float = 2.0
WATER_SHORTAGE_FRACTION: float = 0.2
NEAR_FULL_PLOTS_FRACTION: float = 0.8
EMERGENCY_INTERVALS: dict[str, int] = {
    "seed_shortage": 2,
    "low_water": 5,
    "energy_full": 10,
    "crops_ready": 8,
}
ENERGY_FULL_FRACTION: float = 0.85
DEFAULT_ACTIONS_PER_CHECKIN: int = 3

# =============================================================================
# PROCESS LIMITS (None = unlimited)
# =============================================================================
PROCESS_LIMITS: dict[str, int | None] = {
    "growth": None,
    "crafting": 1,
    "mining": 1,
    "adventure": 1,
    "training": 1,
    "seed_catching": 1,
}

# =============================================================================
# DASHBOARD
# =============================================================================
DASHBOARD_UPDATE_INTERVAL: int = 1  # update every N simulated days
