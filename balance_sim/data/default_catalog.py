"""Built-in game catalog used by the CLI and batch runner.

Records use the same loose shape a CSV export would: costs as 'Name xN'
strings, durations as '<N> min' strings, prerequisites as ';'-joined ids or
'metric>=N' thresholds.
"""

from __future__ import annotations

from balance_sim.state.catalog import Catalog


def _crop(crop_id: str, duration: str, energy: float, stages: int = 3) -> dict:
    return {
        "id": crop_id,
        "kind": "crop",
        "system": "farm",
        "duration": duration,
        "energy_value": energy,
        "stats": {"stages": stages},
    }


def _cleanup(
    cleanup_id: str,
    energy: float,
    plots: int,
    prerequisites: str = "",
    tool: str | None = None,
    gain: str = "",
) -> dict:
    return {
        "id": cleanup_id,
        "kind": "cleanup",
        "system": "farm",
        "energy_cost": energy,
        "plots_added": plots,
        "prerequisites": prerequisites,
        "tool_required": tool,
        "materials_gain": gain,
    }


def _equipment(item_id: str, kind: str, slot: str, gold: float, level: int, system: str = "town", **fields) -> dict:
    record = {"id": item_id, "kind": kind, "system": system, "slot": slot, "gold_cost": gold, "level": level}
    record.update(fields)
    return record


def _upgrade(upgrade_id: str, gold: float, prerequisites: str = "", kind: str = "upgrade", **fields) -> dict:
    record = {"id": upgrade_id, "kind": kind, "system": "town", "gold_cost": gold, "prerequisites": prerequisites}
    record.update(fields)
    return record


def _recipe(
    recipe_id: str,
    cost: str,
    duration: str,
    heat: float,
    output: str | None = None,
    gain: str = "",
    prerequisites: str = "",
    repeatable: bool = False,
) -> dict:
    return {
        "id": recipe_id,
        "kind": "recipe",
        "system": "forge",
        "materials_cost": cost,
        "materials_gain": gain,
        "duration": duration,
        "output_item": output,
        "prerequisites": prerequisites,
        "repeatable": repeatable,
        "stats": {"heat": heat},
    }


def _route(
    route_id: str,
    level: int,
    energy: float,
    enemies: list[str],
    boss: str,
    waves: tuple[int, int, int],
    gold: int,
    xp: int,
    prerequisites: str = "",
    loot: list | None = None,
    wave_base: int = 2,
) -> dict:
    short, medium, long_ = waves
    return {
        "id": route_id,
        "kind": "route",
        "system": "adventure",
        "level": level,
        "energy_cost": energy,
        "prerequisites": prerequisites,
        "enemy_types": enemies,
        "boss": boss,
        "loot": loot or [],
        "stats": {
            "waves_short": short,
            "waves_medium": medium,
            "waves_long": long_,
            "wave_base": wave_base,
            "gold_reward": gold,
            "xp_reward": xp,
        },
    }


def _fighter(fighter_id: str, kind: str, hp: float, damage: float, speed: float) -> dict:
    return {
        "id": fighter_id,
        "kind": kind,
        "system": "adventure",
        "damage": damage,
        "attack_speed": speed,
        "stats": {"hp": hp},
    }


# =============================================================================
# FARM
# =============================================================================
CROPS: list[dict] = [
    _crop("carrot", "6 min", 1),
    _crop("radish", "5 min", 1),
    _crop("turnip", "8 min", 2),
    _crop("potato", "10 min", 2),
    _crop("cabbage", "15 min", 3),
    _crop("corn", "25 min", 5),
    _crop("tomato", "20 min", 4),
    _crop("strawberry", "40 min", 8),
    _crop("spinach", "25 min", 5),
    _crop("onion", "30 min", 6),
    _crop("garlic", "40 min", 8),
    _crop("cucumber", "1 hour", 12, stages=4),
    _crop("leek", "50 min", 10, stages=4),
    _crop("wheat", "1 hour", 12, stages=4),
    _crop("asparagus", "1 hour 40 min", 20, stages=4),
    _crop("cauliflower", "1 hour 30 min", 18, stages=4),
    _crop("caisim", "1 hour 15 min", 15, stages=4),
    _crop("pumpkin", "2 hours", 25, stages=5),
    _crop("watermelon", "3 hours", 35, stages=5),
]

CLEANUPS: list[dict] = [
    _cleanup("clear_weeds_1", 1, 1, gain="Wood x1"),
    _cleanup("clear_weeds_2", 2, 1, "clear_weeds_1", gain="Wood x2"),
    _cleanup("till_soil", 3, 2, "clear_weeds_2", tool="hoe"),
    _cleanup("remove_stumps", 5, 2, "till_soil", tool="axe", gain="Wood x8"),
    _cleanup("clear_small_boulders", 8, 2, "till_soil", tool="hammer", gain="Stone x8"),
    _cleanup("clear_thickets", 10, 3, "remove_stumps", tool="axe", gain="Wood x12"),
    _cleanup("clear_boulders", 15, 3, "clear_small_boulders;hero_level>=3", tool="hammer", gain="Stone x15"),
    _cleanup("till_manor_grounds_4", 25, 4, "clear_thickets;clear_boulders", tool="hoe_plus"),
    _cleanup("till_manor_grounds_5", 40, 5, "till_manor_grounds_4;plots>=20", tool="hoe_plus"),
    _cleanup("till_manor_grounds_6", 60, 6, "till_manor_grounds_5", tool="hoe_plus"),
]

# =============================================================================
# TOWN: tools, nets, weapons, armor
# =============================================================================
EQUIPMENT: list[dict] = [
    _equipment("hoe", "tool", "hoe", 25, 1),
    _equipment("axe", "tool", "axe", 40, 1),
    _equipment("hammer", "tool", "hammer", 50, 1),
    _equipment("pickaxe_1", "tool", "pickaxe", 60, 1, stats={"efficiency": 0.0}),
    _equipment("net_i", "net", "net", 30, 1, stats={"efficiency": 1.2}),
    _equipment("net_ii", "net", "net", 120, 2, prerequisites="net_i", stats={"efficiency": 1.5}),
    _equipment("spear", "weapon", "weapon", 50, 1, weapon_type="spear", damage=10, attack_speed=1.2),
    _equipment("sword", "weapon", "weapon", 90, 2, prerequisites="hero_level>=2",
               weapon_type="sword", damage=14, attack_speed=1.0),
    _equipment("bow", "weapon", "weapon", 110, 3, prerequisites="hero_level>=3",
               weapon_type="bow", damage=12, attack_speed=1.3),
    _equipment("crossbow", "weapon", "weapon", 160, 4, prerequisites="hero_level>=4",
               weapon_type="crossbow", damage=18, attack_speed=0.9),
    _equipment("wand", "weapon", "weapon", 200, 5, prerequisites="hero_level>=5",
               weapon_type="wand", damage=15, attack_speed=1.2),
    _equipment("leather_vest", "armor", "armor", 40, 1, defense=15),
    _equipment("scaled_vest", "armor", "armor", 150, 2, prerequisites="hero_level>=3", defense=25, effect="evasion"),
]

# Forge outputs: never sold, only crafted
FORGED: list[dict] = [
    _equipment("hoe_plus", "tool", "hoe", 0, 2, system="forge"),
    _equipment("axe_plus", "tool", "axe", 0, 2, system="forge"),
    _equipment("hammer_plus", "tool", "hammer", 0, 2, system="forge"),
    _equipment("pickaxe_2", "tool", "pickaxe", 0, 2, system="forge",
               stats={"efficiency": 0.1, "material_bonus": 0.1}),
    _equipment("pickaxe_3", "tool", "pickaxe", 0, 3, system="forge",
               stats={"efficiency": 0.2, "material_bonus": 0.2}),
    _equipment("abyss_seeker", "tool", "pickaxe", 0, 4, system="forge",
               stats={"efficiency": 0.35, "material_bonus": 0.3, "double_obsidian": 1}),
    _equipment("iron_sword", "weapon", "weapon", 0, 6, system="forge",
               weapon_type="sword", damage=26, attack_speed=1.0),
    _equipment("silver_wand", "weapon", "weapon", 0, 7, system="forge",
               weapon_type="wand", damage=28, attack_speed=1.2),
    _equipment("iron_plate", "armor", "armor", 0, 3, system="forge", defense=35, effect="reflection"),
    _equipment("vampiric_mail", "armor", "armor", 0, 4, system="forge", defense=40, effect="vampiric"),
    _equipment("silver_guard", "armor", "armor", 0, 5, system="forge", defense=45, effect="gold_magnet"),
    _equipment("lava_ward", "armor", "armor", 0, 6, system="forge", defense=50, effect="regeneration"),
]

# =============================================================================
# TOWN: upgrades, housing, auto catchers
# =============================================================================
UPGRADES: list[dict] = [
    _upgrade("energy_storage_i", 100),
    _upgrade("energy_storage_ii", 400, "energy_storage_i"),
    _upgrade("energy_storage_iii", 1500, "energy_storage_ii"),
    _upgrade("water_tank_i", 60),
    _upgrade("water_tank_ii", 250, "water_tank_i"),
    _upgrade("water_tower", 1000, "water_tank_ii"),
    _upgrade("gold_vault_i", 3000, "energy_storage_ii"),
    _upgrade("material_crate_i", 80, materials_cost="Wood x10"),
    _upgrade("material_crate_ii", 300, "material_crate_i", materials_cost="Wood x25;Stone x10"),
    _upgrade("material_warehouse", 900, "material_crate_ii", materials_cost="Wood x60;Stone x40"),
    _upgrade("seed_pouch", 50),
    _upgrade("seed_chest", 300, "seed_pouch"),
    _upgrade("mulch_beds", 80, "till_soil"),
    _upgrade("irrigation_channels", 300, "mulch_beds"),
    _upgrade("hand_pump_ii", 120),
    _upgrade("windmill_pump", 500, "hand_pump_ii", materials_cost="Wood x20"),
    _upgrade("well", 150, "till_soil", stats={"water_regen": 0.05}),
    _upgrade("rain_barrels", 400, "well", stats={"water_regen": 0.1}),
    _upgrade("tower_reach_2", 100),
    _upgrade("tower_reach_3", 250, "tower_reach_2"),
    _upgrade("tower_reach_4", 600, "tower_reach_3"),
    _upgrade("tower_reach_5", 1200, "tower_reach_4"),
    _upgrade("tower_reach_6", 2000, "tower_reach_5"),
    _upgrade("farm_deed", 500, "till_manor_grounds_4", plots_added=2),
    _upgrade("gnome_hut", 150, "hero_level>=2", kind="housing", stats={"housing": 1}),
    _upgrade("gnome_lodge", 500, "gnome_hut", kind="housing", stats={"housing": 2}),
    _upgrade("wind_vane", 200, "tower_reach_2", kind="auto_catcher", stats={"rate": 0.002}),
    _upgrade("wind_turbine", 800, "wind_vane", kind="auto_catcher", stats={"rate": 0.006}),
]

HIRES: list[dict] = [
    {"id": "hire_gnome", "kind": "hire", "system": "helpers", "gold_cost": 100, "repeatable": True},
]

# =============================================================================
# FORGE
# =============================================================================
RECIPES: list[dict] = [
    _recipe("refine_copper", "Raw Copper x2", "2 min", 30, gain="Copper x1", repeatable=True),
    _recipe("refine_iron", "Raw Iron x2", "3 min", 45, gain="Iron x1", repeatable=True),
    _recipe("refine_silver", "Raw Silver x2", "4 min", 60, gain="Silver x1", repeatable=True),
    _recipe("craft_hoe_plus", "Copper x5;Wood x10", "10 min", 40, output="hoe_plus"),
    _recipe("craft_axe_plus", "Copper x5;Wood x8", "10 min", 40, output="axe_plus"),
    _recipe("craft_hammer_plus", "Copper x6;Stone x10", "10 min", 40, output="hammer_plus"),
    _recipe("craft_pickaxe_2", "Copper x10;Wood x5", "15 min", 50, output="pickaxe_2"),
    _recipe("craft_pickaxe_3", "Iron x10;Copper x5", "20 min", 60, output="pickaxe_3",
            prerequisites="craft_pickaxe_2"),
    _recipe("craft_abyss_seeker", "Mythril x5;Crystal x5;Obsidian x2", "45 min", 90, output="abyss_seeker",
            prerequisites="craft_pickaxe_3"),
    _recipe("craft_iron_sword", "Iron x8;Wood x4", "20 min", 60, output="iron_sword",
            prerequisites="hero_level>=5"),
    _recipe("craft_silver_wand", "Silver x8;Crystal x2", "25 min", 70, output="silver_wand",
            prerequisites="craft_iron_sword"),
    _recipe("craft_iron_plate", "Iron x12", "20 min", 60, output="iron_plate"),
    _recipe("craft_vampiric_mail", "Iron x10;Wolf Pelt x4", "25 min", 65, output="vampiric_mail",
            prerequisites="craft_iron_plate"),
    _recipe("craft_silver_guard", "Silver x10;Serpent Scale x3", "30 min", 70, output="silver_guard",
            prerequisites="craft_iron_plate"),
    _recipe("craft_lava_ward", "Obsidian x2;Lava Heart x1", "40 min", 85, output="lava_ward",
            prerequisites="craft_silver_guard"),
]

# =============================================================================
# ADVENTURE
# =============================================================================
ROUTES: list[dict] = [
    _route("meadow_path", 1, 5, ["slimes"], "giant_slime", (3, 5, 8), 10, 15,
           loot=[["Slime Gel", 1, 2, 0.6]]),
    _route("pine_vale", 2, 8, ["slimes", "armored_insects"], "beetle_lord", (4, 6, 10), 20, 30,
           "hero_level>=2", loot=[["Beetle Shell", 1, 2, 0.5], ["Wood", 2, 5, 0.5]]),
    _route("dark_forest", 3, 12, ["predatory_beasts", "living_plants"], "alpha_wolf", (4, 7, 12), 35, 50,
           "hero_level>=4", loot=[["Wolf Pelt", 1, 2, 0.5]]),
    _route("mountain_pass", 4, 16, ["flying_predators", "armored_insects"], "sky_serpent", (5, 8, 14), 50, 80,
           "hero_level>=6", loot=[["Serpent Scale", 1, 2, 0.4], ["Stone", 3, 8, 0.6]]),
    _route("crystal_caves", 5, 20, ["venomous_crawlers", "living_plants"], "crystal_spider", (5, 9, 16), 70, 110,
           "hero_level>=8", loot=[["Spider Silk", 1, 2, 0.4], ["Crystal", 1, 2, 0.3]]),
    _route("frozen_tundra", 6, 25, ["predatory_beasts", "flying_predators"], "frost_wyrm", (6, 10, 18), 90, 150,
           "hero_level>=10", loot=[["Frost Core", 1, 1, 0.3]], wave_base=3),
    _route("volcano_core", 7, 30, ["venomous_crawlers", "armored_insects"], "lava_titan", (6, 11, 20), 120, 200,
           "hero_level>=12", loot=[["Lava Heart", 1, 1, 0.25], ["Obsidian", 1, 1, 0.2]], wave_base=3),
]

ENEMIES: list[dict] = [
    _fighter("slimes", "enemy", 15, 2, 1.0),
    _fighter("armored_insects", "enemy", 30, 4, 0.8),
    _fighter("predatory_beasts", "enemy", 25, 6, 1.2),
    _fighter("flying_predators", "enemy", 20, 5, 1.5),
    _fighter("venomous_crawlers", "enemy", 35, 4, 1.0),
    _fighter("living_plants", "enemy", 40, 3, 0.7),
    _fighter("giant_slime", "boss", 60, 4, 0.5),
    _fighter("beetle_lord", "boss", 200, 10, 0.4),
    _fighter("alpha_wolf", "boss", 250, 12, 0.8),
    _fighter("sky_serpent", "boss", 300, 10, 1.0),
    _fighter("crystal_spider", "boss", 400, 12, 0.6),
    _fighter("frost_wyrm", "boss", 500, 15, 0.7),
    _fighter("lava_titan", "boss", 600, 18, 0.5),
]

DEFAULT_RECORDS: list[dict] = (
    CROPS + CLEANUPS + EQUIPMENT + FORGED + UPGRADES + HIRES + RECIPES + ROUTES + ENEMIES
)


def load_default_catalog() -> Catalog:
    """Parse the built-in records into a Catalog."""
    return Catalog.from_records(DEFAULT_RECORDS)
