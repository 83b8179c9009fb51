"""
Game rule constants shared by buildings, carriers and logistics.
"""

from typing import Dict

STARTING_RESOURCES: Dict[str, int] = {
    "food": 200,
    "scrap": 200,
    "money": 200,
    "influence": 200,
}

# Buildings
BUILDING_COSTS: Dict[str, Dict[str, int]] = {
    "docks": {"scrap": 20, "money": 50},
    "mine": {"scrap": 40},
    "factory": {"scrap": 60, "money": 100},
    "bunker": {"scrap": 30, "money": 50},
}
BUILDING_LIMITS: Dict[str, int] = {"docks": 2}
BUILDING_EMOJI: Dict[str, str] = {
    "docks": "⚓",
    "mine": "⛏️",
    "factory": "🏭",
    "bunker": "🛡️",
}
DOCKS_STORAGE_CAP = 10
MINE_MAX_SCRAP = 10
MINE_SCRAP_PER_TURN = 1

# Carriers
SHIP_CARGO_CAP = 2
HAULER_CARGO_CAP = 5
SHIP_MOVE_POINTS = 8
HAULER_MOVE_POINTS = 4
DEFAULT_MOVE_POINTS = 8
SHIP_COST: Dict[str, int] = {"food": 10}
HAULER_COST: Dict[str, int] = {"food": 10}
HARVEST_TURNS = 2

# Fish nodes
FISH_COUNT = 5
FISH_MIN_DISTANCE = 8

# Lore
LORE_BASE_YEAR = 5000
