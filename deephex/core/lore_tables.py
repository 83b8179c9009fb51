"""
Name pools and narrative templates for island lore.
"""

FACTIONS = [
    "Azure Concord",
    "Dust Mariners",
    "Iron Compact",
    "Verdant Covenant",
    "Sable Court",
    "Old Reef League",
    "Marrow Tide Company",
]

ISLAND_PREFIXES = ["Isle of", "Island of", "Shoals of", "Reach of", "Haven of", "Reef of"]
ISLAND_ROOTS = ["Brinefall", "Nareth", "Korvan", "Greywatch", "Solmere", "Lowmar", "Tiderest", "Stormwake"]

OUTPOST_PREFIXES = ["Outpost", "Harbor", "Fort", "Watch", "Camp", "Dock"]
OUTPOST_ROOTS = ["Aster", "Gale", "Karn", "Mire", "Ridge", "Pearl", "Thorn"]

RUIN_NAMES = ["Old Spire", "Sunken Hall", "Ashen Gate", "Broken Arch", "Hollow Keep", "Salt Chapel"]
SHRINE_NAMES = ["Shrine of Tides", "Lantern Shrine", "Moss Altar", "Shrine of the Drowned"]
CAMP_NAMES = ["Driftwood Camp", "Cinder Camp", "Gull Rest", "Tarp Hollow"]

DISASTERS = [
    "a meteor shower",
    "a great plague",
    "a black tide",
    "rising seas",
    "a chain of earthquakes",
]

GLOBAL_EVENTS = [
    "Storm season closes the sea lanes for a full year.",
    "A comet hangs over the horizon for forty nights.",
    "Trade caravans from the mainland stop arriving.",
    "The tides run red with algae and the fish vanish for a season.",
    "Scavengers report strange lights beneath the reef.",
]

POLITICS = [
    "a disputed succession splits the council of {faction}",
    "{faction} rewrites its charter and elects a new steward",
    "tax riots force {faction} to open its granaries",
]

FILLER_EVENTS = [
    "Quiet years pass on {island}; the chronicles record little.",
    "Salvagers comb the shallows of {island} for anything of use.",
    "Harvests are thin but the settlers of {island} endure.",
]
