"""
World simulation data model.

Tiles, landmarks, POIs, history entries, road plans, buildings and carriers
are pydantic models mutated in place by the generators and the end-turn
systems. ``WorldState`` bundles everything one simulation owns.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from ..config.rules import DEFAULT_MOVE_POINTS, HAULER_MOVE_POINTS, SHIP_MOVE_POINTS, STARTING_RESOURCES
from .hex_grid import Hex, WorldMap


class Resource(str, Enum):
    """Transferable resource kinds, in fixed transfer order."""

    FOOD = "food"
    SCRAP = "scrap"
    MONEY = "money"
    INFLUENCE = "influence"


STORAGE_FIELDS: Dict[Resource, str] = {
    Resource.FOOD: "storage_food",
    Resource.SCRAP: "storage_scrap",
    Resource.MONEY: "storage_money",
    Resource.INFLUENCE: "storage_influence",
}

CARGO_FIELDS: Dict[Resource, str] = {
    Resource.FOOD: "cargo_food",
    Resource.SCRAP: "cargo_scrap",
    Resource.MONEY: "cargo_money",
    Resource.INFLUENCE: "cargo_influence",
}


class Tile(BaseModel):
    """One hex of the world map."""

    q: int = Field(description="Column (odd-r offset)")
    r: int = Field(description="Row")
    type: str = Field(default="plains", description="Terrain type")
    elevation: int = Field(default=0, description="Elevation level 0-4")
    movement_cost: int = Field(default=1, description="Terrain movement cost")
    defense: int = Field(default=0, description="Terrain defense modifier")

    has_forest: bool = Field(default=False)
    has_ruin: bool = Field(default=False)
    has_crash_site: bool = Field(default=False)
    has_vehicle: bool = Field(default=False)
    has_mountain_icon: bool = Field(default=False)
    has_road: bool = Field(default=False)

    owning_faction: Optional[str] = Field(default=None, description="Faction owning a settlement here")
    city_name: Optional[str] = Field(default=None, description="Settlement name")
    resource_type: Optional[str] = Field(default=None, description="Harvestable resource (fish, oil)")

    @property
    def hex(self) -> Hex:
        return Hex(self.q, self.r)


class Landmark(BaseModel):
    """The single biome-defined landmark of a world."""

    type: str = Field(description="volcano, glacier, plateau, desert or bog")
    q: Optional[int] = Field(default=None, description="Center column")
    r: Optional[int] = Field(default=None, description="Center row")
    emoji: str = Field(default="")
    label: str = Field(default="")


class POI(BaseModel):
    """Point of interest placed by the lore generator (or supplied by the host)."""

    type: str = Field(description="settlement, ruin, mine, watchtower, shrine, ...")
    q: int
    r: int
    name: Optional[str] = None
    faction: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict, description="Placement details")


class ResourceNode(BaseModel):
    """Harvestable resource on a tile (fish shoals)."""

    type: str = "fish"
    q: int
    r: int


class HistoryEntry(BaseModel):
    """One narrative event of the world chronology."""

    year: int
    text: str
    type: str
    island_name: Optional[str] = None
    factions: List[str] = Field(default_factory=list)
    q: Optional[int] = None
    r: Optional[int] = None
    from_hex: Optional[Hex] = None
    to_hex: Optional[Hex] = None
    faction: Optional[str] = None


class RoadAnchor(BaseModel):
    q: int
    r: int
    type: str


class RoadPlan(BaseModel):
    """Accepted road between two land anchors."""

    from_anchor: RoadAnchor
    to_anchor: RoadAnchor
    faction: Optional[str] = None
    reason: str = ""
    year: int = 0
    path: List[Hex] = Field(default_factory=list, description="Land path at acceptance time")


class Building(BaseModel):
    """Player building; storage fields back its logistics station."""

    id: int
    type: str = Field(description="docks, mine, factory or bunker")
    q: int
    r: int
    name: str = ""
    storage_food: int = 0
    storage_scrap: int = 0
    storage_money: int = 0
    storage_influence: int = 0
    route: Optional[Hex] = Field(default=None, description="Docks ship route target")
    max_scrap: Optional[int] = Field(default=None, description="Mine storage ceiling")

    def get_storage(self, resource: Resource) -> int:
        return getattr(self, STORAGE_FIELDS[Resource(resource)])

    def set_storage(self, resource: Resource, amount: int) -> None:
        setattr(self, STORAGE_FIELDS[Resource(resource)], max(0, int(amount)))


class RouteStop(BaseModel):
    """One scheduled action of a carrier logistics route."""

    station_id: str
    action: str = Field(description="load, loadAll, unload or unloadAll")
    resource: Optional[Resource] = None


class Carrier(BaseModel):
    """Movable unit able to carry cargo."""

    id: int
    type: str = "carrier"
    name: str = "Carrier"
    q: int
    r: int
    max_move_points: int = DEFAULT_MOVE_POINTS
    move_points: int = DEFAULT_MOVE_POINTS
    cargo_food: int = 0
    cargo_scrap: int = 0
    cargo_money: int = 0
    cargo_influence: int = 0
    cargo_cap: Optional[int] = Field(default=None, description="Explicit capacity override")
    mode: str = "idle"
    route: List[RouteStop] = Field(default_factory=list, description="Logistics stops")
    route_index: int = 0
    logistics_enabled: bool = False

    def get_cargo(self, resource: Resource) -> int:
        return getattr(self, CARGO_FIELDS[Resource(resource)])

    def set_cargo(self, resource: Resource, amount: int) -> None:
        setattr(self, CARGO_FIELDS[Resource(resource)], max(0, int(amount)))

    def total_cargo(self) -> int:
        return sum(getattr(self, name) for name in CARGO_FIELDS.values())

    @property
    def uses_logistics(self) -> bool:
        return self.logistics_enabled and bool(self.route)


class Ship(Carrier):
    """Fishing ship bound to a docks."""

    type: str = "ship"
    name: str = "Ship"
    max_move_points: int = SHIP_MOVE_POINTS
    move_points: int = SHIP_MOVE_POINTS
    mode: str = "toTarget"
    docks_id: Optional[int] = None
    harvest_turns_remaining: int = 0
    harvest_at: Optional[Hex] = None


class Hauler(Carrier):
    """Land carrier shuttling food from a docks to the mobile base."""

    type: str = "hauler"
    name: str = "Hauler"
    max_move_points: int = HAULER_MOVE_POINTS
    move_points: int = HAULER_MOVE_POINTS
    mode: str = "idle"
    target_docks_id: Optional[int] = None
    base_q: int = 0
    base_r: int = 0


class MobileBase(BaseModel):
    """The player's mobile base; its station draws on the player resource pool."""

    id: str = "base"
    type: str = "mobile_base"
    name: str = "Mobile Base"
    q: int
    r: int


class WorldSummary(BaseModel):
    """Seed-derived world statistics and biome description."""

    water_tiles: int
    forest_tiles: int
    mountain_tiles: int
    roughness: float
    elevation_var: float
    climate: str
    biome: str


class LoreState(BaseModel):
    """Cached result of lore generation."""

    island_name: str
    factions: List[str]
    pois: List[POI] = Field(default_factory=list)
    roads: List[RoadPlan] = Field(default_factory=list)
    entries: List[HistoryEntry] = Field(default_factory=list)
    analysis: Dict[str, float] = Field(default_factory=dict)


class WorldMeta(BaseModel):
    """Per-world metadata attached once and never rebuilt."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    biome: str = "Temperate Biome"
    summary: Optional[WorldSummary] = None
    landmark: Optional[Landmark] = None
    geo_cells: List[Hex] = Field(default_factory=list)
    no_poi_set: Optional[Set[Hex]] = None
    geo_center: Optional[Hex] = None
    geo_built: bool = False
    lore: Optional[LoreState] = None
    lore_built: bool = False


@dataclass
class WorldState:
    """Everything one simulation owns; passed explicitly to every subsystem."""

    seed: str
    world_map: WorldMap
    meta: WorldMeta = field(default_factory=WorldMeta)
    pois: List[POI] = field(default_factory=list)
    resources: List[ResourceNode] = field(default_factory=list)
    buildings: List[Building] = field(default_factory=list)
    ships: List[Ship] = field(default_factory=list)
    haulers: List[Hauler] = field(default_factory=list)
    mobile_base: Optional[MobileBase] = None
    player_resources: Dict[str, int] = field(
        default_factory=lambda: dict(STARTING_RESOURCES)
    )
    history: List[HistoryEntry] = field(default_factory=list)
    turn: int = 1
    _id_counters: Dict[str, int] = field(default_factory=dict, repr=False)

    def next_id(self, kind: str) -> int:
        """Monotonic id sequence per entity kind (buildings, ships, haulers)."""
        self._id_counters[kind] = self._id_counters.get(kind, 0) + 1
        return self._id_counters[kind]

    def tile_at(self, q: int, r: int) -> Optional[Tile]:
        return self.world_map.tile_at(q, r)

    def building_by_id(self, building_id: Optional[int]) -> Optional[Building]:
        if building_id is None:
            return None
        for b in self.buildings:
            if b.id == building_id:
                return b
        return None

    def building_at(self, q: int, r: int) -> Optional[Building]:
        for b in self.buildings:
            if b.q == q and b.r == r:
                return b
        return None

    def docks(self) -> List[Building]:
        return [b for b in self.buildings if b.type == "docks"]

    def docks_hexes(self) -> Set[Hex]:
        return {Hex(b.q, b.r) for b in self.buildings if b.type == "docks"}

    def fish_at(self, q: int, r: int) -> bool:
        return any(n.type == "fish" and n.q == q and n.r == r for n in self.resources)
