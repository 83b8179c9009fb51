"""
Island lore and history generation.

Given the world seed, the map and the shared POI list, this module names
the island and its factions, places points of interest, plans roads and
writes a chronology of the island up to the moment the players arrive.
Everything is drawn from the seed's ``worldLoreV8`` stream, so the same
world always tells the same story.

Process:
1. analyze_resources() - Land-use ratios and fish/oil counts (flavor only)
2. name_world() - Island name and one or two factions
3. place_pois() - Settlements, ruins, optional sites, guaranteed salvage sites
4. build_timeline() - Main beats interleaved with pairs of secondary beats
5. plan_road() - Land-connected, non-redundant roads between anchors
6. commit - Year-sorted entries, cached on the world metadata
"""

from collections import deque
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

import structlog
from pydantic import BaseModel, Field

from ..config.rules import LORE_BASE_YEAR
from ..utils.random import LORE_STREAM, seeded_rng
from . import lore_tables as tables
from .geography import get_no_poi_set
from .hex_grid import Hex, WorldMap, hex_distance, is_water_type
from .models import (
    POI,
    HistoryEntry,
    LoreState,
    ResourceNode,
    RoadAnchor,
    RoadPlan,
    Tile,
    WorldMeta,
    WorldState,
)
from .pathfinding import Domain, find_path
from .renderer import Renderer

logger = structlog.get_logger()


class LoreOptions(BaseModel):
    """Lore generation parameters."""

    base_year: int = Field(default=LORE_BASE_YEAR, description="Year of the founding beat")
    placement_tries: int = Field(default=90, description="Rejection-sampling attempts per POI")
    two_factions_chance: float = Field(default=0.8, description="Chance of a second faction")
    second_settlement_chance: float = Field(default=0.55, description="Chance of a second settlement")
    first_settlement_distance: int = Field(default=6, description="Min hex distance, first settlement")
    second_settlement_distance: int = Field(default=8, description="Min hex distance, second settlement")
    ruin_distance: int = Field(default=4, description="Min hex distance for ruins")
    site_distance: int = Field(default=3, description="Min hex distance for optional and salvage sites")
    extra_ruin_chance: float = Field(default=0.5, description="Chance of a second ruin")
    optional_sites: Dict[str, float] = Field(
        default_factory=lambda: {
            "mine": 0.5,
            "watchtower": 0.45,
            "shrine": 0.4,
            "roadside_camp": 0.4,
            "raider_camp": 0.35,
        },
        description="Independent placement chance per optional POI kind",
    )
    secondary_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "road": 3,
            "salvage": 2,
            "shrine": 1,
            "camp": 1,
            "truce": 1,
            "global": 1,
        },
        description="Weights of the secondary beat candidates",
    )
    year_step_min: int = Field(default=1)
    year_step_max: int = Field(default=12)
    war_chance: float = Field(default=0.6, description="War instead of politics with two factions")


def is_mountainish(tile: Optional[Tile]) -> bool:
    return tile is not None and (
        tile.type == "mountain" or tile.elevation >= 4 or tile.has_mountain_icon
    )


def location_label(poi: POI) -> str:
    """Short phrase naming a road endpoint."""
    at = f"({poi.q},{poi.r})"
    if poi.type == "settlement":
        return f"the outpost {poi.name} {at}" if poi.name else f"an outpost at {at}"
    if poi.type == "ruin":
        return f"the ruins of {poi.name} {at}" if poi.name else f"ruins at {at}"
    if poi.type == "crash_site":
        return f"a crash site near {at}"
    if poi.type == "vehicle":
        return f"a stranded vehicle at {at}"
    kind = poi.type.replace("_", " ")
    return f"the {kind} {poi.name} {at}" if poi.name else f"a {kind} at {at}"


class LoreGenerator:
    """Generates POIs, roads and history for one world."""

    def __init__(
        self,
        world_map: WorldMap,
        meta: WorldMeta,
        seed: str,
        pois: List[POI],
        resources: Optional[List[ResourceNode]] = None,
        options: Optional[LoreOptions] = None,
    ):
        self.world_map = world_map
        self.meta = meta
        self.seed = str(seed)
        self.pois = pois
        self.resources = resources or []
        self.options = options or LoreOptions()
        self.prng = seeded_rng(self.seed, LORE_STREAM)

        self.no_poi: Set[Hex] = set(get_no_poi_set(meta) or ())
        self.entries: List[HistoryEntry] = []
        self.roads: List[RoadPlan] = []
        self._road_edges: Set[FrozenSet[Hex]] = set()
        self._road_adjacency: Dict[Hex, Set[Hex]] = {}
        self._used: Set[Tuple[str, int, int]] = set()
        self._used_events: Set[str] = set()
        self._year: Optional[int] = None
        self._war_between: Optional[Tuple[str, str]] = None
        self._truce_signed = False

        self.island_name = ""
        self.factions: List[str] = []
        self.analysis: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def generate(self) -> LoreState:
        """Run every stage and return the cached lore state."""
        self.analysis = self.analyze_resources()
        self.name_world()
        self.place_pois()
        self.build_timeline()

        # stable: equal years keep insertion order
        ordered = sorted(self.entries, key=lambda e: e.year)
        for road in self.roads:
            for h in road.path:
                tile = self.world_map.tile_at(h.q, h.r)
                if tile is not None and not is_water_type(tile.type):
                    tile.has_road = True

        logger.info(
            "World lore generated",
            island=self.island_name,
            factions=self.factions,
            pois=len(self.pois),
            roads=len(self.roads),
            entries=len(ordered),
        )
        return LoreState(
            island_name=self.island_name,
            factions=list(self.factions),
            pois=list(self.pois),
            roads=list(self.roads),
            entries=ordered,
            analysis=self.analysis,
        )

    # ------------------------------------------------------------------
    # 1. Resource analysis
    # ------------------------------------------------------------------

    def analyze_resources(self) -> Dict[str, float]:
        total = max(1, len(self.world_map))
        water = forest = mountain = 0
        fish: Set[Hex] = set()
        oil: Set[Hex] = set()
        for t in self.world_map:
            if is_water_type(t.type):
                water += 1
            if t.has_forest or t.type == "forest":
                forest += 1
            if t.type == "mountain":
                mountain += 1
            if t.resource_type == "fish":
                fish.add(Hex(t.q, t.r))
            elif t.resource_type == "oil":
                oil.add(Hex(t.q, t.r))
        for item in list(self.resources) + list(self.pois):
            if item.type == "fish":
                fish.add(Hex(item.q, item.r))
            elif item.type == "oil":
                oil.add(Hex(item.q, item.r))

        return {
            "water_ratio": water / total,
            "forest_ratio": forest / total,
            "mountain_ratio": mountain / total,
            "fish": float(len(fish)),
            "oil": float(len(oil)),
        }

    # ------------------------------------------------------------------
    # 2. Naming
    # ------------------------------------------------------------------

    def name_world(self) -> None:
        self.island_name = (
            f"{self.prng.choice(tables.ISLAND_PREFIXES)} {self.prng.choice(tables.ISLAND_ROOTS)}"
        )
        count = 2 if self.prng.random() < self.options.two_factions_chance else 1
        self.factions = self.prng.sample(tables.FACTIONS, count)

    def outpost_name(self) -> str:
        return f"{self.prng.choice(tables.OUTPOST_PREFIXES)} {self.prng.choice(tables.OUTPOST_ROOTS)}"

    # ------------------------------------------------------------------
    # 3. POI placement
    # ------------------------------------------------------------------

    def _occupied(self) -> Set[Hex]:
        return {Hex(p.q, p.r) for p in self.pois}

    def _is_free(self, tile: Tile, occupied: Set[Hex]) -> bool:
        h = Hex(tile.q, tile.r)
        return h not in occupied and h not in self.no_poi and not is_mountainish(tile)

    def candidate_pools(self) -> Dict[str, List[Tile]]:
        """Tile pools per placement preference."""
        land, coast, inland, forest, high, shallow = [], [], [], [], [], []
        for t in self.world_map:
            neighbors = self.world_map.neighbors(t.q, t.r)
            if is_water_type(t.type):
                if Hex(t.q, t.r) not in self.no_poi and any(
                    not is_water_type(n.type) for n in neighbors
                ):
                    shallow.append(t)
                continue
            if is_mountainish(t) or Hex(t.q, t.r) in self.no_poi:
                continue
            land.append(t)
            if any(is_water_type(n.type) for n in neighbors):
                coast.append(t)
            else:
                inland.append(t)
            if t.has_forest or t.type == "forest":
                forest.append(t)
            if t.elevation >= 2:
                high.append(t)
        return {
            "land": land,
            "coast": coast,
            "inland": inland,
            "forest": forest,
            "high": high,
            "shallow": shallow,
        }

    @staticmethod
    def _first_pool(*pools: List[Tile]) -> List[Tile]:
        for pool in pools:
            if pool:
                return pool
        return []

    def place_poi(
        self,
        kind: str,
        pool: List[Tile],
        min_distance: int,
        name: Optional[str] = None,
        faction: Optional[str] = None,
    ) -> Optional[POI]:
        """
        Bounded-retry rejection sampler.

        Rejects occupied, mountain-ish, suppressed or too-close candidates.
        After the tries run out the first free candidate of the pool is
        taken without the spacing rule.
        """
        if not pool:
            logger.debug("No candidates for POI", kind=kind)
            return None

        occupied = self._occupied()
        for _ in range(self.options.placement_tries):
            tile = pool[int(self.prng.random() * len(pool))]
            if not self._is_free(tile, occupied):
                continue
            if any(hex_distance(tile.q, tile.r, p.q, p.r) < min_distance for p in self.pois):
                continue
            return self._commit_poi(kind, tile, min_distance, False, name, faction)

        for tile in pool:
            if self._is_free(tile, occupied):
                logger.debug("POI placed by fallback", kind=kind, q=tile.q, r=tile.r)
                return self._commit_poi(kind, tile, min_distance, True, name, faction)
        return None

    def _commit_poi(
        self,
        kind: str,
        tile: Tile,
        min_distance: int,
        fallback: bool,
        name: Optional[str],
        faction: Optional[str],
    ) -> POI:
        poi = POI(
            type=kind,
            q=tile.q,
            r=tile.r,
            name=name,
            faction=faction,
            meta={"min_distance": min_distance, "fallback": fallback},
        )
        self.pois.append(poi)

        if kind == "settlement":
            tile.city_name = name
            tile.owning_faction = faction
        elif kind == "ruin":
            tile.has_ruin = True
        elif kind == "crash_site":
            tile.has_crash_site = True
        elif kind == "vehicle":
            tile.has_vehicle = True
        return poi

    def ensure_poi(self, kind: str, pool: List[Tile], min_distance: int, name: Optional[str] = None) -> Optional[POI]:
        """Place one POI of a kind unless the world already has one."""
        existing = self.pois_of(kind)
        if existing:
            return existing[0]
        return self.place_poi(kind, pool, min_distance, name=name)

    def pois_of(self, *kinds: str) -> List[POI]:
        return [p for p in self.pois if p.type in kinds]

    def place_pois(self) -> None:
        opts = self.options
        pools = self.candidate_pools()
        coastal = self._first_pool(pools["coast"], pools["land"])
        inland = self._first_pool(pools["inland"], pools["land"])
        high = self._first_pool(pools["high"], pools["land"])
        forest = self._first_pool(pools["forest"], pools["land"])

        first_faction = self.factions[0]
        second_faction = self.factions[1] if len(self.factions) > 1 else first_faction

        self.place_poi(
            "settlement", coastal, opts.first_settlement_distance,
            name=self.outpost_name(), faction=first_faction,
        )
        if self.prng.random() < opts.second_settlement_chance:
            self.place_poi(
                "settlement", coastal, opts.second_settlement_distance,
                name=self.outpost_name(), faction=second_faction,
            )

        ruin_count = 1 + (1 if self.prng.random() < opts.extra_ruin_chance else 0)
        for _ in range(ruin_count):
            self.place_poi("ruin", inland, opts.ruin_distance, name=self.prng.choice(tables.RUIN_NAMES))

        site_pools = {
            "mine": high,
            "watchtower": high,
            "shrine": forest,
            "roadside_camp": pools["land"],
            "raider_camp": coastal,
        }
        for kind, chance in opts.optional_sites.items():
            if self.prng.random() >= chance:
                continue
            self.place_poi(kind, site_pools.get(kind, pools["land"]), opts.site_distance, name=self._site_name(kind))

        self.ensure_poi("crash_site", pools["land"], opts.site_distance)
        self.ensure_poi("vehicle", inland, opts.site_distance)
        self.ensure_poi("wreck", pools["shallow"], opts.site_distance)

        logger.debug("POIs placed", counts={k: len(self.pois_of(k)) for k in {p.type for p in self.pois}})

    def _site_name(self, kind: str) -> str:
        if kind == "shrine":
            return self.prng.choice(tables.SHRINE_NAMES)
        if kind in ("roadside_camp", "raider_camp"):
            return self.prng.choice(tables.CAMP_NAMES)
        root = self.prng.choice(tables.OUTPOST_ROOTS)
        return f"{root} {kind.replace('_', ' ').title()}"

    # ------------------------------------------------------------------
    # 4. Timeline
    # ------------------------------------------------------------------

    def next_year(self, year: int) -> int:
        """Advance by a bounded random step; never decreases."""
        span = self.options.year_step_max - self.options.year_step_min + 1
        return year + self.options.year_step_min + int(self.prng.random() * span)

    def add_entry(self, entry_type: str, text: str, poi: Optional[POI] = None, **extra) -> HistoryEntry:
        """Append an entry, advancing the year unless it is the first one."""
        if self._year is None:
            self._year = self.options.base_year
        else:
            self._year = self.next_year(self._year)
        entry = HistoryEntry(
            year=self._year,
            text=text,
            type=entry_type,
            island_name=self.island_name,
            factions=list(self.factions),
            q=poi.q if poi else extra.pop("q", None),
            r=poi.r if poi else extra.pop("r", None),
            **extra,
        )
        self.entries.append(entry)
        return entry

    def _mark_used(self, poi: POI) -> None:
        self._used.add((poi.type, poi.q, poi.r))

    def _unused(self, *kinds: str) -> List[POI]:
        return [p for p in self.pois_of(*kinds) if (p.type, p.q, p.r) not in self._used]

    def build_timeline(self) -> None:
        main_beats: List[Callable[[], None]] = [
            self.beat_founding,
            self.beat_crash_or_ruin,
            self.beat_war_or_politics,
            self.beat_context,
        ]
        for beat in main_beats:
            beat()
            self.secondary_pair()
        self.add_entry("arrival", f"The players arrive on {self.island_name}.")

    def beat_founding(self) -> None:
        settlements = self.pois_of("settlement")
        founder = self.factions[0]
        if settlements:
            home = settlements[0]
            self._mark_used(home)
            self.add_entry(
                "discovery",
                f"{founder} discover the {self.island_name} and found {home.name} "
                f"at ({home.q},{home.r}).",
                poi=home,
                faction=founder,
            )
        else:
            self.add_entry(
                "discovery",
                f"{founder} sight the {self.island_name} but find nowhere to land.",
                faction=founder,
            )

    def beat_crash_or_ruin(self) -> None:
        crash = self.pois_of("crash_site")
        ruins = self.pois_of("ruin")
        faction = self.prng.choice(self.factions)
        if crash and (not ruins or self.prng.random() < 0.5):
            site = crash[0]
            self.add_entry(
                "crash",
                f"A vessel of the {faction} falls burning from the sky near ({site.q},{site.r}).",
                poi=site,
                faction=faction,
            )
            return
        disaster = self.prng.choice(tables.DISASTERS)
        if ruins:
            ruin = self.prng.choice(ruins)
            self.add_entry(
                "ruin_fall",
                f"The {ruin.name} at ({ruin.q},{ruin.r}) is abandoned after {disaster}.",
                poi=ruin,
            )
        else:
            self.add_entry("disaster", f"{self.island_name} is scarred by {disaster}.")

    def beat_war_or_politics(self) -> None:
        if len(self.factions) > 1 and self.prng.random() < self.options.war_chance:
            a, b = self.factions[0], self.factions[1]
            self._war_between = (a, b)
            self.add_entry(
                "war",
                f"War breaks out between the {a} and the {b} over the {self.island_name}.",
            )
            return
        faction = self.prng.choice(self.factions)
        event = self.prng.choice(tables.POLITICS).format(faction=f"the {faction}")
        self.add_entry("politics", f"On the {self.island_name}, {event}.", faction=faction)

    def beat_context(self) -> None:
        settlements = self.pois_of("settlement")
        if len(settlements) > 1:
            rival = settlements[1]
            self._mark_used(rival)
            self.add_entry(
                "rivalry",
                f"The {rival.faction} found {rival.name} at ({rival.q},{rival.r}), "
                f"a rival port across the island.",
                poi=rival,
                faction=rival.faction,
            )
        elif self.analysis.get("fish", 0) > 0:
            count = int(self.analysis["fish"])
            self.add_entry(
                "fishing",
                f"Fleets chase {count} great shoals around the {self.island_name}; "
                f"the harbors grow fat.",
            )
        elif self.analysis.get("mountain_ratio", 0) > 0.08:
            mines = self.pois_of("mine")
            self.add_entry(
                "mining",
                f"Prospectors tunnel into the peaks of the {self.island_name} in search of ore.",
                poi=mines[0] if mines else None,
            )
        else:
            disaster = self.prng.choice(tables.DISASTERS)
            self.add_entry("disaster", f"The {self.island_name} is struck by {disaster}.")

    def secondary_pair(self) -> None:
        """Two weighted secondary beats; failures are dropped, gaps filled."""
        beats: Dict[str, Callable[[], bool]] = {
            "road": self.beat_road,
            "salvage": self.beat_salvage,
            "shrine": self.beat_shrine,
            "camp": self.beat_camp,
            "truce": self.beat_truce,
            "global": self.beat_global_event,
        }
        pool = [(name, self.options.secondary_weights.get(name, 0)) for name in beats]
        pool = [(name, w) for name, w in pool if w > 0]

        successes = 0
        while successes < 2 and pool:
            idx = self.prng.weighted_index([w for _, w in pool])
            name, _ = pool.pop(idx)
            if beats[name]():
                successes += 1
        while successes < 2:
            self.add_entry(
                "chronicle", self.prng.choice(tables.FILLER_EVENTS).format(island=self.island_name)
            )
            successes += 1

    def beat_road(self) -> bool:
        anchors = [p for p in self.pois if p.type != "wreck"]
        if len(anchors) < 2:
            return False
        faction = self.prng.choice(self.factions)
        for _ in range(4):
            a, b = self.prng.sample(anchors, 2)
            plan = self.plan_road(a, b, faction=faction, reason="trade")
            if plan is None:
                continue
            entry = self.add_entry(
                "road_built",
                f"The {faction} lay a road across the {self.island_name}, linking "
                f"{location_label(a)} with {location_label(b)}.",
                faction=faction,
                from_hex=Hex(a.q, a.r),
                to_hex=Hex(b.q, b.r),
            )
            plan.year = entry.year
            return True
        return False

    def beat_salvage(self) -> bool:
        found = self._unused("vehicle", "wreck")
        if not found:
            return False
        poi = self.prng.choice(found)
        faction = self.prng.choice(self.factions)
        self._mark_used(poi)
        if poi.type == "vehicle":
            text = f"Scouts of the {faction} find a stranded vehicle at ({poi.q},{poi.r}), its cells still warm."
            entry_type = "vehicle_found"
        else:
            text = f"Divers of the {faction} chart a wreck in the shallows at ({poi.q},{poi.r})."
            entry_type = "wreck_found"
        self.add_entry(entry_type, text, poi=poi, faction=faction)
        return True

    def beat_shrine(self) -> bool:
        shrines = self._unused("shrine")
        if not shrines:
            return False
        shrine = shrines[0]
        self._mark_used(shrine)
        self.add_entry("shrine", f"Pilgrims raise the {shrine.name} at ({shrine.q},{shrine.r}).", poi=shrine)
        return True

    def beat_camp(self) -> bool:
        camps = self._unused("roadside_camp", "raider_camp")
        if not camps:
            return False
        camp = self.prng.choice(camps)
        self._mark_used(camp)
        if camp.type == "raider_camp":
            text = f"Raiders make {camp.name} at ({camp.q},{camp.r}) their hideout."
        else:
            text = f"Travellers pitch {camp.name} beside the trail at ({camp.q},{camp.r})."
        self.add_entry("camp", text, poi=camp)
        return True

    def beat_truce(self) -> bool:
        if self._war_between is None or self._truce_signed:
            return False
        a, b = self._war_between
        self._truce_signed = True
        settlements = self.pois_of("settlement")
        place = settlements[0].name if settlements else f"the shores of the {self.island_name}"
        self.add_entry("truce", f"The {a} and the {b} sign a truce at {place}.")
        return True

    def beat_global_event(self) -> bool:
        remaining = [e for e in tables.GLOBAL_EVENTS if e not in self._used_events]
        if not remaining:
            return False
        event = self.prng.choice(remaining)
        self._used_events.add(event)
        self.add_entry("global", event)
        return True

    # ------------------------------------------------------------------
    # 5. Road planning
    # ------------------------------------------------------------------

    def _valid_anchor(self, poi: POI) -> Optional[Tile]:
        tile = self.world_map.tile_at(poi.q, poi.r)
        if tile is None or is_water_type(tile.type) or is_mountainish(tile):
            return None
        return tile

    def _roads_connect(self, a: Hex, b: Hex) -> bool:
        """BFS over the road graph built so far."""
        if a not in self._road_adjacency:
            return False
        seen = {a}
        queue = deque([a])
        while queue:
            current = queue.popleft()
            if current == b:
                return True
            for n in self._road_adjacency.get(current, ()):
                if n not in seen:
                    seen.add(n)
                    queue.append(n)
        return False

    def plan_road(
        self,
        from_poi: POI,
        to_poi: POI,
        faction: Optional[str] = None,
        reason: str = "",
        year: int = 0,
    ) -> Optional[RoadPlan]:
        """
        Accept a road only between valid, land-connected, not yet linked anchors.

        Returns:
            The accepted plan, or None when any rule rejects it
        """
        tile_a = self._valid_anchor(from_poi)
        tile_b = self._valid_anchor(to_poi)
        if tile_a is None or tile_b is None:
            return None

        a = Hex(tile_a.q, tile_a.r)
        b = Hex(tile_b.q, tile_b.r)
        if a == b:
            return None

        edge = frozenset((a, b))
        if edge in self._road_edges:
            return None

        path = find_path(self.world_map, a.q, a.r, b.q, b.r, Domain.LAND)
        if path is None:
            logger.debug("Road rejected, no land path", start=a, end=b)
            return None

        if self._roads_connect(a, b):
            logger.debug("Road rejected, already connected", start=a, end=b)
            return None

        plan = RoadPlan(
            from_anchor=RoadAnchor(q=a.q, r=a.r, type=from_poi.type),
            to_anchor=RoadAnchor(q=b.q, r=b.r, type=to_poi.type),
            faction=faction,
            reason=reason,
            year=year,
            path=path,
        )
        self.roads.append(plan)
        self._road_edges.add(edge)
        self._road_adjacency.setdefault(a, set()).add(b)
        self._road_adjacency.setdefault(b, set()).add(a)
        return plan


def ensure_world_lore_generated(
    state: WorldState,
    renderer: Optional[Renderer] = None,
    options: Optional[LoreOptions] = None,
) -> Optional[LoreState]:
    """
    Generate the world lore once and publish its history.

    Subsequent calls return the cached lore without emitting anything.
    """
    if state.meta.lore_built:
        return state.meta.lore
    if state.world_map is None or len(state.world_map) == 0:
        logger.warning("Lore generation skipped: empty map")
        return None

    renderer = renderer or Renderer()
    generator = LoreGenerator(
        state.world_map, state.meta, state.seed, state.pois, state.resources, options
    )
    lore = generator.generate()

    for entry in lore.entries:
        state.history.append(entry)
        renderer.emit_history_entry(entry)

    state.meta.lore = lore
    state.meta.lore_built = True
    renderer.redraw_world()
    return lore


def generate_ruin_lore_for_tile(
    state: WorldState, tile: Optional[Tile], renderer: Optional[Renderer] = None
) -> Optional[LoreState]:
    """Ensure lore exists when the player inspects a ruin."""
    if tile is None:
        logger.warning("Ruin lore requested without a tile")
        return None
    return ensure_world_lore_generated(state, renderer)


def generate_road_lore_for_existing_connections(
    state: WorldState, renderer: Optional[Renderer] = None
) -> Optional[LoreState]:
    """Ensure lore (and its planned roads) exists."""
    return ensure_world_lore_generated(state, renderer)
