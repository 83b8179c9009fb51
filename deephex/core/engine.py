"""
Simulation engine.

Owns one ``WorldState`` and its renderer, runs the generation pipeline once
per world and advances the simulation one end-turn tick at a time.

Process:
1. Generate the base map and re-label its border as water
2. Summarize the seed into a biome description
3. Stamp the biome landmark and outline it in the biome color
4. Spawn fish shoals on open water
5. Drop the mobile base on the non-mountain land tile nearest the map center
6. Generate island lore and publish its history
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog

from ..config import settings as default_settings
from ..config.config import Settings
from .buildings import apply_building_production_on_end_turn, destroy_building, start_building_placement
from .carriers import (
    apply_hauler_behavior_on_end_turn,
    apply_ship_routes_on_end_turn,
    assign_hauler_to_docks,
    build_hauler_at_selected_unit,
    build_ship_for_docks,
    clear_docks_route,
    recall_ships_to_docks,
    set_docks_route,
)
from .geography import compute_highlight_cells, draw_landmark_outline, get_no_poi_set, init_or_update_geography
from .hex_grid import Hex, WorldMap, hex_distance, is_water_type
from .logistics import apply_logistics_on_end_turn
from .lore import (
    LoreOptions,
    ensure_world_lore_generated,
    generate_road_lore_for_existing_connections,
    generate_ruin_lore_for_tile,
    is_mountainish,
)
from .models import Building, Hauler, LoreState, MobileBase, Ship, Tile, WorldMeta, WorldState
from .pathfinding import Domain, find_path
from .renderer import Renderer
from .resources import spawn_fish_resources
from .terrain import TerrainOptions, generate_map
from .world_summary import summarize_world

logger = structlog.get_logger()


def place_mobile_base(world_map: WorldMap) -> Optional[MobileBase]:
    """Mobile base on the passable land tile closest to the map center."""
    land = [t for t in world_map if not is_water_type(t.type)]
    if not land:
        return None
    pool = [t for t in land if not is_mountainish(t)] or land
    cq, cr = world_map.width // 2, world_map.height // 2
    tile = min(pool, key=lambda t: (hex_distance(t.q, t.r, cq, cr), t.r, t.q))
    return MobileBase(q=tile.q, r=tile.r)


class SimulationEngine:
    """One world and the operations a host may run on it."""

    def __init__(self, state: WorldState, renderer: Optional[Renderer] = None):
        self.state = state
        self.renderer = renderer or Renderer()

    @classmethod
    def create_world(
        cls,
        width: int,
        height: int,
        seed: str,
        renderer: Optional[Renderer] = None,
        settings: Optional[Settings] = None,
        terrain_options: Optional[TerrainOptions] = None,
        lore_options: Optional[LoreOptions] = None,
    ) -> "SimulationEngine":
        """Generate a complete world for ``seed``."""
        settings = settings or default_settings
        seed = str(seed)
        logger.info("Creating world", seed=seed, width=width, height=height)

        tiles = generate_map(width, height, seed, terrain_options)
        world_map = WorldMap(tiles, width, height)

        summary = summarize_world(seed, width, height)
        meta = WorldMeta(biome=summary.biome, summary=summary)
        state = WorldState(
            seed=seed,
            world_map=world_map,
            meta=meta,
            player_resources=dict(settings.starting_resources),
        )

        init_or_update_geography(world_map, meta)
        spawn_fish_resources(state)
        state.mobile_base = place_mobile_base(world_map)

        engine = cls(state, renderer)
        draw_landmark_outline(world_map, meta, engine.renderer)
        options = lore_options or LoreOptions(base_year=settings.lore_base_year)
        ensure_world_lore_generated(state, engine.renderer, options)

        logger.info(
            "World created",
            seed=seed,
            biome=meta.biome,
            landmark=meta.landmark.type if meta.landmark else None,
            fish=len(state.resources),
            history=len(state.history),
        )
        return engine

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------

    def end_turn(self) -> int:
        """Run one tick: production, ships, haulers, then logistics."""
        state = self.state
        apply_building_production_on_end_turn(state)
        apply_ship_routes_on_end_turn(state, self.renderer)
        apply_hauler_behavior_on_end_turn(state, self.renderer)
        apply_logistics_on_end_turn(state, self.renderer)
        self.renderer.notify_resources_changed(state.player_resources)

        state.turn += 1
        logger.info(
            "Turn ended",
            turn=state.turn,
            ships=len(state.ships),
            haulers=len(state.haulers),
            resources=dict(state.player_resources),
        )
        return state.turn

    # ------------------------------------------------------------------
    # Host operations
    # ------------------------------------------------------------------

    def place_building(self, kind: str, q: Optional[int] = None, r: Optional[int] = None) -> Optional[Building]:
        hex_override = (q, r) if q is not None and r is not None else None
        return start_building_placement(self.state, kind, hex_override, self.renderer)

    def destroy_building(self, building_id: int) -> bool:
        return destroy_building(self.state, building_id, self.renderer)

    def build_ship(self, docks_id: int) -> Optional[Ship]:
        return build_ship_for_docks(self.state, self.state.building_by_id(docks_id), self.renderer)

    def set_docks_route(self, docks_id: int, q: int, r: int) -> bool:
        return set_docks_route(self.state, self.state.building_by_id(docks_id), q, r)

    def clear_docks_route(self, docks_id: int) -> bool:
        return clear_docks_route(self.state.building_by_id(docks_id))

    def recall_ships(self, docks_id: int) -> int:
        docks = self.state.building_by_id(docks_id)
        return recall_ships_to_docks(self.state, docks) if docks is not None else 0

    def build_hauler(self) -> Optional[Hauler]:
        return build_hauler_at_selected_unit(self.state, self.renderer)

    def assign_hauler(self, hauler_id: int, q: int, r: int) -> bool:
        hauler = next((h for h in self.state.haulers if h.id == hauler_id), None)
        if hauler is None:
            logger.warning("No such hauler", hauler_id=hauler_id)
            return False
        return assign_hauler_to_docks(self.state, hauler, q, r)

    def find_path(self, from_q: int, from_r: int, to_q: int, to_r: int, domain: Domain) -> Optional[List[Hex]]:
        return find_path(
            self.state.world_map, from_q, from_r, to_q, to_r, domain, passable_extra=self.state.docks_hexes()
        )

    def ruin_lore(self, q: int, r: int) -> Optional[LoreState]:
        return generate_ruin_lore_for_tile(self.state, self.state.tile_at(q, r), self.renderer)

    def road_lore(self) -> Optional[LoreState]:
        return generate_road_lore_for_existing_connections(self.state, self.renderer)

    def highlight_cells(self) -> List[Hex]:
        return compute_highlight_cells(self.state.world_map, self.state.meta)

    def no_poi_set(self):
        return get_no_poi_set(self.state.meta)

    def tiles(self) -> List[Tile]:
        return list(self.state.world_map)

    def summary(self) -> Dict[str, Any]:
        """Host-facing overview of the world."""
        state = self.state
        lore = state.meta.lore
        landmark = state.meta.landmark
        base: Optional[Tuple[int, int]] = (
            (state.mobile_base.q, state.mobile_base.r) if state.mobile_base else None
        )
        return {
            "seed": state.seed,
            "width": state.world_map.width,
            "height": state.world_map.height,
            "turn": state.turn,
            "biome": state.meta.biome,
            "landmark": landmark.model_dump() if landmark else None,
            "island_name": lore.island_name if lore else None,
            "factions": list(lore.factions) if lore else [],
            "pois": len(state.pois),
            "fish": [(n.q, n.r) for n in state.resources],
            "mobile_base": base,
            "player_resources": dict(state.player_resources),
            "buildings": [b.model_dump() for b in state.buildings],
            "ships": [s.model_dump() for s in state.ships],
            "haulers": [h.model_dump() for h in state.haulers],
        }
