"""FastAPI main application."""

import threading
import uuid
from typing import Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import settings
from ..core.engine import SimulationEngine
from ..core.geography import describe_landmark
from ..core.pathfinding import Domain
from ..core.renderer import RecordingRenderer
from ..utils.logging import configure_logging

configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Deephex World API",
    description="Seeded hex-island generation and turn simulation",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Worlds live in process memory only
_worlds: Dict[str, SimulationEngine] = {}
_lock = threading.Lock()


# Request/Response models
class WorldCreateRequest(BaseModel):
    """Request to generate a new world."""

    seed: str = Field(..., min_length=1, description="World seed string")
    width: int = Field(
        settings.default_map_width, ge=4, le=settings.max_map_width, description="Map width in hexes"
    )
    height: int = Field(
        settings.default_map_height, ge=4, le=settings.max_map_height, description="Map height in hexes"
    )


class WorldResponse(BaseModel):
    """Summary information about a generated world."""

    world_id: str
    seed: str
    width: int
    height: int
    turn: int
    biome: str
    landmark: Optional[dict] = None
    island_name: Optional[str] = None
    factions: List[str] = []
    mobile_base: Optional[List[int]] = None
    player_resources: Dict[str, int] = {}


class BuildingRequest(BaseModel):
    """Place a building; without coordinates it goes on the mobile base."""

    kind: str = Field(..., description="docks, mine, factory or bunker")
    q: Optional[int] = Field(None, description="Target column")
    r: Optional[int] = Field(None, description="Target row")


class RouteRequest(BaseModel):
    q: int
    r: int


class LandmarkResponse(BaseModel):
    landmark: Optional[dict] = None
    center: Optional[List[int]] = None
    highlight_cells: List[List[int]] = []
    lines: List[str] = []


def get_engine(world_id: str) -> SimulationEngine:
    engine = _worlds.get(world_id)
    if engine is None:
        raise HTTPException(status_code=404, detail="World not found")
    return engine


def world_response(world_id: str, engine: SimulationEngine) -> WorldResponse:
    summary = engine.summary()
    base = summary["mobile_base"]
    return WorldResponse(
        world_id=world_id,
        seed=summary["seed"],
        width=summary["width"],
        height=summary["height"],
        turn=summary["turn"],
        biome=summary["biome"],
        landmark=summary["landmark"],
        island_name=summary["island_name"],
        factions=summary["factions"],
        mobile_base=list(base) if base else None,
        player_resources=summary["player_resources"],
    )


# API endpoints
@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Deephex World API", "version": "0.1.0", "status": "running"}


@app.get("/health")
def health_check():
    """Health check endpoint."""
    with _lock:
        count = len(_worlds)
    return {"status": "healthy", "worlds": count}


@app.post("/worlds", response_model=WorldResponse)
def create_world(request: WorldCreateRequest):
    """Generate a world and keep it in memory."""
    world_id = str(uuid.uuid4())
    logger.info("World generation requested", world_id=world_id, seed=request.seed)
    engine = SimulationEngine.create_world(
        request.width, request.height, request.seed, renderer=RecordingRenderer(), settings=settings
    )
    with _lock:
        _worlds[world_id] = engine
    return world_response(world_id, engine)


@app.get("/worlds/{world_id}", response_model=WorldResponse)
def get_world(world_id: str):
    with _lock:
        engine = get_engine(world_id)
        return world_response(world_id, engine)


@app.get("/worlds/{world_id}/tiles")
def get_tiles(world_id: str):
    with _lock:
        engine = get_engine(world_id)
        return [t.model_dump() for t in engine.tiles()]


@app.get("/worlds/{world_id}/history")
def get_history(world_id: str):
    with _lock:
        engine = get_engine(world_id)
        return [e.model_dump() for e in engine.state.history]


@app.get("/worlds/{world_id}/landmark", response_model=LandmarkResponse)
def get_landmark(world_id: str):
    with _lock:
        engine = get_engine(world_id)
        meta = engine.state.meta
        landmark = meta.landmark
        return LandmarkResponse(
            landmark=landmark.model_dump() if landmark else None,
            center=list(meta.geo_center) if meta.geo_center else None,
            highlight_cells=[list(h) for h in engine.highlight_cells()],
            lines=describe_landmark(engine.state.world_map, meta),
        )


@app.get("/worlds/{world_id}/path")
def get_path(world_id: str, from_q: int, from_r: int, to_q: int, to_r: int, domain: Domain = Domain.LAND):
    """Shortest domain-restricted path between two hexes."""
    with _lock:
        engine = get_engine(world_id)
        path = engine.find_path(from_q, from_r, to_q, to_r, domain)
    return {"found": path is not None, "path": [list(h) for h in path] if path else []}


@app.post("/worlds/{world_id}/buildings")
def place_building(world_id: str, request: BuildingRequest):
    with _lock:
        engine = get_engine(world_id)
        building = engine.place_building(request.kind, request.q, request.r)
        if building is None:
            raise HTTPException(status_code=400, detail=f"Cannot place {request.kind} here")
        return building.model_dump()


@app.delete("/worlds/{world_id}/buildings/{building_id}")
def destroy_building(world_id: str, building_id: int):
    with _lock:
        engine = get_engine(world_id)
        if not engine.destroy_building(building_id):
            raise HTTPException(status_code=404, detail="Building not found")
    return {"destroyed": building_id}


@app.post("/worlds/{world_id}/buildings/{building_id}/ships")
def build_ship(world_id: str, building_id: int):
    with _lock:
        engine = get_engine(world_id)
        ship = engine.build_ship(building_id)
        if ship is None:
            raise HTTPException(status_code=400, detail="Cannot build a ship at this building")
        return ship.model_dump()


@app.put("/worlds/{world_id}/buildings/{building_id}/route")
def set_route(world_id: str, building_id: int, request: RouteRequest):
    with _lock:
        engine = get_engine(world_id)
        if not engine.set_docks_route(building_id, request.q, request.r):
            raise HTTPException(status_code=400, detail="Invalid docks route")
        return engine.state.building_by_id(building_id).model_dump()


@app.delete("/worlds/{world_id}/buildings/{building_id}/route")
def clear_route(world_id: str, building_id: int):
    with _lock:
        engine = get_engine(world_id)
        if not engine.clear_docks_route(building_id):
            raise HTTPException(status_code=400, detail="Invalid docks route")
        return engine.state.building_by_id(building_id).model_dump()


@app.post("/worlds/{world_id}/haulers")
def build_hauler(world_id: str):
    with _lock:
        engine = get_engine(world_id)
        hauler = engine.build_hauler()
        if hauler is None:
            raise HTTPException(status_code=400, detail="Cannot build a hauler")
        return hauler.model_dump()


@app.post("/worlds/{world_id}/end-turn")
def end_turn(world_id: str):
    with _lock:
        engine = get_engine(world_id)
        turn = engine.end_turn()
        summary = engine.summary()
    return {
        "turn": turn,
        "player_resources": summary["player_resources"],
        "buildings": summary["buildings"],
        "ships": summary["ships"],
        "haulers": summary["haulers"],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
