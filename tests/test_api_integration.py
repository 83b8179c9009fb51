"""
Integration tests for the HTTP surface.

Tests cover:
- Service banner and health
- World creation, lookup and 404s
- Tiles, history, landmark and path queries
- Building placement errors and end-turn ticks
"""

import pytest
from fastapi.testclient import TestClient

from deephex.api import main
from deephex.api.main import app


class TestWorldEndpoints:
    """Test the world endpoints end to end."""

    def setup_method(self):
        """Set up test client and one world."""
        self.client = TestClient(app)
        response = self.client.post("/worlds", json={"seed": "123456", "width": 20, "height": 20})
        assert response.status_code == 200
        self.world = response.json()
        self.world_id = self.world["world_id"]

    def teardown_method(self):
        main._worlds.clear()

    def test_root_and_health(self):
        """Test root and health."""
        assert self.client.get("/").json()["status"] == "running"
        health = self.client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["worlds"] == 1

    def test_create_response(self):
        """Test create response."""
        assert self.world["seed"] == "123456"
        assert self.world["turn"] == 1
        assert " Biome, " in self.world["biome"]
        assert self.world["island_name"]

    def test_get_world(self):
        """Test get world."""
        response = self.client.get(f"/worlds/{self.world_id}")
        assert response.status_code == 200
        assert response.json()["world_id"] == self.world_id

    def test_unknown_world(self):
        """Test unknown world."""
        assert self.client.get("/worlds/nope").status_code == 404
        assert self.client.post("/worlds/nope/end-turn").status_code == 404

    def test_invalid_size(self):
        """Test invalid size."""
        response = self.client.post("/worlds", json={"seed": "x", "width": 1, "height": 20})
        assert response.status_code == 422

    def test_tiles(self):
        """Test tile listing for a world."""
        tiles = self.client.get(f"/worlds/{self.world_id}/tiles").json()
        assert len(tiles) == 400
        assert {"q", "r", "type", "elevation"} <= set(tiles[0])

    def test_history(self):
        """Test history is returned in year order."""
        history = self.client.get(f"/worlds/{self.world_id}/history").json()
        assert history[0]["type"] == "discovery"
        assert history[0]["year"] == 5000
        assert history[-1]["type"] == "arrival"

    def test_landmark(self):
        """Test landmark endpoint with highlight cells."""
        data = self.client.get(f"/worlds/{self.world_id}/landmark").json()
        if data["landmark"] is not None:
            assert data["lines"][0].startswith(data["landmark"]["label"])

    def test_path_same_point(self):
        """Test path same point."""
        base = self.world["mobile_base"]
        response = self.client.get(
            f"/worlds/{self.world_id}/path",
            params={"from_q": base[0], "from_r": base[1], "to_q": base[0], "to_r": base[1], "domain": "land"},
        )
        assert response.json() == {"found": True, "path": [base]}

    def test_unknown_building_kind(self):
        """Test unknown building kind."""
        response = self.client.post(f"/worlds/{self.world_id}/buildings", json={"kind": "castle"})
        assert response.status_code == 400

    def test_place_mine_and_tick(self):
        """Test place mine and tick."""
        response = self.client.post(f"/worlds/{self.world_id}/buildings", json={"kind": "mine"})
        assert response.status_code == 200
        mine = response.json()
        assert mine["max_scrap"] == 10

        tick = self.client.post(f"/worlds/{self.world_id}/end-turn").json()
        assert tick["turn"] == 2
        assert tick["buildings"][0]["storage_scrap"] == 1
        assert tick["player_resources"]["scrap"] == 160

    def test_destroy_missing_building(self):
        """Test destroy missing building."""
        assert self.client.delete(f"/worlds/{self.world_id}/buildings/7").status_code == 404

    def test_ship_needs_docks(self):
        """Test ship needs docks."""
        assert self.client.post(f"/worlds/{self.world_id}/buildings/7/ships").status_code == 400

    def test_route_needs_docks(self):
        """Test route needs docks."""
        response = self.client.put(f"/worlds/{self.world_id}/buildings/7/route", json={"q": 0, "r": 0})
        assert response.status_code == 400

    def test_clear_route_needs_docks(self):
        """Test clearing a route on a missing docks."""
        assert self.client.delete(f"/worlds/{self.world_id}/buildings/7/route").status_code == 400

    def test_build_hauler(self):
        """Test hauler build endpoint."""
        response = self.client.post(f"/worlds/{self.world_id}/haulers")
        assert response.status_code == 200
        assert response.json()["mode"] == "idle"
