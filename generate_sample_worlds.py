#!/usr/bin/env python3
"""
Generate sample hex-island worlds and render them to PNG.

Each world runs the full pipeline:
1. Seeded island terrain with a water border
2. Biome summary and landmark
3. Fish shoals and the mobile base
4. Island lore (POIs, roads, history)

Usage:
    python generate_sample_worlds.py [seed]

If no seed is provided, defaults to "default_seed"
"""

import sys

import matplotlib.pyplot as plt
from matplotlib.patches import RegularPolygon

from deephex.config import settings
from deephex.core.engine import SimulationEngine
from deephex.core.renderer import Renderer
from deephex.utils.logging import configure_logging

TERRAIN_COLORS = {
    "water": "#2b6cb0",
    "plains": "#9ac67a",
    "grassland": "#b5d98a",
    "forest": "#3f7d3a",
    "mountain": "#8a7763",
    "swamp": "#5b6b3a",
    "sand": "#e3cf8a",
    "ice": "#e8f4fa",
    "volcano": "#5a2a1e",
}

POI_MARKERS = {
    "settlement": ("s", "#c53030"),
    "ruin": ("X", "#4a4a4a"),
    "crash_site": ("*", "#dd6b20"),
    "vehicle": ("D", "#805ad5"),
    "mine": ("^", "#2d3748"),
}


def render_world(engine: SimulationEngine, output_file: str) -> None:
    """Draw tiles, roads, POIs and fish for one world."""
    state = engine.state
    renderer = Renderer(hex_size=1.0)
    fig, ax = plt.subplots(figsize=(12, 10))

    for tile in state.world_map:
        x, y = renderer.coordinate_to_world(tile.q, tile.r)
        color = TERRAIN_COLORS.get(tile.type, "#cccccc")
        if tile.has_forest and tile.type != "forest":
            color = TERRAIN_COLORS["forest"]
        ax.add_patch(
            RegularPolygon(
                (x, -y), numVertices=6, radius=1.0, orientation=0,
                facecolor=color, edgecolor="black", linewidth=0.2,
            )
        )

    lore = state.meta.lore
    if lore is not None:
        for road in lore.roads:
            pts = [renderer.coordinate_to_world(h.q, h.r) for h in road.path]
            ax.plot([p[0] for p in pts], [-p[1] for p in pts], color="#744210", linewidth=1.5)

    for poi in state.pois:
        marker, color = POI_MARKERS.get(poi.type, ("o", "#1a202c"))
        x, y = renderer.coordinate_to_world(poi.q, poi.r)
        ax.plot(x, -y, marker=marker, color=color, markersize=8)
        if poi.name:
            ax.annotate(poi.name, (x, -y), fontsize=6, xytext=(4, 4), textcoords="offset points")

    for node in state.resources:
        x, y = renderer.coordinate_to_world(node.q, node.r)
        ax.plot(x, -y, marker="o", color="white", markersize=5, markeredgecolor="navy")

    if state.mobile_base is not None:
        x, y = renderer.coordinate_to_world(state.mobile_base.q, state.mobile_base.r)
        ax.plot(x, -y, marker="P", color="gold", markersize=12, markeredgecolor="black")

    ax.set_aspect("equal")
    ax.autoscale_view()
    ax.set_xticks([])
    ax.set_yticks([])

    island = lore.island_name if lore else "Unnamed island"
    title = f"{island} - {state.world_map.width}x{state.world_map.height}\n{state.meta.biome}"
    ax.set_title(title, fontsize=14, pad=20)

    ax.text(0.98, 0.02, f"Seed: {state.seed}", transform=ax.transAxes,
            bbox=dict(boxstyle="round,pad=0.3", facecolor="white", alpha=0.8),
            horizontalalignment="right", fontsize=10, family="monospace")

    plt.savefig(output_file, dpi=200, bbox_inches="tight", pad_inches=0.1)
    plt.close()


def main():
    """Generate a handful of sample worlds from one base seed."""
    configure_logging(settings.log_level, "console")
    seed = sys.argv[1] if len(sys.argv) > 1 else "default_seed"

    sizes = [(20, 20), (25, 25), (40, 30)]

    print("Generating sample worlds")
    print(f"Using seed: {seed}")
    print("=" * 60)

    for i, (width, height) in enumerate(sizes):
        world_seed = f"{seed}-{i}"
        engine = SimulationEngine.create_world(width, height, world_seed)
        output_file = f"world_{world_seed}_{width}x{height}.png"
        render_world(engine, output_file)

        print(f"\n{world_seed}: {engine.state.meta.biome}")
        for entry in engine.state.history:
            print(f"  {entry.year}: {entry.text}")
        print(f"  Saved to: {output_file}")

    print("\n" + "=" * 60)
    print("All worlds generated.")


if __name__ == "__main__":
    main()
