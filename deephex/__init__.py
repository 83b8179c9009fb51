"""
Deephex: seeded hex-island worlds with lore, ships, haulers and logistics.
"""

__version__ = "0.1.0"
