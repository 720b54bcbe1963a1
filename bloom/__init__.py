"""
Bloom - Garden Tile-Placement Rules Engine

An authoritative rules engine for an eight-season, multiplayer garden
board game played on a 6x6 grid per player. The engine provides:
- Dice rolls and placement legality
- Pattern scoring over board topology
- Season lifecycle and scheduled water events
- A greedy automa opponent
- In-memory rooms and an HTTP/WebSocket API around the engine
"""

__version__ = "0.1.0"
