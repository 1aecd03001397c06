"""Game domain services: rooms, rotation, phases, timers and reveal.

This package contains the in-memory game core that socket handlers and
HTTP routes call into, keeping transport concerns separated from core
game mechanics.
"""
