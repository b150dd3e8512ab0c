"""Anyventure effects engine.

Turns authored data codes into typed deltas and recomputes a character's
derived state from a persisted baseline plus ordered overlays.
"""

__version__ = "0.1.0"
