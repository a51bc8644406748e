"""
Battlecard - Turn-Based Card Battle Engine

A deterministic, rules-driven engine for two-player creature card battles.
The engine owns a single authoritative battle state and provides:
- State management
- Legal action generation
- Deterministic combat and effect resolution
- Opponent strategies for automated play
"""

__version__ = "0.1.0"
