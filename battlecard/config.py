"""
Battle rules configuration.

All tunable rule constants live in BattleRules. A rules instance travels
inside every GameState so each transition sees the same policy.

Environment overrides (read by BattleRules.from_env):
    BATTLECARD_DECK_OUT        "0"/"false" disables deck-out losses
    BATTLECARD_STARTING_HP     starting HP for both players, 1..max_hp
    BATTLECARD_LOG_CAPACITY    number of battle log entries kept
    BATTLECARD_FAST            "1" zeroes all presentation delays
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import os


_FALSY = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in _FALSY


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class BattleRules:
    """Rule constants for a single battle."""
    starting_hp: int = 8000
    max_hp: int = 8000
    max_field_size: int = 3
    max_trap_zone: int = 2
    initial_hand_size: int = 5
    log_capacity: int = 50

    # When False, drawing from an empty deck skips the draw instead of losing
    deck_out_enabled: bool = True

    # Presentation pacing (milliseconds). Never used for rules ordering.
    strike_delay_ms: int = 600
    cleanup_delay_ms: int = 200
    summon_delay_ms: int = 300
    opponent_delay_ms: int = 1000

    def __post_init__(self):
        if not 0 < self.starting_hp <= self.max_hp:
            raise ValueError("starting_hp must be within 1..max_hp")
        if self.max_field_size < 1 or self.max_trap_zone < 0:
            raise ValueError("zone sizes must be positive")
        if self.log_capacity < 1:
            raise ValueError("log_capacity must be at least 1")

    def without_delays(self) -> BattleRules:
        """Return rules with every presentation delay set to zero."""
        return replace(
            self,
            strike_delay_ms=0,
            cleanup_delay_ms=0,
            summon_delay_ms=0,
            opponent_delay_ms=0,
        )

    @classmethod
    def from_env(cls) -> BattleRules:
        """Build rules from defaults plus environment overrides."""
        rules = cls(
            starting_hp=_env_int("BATTLECARD_STARTING_HP", cls.starting_hp),
            log_capacity=_env_int("BATTLECARD_LOG_CAPACITY", cls.log_capacity),
            deck_out_enabled=_env_flag("BATTLECARD_DECK_OUT", cls.deck_out_enabled),
        )
        if _env_flag("BATTLECARD_FAST", False):
            rules = rules.without_delays()
        return rules


DEFAULT_RULES = BattleRules()
