"""
Cards - The starter card catalog and battle setup.
"""

from .catalog import (
    ALL_CARDS,
    CREATURE_CARDS,
    SPELL_CARDS,
    TRAP_CARDS,
    all_cards,
    get_card,
    get_cards,
)
from .setup import build_npc_deck, create_battle, default_deck

__all__ = [
    "ALL_CARDS",
    "CREATURE_CARDS",
    "SPELL_CARDS",
    "TRAP_CARDS",
    "all_cards",
    "get_card",
    "get_cards",
    "build_npc_deck",
    "create_battle",
    "default_deck",
]
