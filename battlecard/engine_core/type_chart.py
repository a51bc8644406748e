"""
Type Chart - attack type -> defense type -> damage multiplier.

Pairs that are not listed are neutral (1.0).
"""

from __future__ import annotations

from .state import ElementType as T


SUPER_EFFECTIVE = 1.5
NOT_EFFECTIVE = 0.5
IMMUNE = 0.0


def _row(strong=(), weak=(), immune=()) -> dict[T, float]:
    row = {t: SUPER_EFFECTIVE for t in strong}
    row.update({t: NOT_EFFECTIVE for t in weak})
    row.update({t: IMMUNE for t in immune})
    return row


TYPE_CHART: dict[T, dict[T, float]] = {
    T.WATER: _row(strong=(T.FIRE, T.GROUND), weak=(T.WATER, T.GRASS, T.DRAGON)),
    T.FIRE: _row(strong=(T.GRASS, T.BUG), weak=(T.FIRE, T.WATER, T.DRAGON)),
    T.GRASS: _row(
        strong=(T.WATER, T.GROUND),
        weak=(T.FIRE, T.GRASS, T.POISON, T.BUG, T.DRAGON),
    ),
    T.ELECTRIC: _row(
        strong=(T.WATER,),
        weak=(T.GRASS, T.ELECTRIC, T.DRAGON),
        immune=(T.GROUND,),
    ),
    T.GROUND: _row(strong=(T.FIRE, T.ELECTRIC, T.POISON), weak=(T.GRASS, T.BUG)),
    T.FIGHTING: _row(
        strong=(T.NORMAL,),
        weak=(T.POISON, T.PSYCHIC, T.BUG),
        immune=(T.GHOST,),
    ),
    T.PSYCHIC: _row(strong=(T.FIGHTING, T.POISON), weak=(T.PSYCHIC,)),
    T.POISON: _row(strong=(T.GRASS, T.BUG), weak=(T.POISON, T.GROUND, T.GHOST)),
    T.BUG: _row(strong=(T.GRASS, T.PSYCHIC), weak=(T.FIRE, T.FIGHTING, T.GHOST)),
    T.GHOST: _row(strong=(T.GHOST, T.PSYCHIC), immune=(T.NORMAL,)),
    T.DRAGON: _row(strong=(T.DRAGON,)),
    T.NORMAL: _row(immune=(T.GHOST,)),
}


def multiplier(
    attack_type: T,
    defense_type: T,
    chart: dict[T, dict[T, float]] | None = None,
) -> float:
    """Look up the multiplier, defaulting to 1 for unlisted pairs."""
    table = TYPE_CHART if chart is None else chart
    return table.get(attack_type, {}).get(defense_type, 1.0)
