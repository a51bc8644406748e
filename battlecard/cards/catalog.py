"""
Card Catalog - The starter card pool.

Card structure:
- Creatures: element, attack, defense, level (1-3) and an optional ability
- Spells: one effect resolved on cast
- Traps: a trigger condition and one effect, set face-down

Level decides the sacrifice cost: 1 -> 0, 2 -> 1, 3 -> 2.
"""

from __future__ import annotations

from ..engine_core.state import (
    Ability, AbilityTrigger, CardDefinition, CardKind, EffectKind, EffectSpec,
    EffectTarget, ElementType, Rarity, Stat, StatusEffect, TrapCondition,
)

E = ElementType
K = EffectKind
T = EffectTarget


def _rarity_for_level(level: int) -> Rarity:
    if level == 3:
        return Rarity.EPIC
    if level == 2:
        return Rarity.RARE
    return Rarity.COMMON


def creature(
    card_id: str,
    name: str,
    element: ElementType,
    attack: int,
    defense: int,
    level: int,
    rarity: Rarity | None = None,
    ability: Ability | None = None,
) -> CardDefinition:
    return CardDefinition(
        card_id=card_id,
        name=name,
        kind=CardKind.CREATURE,
        element=element,
        attack=attack,
        defense=defense,
        level=level,
        rarity=rarity or _rarity_for_level(level),
        ability=ability,
    )


def spell(card_id: str, name: str, effect: EffectSpec, rarity: Rarity = Rarity.COMMON) -> CardDefinition:
    return CardDefinition(card_id=card_id, name=name, kind=CardKind.SPELL, rarity=rarity, spell_effect=effect)


def trap(
    card_id: str,
    name: str,
    condition: TrapCondition,
    effect: EffectSpec,
    rarity: Rarity = Rarity.UNCOMMON,
) -> CardDefinition:
    return CardDefinition(
        card_id=card_id,
        name=name,
        kind=CardKind.TRAP,
        rarity=rarity,
        trap_condition=condition,
        trap_effect=effect,
    )


def ability(ability_id: str, name: str, trigger: AbilityTrigger, effect: EffectSpec, description: str = "") -> Ability:
    return Ability(ability_id=ability_id, name=name, trigger=trigger, effect=effect, description=description)


# === CREATURES ===
CREATURE_CARDS: list[CardDefinition] = [
    # Level 1
    creature("sproutling", "Sproutling", E.GRASS, 800, 600, 1),
    creature("emberkit", "Emberkit", E.FIRE, 900, 500, 1),
    creature("puddlefin", "Puddlefin", E.WATER, 700, 700, 1),
    creature("pebblepup", "Pebblepup", E.GROUND, 600, 900, 1),
    creature("scrapfist", "Scrapfist", E.FIGHTING, 1000, 400, 1),
    creature("fluffbun", "Fluffbun", E.NORMAL, 800, 800, 1),
    creature("mindling", "Mindling", E.PSYCHIC, 800, 500, 1),
    creature("hatchwyrm", "Hatchwyrm", E.DRAGON, 900, 600, 1),
    creature("beetlet", "Beetlet", E.BUG, 700, 500, 1),
    creature("dustmole", "Dustmole", E.GROUND, 750, 650, 1),
    creature("sparkmouse", "Sparkmouse", E.ELECTRIC, 900, 400, 1, Rarity.UNCOMMON, ability(
        "static_touch", "Static Touch", AbilityTrigger.ON_ATTACK,
        EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.PARALYZE),
        "Paralyzes the creature it attacks.",
    )),
    creature("mothwing", "Mothwing", E.BUG, 600, 500, 1, Rarity.UNCOMMON, ability(
        "drowsy_dust", "Drowsy Dust", AbilityTrigger.ON_SUMMON,
        EffectSpec(K.STATUS, target=T.RANDOM_ENEMY, status=StatusEffect.SLEEP),
        "Puts a random enemy creature to sleep.",
    )),
    creature("sludgling", "Sludgling", E.POISON, 700, 600, 1, Rarity.UNCOMMON, ability(
        "toxic_burst", "Toxic Burst", AbilityTrigger.ON_DESTROY,
        EffectSpec(K.STATUS, target=T.ENEMY, status=StatusEffect.POISON),
        "Poisons the creature that destroyed it.",
    )),
    creature("wisp", "Wisp", E.GHOST, 700, 500, 1, Rarity.UNCOMMON, ability(
        "flicker", "Flicker", AbilityTrigger.PASSIVE,
        EffectSpec(K.SPECIAL, value=25, target=T.SELF, special_id="evasion"),
        "25% chance to dodge attacks.",
    )),
    creature("thornlet", "Thornlet", E.GRASS, 600, 800, 1, Rarity.UNCOMMON, ability(
        "photosynthesis", "Photosynthesis", AbilityTrigger.ON_TURN_START,
        EffectSpec(K.HEAL, value=200, target=T.OWNER),
        "Heals its owner 200 HP each turn.",
    )),
    creature("cinderling", "Cinderling", E.FIRE, 850, 550, 1, Rarity.UNCOMMON, ability(
        "spark_shot", "Spark Shot", AbilityTrigger.ON_SUMMON,
        EffectSpec(K.DAMAGE, value=300, target=T.RANDOM_ENEMY),
        "Deals 300 damage to a random enemy creature.",
    )),

    # Level 2
    creature("vinebear", "Vinebear", E.GRASS, 1500, 1300, 2, ability=ability(
        "bark_skin", "Bark Skin", AbilityTrigger.ON_TURN_END,
        EffectSpec(K.BUFF, value=200, target=T.SELF, stat=Stat.DEFENSE),
        "Gains 200 defense at the end of each turn.",
    )),
    creature("blazehound", "Blazehound", E.FIRE, 1700, 1100, 2, ability=ability(
        "searing_bite", "Searing Bite", AbilityTrigger.ON_ATTACK,
        EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.BURN),
        "Burns the creature it attacks.",
    )),
    creature("reefguard", "Reefguard", E.WATER, 1400, 1600, 2, ability=ability(
        "tidal_wall", "Tidal Wall", AbilityTrigger.PASSIVE,
        EffectSpec(K.BUFF, value=300, target=T.ALL_ALLIES, stat=Stat.DEFENSE),
        "Allied creatures gain 300 defense.",
    )),
    creature("voltwing", "Voltwing", E.ELECTRIC, 1600, 1000, 2, ability=ability(
        "overcharge", "Overcharge", AbilityTrigger.PASSIVE,
        EffectSpec(K.SPECIAL, value=300, target=T.ALL_ALLIES, special_id="type_boost", element=E.ELECTRIC),
        "Allied ELECTRIC creatures gain 300 attack.",
    )),
    creature("quakeback", "Quakeback", E.GROUND, 1500, 1500, 2, ability=ability(
        "aftershock", "Aftershock", AbilityTrigger.ON_DESTROY,
        EffectSpec(K.DAMAGE, value=500, target=T.ENEMY_PLAYER),
        "Deals 500 damage to the opponent when destroyed.",
    )),
    creature("brawlhorn", "Brawlhorn", E.FIGHTING, 1800, 1000, 2),
    creature("hexmoth", "Hexmoth", E.BUG, 1300, 1200, 2, ability=ability(
        "dizzy_scales", "Dizzy Scales", AbilityTrigger.ON_ATTACK,
        EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.CONFUSE),
        "Confuses the creature it attacks.",
    )),
    creature("venomaw", "Venomaw", E.POISON, 1500, 1200, 2, ability=ability(
        "venom_fang", "Venom Fang", AbilityTrigger.ON_ATTACK,
        EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.POISON),
        "Poisons the creature it attacks.",
    )),
    creature("shadeclaw", "Shadeclaw", E.GHOST, 1600, 1000, 2, ability=ability(
        "dread_aura", "Dread Aura", AbilityTrigger.PASSIVE,
        EffectSpec(K.DEBUFF, value=200, target=T.ALL_ENEMIES, stat=Stat.ATTACK),
        "Enemy creatures lose 200 attack.",
    )),
    creature("dreamseer", "Dreamseer", E.PSYCHIC, 1400, 1200, 2, ability=ability(
        "foresight", "Foresight", AbilityTrigger.ON_SUMMON,
        EffectSpec(K.DRAW, value=1, target=T.OWNER),
        "Draws a card when summoned.",
    )),
    creature("frostfang", "Frostfang", E.WATER, 1500, 1200, 2, ability=ability(
        "ice_fang", "Ice Fang", AbilityTrigger.ON_ATTACK,
        EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.FREEZE),
        "Freezes the creature it attacks.",
    )),
    creature("wyrmling", "Wyrmling", E.DRAGON, 1800, 1400, 2),

    # Level 3
    creature("elderoak", "Elderoak", E.GRASS, 2500, 2600, 3, ability=ability(
        "deep_roots", "Deep Roots", AbilityTrigger.ON_TURN_START,
        EffectSpec(K.HEAL, value=500, target=T.OWNER),
        "Heals its owner 500 HP each turn.",
    )),
    creature("infernodrake", "Infernodrake", E.FIRE, 2800, 2000, 3, ability=ability(
        "firestorm", "Firestorm", AbilityTrigger.ON_SUMMON,
        EffectSpec(K.DAMAGE, value=500, target=T.ALL_ENEMIES),
        "Deals 500 damage to every enemy creature.",
    )),
    creature("leviathan", "Abyssal Leviathan", E.WATER, 2700, 2500, 3, ability=ability(
        "wrath_of_the_deep", "Wrath of the Deep", AbilityTrigger.ON_DAMAGE,
        EffectSpec(K.BUFF, value=300, target=T.SELF, stat=Stat.ATTACK),
        "Gains 300 attack whenever its owner takes damage.",
    )),
    creature("stormcaller", "Stormcaller", E.ELECTRIC, 2600, 2000, 3, ability=ability(
        "chain_lightning", "Chain Lightning", AbilityTrigger.ON_ATTACK,
        EffectSpec(K.DAMAGE, value=400, target=T.RANDOM_ENEMY),
        "Deals 400 damage to a random enemy creature when attacking.",
    )),
    creature("titanmaw", "Titanmaw", E.GROUND, 2400, 2900, 3),
    creature("phantom_king", "Phantom King", E.GHOST, 2600, 2200, 3, ability=ability(
        "undying_court", "Undying Court", AbilityTrigger.ON_DESTROY,
        EffectSpec(K.REVIVE, value=1, target=T.GRAVEYARD),
        "Returns the last destroyed creature to the hand at full strength.",
    )),
    creature("oracle", "Grand Oracle", E.PSYCHIC, 2500, 2300, 3, ability=ability(
        "prophecy", "Prophecy", AbilityTrigger.ON_TURN_END,
        EffectSpec(K.DRAW, value=1, target=T.OWNER),
        "Draws a card at the end of each turn.",
    )),
    creature("skyrend", "Skyrend Dragon", E.DRAGON, 3000, 2500, 3, Rarity.LEGENDARY, ability(
        "sky_sunder", "Sky Sunder", AbilityTrigger.ON_SUMMON,
        EffectSpec(K.DESTROY, target=T.RANDOM_ENEMY),
        "Destroys a random enemy creature when summoned.",
    )),
]


# === SPELLS ===
SPELL_CARDS: list[CardDefinition] = [
    # Healing
    spell("spell_potion", "Potion", EffectSpec(K.HEAL, 1000, T.OWNER)),
    spell("spell_super_potion", "Super Potion", EffectSpec(K.HEAL, 2000, T.OWNER), Rarity.UNCOMMON),
    spell("spell_hyper_potion", "Hyper Potion", EffectSpec(K.HEAL, 3500, T.OWNER), Rarity.RARE),
    spell("spell_full_restore", "Full Restore", EffectSpec(K.HEAL, 5000, T.OWNER), Rarity.EPIC),

    # Buffs
    spell("spell_x_attack", "X-Attack", EffectSpec(K.BUFF, 500, T.SINGLE_ALLY, stat=Stat.ATTACK)),
    spell("spell_x_defense", "X-Defense", EffectSpec(K.BUFF, 500, T.SINGLE_ALLY, stat=Stat.DEFENSE)),
    spell("spell_rare_candy", "Rare Candy", EffectSpec(K.BUFF, 800, T.SINGLE_ALLY, stat=Stat.ATTACK), Rarity.UNCOMMON),
    spell("spell_protein", "Protein", EffectSpec(K.BUFF, 800, T.SINGLE_ALLY, stat=Stat.DEFENSE), Rarity.RARE),
    spell("spell_mass_protein", "Mass Protein", EffectSpec(K.BUFF, 500, T.ALL_ALLIES, stat=Stat.ATTACK), Rarity.RARE),

    # Damage
    spell("spell_thunder", "Thunder", EffectSpec(K.DAMAGE, 800, T.SINGLE_ENEMY), Rarity.UNCOMMON),
    spell("spell_fire_blast", "Fire Blast", EffectSpec(K.DAMAGE, 1200, T.SINGLE_ENEMY), Rarity.RARE),
    spell("spell_blizzard", "Blizzard", EffectSpec(K.DAMAGE, 600, T.ALL_ENEMIES), Rarity.RARE),
    spell("spell_earthquake", "Earthquake", EffectSpec(K.DAMAGE, 500, T.ALL_ENEMIES), Rarity.UNCOMMON),

    # Capture
    spell("spell_capture_ball", "Capture Ball", EffectSpec(K.DESTROY, target=T.SINGLE_ENEMY, special_id="capture"), Rarity.UNCOMMON),
    spell("spell_great_ball", "Great Ball", EffectSpec(K.DESTROY, target=T.SINGLE_ENEMY, special_id="capture_better"), Rarity.RARE),
    spell("spell_master_ball", "Master Ball", EffectSpec(K.DESTROY, target=T.SINGLE_ENEMY, special_id="capture_guaranteed"), Rarity.LEGENDARY),

    # Draw
    spell("spell_scout", "Scout", EffectSpec(K.DRAW, 1, T.OWNER)),
    spell("spell_professor", "Professor's Advice", EffectSpec(K.DRAW, 2, T.OWNER), Rarity.RARE),

    # Status
    spell("spell_sleep_powder", "Sleep Powder", EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.SLEEP), Rarity.UNCOMMON),
    spell("spell_toxic", "Toxic", EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.POISON), Rarity.UNCOMMON),
    spell("spell_will_o_wisp", "Will-o-Wisp", EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.BURN), Rarity.UNCOMMON),
    spell("spell_thunder_wave", "Thunder Wave", EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.PARALYZE), Rarity.UNCOMMON),
    spell("spell_confuse_ray", "Confuse Ray", EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.CONFUSE), Rarity.RARE),

    # Revive
    spell("spell_revive", "Revive", EffectSpec(K.REVIVE, target=T.GRAVEYARD), Rarity.RARE),
    spell("spell_max_revive", "Max Revive", EffectSpec(K.REVIVE, 1, T.GRAVEYARD), Rarity.EPIC),
]


# === TRAPS ===
TRAP_CARDS: list[CardDefinition] = [
    # Counter-attack
    trap("trap_counter", "Counter", TrapCondition.ON_ATTACK,
         EffectSpec(K.DAMAGE, 500, T.SINGLE_ENEMY), Rarity.COMMON),
    trap("trap_mirror_coat", "Mirror Coat", TrapCondition.ON_ATTACK,
         EffectSpec(K.DAMAGE, 0, T.SINGLE_ENEMY, special_id="reflect_damage"), Rarity.RARE),

    # Protection
    trap("trap_protect", "Protect", TrapCondition.ON_DIRECT_ATTACK,
         EffectSpec(K.SPECIAL, special_id="negate_attack")),
    trap("trap_endure", "Endure", TrapCondition.ON_DESTROY,
         EffectSpec(K.SPECIAL, special_id="survive_1hp"), Rarity.RARE),

    # Status
    trap("trap_poison_spikes", "Poison Spikes", TrapCondition.ON_SUMMON,
         EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.POISON)),
    trap("trap_thunder_trap", "Thunder Trap", TrapCondition.ON_ATTACK,
         EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.PARALYZE)),
    trap("trap_freeze_trap", "Freeze Trap", TrapCondition.ON_ATTACK,
         EffectSpec(K.STATUS, target=T.SINGLE_ENEMY, status=StatusEffect.FREEZE), Rarity.RARE),

    # Destruction
    trap("trap_destiny_bond", "Destiny Bond", TrapCondition.ON_DESTROY,
         EffectSpec(K.DESTROY, target=T.SINGLE_ENEMY), Rarity.EPIC),
    trap("trap_explosion", "Explosion", TrapCondition.ON_ATTACK,
         EffectSpec(K.DAMAGE, 1500, T.ALL_ENEMIES), Rarity.RARE),

    # Debuff
    trap("trap_scary_face", "Scary Face", TrapCondition.ON_SUMMON,
         EffectSpec(K.DEBUFF, 400, T.ALL_ENEMIES, stat=Stat.ATTACK)),
    trap("trap_intimidate", "Intimidate", TrapCondition.ON_ATTACK,
         EffectSpec(K.DEBUFF, 600, T.SINGLE_ENEMY, stat=Stat.ATTACK), Rarity.RARE),
]


ALL_CARDS: list[CardDefinition] = CREATURE_CARDS + SPELL_CARDS + TRAP_CARDS

_BY_ID: dict[str, CardDefinition] = {c.card_id: c for c in ALL_CARDS}


def get_card(card_id: str) -> CardDefinition | None:
    """Get a card definition by ID."""
    return _BY_ID.get(card_id)


def get_cards(card_ids: list[str]) -> list[CardDefinition]:
    """Resolve a list of IDs, raising on unknown ones."""
    missing = [cid for cid in card_ids if cid not in _BY_ID]
    if missing:
        raise KeyError(f"Unknown card ids: {', '.join(missing)}")
    return [_BY_ID[cid] for cid in card_ids]


def all_cards() -> list[CardDefinition]:
    return list(ALL_CARDS)
