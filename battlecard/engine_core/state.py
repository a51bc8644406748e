"""
Game State - The single authoritative battle state.

Design principles:
- Immutable by convention: the reducer clones before it mutates,
  so a state handed to a caller is never changed afterwards
- Serializable: plain dataclasses and enums
- Deterministic: every random roll comes from the seeded rng in the state
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterator
from copy import deepcopy
from enum import Enum
import random
import time

from ..config import BattleRules, DEFAULT_RULES


class Side(Enum):
    """The two seats at the table."""
    PLAYER = "player"
    NPC = "npc"

    @property
    def opponent(self) -> Side:
        return Side.NPC if self is Side.PLAYER else Side.PLAYER


class GameStatus(Enum):
    """High-level battle lifecycle."""
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class Phase(Enum):
    """Phases within a single turn."""
    DRAW = "DRAW"
    MAIN = "MAIN"
    BATTLE = "BATTLE"
    END = "END"


class GameMode(Enum):
    QUICK_BATTLE = "QUICK_BATTLE"
    CAMPAIGN = "CAMPAIGN"
    SURVIVAL = "SURVIVAL"
    BOSS_RUSH = "BOSS_RUSH"
    DRAFT = "DRAFT"


class ElementType(Enum):
    GRASS = "GRASS"
    FIRE = "FIRE"
    WATER = "WATER"
    ELECTRIC = "ELECTRIC"
    DRAGON = "DRAGON"
    GHOST = "GHOST"
    NORMAL = "NORMAL"
    BUG = "BUG"
    POISON = "POISON"
    GROUND = "GROUND"
    FIGHTING = "FIGHTING"
    PSYCHIC = "PSYCHIC"


class CardKind(Enum):
    CREATURE = "CREATURE"
    SPELL = "SPELL"
    TRAP = "TRAP"


class Rarity(Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class StatusEffect(Enum):
    BURN = "BURN"          # periodic damage, -25% attack
    FREEZE = "FREEZE"      # chance to lose the turn's action
    PARALYZE = "PARALYZE"  # cannot attack for one turn
    POISON = "POISON"      # escalating periodic damage
    SLEEP = "SLEEP"        # skips two turns
    CONFUSE = "CONFUSE"    # chance to strike its own side


class AbilityTrigger(Enum):
    ON_SUMMON = "ON_SUMMON"
    ON_ATTACK = "ON_ATTACK"
    ON_DESTROY = "ON_DESTROY"
    ON_TURN_START = "ON_TURN_START"
    ON_TURN_END = "ON_TURN_END"
    ON_DAMAGE = "ON_DAMAGE"
    PASSIVE = "PASSIVE"


class TrapCondition(Enum):
    ON_ATTACK = "ON_ATTACK"
    ON_DIRECT_ATTACK = "ON_DIRECT_ATTACK"
    ON_SUMMON = "ON_SUMMON"
    ON_DESTROY = "ON_DESTROY"


class EffectKind(Enum):
    DAMAGE = "DAMAGE"
    HEAL = "HEAL"
    BUFF = "BUFF"
    DEBUFF = "DEBUFF"
    STATUS = "STATUS"
    DRAW = "DRAW"
    REVIVE = "REVIVE"
    DESTROY = "DESTROY"
    SPECIAL = "SPECIAL"


class EffectTarget(Enum):
    SELF = "SELF"
    ENEMY = "ENEMY"
    SINGLE_ENEMY = "SINGLE_ENEMY"
    ALL_ENEMIES = "ALL_ENEMIES"
    RANDOM_ENEMY = "RANDOM_ENEMY"
    SINGLE_ALLY = "SINGLE_ALLY"
    ALL_ALLIES = "ALL_ALLIES"
    OWNER = "OWNER"
    ENEMY_PLAYER = "ENEMY_PLAYER"
    GRAVEYARD = "GRAVEYARD"


class Stat(Enum):
    ATTACK = "ATTACK"
    DEFENSE = "DEFENSE"


class LogCategory(Enum):
    INFO = "info"
    COMBAT = "combat"
    EFFECT = "effect"
    STATUS = "status"
    SPELL = "spell"
    TRAP = "trap"


@dataclass(frozen=True)
class EffectSpec:
    """
    Effect payload shared by abilities, spells and traps.

    Which fields matter depends on kind; unknown combinations are
    ignored with a log line when resolved.
    """
    kind: EffectKind
    value: int = 0
    target: EffectTarget | None = None
    status: StatusEffect | None = None
    duration: int | None = None
    stat: Stat | None = None  # None means both attack and defense
    special_id: str | None = None
    element: ElementType | None = None  # for type-conditional passives


@dataclass(frozen=True)
class Ability:
    ability_id: str
    name: str
    trigger: AbilityTrigger
    effect: EffectSpec
    description: str = ""


@dataclass(frozen=True)
class CardDefinition:
    """
    Template for a card. Never mutated during a battle.

    Runtime copies are Card instances.
    """
    card_id: str
    name: str
    kind: CardKind = CardKind.CREATURE
    element: ElementType = ElementType.NORMAL
    attack: int = 0
    defense: int = 0
    level: int = 1
    rarity: Rarity = Rarity.COMMON
    ability: Ability | None = None
    spell_effect: EffectSpec | None = None
    trap_condition: TrapCondition | None = None
    trap_effect: EffectSpec | None = None

    @property
    def sacrifice_required(self) -> int:
        """Level 1 needs no tribute, level 2 one, level 3 two."""
        if self.kind is not CardKind.CREATURE:
            return 0
        return max(0, min(self.level, 3) - 1)


@dataclass
class StatusInstance:
    """An active status effect with its remaining duration."""
    status: StatusEffect
    remaining: int
    ticks: int = 0  # how many owner turn starts it has already ticked


@dataclass
class Card:
    """
    A physical card instance in the battle.

    instance_id identifies exactly one card across every zone of both players.
    """
    definition: CardDefinition
    instance_id: str
    attack: int = 0
    defense: int = 0
    has_attacked: bool = False
    statuses: list[StatusInstance] = field(default_factory=list)
    is_set: bool = False
    destroyed_at: float | None = None

    @classmethod
    def from_definition(cls, definition: CardDefinition, instance_id: str) -> Card:
        return cls(
            definition=definition,
            instance_id=instance_id,
            attack=definition.attack,
            defense=definition.defense,
        )

    def __hash__(self):
        return hash(self.instance_id)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return False
        return self.instance_id == other.instance_id

    @property
    def card_id(self) -> str:
        return self.definition.card_id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def kind(self) -> CardKind:
        return self.definition.kind

    @property
    def element(self) -> ElementType:
        return self.definition.element

    @property
    def level(self) -> int:
        return self.definition.level

    @property
    def sacrifice_required(self) -> int:
        return self.definition.sacrifice_required

    @property
    def ability(self) -> Ability | None:
        return self.definition.ability

    @property
    def is_creature(self) -> bool:
        return self.definition.kind is CardKind.CREATURE

    def get_status(self, status: StatusEffect) -> StatusInstance | None:
        for active in self.statuses:
            if active.status is status:
                return active
        return None

    def has_status(self, status: StatusEffect) -> bool:
        return self.get_status(status) is not None

    def reset_to_template(self):
        """Clear battle state, e.g. when leaving the field."""
        self.attack = self.definition.attack
        self.defense = self.definition.defense
        self.has_attacked = False
        self.statuses = []
        self.is_set = False


ZONES = ("deck", "hand", "field", "trap_zone", "graveyard")


@dataclass
class PlayerState:
    """
    One side of the table.

    deck is a draw-order queue (front is drawn first), field and trap_zone
    are ordered, graveyard is append-only in destruction order.
    """
    side: Side
    name: str
    hp: int = DEFAULT_RULES.starting_hp
    deck: list[Card] = field(default_factory=list)
    hand: list[Card] = field(default_factory=list)
    trap_zone: list[Card] = field(default_factory=list)
    graveyard: list[Card] = field(default_factory=list)
    # Declared last: this name shadows dataclasses.field inside the class body
    field: list[Card] = field(default_factory=list)

    def zone(self, name: str) -> list[Card]:
        if name not in ZONES:
            raise KeyError(f"Unknown zone: {name}")
        return getattr(self, name)

    def find(self, instance_id: str, zones: tuple[str, ...] = ZONES) -> tuple[str, Card] | None:
        """Locate a card by instance id; returns (zone name, card)."""
        for zone_name in zones:
            for card in self.zone(zone_name):
                if card.instance_id == instance_id:
                    return zone_name, card
        return None

    def field_card(self, instance_id: str | None) -> Card | None:
        if instance_id is None:
            return None
        found = self.find(instance_id, ("field",))
        return found[1] if found else None

    def hand_card(self, instance_id: str | None) -> Card | None:
        if instance_id is None:
            return None
        found = self.find(instance_id, ("hand",))
        return found[1] if found else None

    def remove(self, zone_name: str, instance_id: str) -> Card | None:
        """Remove and return a card from a zone, or None if absent."""
        cards = self.zone(zone_name)
        for i, card in enumerate(cards):
            if card.instance_id == instance_id:
                return cards.pop(i)
        return None

    def all_cards(self) -> Iterator[Card]:
        for zone_name in ZONES:
            yield from self.zone(zone_name)


@dataclass
class LogEntry:
    """One human-readable battle log line."""
    entry_id: int
    message: str
    category: LogCategory = LogCategory.INFO
    timestamp: float = 0.0


@dataclass
class BattleLog:
    """Append-only log capped to the most recent entries (newest last)."""
    capacity: int = DEFAULT_RULES.log_capacity
    entries: list[LogEntry] = field(default_factory=list)
    next_id: int = 1

    def append(
        self,
        message: str,
        category: LogCategory = LogCategory.INFO,
        timestamp: float | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            entry_id=self.next_id,
            message=message,
            category=category,
            timestamp=time.time() if timestamp is None else timestamp,
        )
        self.next_id += 1
        self.entries.append(entry)
        if len(self.entries) > self.capacity:
            del self.entries[: len(self.entries) - self.capacity]
        return entry

    def since(self, entry_id: int) -> list[LogEntry]:
        """Entries newer than the given id."""
        return [e for e in self.entries if e.entry_id > entry_id]

    @property
    def last_id(self) -> int:
        return self.next_id - 1

    def __len__(self):
        return len(self.entries)


@dataclass
class SideStats:
    damage_dealt: int = 0
    damage_received: int = 0
    cards_destroyed: int = 0
    cards_lost: int = 0
    spells_used: int = 0
    traps_activated: int = 0
    abilities_triggered: int = 0
    status_inflicted: dict[str, int] = field(default_factory=dict)


@dataclass
class MatchStats:
    """Per-battle accumulator, reported once when the battle ends."""
    sides: dict[Side, SideStats] = field(
        default_factory=lambda: {Side.PLAYER: SideStats(), Side.NPC: SideStats()}
    )
    turns: int = 1

    def of(self, side: Side) -> SideStats:
        return self.sides[side]

    def record_damage(self, target: Side, amount: int, source: Side | None):
        if amount <= 0:
            return
        self.sides[target].damage_received += amount
        if source is not None and source is not target:
            self.sides[source].damage_dealt += amount

    def record_destroyed(self, owner: Side, cause: Side | None):
        self.sides[owner].cards_lost += 1
        if cause is not None and cause is not owner:
            self.sides[cause].cards_destroyed += 1

    def record_status(self, source: Side, status: StatusEffect):
        counts = self.sides[source].status_inflicted
        counts[status.value] = counts.get(status.value, 0) + 1


class ResolutionStage(Enum):
    """Steps of an in-flight resolution, each separated by a presentation delay."""
    STRIKE = "strike"
    CLEANUP = "cleanup"
    TRIGGERS = "triggers"


@dataclass
class PendingResolution:
    """
    A resolution sequence that is still in flight.

    While one exists the battle is busy and only ADVANCE is accepted.
    """
    kind: str  # "attack" or "summon"
    stage: ResolutionStage
    side: Side
    card_id: str
    target_id: str | None = None
    delay_ms: int = 0
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class GameState:
    """
    Complete battle state at a point in time.

    All state changes go through the reducer.
    """
    game_id: str
    rules: BattleRules = DEFAULT_RULES
    mode: GameMode = GameMode.QUICK_BATTLE

    status: GameStatus = GameStatus.SETUP
    phase: Phase = Phase.DRAW
    current_side: Side = Side.PLAYER
    starter: Side = Side.PLAYER
    turn_count: int = 1

    players: dict[Side, PlayerState] = field(default_factory=dict)
    log: BattleLog = field(default_factory=BattleLog)

    # In-flight resolution (busy flag)
    pending: PendingResolution | None = None

    # Result (written once by the game-over guard)
    winner: Side | None = None
    end_reason: str | None = None

    stats: MatchStats = field(default_factory=MatchStats)
    action_history: list[Any] = field(default_factory=list)

    # Random seed for determinism
    random_seed: int = 0
    rng: random.Random = field(default_factory=random.Random)

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_side]

    @property
    def opponent_player(self) -> PlayerState:
        return self.players[self.current_side.opponent]

    @property
    def is_busy(self) -> bool:
        return self.pending is not None

    @property
    def is_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    def player(self, side: Side) -> PlayerState:
        return self.players[side]

    def add_log(
        self,
        message: str,
        category: LogCategory = LogCategory.INFO,
        timestamp: float | None = None,
    ) -> LogEntry:
        return self.log.append(message, category, timestamp)

    def clone(self) -> GameState:
        """
        Deep copy the state.

        Applied actions are never mutated, so the history list is copied
        but its entries are shared between the two states.
        """
        memo = {id(self.action_history): list(self.action_history)}
        return deepcopy(self, memo)
