"""
Reducer - Applies actions to battle state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- (state, action) -> new state; the input state is never changed
- Validates before applying
- Returns ActionResult with success/failure
- A rejected action yields the input state plus one log line
- Trigger events are dispatched FIFO through the ability processor and
  the trap engine; their effect bundles are applied here and nowhere else
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Callable
import logging
import time

from .abilities import AbilityProcessor
from .action import Action, ActionResult, ActionType
from .combat import effective_stats, resolve_combat, resolve_direct_attack
from .events import (
    Attacked, Damaged, Destroyed, DirectAttacked, EffectBundle, Summoned,
    TriggerEvent, TurnEnded, TurnStarted,
)
from .game_over import GameOverGuard
from .spells import SpellResolver
from .state import (
    Card, CardKind, GameState, GameStatus, LogCategory, PendingResolution, Phase,
    ResolutionStage, Side, Stat, StatusEffect,
)
from .status import CONFUSE_CHANCE, StatusProcessor, apply_status
from .summon import SummonValidator
from .traps import TrapEngine

logger = logging.getLogger(__name__)


# Upper bound on events processed for one action
MAX_CHAIN_LENGTH = 64

_PHASES = {
    ActionType.DRAW: {Phase.DRAW},
    ActionType.SUMMON: {Phase.MAIN},
    ActionType.USE_SPELL: {Phase.MAIN},
    ActionType.SET_TRAP: {Phase.MAIN},
    ActionType.GO_TO_BATTLE: {Phase.MAIN},
    ActionType.ATTACK: {Phase.BATTLE},
    ActionType.END_TURN: {Phase.MAIN, Phase.BATTLE},
}


@dataclass
class Reducer:
    """
    Reducer applies actions to battle state.

    Stateless - all state is in GameState. The processors it holds are
    stateless too; clock only stamps log entries and graveyard arrivals.
    """
    clock: Callable[[], float] = time.time
    abilities: AbilityProcessor = field(default_factory=AbilityProcessor)
    traps: TrapEngine = field(default_factory=TrapEngine)
    spells: SpellResolver = field(default_factory=SpellResolver)
    statuses: StatusProcessor = field(default_factory=StatusProcessor)
    summons: SummonValidator = field(default_factory=SummonValidator)
    guard: GameOverGuard = field(default_factory=GameOverGuard)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the battle state.

        Returns ActionResult with new state or error.
        """
        # Validate action is legal
        validation = self._validate_action(state, action)
        if validation:
            message, code = validation
            return self._reject(state, message, code)

        # Dispatch to handler based on action type
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
                state=state,
            )

        new_state = state.clone()
        last_log = new_state.log.last_id
        try:
            result = handler(new_state, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR", state=state)

        # Log action to history if successful
        if result.success and result.new_state:
            result.new_state.action_history.append(action)
            result.state_changes = [e.message for e in result.new_state.log.since(last_log)]
        return result

    def _validate_action(self, state: GameState, action: Action) -> tuple[str, str] | None:
        """
        Validate that an action is legal in the current state.

        Returns (error message, error code) if invalid, None if valid.
        """
        if state.status is GameStatus.SETUP:
            return "Battle not started", "INVALID_ACTION"
        if state.status is GameStatus.GAME_OVER:
            return "Battle is over - no actions allowed", "GAME_OVER"

        if action.action_type is ActionType.ADVANCE:
            if state.pending is None:
                return "Nothing to advance", "INVALID_ACTION"
            return None

        # While a resolution is in flight only ADVANCE gets through
        if state.pending is not None:
            return "Wait for the current resolution to finish", "BUSY"

        side = action.side
        if side is None:
            return "Action has no side", "INVALID_ACTION"
        if action.action_type is ActionType.SURRENDER:
            return None
        if side is not state.current_side:
            return f"Not {state.player(side).name}'s turn", "INVALID_ACTION"

        allowed = _PHASES.get(action.action_type)
        if allowed is not None and state.phase not in allowed:
            if state.phase is Phase.DRAW:
                return "Draw a card first", "INVALID_ACTION"
            return (
                f"Cannot {action.action_type.value.lower().replace('_', ' ')} "
                f"during the {state.phase.value} phase",
                "INVALID_ACTION",
            )
        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.DRAW: self._handle_draw,
            ActionType.SUMMON: self._handle_summon,
            ActionType.USE_SPELL: self._handle_use_spell,
            ActionType.SET_TRAP: self._handle_set_trap,
            ActionType.GO_TO_BATTLE: self._handle_go_to_battle,
            ActionType.ATTACK: self._handle_attack,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.WAIT: self._handle_wait,
            ActionType.SURRENDER: self._handle_surrender,
            ActionType.ADVANCE: self._handle_advance,
        }
        return handlers.get(action_type)

    # ------------------------------------------------------------------
    # Rejection helpers

    def _reject(self, state: GameState, message: str, code: str = "INVALID_ACTION") -> ActionResult:
        """Reject before any work: copy the input state and explain."""
        return self._refuse(state.clone(), message, code)

    def _refuse(self, state: GameState, message: str, code: str = "INVALID_ACTION") -> ActionResult:
        """Reject from inside a handler that has not mutated its working copy yet."""
        logger.debug("Rejected action: %s", message)
        self._log(state, f"Action rejected: {message}")
        return ActionResult.failure(message, error_code=code, state=state)

    def _log(self, state: GameState, message: str, category: LogCategory = LogCategory.INFO):
        state.add_log(message, category, self.clock())

    # ------------------------------------------------------------------
    # Handlers

    def _handle_draw(self, state: GameState, action: Action) -> ActionResult:
        """Start-of-turn sequence: status tick, turn-start triggers, draw."""
        side = state.current_side
        player = state.player(side)

        tick = self.statuses.tick(state, side)
        self.statuses.apply(state, tick)
        if tick.total_damage and player.hp <= 0:
            self.guard.finish(state, side.opponent, "status_damage", self.clock())
            return ActionResult.success_with_state(state)

        self._run_chain(state, [TurnStarted(side)])
        if state.is_over:
            return ActionResult.success_with_state(state)

        if not player.deck:
            if state.rules.deck_out_enabled:
                self._log(state, f"{player.name} has no cards left to draw!")
                self.guard.finish(state, side.opponent, "deck_out", self.clock())
                return ActionResult.success_with_state(state)
            self._log(state, f"{player.name}'s deck is empty. No card drawn.")
        else:
            player.hand.append(player.deck.pop(0))
            self._log(state, f"{player.name} drew a card.")

        state.phase = Phase.MAIN
        return ActionResult.success_with_state(state)

    def _handle_summon(self, state: GameState, action: Action) -> ActionResult:
        side = action.side
        player = state.player(side)
        payload = action.payload

        check = self.summons.validate(player, payload.card_id, payload.sacrifices, state.rules)
        if not check.ok:
            return self._refuse(state, check.reason)

        card = player.remove("hand", payload.card_id)
        tributes = []
        for sacrifice_id in check.from_hand:
            tributes.append(self._to_graveyard(state, side, "hand", sacrifice_id))
        for sacrifice_id in check.from_field:
            tributes.append(self._to_graveyard(state, side, "field", sacrifice_id))

        card.has_attacked = False
        player.field.append(card)

        message = f"{player.name} summoned {card.name}!"
        if tributes:
            message += f" (sacrificed {', '.join(c.name for c in tributes)})"
        self._log(state, message)

        state.pending = PendingResolution(
            kind="summon",
            stage=ResolutionStage.TRIGGERS,
            side=side,
            card_id=card.instance_id,
            delay_ms=state.rules.summon_delay_ms,
        )
        return ActionResult.success_with_state(state)

    def _handle_use_spell(self, state: GameState, action: Action) -> ActionResult:
        side = action.side
        player = state.player(side)
        card = player.hand_card(action.payload.card_id)
        if card is None:
            return self._refuse(state, "Card is not in hand")
        if card.kind is not CardKind.SPELL:
            return self._refuse(state, f"{card.name} is not a spell")

        error = self.spells.validate_target(state, side, card, action.payload.target_id)
        if error:
            return self._refuse(state, error)

        self._to_graveyard(state, side, "hand", card.instance_id)
        state.stats.of(side).spells_used += 1
        self._log(state, f"{player.name} cast {card.name}!", LogCategory.SPELL)

        bundle = self.spells.resolve(state, side, card, action.payload.target_id)
        events, _ = self._apply_bundle(state, bundle)
        self._run_chain(state, events)
        return ActionResult.success_with_state(state)

    def _handle_set_trap(self, state: GameState, action: Action) -> ActionResult:
        side = action.side
        player = state.player(side)
        card = player.hand_card(action.payload.card_id)
        if card is None:
            return self._refuse(state, "Card is not in hand")
        if card.kind is not CardKind.TRAP:
            return self._refuse(state, f"{card.name} is not a trap")
        if len(player.trap_zone) >= state.rules.max_trap_zone:
            return self._refuse(state, "The trap zone is full")

        player.remove("hand", card.instance_id)
        card.is_set = True
        player.trap_zone.append(card)
        self._log(state, f"{player.name} set a card face-down.", LogCategory.TRAP)
        return ActionResult.success_with_state(state)

    def _handle_go_to_battle(self, state: GameState, action: Action) -> ActionResult:
        state.phase = Phase.BATTLE
        self._log(state, f"{state.current_player.name} enters the battle phase.")

        # The starting player may not attack on the very first turn
        if state.turn_count == 1 and state.current_side is state.starter:
            self._log(state, "The first player cannot attack on turn 1. Ending turn.")
            self._end_turn(state)
        return ActionResult.success_with_state(state)

    def _handle_attack(self, state: GameState, action: Action) -> ActionResult:
        side = action.side
        player = state.player(side)
        opponent = state.player(side.opponent)
        payload = action.payload

        attacker = player.field_card(payload.card_id)
        if attacker is None:
            return self._refuse(state, "Attacker is not on your field")
        if attacker.has_attacked:
            return self._refuse(state, f"{attacker.name} cannot attack again this turn")
        if state.turn_count == 1 and side is state.starter:
            return self._refuse(state, "The first player cannot attack on turn 1")

        defender = None
        if payload.target_id is None:
            if opponent.field:
                return self._refuse(state, "Cannot attack directly while the opponent has creatures")
        else:
            defender = opponent.field_card(payload.target_id)
            if defender is None:
                return self._refuse(state, "Target is not on the opponent's field")

        attacker.has_attacked = True
        if defender is None:
            self._log(state, f"{attacker.name} attacks {opponent.name} directly!", LogCategory.COMBAT)
        else:
            self._log(state, f"{attacker.name} attacks {defender.name}!", LogCategory.COMBAT)

        if attacker.has_status(StatusEffect.CONFUSE) and state.rng.random() < CONFUSE_CHANCE:
            hurt = effective_stats(state, side, attacker, self.abilities).attack // 2
            self._log(
                state,
                f"{attacker.name} is confused and hurts its own side for {hurt}!",
                LogCategory.STATUS,
            )
            self._run_chain(state, self._damage_player(state, side, hurt, None, "confusion"))
            return ActionResult.success_with_state(state)

        if defender is None:
            event = DirectAttacked(side, attacker.instance_id)
        else:
            event = Attacked(side, attacker.instance_id, defender.instance_id)
        negated = self._run_chain(state, [event])
        if state.is_over:
            return ActionResult.success_with_state(state)

        if negated:
            return ActionResult.success_with_state(state)
        if player.field_card(attacker.instance_id) is None:
            self._log(state, f"{attacker.name} left the field. The attack fizzles.", LogCategory.COMBAT)
            return ActionResult.success_with_state(state)
        if defender is not None and opponent.field_card(defender.instance_id) is None:
            self._log(state, f"{defender.name} left the field. The attack fizzles.", LogCategory.COMBAT)
            return ActionResult.success_with_state(state)

        state.pending = PendingResolution(
            kind="attack",
            stage=ResolutionStage.STRIKE,
            side=side,
            card_id=attacker.instance_id,
            target_id=payload.target_id,
            delay_ms=state.rules.strike_delay_ms,
        )
        return ActionResult.success_with_state(state)

    def _handle_end_turn(self, state: GameState, action: Action) -> ActionResult:
        self._end_turn(state)
        return ActionResult.success_with_state(state)

    def _handle_wait(self, state: GameState, action: Action) -> ActionResult:
        """Explicit no-op; the opponent had nothing better to do."""
        return ActionResult.success_with_state(state)

    def _handle_surrender(self, state: GameState, action: Action) -> ActionResult:
        self._log(state, f"{state.player(action.side).name} surrenders.")
        self.guard.finish(state, action.side.opponent, "surrender", self.clock())
        return ActionResult.success_with_state(state)

    def _handle_advance(self, state: GameState, action: Action) -> ActionResult:
        """Run the next stage of the in-flight resolution."""
        pending = state.pending
        if pending.kind == "summon":
            state.pending = None
            if state.player(pending.side).field_card(pending.card_id) is None:
                return ActionResult.success_with_state(state)
            self._run_chain(state, [Summoned(pending.side, pending.card_id)])
        elif pending.stage is ResolutionStage.STRIKE:
            self._resolve_strike(state, pending)
        else:
            self._resolve_cleanup(state, pending)
        return ActionResult.success_with_state(state)

    # ------------------------------------------------------------------
    # Attack stages

    def _resolve_strike(self, state: GameState, pending: PendingResolution):
        side = pending.side
        attacker = state.player(side).field_card(pending.card_id)
        if attacker is None:
            state.pending = None
            self._log(state, "The attacker is gone. The attack fizzles.", LogCategory.COMBAT)
            return

        atk = effective_stats(state, side, attacker, self.abilities)
        if pending.target_id is None:
            state.pending = None
            damage = resolve_direct_attack(atk)
            self._log(state, f"DIRECT ATTACK! {attacker.name} deals {damage} damage!", LogCategory.COMBAT)
            self._run_chain(state, self._damage_player(state, side.opponent, damage, side, "direct_attack"))
            return

        defender = state.player(side.opponent).field_card(pending.target_id)
        if defender is None:
            state.pending = None
            self._log(state, "The target is gone. The attack fizzles.", LogCategory.COMBAT)
            return

        dfn = effective_stats(state, side.opponent, defender, self.abilities)
        if dfn.evasion and state.rng.random() * 100 < dfn.evasion:
            state.pending = None
            self._log(state, f"{defender.name} evaded the attack!", LogCategory.COMBAT)
            return

        result = resolve_combat(atk, dfn)
        message = f"{attacker.name} ({result.effective_attack} ATK) vs {defender.name} ({result.effective_defense} DEF)"
        if result.multiplier > 1:
            message += " - super effective!"
        elif result.multiplier == 0:
            message += " - no effect!"
        elif result.multiplier < 1:
            message += " - not very effective."
        self._log(state, message, LogCategory.COMBAT)

        pending.stage = ResolutionStage.CLEANUP
        pending.delay_ms = state.rules.cleanup_delay_ms
        pending.data = {
            "attacker_destroyed": not result.attacker_survived,
            "defender_destroyed": not result.defender_survived,
        }

        events = []
        events += self._damage_player(state, side.opponent, result.damage_to_defender_owner, side, "combat")
        if not state.is_over:
            events += self._damage_player(state, side, result.damage_to_attacker_owner, side.opponent, "combat")
        self._run_chain(state, events)

    def _resolve_cleanup(self, state: GameState, pending: PendingResolution):
        state.pending = None
        side = pending.side
        events = []
        if pending.data.get("defender_destroyed"):
            event = self._destroy(state, side.opponent, pending.target_id, side, pending.card_id)
            if event:
                events.append(event)
        if pending.data.get("attacker_destroyed"):
            event = self._destroy(state, side, pending.card_id, side.opponent, pending.target_id)
            if event:
                events.append(event)
        self._run_chain(state, events)

    def _end_turn(self, state: GameState):
        side = state.current_side
        state.phase = Phase.END
        self._run_chain(state, [TurnEnded(side)])
        if state.is_over:
            return

        for player in state.players.values():
            for card in player.field:
                card.has_attacked = False

        state.current_side = side.opponent
        state.turn_count += 1
        state.stats.turns = state.turn_count
        state.phase = Phase.DRAW
        self._log(state, f"Turn {state.turn_count}: {state.current_player.name}'s turn.")

    # ------------------------------------------------------------------
    # Event chain

    def _run_chain(self, state: GameState, events: list[TriggerEvent]) -> bool:
        """
        Process trigger events first-in first-out.

        Abilities resolve before traps for the same event. Returns True if
        a trap negated an attack along the way.
        """
        queue = deque(events)
        negated = False
        processed = 0
        while queue and not state.is_over:
            processed += 1
            if processed > MAX_CHAIN_LENGTH:
                logger.warning("Effect chain cut off after %d events in %s", MAX_CHAIN_LENGTH, state.game_id)
                self._log(state, "The chain of effects fizzles out.", LogCategory.EFFECT)
                break
            event = queue.popleft()
            for evaluate in (self.abilities.evaluate, self.traps.scan):
                bundle = evaluate(state, event)
                if bundle.is_empty:
                    continue
                new_events, negate = self._apply_bundle(state, bundle)
                negated = negated or negate
                queue.extend(new_events)
                if state.is_over:
                    break
        return negated

    def _apply_bundle(self, state: GameState, bundle: EffectBundle) -> tuple[list[TriggerEvent], bool]:
        """Apply one effect bundle; returns the follow-up events and the negate flag."""
        source = bundle.source
        events: list[TriggerEvent] = []

        if source is not None:
            stats = state.stats.of(source)
            stats.abilities_triggered += bundle.abilities_triggered
            stats.traps_activated += bundle.traps_activated

        for message, category in bundle.logs:
            self._log(state, message, category)

        for trap_id in bundle.spent_traps:
            if source is not None and state.player(source).find(trap_id, ("trap_zone",)):
                self._to_graveyard(state, source, "trap_zone", trap_id)

        for side, amount in bundle.heals:
            self._heal(state, side, amount)

        for change in bundle.stat_changes:
            found = self._field_lookup(state, change.target_id)
            if found is None:
                self._log(state, "The effect missed: target is gone.", LogCategory.EFFECT)
                continue
            _, card = found
            if change.stat in (None, Stat.ATTACK):
                card.attack = max(0, card.attack + change.delta)
            if change.stat in (None, Stat.DEFENSE):
                card.defense = max(0, card.defense + change.delta)

        for application in bundle.statuses:
            found = self._field_lookup(state, application.target_id)
            if found is None:
                self._log(state, "The effect missed: target is gone.", LogCategory.STATUS)
                continue
            _, card = found
            apply_status(card, application.status, application.duration)
            if source is not None:
                state.stats.record_status(source, application.status)
            self._log(state, f"{card.name} is afflicted with {application.status.value}!", LogCategory.STATUS)

        for hit in bundle.creature_damage:
            found = self._field_lookup(state, hit.target_id)
            if found is None:
                self._log(state, "The effect missed: target is gone.", LogCategory.EFFECT)
                continue
            owner, card = found
            card.defense -= hit.amount
            if card.defense <= 0:
                card.defense = 0
                event = self._destroy(state, owner, card.instance_id, source)
                if event:
                    events.append(event)

        for target_id in bundle.destroy:
            found = self._field_lookup(state, target_id)
            if found is None:
                self._log(state, "The effect missed: target is gone.", LogCategory.EFFECT)
                continue
            event = self._destroy(state, found[0], target_id, source)
            if event:
                events.append(event)

        for hit in bundle.player_damage:
            reason = "trap_damage" if bundle.traps_activated else "effect_damage"
            events += self._damage_player(state, hit.side, hit.amount, source, reason)
            if state.is_over:
                break

        for side, count in bundle.draws:
            self._draw_cards(state, side, count)

        for revive in bundle.revives:
            self._revive(state, revive.side, revive.half_attack)

        return events, bundle.negate_attack

    # ------------------------------------------------------------------
    # Primitive mutations

    def _field_lookup(self, state: GameState, instance_id: str) -> tuple[Side, Card] | None:
        for side, player in state.players.items():
            card = player.field_card(instance_id)
            if card is not None:
                return side, card
        return None

    def _to_graveyard(self, state: GameState, side: Side, zone: str, instance_id: str) -> Card:
        card = state.player(side).remove(zone, instance_id)
        card.reset_to_template()
        card.destroyed_at = self.clock()
        state.player(side).graveyard.append(card)
        return card

    def _destroy(
        self,
        state: GameState,
        owner: Side,
        instance_id: str,
        cause: Side | None,
        destroyer_id: str | None = None,
    ) -> Destroyed | None:
        if state.player(owner).field_card(instance_id) is None:
            return None
        card = self._to_graveyard(state, owner, "field", instance_id)
        state.stats.record_destroyed(owner, cause)
        self._log(state, f"{card.name} was destroyed!", LogCategory.COMBAT)
        return Destroyed(owner, card, cause, destroyer_id)

    def _damage_player(
        self,
        state: GameState,
        target: Side,
        amount: int,
        source: Side | None,
        reason: str,
    ) -> list[TriggerEvent]:
        """
        Take HP from a player.

        Lethal damage from the opponent is survived at 1 HP when the target
        holds a survival trap. Returns the Damaged event when HP was lost and
        the battle goes on.
        """
        if amount <= 0 or state.is_over:
            return []
        player = state.player(target)
        state.stats.record_damage(target, amount, source)

        if player.hp - amount <= 0:
            trap = None
            if source is target.opponent:
                trap = self.traps.find_survival_trap(state, target)
            if trap is None:
                player.hp = 0
                self._log(state, f"{player.name} takes {amount} damage!", LogCategory.COMBAT)
                self.guard.finish(state, target.opponent, reason, self.clock())
                return []
            self._to_graveyard(state, target, "trap_zone", trap.instance_id)
            state.stats.of(target).traps_activated += 1
            player.hp = 1
            self._log(state, f"Trap activated: {trap.name}! {player.name} endures with 1 HP!", LogCategory.TRAP)
            return [Damaged(target, amount, source)]

        player.hp -= amount
        self._log(state, f"{player.name} takes {amount} damage!", LogCategory.COMBAT)
        return [Damaged(target, amount, source)]

    def _heal(self, state: GameState, side: Side, amount: int):
        player = state.player(side)
        before = player.hp
        player.hp = min(state.rules.max_hp, player.hp + max(0, amount))
        self._log(state, f"{player.name} recovers {player.hp - before} HP.", LogCategory.EFFECT)

    def _draw_cards(self, state: GameState, side: Side, count: int):
        player = state.player(side)
        drawn = 0
        for _ in range(count):
            if not player.deck:
                self._log(state, f"{player.name}'s deck is empty.", LogCategory.EFFECT)
                break
            player.hand.append(player.deck.pop(0))
            drawn += 1
        if drawn:
            self._log(state, f"{player.name} drew {drawn} card(s).", LogCategory.EFFECT)

    def _revive(self, state: GameState, side: Side, half_attack: bool):
        """Return the most recently destroyed creature to the hand."""
        player = state.player(side)
        for card in reversed(player.graveyard):
            if card.is_creature:
                break
        else:
            self._log(state, "There is nothing to revive.", LogCategory.EFFECT)
            return

        player.graveyard.remove(card)
        card.reset_to_template()
        card.destroyed_at = None
        if half_attack:
            card.attack = card.attack // 2
        player.hand.append(card)
        self._log(state, f"{card.name} returned to {player.name}'s hand!", LogCategory.EFFECT)


_default_reducer = Reducer()


def apply_action(state: GameState, action: Action, reducer: Reducer | None = None) -> ActionResult:
    """
    Convenience function to apply an action.

    Uses a shared stateless Reducer unless one is given.
    """
    return (reducer or _default_reducer).apply(state, action)


def advance(state: GameState, reducer: Reducer | None = None) -> ActionResult:
    """Run the next stage of an in-flight resolution."""
    return apply_action(state, Action.advance(), reducer)


def run_pending(state: GameState, reducer: Reducer | None = None) -> GameState:
    """Drive every pending stage to completion without delays."""
    while state.pending is not None and not state.is_over:
        result = advance(state, reducer)
        if not result.success:
            break
        state = result.new_state
    return state
