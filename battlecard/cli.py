"""
Battlecard CLI - Command-line interface for the engine.

Usage:
    battlecard simulate [--seed N] [--difficulty D]   Run a bot-vs-bot battle
    battlecard cards [--kind K]                      List the card catalog
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Battlecard - Turn-Based Card Battle Engine",
        prog="battlecard",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show engine debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run a headless bot-vs-bot battle")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument(
        "--difficulty",
        choices=["EASY", "NORMAL", "HARD", "EXPERT"],
        default="NORMAL",
        help="Difficulty for both bots",
    )
    simulate_parser.add_argument("--no-deck-out", action="store_true", help="Drawing from an empty deck does not lose")
    simulate_parser.add_argument("--max-steps", type=int, default=5000, help="Step limit for the battle")
    simulate_parser.add_argument("--quiet", "-q", action="store_true", help="Only print the result")

    # Cards command
    cards_parser = subparsers.add_parser("cards", help="List the card catalog")
    cards_parser.add_argument("--kind", choices=["CREATURE", "SPELL", "TRAP"], help="Filter by kind")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "cards":
        return cmd_cards(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Play both sides with the greedy bot and print the log."""
    from dataclasses import replace

    from .bots import Difficulty, GreedyStrategy
    from .config import BattleRules
    from .engine_core.state import Side
    from .session import BattleLoop, MemoryStatsSink, SessionManager

    rules = BattleRules.from_env().without_delays()
    if args.no_deck_out:
        rules = replace(rules, deck_out_enabled=False)

    difficulty = Difficulty(args.difficulty)
    seed = args.seed
    sink = MemoryStatsSink()
    manager = SessionManager(rules=rules, stats_sinks=[sink])
    session = manager.create_session(
        random_seed=seed,
        difficulty=difficulty,
        strategies={
            Side.PLAYER: GreedyStrategy(difficulty=difficulty, seed=None if seed is None else seed + 1),
            Side.NPC: GreedyStrategy(difficulty=difficulty, seed=seed),
        },
    )

    def print_entries(entries):
        for entry in entries:
            print(f"[{entry.category.value:>6}] {entry.message}")

    if not args.quiet:
        print_entries(session.game_state.log.entries)

    loop = BattleLoop(
        session,
        sinks=[sink],
        log_listeners=[] if args.quiet else [print_entries],
    )
    loop.run_until_input(max_steps=args.max_steps)

    state = session.game_state
    if not state.is_over:
        print(f"\nNo result after {args.max_steps} steps (turn {state.turn_count}).")
        return 2

    report = sink.reports[0]
    print()
    print(f"Winner: {state.player(report.winner).name} ({report.reason})")
    print(f"Turns: {report.turns}")
    for side in (Side.PLAYER, Side.NPC):
        stats = report.stats[side.value]
        print(
            f"  {state.player(side).name}: HP {state.player(side).hp}, "
            f"dealt {stats['damage_dealt']}, destroyed {stats['cards_destroyed']}, "
            f"spells {stats['spells_used']}, traps {stats['traps_activated']}"
        )
    return 0


def cmd_cards(args):
    """Print the card catalog."""
    from .cards import all_cards

    for card in all_cards():
        if args.kind and card.kind.value != args.kind:
            continue
        line = f"{card.card_id:<16} {card.name:<20} {card.kind.value:<8} {card.rarity.value:<10}"
        if card.kind.value == "CREATURE":
            line += f" L{card.level} {card.element.value:<8} {card.attack:>5}/{card.defense:<5}"
            if card.ability:
                line += f" [{card.ability.name}]"
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
