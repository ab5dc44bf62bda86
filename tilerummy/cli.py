from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from typing import List, Optional, Sequence

from .game import Board, Game
from .meld import meld_reason
from .operation import GameOperation
from .rules import Ruleset
from .solver import Solver
from .tiles import Tile, format_tiles, iter_full_deck, parse_tiles

LOG_LEVEL_ENV = "TILERUMMY_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_log_level(cli_value: Optional[str] = None) -> str:
    if cli_value:
        return cli_value.upper()
    return os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()


def _tiles_arg(text: str) -> List[Tile]:
    try:
        return parse_tiles(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def deal_hand(ruleset: Ruleset, seed: Optional[int] = None) -> List[Tile]:
    rng = random.Random(seed)
    deck = list(iter_full_deck(ruleset.copies_per_tiletype, ruleset.num_wildcards))
    rng.shuffle(deck)
    return deck[: ruleset.initial_hand_size]


def build_game(hand: Sequence[Tile], melds: Sequence[Sequence[Tile]], ruleset: Ruleset) -> Game:
    game = Game(ruleset=ruleset)
    for meld in melds:
        game.operate(GameOperation.put(meld))
    if hand:
        game.operate(GameOperation.draw(hand))
    return game


def format_board(board: Board) -> List[str]:
    lines = [f"hand: {format_tiles(board[0])}"]
    for idx, tiles in enumerate(board[1:], start=1):
        ok, reason = meld_reason(tiles)
        suffix = "" if ok else f"  ({reason})"
        lines.append(f"{idx:>4}: {format_tiles(tiles)}{suffix}")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check whether a tile-rummy board can be laid out as valid melds.")
    parser.add_argument("--hand", type=_tiles_arg, default=[], help="Unplaced tiles, e.g. '10R 11R 12R W'.")
    parser.add_argument(
        "--meld", type=_tiles_arg, action="append", default=[], help="A meld already on the table (repeatable)."
    )
    parser.add_argument("--deal", action="store_true", help="Add a randomly dealt hand to --hand.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for --deal.")
    parser.add_argument("--log-level", default=None, help=f"Logging level (default from {LOG_LEVEL_ENV} or WARNING).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=resolve_log_level(args.log_level), format=LOG_FORMAT)

    ruleset = Ruleset()
    hand = list(args.hand)
    if args.deal:
        hand.extend(deal_hand(ruleset, seed=args.seed))

    game = build_game(hand, args.meld, ruleset)
    for line in format_board(game.get_board()):
        print(line)

    partition = Solver(game).solve()
    if partition is None:
        print("No solution")
        return 1
    print("Solution:")
    for tiles in partition:
        print(f"  {format_tiles(tiles)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
