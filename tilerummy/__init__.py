"""Tile-rummy board model and solver package."""

from .rules import Ruleset
from .tiles import Color, Tile, WILDCARD_NUMBER, parse_tile, parse_tiles, wildcard
from .meld import TileSetInfo, TilesType
from .operation import Command, GameOperation, NEW_MELD
from .game import Game
from .solver import Solver

__all__ = [
    "Ruleset",
    "Color",
    "Tile",
    "WILDCARD_NUMBER",
    "parse_tile",
    "parse_tiles",
    "wildcard",
    "TileSetInfo",
    "TilesType",
    "Command",
    "GameOperation",
    "NEW_MELD",
    "Game",
    "Solver",
]
