from dataclasses import dataclass

from .tiles import MAX_NUMBER, MIN_NUMBER, Color


@dataclass(frozen=True)
class Ruleset:
    copies_per_tiletype: int = 2
    num_wildcards: int = 2
    initial_hand_size: int = 14
    max_wildcards_per_meld: int = 2
    split_threshold: int = 6
    oversized_meld_size: int = 4

    def deck_size(self) -> int:
        values = MAX_NUMBER - MIN_NUMBER + 1
        normal_tiles = len(Color.ordered()) * values * self.copies_per_tiletype
        return normal_tiles + self.num_wildcards
