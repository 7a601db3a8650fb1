"""
Bracket Pairing: seed placement for elimination brackets.

Placement: the bracket is padded to the next power of two; seeds beyond the
qualifier count are byes, so the top seeds receive them.
Ordering: consecutive pairs of the position list meet in round 1, and the
winners of adjacent pairs meet in the next round.
"""

from enum import Enum
from typing import List, Optional, Tuple

from league_engine.models.match import RoundType

MAX_BRACKET_SIZE = 64


class SeedingStrategy(str, Enum):
    standard = "standard"  # bracket fold: 1 and 2 can only meet in the final
    sequential = "sequential"  # 1 v last, 2 v second-last, listed in seed order


def next_power_of_two(n: int) -> int:
    size = 1
    while size < n:
        size *= 2
    return size


def bracket_fold_positions(n: int) -> List[int]:
    """Standard bracket-fold positions for *n* entries.

    Returns a flat list of seed numbers in bracket position order.
    Consecutive pairs indicate which seeds meet if chalk holds:
      4-entry  -> [1, 4, 2, 3]       -> (1v4), (2v3)
      8-entry  -> [1, 8, 4, 5, ...]   -> (1v8), (4v5), ...
      16-entry -> [1, 16, 8, 9, ...]   -> (1v16), (8v9), ...
    """
    if n == 2:
        return [1, 2]

    half = bracket_fold_positions(n // 2)

    expanded: List[int] = []
    for s in half:
        expanded.append(s)
        expanded.append(n + 1 - s)

    mid = len(expanded) // 2
    top = expanded[:mid]
    bot = expanded[mid:]
    if len(bot) >= 4:
        bot = bot[:-4] + bot[-2:] + bot[-4:-2]

    return top + bot


def sequential_positions(n: int) -> List[int]:
    """[1, n, 2, n-1, 3, n-2, ...]"""
    positions: List[int] = []
    for seed in range(1, n // 2 + 1):
        positions.append(seed)
        positions.append(n + 1 - seed)
    return positions


def seed_positions(size: int, strategy: SeedingStrategy = SeedingStrategy.standard) -> List[int]:
    if strategy == SeedingStrategy.sequential:
        return sequential_positions(size)
    return bracket_fold_positions(size)


def first_round_pairs(
    entrants: int,
    strategy: SeedingStrategy = SeedingStrategy.standard,
) -> List[Tuple[int, Optional[int]]]:
    """
    Seed pairs for the first round, in bracket order.

    The second seed of a pair is None when the first seed has a bye.
    """
    size = next_power_of_two(max(entrants, 2))
    positions = seed_positions(size, strategy)
    pairs: List[Tuple[int, Optional[int]]] = []
    for i in range(0, size, 2):
        a, b = positions[i], positions[i + 1]
        if a > b:
            a, b = b, a
        pairs.append((a, b if b <= entrants else None))
    return pairs


_ROUND_TYPES_BY_MATCH_COUNT = {
    1: RoundType.final,
    2: RoundType.semifinal,
    4: RoundType.quarterfinal,
    8: RoundType.round_of_16,
    16: RoundType.round_of_32,
    32: RoundType.round_of_64,
}


def round_type_for(match_count: int) -> RoundType:
    """Round type from the number of matches in the round (1 -> final, 2 -> semifinal, ...)."""
    try:
        return _ROUND_TYPES_BY_MATCH_COUNT[match_count]
    except KeyError:
        raise ValueError(f"No elimination round has {match_count} matches")
