"""
Tie-Breaker Generator: extra head-to-head matches for ties at rank cutoffs.

A cutoff c is the boundary between positions c and c+1 (e.g. cutoff 1
separates the winner from the runner-up). When the rows on both sides of a
cutoff are equal under the standings cascade, the whole contiguous block of
tied rows is a TieGroup.

- 2 tied teams: one match
- 3+ tied teams: mini round robin among the tied teams only

Tie-break matches are ordinary group-phase matches tagged tie_break=True, so
recomputing standings after they are played folds them into the cascade.
A block that is still tied after its tie-breaks were played is reported by
unresolved_ties and left for manual adjudication; it is never regenerated.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from league_engine.models.match import Match, MatchPhase, RoundType
from league_engine.models.standing import Standing
from league_engine.services.fixture_rules import rr_pairings_by_round
from league_engine.services.standings import is_tied

logger = logging.getLogger(__name__)

# Podium boundaries checked before a league is closed
PODIUM_CUTOFFS = (1, 2, 3)


@dataclass
class TieGroup:
    team_ids: List[str]
    first_position: int
    last_position: int
    cutoffs: List[int] = field(default_factory=list)
    group_number: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.team_ids)


def find_cutoff_ties(standings: Sequence[Standing], cutoffs: Iterable[int] = PODIUM_CUTOFFS) -> List[TieGroup]:
    """
    Detect fully tied blocks that straddle any of the given cutoffs.

    Blocks touching several cutoffs are reported once, with every cutoff
    they straddle listed in ascending order.
    """
    ranked = sorted(standings, key=lambda s: s.position)
    blocks = {}

    for cutoff in sorted(set(cutoffs)):
        if cutoff < 1 or cutoff >= len(ranked):
            continue
        if not is_tied(ranked[cutoff - 1], ranked[cutoff]):
            continue

        start = cutoff - 1
        while start > 0 and is_tied(ranked[start - 1], ranked[start]):
            start -= 1
        end = cutoff
        while end + 1 < len(ranked) and is_tied(ranked[end], ranked[end + 1]):
            end += 1

        if start in blocks:
            blocks[start].cutoffs.append(cutoff)
            continue
        rows = ranked[start:end + 1]
        blocks[start] = TieGroup(
            team_ids=[s.team_id for s in rows],
            first_position=start + 1,
            last_position=end + 1,
            cutoffs=[cutoff],
            group_number=rows[0].group_number,
        )

    return [blocks[key] for key in sorted(blocks)]


def _tie_break_matches_for(tie: TieGroup, matches: Iterable[Match]) -> List[Match]:
    """
    Tie-break matches of the batches played among exactly this block's teams.

    A batch covering only part of the block (an earlier A-B tie-break when
    A, B and C are now level) does not count.
    """
    members = set(tie.team_ids)
    batches: Dict[str, List[Match]] = {}
    for m in matches:
        if m.tie_break and set(m.team_ids) <= members:
            batches.setdefault(m.tie_break_batch or m.id, []).append(m)

    found: List[Match] = []
    for batch in batches.values():
        if {tid for m in batch for tid in m.team_ids} == members:
            found.extend(batch)
    return found


def _tie_break_prefix(tie: TieGroup) -> str:
    prefix = f"g{tie.group_number}-" if tie.group_number is not None else ""
    return f"{prefix}tb{tie.first_position}"


def generate_tie_breakers(
    standings: Sequence[Standing],
    cutoffs: Iterable[int] = PODIUM_CUTOFFS,
    existing_matches: Sequence[Match] = (),
) -> List[Match]:
    """
    Emit the head-to-head matches needed to break ties at the cutoffs.

    Args:
        standings: Ranked rows of one group (or of the whole competition)
        cutoffs: Rank boundaries that must be unambiguous
        existing_matches: Matches already stored; used for the next round
            number and to skip blocks that already have tie-break matches

    Returns:
        New pending matches (phase=group, tie_break=True), possibly empty
    """
    ties = find_cutoff_ties(standings, cutoffs)
    if not ties:
        return []

    next_round = max((m.round for m in existing_matches), default=0) + 1
    created: List[Match] = []

    for tie in ties:
        if _tie_break_matches_for(tie, existing_matches):
            logger.debug(
                "Tie at positions %d-%d already has tie-break matches, skipping",
                tie.first_position,
                tie.last_position,
            )
            continue

        prefix = _tie_break_prefix(tie)
        for round_offset, seq, idx_a, idx_b in rr_pairings_by_round(tie.size):
            round_num = next_round + round_offset - 1
            created.append(Match(
                id=f"{prefix}-r{round_num}-m{seq}",
                tie_break_batch=f"{prefix}-r{next_round}",
                team1_id=tie.team_ids[idx_a],
                team2_id=tie.team_ids[idx_b],
                round=round_num,
                phase=MatchPhase.group,
                round_type=RoundType.tie_break,
                tie_break=True,
                group_number=tie.group_number,
            ))

        logger.info(
            "Tie-break for positions %d-%d (group %s): %d teams",
            tie.first_position,
            tie.last_position,
            tie.group_number,
            tie.size,
        )

    return created


def unresolved_ties(
    standings: Sequence[Standing],
    cutoffs: Iterable[int] = PODIUM_CUTOFFS,
    existing_matches: Sequence[Match] = (),
) -> List[TieGroup]:
    """Ties that survived their completed tie-break matches (manual adjudication needed)."""
    unresolved: List[TieGroup] = []
    for tie in find_cutoff_ties(standings, cutoffs):
        played = _tie_break_matches_for(tie, existing_matches)
        if played and all(m.is_completed for m in played):
            logger.warning(
                "Tie at positions %d-%d (group %s) persists after tie-break matches: %s",
                tie.first_position,
                tie.last_position,
                tie.group_number,
                ", ".join(tie.team_ids),
            )
            unresolved.append(tie)
    return unresolved
