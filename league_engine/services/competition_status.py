"""
Competition status helpers for the surrounding service layer.

- suggest_next_match: most competitive pending match (smallest points gap)
- is_group_phase_complete: every group-phase match has a result
- is_competition_complete: finals played, or round robin finished with an
  unambiguous podium
"""

from typing import Iterable, Mapping, Optional, Sequence, Union

from league_engine.models.match import Match, MatchPhase, MatchStatus, RoundType
from league_engine.models.standing import Standing
from league_engine.services.tie_breakers import PODIUM_CUTOFFS, find_cutoff_ties

StandingsInput = Union[Sequence[Standing], Mapping[int, Sequence[Standing]]]


def _standing_tables(standings: Optional[StandingsInput]) -> list:
    if standings is None:
        return []
    if isinstance(standings, Mapping):
        return [list(rows) for _, rows in sorted(standings.items())]
    return [list(standings)]


def suggest_next_match(matches: Sequence[Match], standings: Optional[StandingsInput] = None) -> Optional[Match]:
    """
    Pick the pending match whose teams are closest in points.

    Ties on the gap keep match list order. Returns None when nothing is pending.
    """
    points = {}
    for table in _standing_tables(standings):
        for row in table:
            points[row.team_id] = row.points

    best: Optional[Match] = None
    best_gap = None
    for m in matches:
        if m.status != MatchStatus.pending:
            continue
        gap = abs(points.get(m.team1_id, 0) - points.get(m.team2_id, 0))
        if best_gap is None or gap < best_gap:
            best, best_gap = m, gap
    return best


def is_group_phase_complete(matches: Iterable[Match]) -> bool:
    group_matches = [m for m in matches if m.phase == MatchPhase.group]
    return bool(group_matches) and all(m.is_completed for m in group_matches)


def is_competition_complete(
    matches: Sequence[Match],
    standings: Optional[StandingsInput] = None,
    cutoffs: Iterable[int] = PODIUM_CUTOFFS,
) -> bool:
    """
    Elimination competitions are complete when every elimination match,
    finals included, has a result. Round-robin competitions are complete when
    every match has a result and no podium cutoff is tied.
    """
    if not matches:
        return False

    elimination = [m for m in matches if m.phase == MatchPhase.elimination]
    if elimination:
        finals = [m for m in elimination if m.round_type == RoundType.final]
        return bool(finals) and all(m.is_completed for m in elimination)

    if not all(m.is_completed for m in matches):
        return False

    cutoffs = tuple(cutoffs)
    return not any(find_cutoff_ties(table, cutoffs) for table in _standing_tables(standings))
