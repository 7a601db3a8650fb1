"""
Standings Calculator

Pure aggregation of completed matches into ranked Standing rows.

Ranking cascade (descending):
  1. points
  2. set difference (sets won - sets lost)
  3. game difference (games won - games lost)
  4. insertion order (roster order, else order of first appearance)

Guarantees:
  - Idempotent: same match list -> identical ordering and values
  - Per-group computation never leaks results across groups
  - Completed matches without a winner are skipped unless flagged is_draw
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from league_engine.models.match import Match, MatchPhase
from league_engine.models.schedule_config import PointsConfig
from league_engine.models.standing import Standing
from league_engine.models.team import Team
from league_engine.services.score_parser import summarize_sets


def ranking_key(standing: Standing) -> Tuple[int, int, int]:
    """Cascade key used for ordering and tie detection (smaller sorts first)."""
    return (-standing.points, -standing.set_difference, -standing.game_difference)


def is_tied(a: Optional[Standing], b: Optional[Standing]) -> bool:
    """True when two rows cannot be separated by the cascade."""
    if a is None or b is None:
        return False
    return ranking_key(a) == ranking_key(b)


def _filter_matches(
    matches: Iterable[Match],
    group_number: Optional[int],
    phase: Optional[MatchPhase],
) -> List[Match]:
    selected = []
    for m in matches:
        if group_number is not None and m.group_number != group_number:
            continue
        if phase is not None and m.phase != phase:
            continue
        selected.append(m)
    return selected


def compute_standings(
    matches: Sequence[Match],
    points: Optional[PointsConfig] = None,
    group_number: Optional[int] = None,
    phase: Optional[MatchPhase] = None,
    teams: Optional[Sequence[Team]] = None,
) -> List[Standing]:
    """
    Aggregate results into ranked standings.

    Args:
        matches: Full match history (any status)
        points: Points per win/draw/loss
        group_number: Only count matches of this group
        phase: Only count matches of this phase
        teams: Optional roster; fixes the row set and the insertion order

    Returns:
        Standings sorted by the cascade, positions 1..n
    """
    points = points or PointsConfig()
    subset = _filter_matches(matches, group_number, phase)

    rows: "OrderedDict[str, Standing]" = OrderedDict()
    if teams is not None:
        for team in teams:
            if group_number is not None and team.group_number != group_number:
                continue
            rows[team.id] = Standing(team_id=team.id, group_number=group_number or team.group_number)
    else:
        for m in subset:
            for team_id in m.team_ids:
                if team_id not in rows:
                    rows[team_id] = Standing(team_id=team_id, group_number=group_number or m.group_number)

    for m in subset:
        if not m.is_completed:
            continue
        if m.winner_id is None and not m.is_draw:
            continue

        s1 = rows.get(m.team1_id)
        s2 = rows.get(m.team2_id)
        if s1 is None or s2 is None:
            continue

        totals = summarize_sets(m.sets)
        s1.sets_won += totals.team1_sets_won
        s1.sets_lost += totals.team2_sets_won
        s1.games_won += totals.team1_games
        s1.games_lost += totals.team2_games
        s2.sets_won += totals.team2_sets_won
        s2.sets_lost += totals.team1_sets_won
        s2.games_won += totals.team2_games
        s2.games_lost += totals.team1_games

        s1.matches_played += 1
        s2.matches_played += 1

        if m.winner_id == m.team1_id:
            winner, loser = s1, s2
        elif m.winner_id == m.team2_id:
            winner, loser = s2, s1
        else:
            s1.matches_drawn += 1
            s2.matches_drawn += 1
            s1.points += points.points_draw
            s2.points += points.points_draw
            continue

        winner.matches_won += 1
        winner.points += points.points_win
        loser.matches_lost += 1
        loser.points += points.points_loss

    # sorted() is stable, so rows equal under the cascade keep insertion order
    ranked = sorted(rows.values(), key=ranking_key)
    for index, standing in enumerate(ranked):
        standing.position = index + 1
    return ranked


def group_numbers(matches: Iterable[Match], teams: Optional[Sequence[Team]] = None) -> List[int]:
    found = {m.group_number for m in matches if m.group_number is not None}
    if teams:
        found.update(t.group_number for t in teams if t.group_number is not None)
    return sorted(found)


def compute_group_standings(
    matches: Sequence[Match],
    points: Optional[PointsConfig] = None,
    phase: Optional[MatchPhase] = MatchPhase.group,
    teams: Optional[Sequence[Team]] = None,
) -> Dict[int, List[Standing]]:
    """Standings per group number, each computed independently."""
    result: Dict[int, List[Standing]] = {}
    for group in group_numbers(matches, teams):
        group_teams = None
        if teams is not None:
            group_teams = [t for t in teams if t.group_number == group] or None
        result[group] = compute_standings(
            matches,
            points,
            group_number=group,
            phase=phase,
            teams=group_teams,
        )
    return result
