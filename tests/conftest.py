import pytest

from league_engine.models import Match, MatchStatus, Team
from league_engine.services.score_parser import parse_score, summarize_sets

# ============================================================================
# Record factories
# ============================================================================
# Engine operations are pure, so tests build records in memory instead of
# going through a database. Factories are exposed as fixtures returning
# callables so each test can shape its own roster.


def build_teams(n, groups=None):
    """n teams t1..tn; `groups` optionally maps team number -> group_number."""
    groups = groups or {}
    return [
        Team(
            id=f"t{i}",
            player1_id=f"p{2 * i - 1}",
            player2_id=f"p{2 * i}",
            name=f"Team {i}",
            group_number=groups.get(i),
        )
        for i in range(1, n + 1)
    ]


def build_result(match_id, team1_id, team2_id, score, **fields):
    """A completed match from a score string like '6-4 3-6 6-2'."""
    sets = parse_score(score) or []
    totals = summarize_sets(sets)
    winner_id = None
    if totals.team1_sets_won > totals.team2_sets_won:
        winner_id = team1_id
    elif totals.team2_sets_won > totals.team1_sets_won:
        winner_id = team2_id
    return Match(
        id=match_id,
        team1_id=team1_id,
        team2_id=team2_id,
        sets=sets,
        status=MatchStatus.completed,
        winner_id=winner_id,
        is_draw=winner_id is None,
        **fields,
    )


@pytest.fixture
def make_teams():
    return build_teams


@pytest.fixture
def make_result():
    return build_result
