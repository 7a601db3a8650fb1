"""
Tests for score string / blob parsing.
"""

from league_engine.models import MatchSet, TiebreakScore
from league_engine.services.score_parser import parse_score, summarize_sets


def test_parse_single_set():
    sets = parse_score("6-4")
    assert sets == [MatchSet(team1_games=6, team2_games=4)]


def test_parse_three_sets_with_tiebreak():
    sets = parse_score("6-3 4-6 7-6(7-4)")
    assert len(sets) == 3
    assert sets[1].team2_games == 6
    assert sets[2].tiebreak == TiebreakScore(team1_points=7, team2_points=4)


def test_parse_comma_separated():
    sets = parse_score("6-3, 4-6, 6-2")
    assert [(s.team1_games, s.team2_games) for s in sets] == [(6, 3), (4, 6), (6, 2)]


def test_parse_display_blob():
    sets = parse_score({"display": "6-1 6-2"})
    assert len(sets) == 2


def test_parse_structured_sets():
    sets = parse_score({"sets": [
        {"a": 6, "b": 4},
        {"team1_games": 6, "team2_games": 6, "tiebreak": {"a": 5, "b": 7}},
    ]})
    assert sets[0].team1_games == 6
    assert sets[1].tiebreak.team2_points == 7


def test_unparseable_returns_none():
    assert parse_score(None) is None
    assert parse_score("") is None
    assert parse_score("   ") is None
    assert parse_score("six-four") is None
    assert parse_score("6-4 x") is None
    assert parse_score({"sets": ["6-4"]}) is None
    assert parse_score({"sets": [{"a": "six", "b": 4}]}) is None


def test_summarize_sets_counts_tiebreak_winner():
    totals = summarize_sets(parse_score("6-6(7-5) 3-6 6-6"))
    assert totals.team1_sets_won == 1
    assert totals.team2_sets_won == 1
    assert totals.team1_games == 15
    assert totals.team2_games == 18
