"""
Tests for standings aggregation and the ranking cascade.
"""

from league_engine.models import Match, MatchPhase, MatchStatus, PointsConfig
from league_engine.services.standings import compute_group_standings, compute_standings, is_tied

FIVE_FOR_A_WIN = PointsConfig(points_win=5, points_draw=0, points_loss=0)


def _by_team(standings):
    return {s.team_id: s for s in standings}


class TestCascade:
    """points -> set difference -> game difference -> insertion order"""

    def _matches(self, make_result):
        return [
            # A: 10 pts, sets 5-2 (+3)
            make_result("m1", "A", "C", "6-1 6-1"),
            make_result("m2", "A", "D", "6-2 6-2"),
            make_result("m3", "A", "E", "6-4 4-6 4-6"),
            # B: 10 pts, sets 5-4 (+1)
            make_result("m4", "B", "F", "6-4 4-6 6-4"),
            make_result("m5", "B", "G", "6-4 4-6 6-4"),
            make_result("m6", "B", "H", "6-4 4-6 4-6"),
        ]

    def test_set_difference_breaks_equal_points(self, make_result):
        standings = compute_standings(self._matches(make_result), FIVE_FOR_A_WIN)
        rows = _by_team(standings)

        assert rows["A"].points == rows["B"].points == 10
        assert rows["A"].set_difference == 3
        assert rows["B"].set_difference == 1
        assert rows["A"].position == 1
        assert rows["B"].position == 2

    def test_order_independent_of_input_order(self, make_result):
        standings = compute_standings(list(reversed(self._matches(make_result))), FIVE_FOR_A_WIN)
        assert [s.team_id for s in standings[:2]] == ["A", "B"]

    def test_game_difference_after_sets(self, make_result):
        matches = [
            make_result("m1", "A", "C", "6-0 6-0"),
            make_result("m2", "B", "D", "6-4 6-4"),
        ]
        standings = compute_standings(matches)
        assert [s.team_id for s in standings[:2]] == ["A", "B"]
        assert standings[0].game_difference == 12
        assert standings[1].game_difference == 4

    def test_full_tie_keeps_insertion_order(self, make_result, make_teams):
        teams = make_teams(4)
        matches = [
            make_result("m1", "t3", "t4", "6-4 6-4"),
            make_result("m2", "t1", "t2", "6-4 6-4"),
        ]
        # Roster order decides between t1 and t3
        standings = compute_standings(matches, teams=teams)
        assert [s.team_id for s in standings] == ["t1", "t3", "t2", "t4"]
        assert is_tied(standings[0], standings[1])
        assert not is_tied(standings[1], standings[2])

        # Without a roster, first appearance decides
        standings = compute_standings(matches)
        assert [s.team_id for s in standings] == ["t3", "t1", "t4", "t2"]


class TestAggregation:
    """Counting rules for points, sets and games."""

    def test_default_points(self, make_result):
        standings = compute_standings([make_result("m1", "A", "B", "6-3 6-3")])
        rows = _by_team(standings)
        assert rows["A"].points == 3
        assert rows["B"].points == 1
        assert rows["A"].matches_won == 1
        assert rows["B"].matches_lost == 1
        assert rows["A"].games_won == 12
        assert rows["B"].games_won == 6

    def test_draw_awards_draw_points(self, make_result):
        standings = compute_standings([make_result("m1", "A", "B", "6-4 4-6")])
        rows = _by_team(standings)
        assert rows["A"].matches_drawn == rows["B"].matches_drawn == 1
        assert rows["A"].points == rows["B"].points == 2

    def test_only_completed_matches_count(self, make_result):
        matches = [
            make_result("m1", "A", "B", "6-3 6-3"),
            Match(id="m2", team1_id="A", team2_id="C"),
            Match(id="m3", team1_id="B", team2_id="C", status=MatchStatus.in_progress),
        ]
        rows = _by_team(compute_standings(matches))
        assert rows["A"].matches_played == 1
        assert rows["C"].matches_played == 0
        assert rows["C"].points == 0

    def test_completed_without_winner_is_skipped(self):
        match = Match(id="m1", team1_id="A", team2_id="B", status=MatchStatus.completed)
        rows = _by_team(compute_standings([match]))
        assert rows["A"].matches_played == 0
        assert rows["B"].matches_played == 0

    def test_tiebreak_set_counts_for_tiebreak_winner(self, make_result):
        rows = _by_team(compute_standings([make_result("m1", "A", "B", "6-6(5-7) 6-6(4-7)")]))
        assert rows["B"].sets_won == 2
        assert rows["B"].matches_won == 1

    def test_idempotent(self, make_result):
        matches = [
            make_result("m1", "A", "B", "6-3 6-3"),
            make_result("m2", "B", "C", "6-3 3-6 7-5"),
            make_result("m3", "C", "A", "7-6(7-2) 6-4"),
        ]
        first = [s.model_dump() for s in compute_standings(matches)]
        second = [s.model_dump() for s in compute_standings(matches)]
        assert first == second


class TestFiltering:
    """Group and phase filters never leak results."""

    def test_groups_are_independent(self, make_result):
        matches = [
            make_result("g1-m1", "A", "B", "6-0 6-0", group_number=1),
            make_result("g2-m1", "C", "D", "6-0 6-0", group_number=2),
            make_result("g2-m2", "C", "E", "6-0 6-0", group_number=2),
        ]
        by_group = compute_group_standings(matches)

        assert set(by_group) == {1, 2}
        assert {s.team_id for s in by_group[1]} == {"A", "B"}
        assert {s.team_id for s in by_group[2]} == {"C", "D", "E"}
        assert by_group[1][0].position == 1
        assert all(s.group_number == 2 for s in by_group[2])

    def test_group_roster_includes_teams_without_results(self, make_result, make_teams):
        teams = make_teams(4, groups={1: 1, 2: 1, 3: 2, 4: 2})
        matches = [make_result("g1-m1", "t1", "t2", "6-0 6-0", group_number=1)]
        by_group = compute_group_standings(matches, teams=teams)
        assert [s.team_id for s in by_group[2]] == ["t3", "t4"]

    def test_phase_filter(self, make_result):
        matches = [
            make_result("m1", "A", "B", "6-0 6-0"),
            make_result("ko-1", "B", "A", "6-0 6-0", phase=MatchPhase.elimination),
        ]
        rows = _by_team(compute_standings(matches, phase=MatchPhase.group))
        assert rows["A"].matches_won == 1
        assert rows["B"].matches_won == 0
