"""
Tests for round-robin and k-regular pairing math.
"""

from collections import Counter, defaultdict

import pytest

from league_engine.services.fixture_rules import (
    check_k_regular,
    expected_match_count,
    k_regular_pairings,
    rr_matches_total,
    rr_pairings_by_round,
    rr_pairings_for_legs,
    rr_round_count,
)


def _degrees(pairings):
    counts = Counter()
    for _, _, a, b in pairings:
        counts[a] += 1
        counts[b] += 1
    return counts


def _no_team_twice_per_round(pairings):
    seen = defaultdict(set)
    for round_num, _, a, b in pairings:
        if a in seen[round_num] or b in seen[round_num]:
            return False
        seen[round_num].update((a, b))
    return True


class TestRoundRobin:
    """Circle method: every pair exactly once."""

    def test_four_teams(self):
        pairings = rr_pairings_by_round(4)
        assert len(pairings) == 6
        assert sorted({p[0] for p in pairings}) == [1, 2, 3]
        assert all(sum(1 for p in pairings if p[0] == r) == 2 for r in (1, 2, 3))

    def test_odd_team_count_uses_bye(self):
        pairings = rr_pairings_by_round(5)
        assert len(pairings) == 10
        assert rr_round_count(5) == 5
        assert all(sum(1 for p in pairings if p[0] == r) == 2 for r in range(1, 6))

    @pytest.mark.parametrize("n", range(2, 11))
    def test_every_pair_once(self, n):
        pairings = rr_pairings_by_round(n)
        pairs = [(a, b) for _, _, a, b in pairings]
        assert len(pairs) == rr_matches_total(n)
        assert len(set(pairs)) == len(pairs)
        assert all(a != b for a, b in pairs)
        assert _no_team_twice_per_round(pairings)

    def test_fewer_than_two_teams(self):
        assert rr_pairings_by_round(1) == []
        assert rr_round_count(1) == 0

    def test_legs_swap_sides(self):
        pairings = rr_pairings_for_legs(4, 2)
        assert len(pairings) == 12
        assert max(p[0] for p in pairings) == 6
        first_leg = {(a, b) for r, _, a, b in pairings if r <= 3}
        second_leg = {(a, b) for r, _, a, b in pairings if r > 3}
        assert second_leg == {(b, a) for a, b in first_leg}


class TestKRegular:
    """Every team meets exactly k distinct opponents."""

    def test_five_teams_two_matches(self):
        pairings = k_regular_pairings(5, 2)
        assert len(pairings) == 5
        assert set(_degrees(pairings).values()) == {2}

    def test_full_degree_is_round_robin(self):
        assert k_regular_pairings(4, 3) == rr_pairings_by_round(4)

    def test_even_n_uses_k_rounds(self):
        pairings = k_regular_pairings(8, 3)
        assert sorted({p[0] for p in pairings}) == [1, 2, 3]
        assert all(sum(1 for p in pairings if p[0] == r) == 4 for r in (1, 2, 3))

    @pytest.mark.parametrize(
        "n,k",
        [(n, k) for n in range(2, 13) for k in range(1, n) if (n * k) % 2 == 0],
    )
    def test_feasible_schedules_are_k_regular(self, n, k):
        pairings = k_regular_pairings(n, k)
        degrees = _degrees(pairings)
        pairs = [frozenset((a, b)) for _, _, a, b in pairings]

        assert len(pairings) == expected_match_count(n, k)
        assert all(degrees[i] == k for i in range(n))
        assert len(set(pairs)) == len(pairs)
        assert all(len(p) == 2 for p in pairs)
        assert _no_team_twice_per_round(pairings)


class TestFeasibility:
    """Handshake lemma and degree bound."""

    def test_feasible(self):
        assert check_k_regular(5, 2) == []
        assert check_k_regular(6, 3) == []

    def test_odd_product(self):
        reasons = check_k_regular(5, 3)
        assert len(reasons) == 1
        assert "even" in reasons[0]

    def test_k_not_below_team_count(self):
        reasons = check_k_regular(4, 4)
        assert len(reasons) == 1
        assert "less than" in reasons[0]

    def test_itemized_reasons_with_label(self):
        reasons = check_k_regular(3, 3, label="Group 2")
        assert len(reasons) == 2
        assert all(r.startswith("Group 2: ") for r in reasons)

    def test_too_few_teams(self):
        assert check_k_regular(1, 1) == ["at least 2 teams are required, got 1"]

    def test_expected_counts(self):
        assert expected_match_count(4, 0) == 6
        assert expected_match_count(4, 0, legs=2) == 12
        assert expected_match_count(5, 2) == 5
