"""
Fixture Rules: pairing math and feasibility checks (single source of truth).

All round-robin and k-regular pairing math lives here. fixture_generator
turns these index pairings into Match records; no other module should
contain pairing math.

Pairings are (round_index, sequence_in_round, idx_a, idx_b) tuples where
idx_a, idx_b are 0-based positions in the team ordering.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

Pairing = Tuple[int, int, int, int]


# =============================================================================
# Round Robin (circle method)
# =============================================================================

def rr_matches_total(team_count: int) -> int:
    """Return number of RR matches for n teams: C(n, 2) = n*(n-1)/2."""
    return (team_count * (team_count - 1)) // 2


def rr_round_count(team_count: int) -> int:
    """
    Return number of RR rounds for n teams.
    Even n: n-1 rounds. Odd n: n rounds (with BYE).
    """
    if team_count < 2:
        return 0
    if team_count % 2 == 0:
        return team_count - 1
    return team_count


def rr_pairings_by_round(team_count: int) -> List[Pairing]:
    """
    Round-robin pairings using the circle method.

    Position 0 stays fixed while the others rotate one step per round.
    For odd n a BYE position is added; whoever meets the BYE sits out,
    so each round has floor(n/2) matches.
    """
    n = team_count
    if n < 2:
        return []
    n2 = n + 1 if n % 2 == 1 else n  # Add BYE for odd n
    half = n2 // 2
    rounds_count = n2 - 1

    bye_idx = n if n % 2 == 1 else -1  # BYE at index n when we have n+1 positions

    result: List[Pairing] = []
    positions = list(range(n2))

    for round_num in range(1, rounds_count + 1):
        seq = 0
        for i in range(half):
            j = n2 - 1 - i
            a, b = positions[i], positions[j]
            if a == bye_idx or b == bye_idx:
                continue
            seq += 1
            result.append((round_num, seq, min(a, b), max(a, b)))
        # Rotate: keep 0, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return result


def rr_pairings_for_legs(team_count: int, legs: int) -> List[Pairing]:
    """
    Repeat the round robin `legs` times. Even legs swap sides so every
    pairing alternates which team is listed first.
    """
    single = rr_pairings_by_round(team_count)
    per_leg = rr_round_count(team_count)
    result: List[Pairing] = []
    for leg in range(legs):
        offset = leg * per_leg
        for round_idx, seq, a, b in single:
            if leg % 2 == 1:
                a, b = b, a
            result.append((round_idx + offset, seq, a, b))
    return result


# =============================================================================
# Partial (k-regular) schedules
# =============================================================================

def k_regular_edges(team_count: int, k: int) -> List[Tuple[int, int]]:
    """
    Edge list of a k-regular graph on n vertices (requires k < n and n*k even).

    Even n: union of the first k circle-method rounds (perfect matchings).
    Odd n (k even): circulant graph, vertex i joined to i±1 .. i±k/2.
    """
    n = team_count
    if n % 2 == 0:
        return [(a, b) for r, _, a, b in rr_pairings_by_round(n) if r <= k]

    edges: List[Tuple[int, int]] = []
    for distance in range(1, k // 2 + 1):
        for i in range(n):
            j = (i + distance) % n
            edges.append((min(i, j), max(i, j)))
    return edges


def pack_rounds(team_count: int, edges: List[Tuple[int, int]]) -> List[Pairing]:
    """
    Pack edges into rounds that are matchings (no team twice per round).

    Greedy: each round takes as many edges as possible, preferring edges
    whose teams still have the most matches left, then input order.
    Deterministic for a given edge order.
    """
    remaining_degree: Dict[int, int] = defaultdict(int)
    for a, b in edges:
        remaining_degree[a] += 1
        remaining_degree[b] += 1

    pending = list(enumerate(edges))
    result: List[Pairing] = []
    round_num = 0
    while pending:
        round_num += 1
        used = set()
        seq = 0
        carried = []
        ordered = sorted(
            pending,
            key=lambda item: (-(remaining_degree[item[1][0]] + remaining_degree[item[1][1]]), item[0]),
        )
        for index, (a, b) in ordered:
            if a in used or b in used:
                carried.append((index, (a, b)))
                continue
            used.add(a)
            used.add(b)
            seq += 1
            result.append((round_num, seq, a, b))
        for _, _, a, b in result[len(result) - seq:]:
            remaining_degree[a] -= 1
            remaining_degree[b] -= 1
        pending = sorted(carried)
    return result


def k_regular_pairings(team_count: int, k: int) -> List[Pairing]:
    """
    Pairings where every team meets exactly k distinct opponents.

    k == n-1 is the full round robin. Even n yields exactly k rounds of
    perfect matchings; odd n yields near-perfect matching rounds.
    Callers must check feasibility first (see check_k_regular).
    """
    n = team_count
    if k == 0 or n < 2:
        return []
    if k == n - 1:
        return rr_pairings_by_round(n)
    if n % 2 == 0:
        return [p for p in rr_pairings_by_round(n) if p[0] <= k]
    return pack_rounds(n, k_regular_edges(n, k))


# =============================================================================
# Validation Helpers
# =============================================================================

def check_k_regular(team_count: int, k: int, label: Optional[str] = None) -> List[str]:
    """
    Feasibility of a k-regular schedule on n teams.

    Returns a list of reasons (empty when feasible):
    - at least 2 teams
    - k < n (a team cannot meet more opponents than exist)
    - n*k even (handshake lemma: sum of degrees is twice the match count)
    """
    prefix = f"{label}: " if label else ""
    reasons: List[str] = []
    n = team_count
    if n < 2:
        reasons.append(f"{prefix}at least 2 teams are required, got {n}")
        return reasons
    if k >= n:
        reasons.append(
            f"{prefix}matches_per_team={k} must be less than the team count {n}"
        )
    if (n * k) % 2 != 0:
        reasons.append(
            f"{prefix}teams x matches_per_team must be even ({n} x {k} = {n * k})"
        )
    return reasons


def expected_match_count(team_count: int, k: int, legs: int = 1) -> int:
    """Total matches: n*k/2 for partial schedules, C(n,2)*legs for full round robin."""
    if k == 0:
        return rr_matches_total(team_count) * legs
    return (team_count * k) // 2
