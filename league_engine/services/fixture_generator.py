"""
Fixture Generator: group-phase schedule generation.

Produces the initial Match set for a competition:
1. Feasibility is checked up front for every group (itemized reasons)
2. Teams are partitioned into groups (stable or seeded deal)
3. Each group is paired independently:
   - matches_per_team == 0: full round robin (circle method, optional legs)
   - matches_per_team == k: k-regular schedule (every team meets k opponents)
4. Courts and sub-slots are assigned per round across all groups
5. The result is verified before it is returned

Generation is all-or-nothing: any failing group rejects the whole request
with InfeasibleScheduleError and no matches are returned.
"""

import logging
import random
from collections import Counter
from typing import Dict, List, Optional, Sequence

from league_engine.exceptions import InfeasibleScheduleError, PreconditionError
from league_engine.models.match import Match, MatchPhase, MatchStatus, RoundType
from league_engine.models.schedule_config import DurationMode, ScheduleConfig
from league_engine.models.team import Team
from league_engine.services.fixture_rules import (
    check_k_regular,
    expected_match_count,
    k_regular_pairings,
    rr_pairings_for_legs,
)
from league_engine.utils.courts import assign_courts
from league_engine.utils.group_partition import (
    assign_groups,
    compute_group_capacities,
    partition_reasons,
    teams_by_group,
)

logger = logging.getLogger(__name__)


def _group_label(group: Optional[int]) -> Optional[str]:
    return f"Group {group}" if group is not None else None


def _planned_group_sizes(teams: Sequence[Team], config: ScheduleConfig) -> Dict[Optional[int], int]:
    """Team count per group as generation will see it (before any shuffle)."""
    if config.total_groups <= 1:
        return {None: len(teams)}
    if all(t.group_number is not None for t in teams):
        counts = Counter(t.group_number for t in teams)
        return {g: counts.get(g, 0) for g in range(1, config.total_groups + 1)}
    capacities = compute_group_capacities(len(teams), config.total_groups)
    return {i + 1: size for i, size in enumerate(capacities)}


def check_schedule_feasibility(teams: Sequence[Team], config: ScheduleConfig) -> List[str]:
    """
    Return every reason the schedule cannot be generated (empty list = feasible).

    Checks:
    - at least 2 teams and unique team ids
    - rounds multiplier only with full round robin
    - fixed duration mode needs duration_minutes
    - group partition is possible
    - per group: k-regular preconditions (k < n, n*k even) or >= 2 teams
    """
    reasons: List[str] = []
    k = config.matches_per_team

    if len(teams) < 2:
        reasons.append(f"at least 2 teams are required, got {len(teams)}")
        return reasons

    duplicates = sorted(tid for tid, count in Counter(t.id for t in teams).items() if count > 1)
    if duplicates:
        reasons.append(f"duplicate team ids: {', '.join(duplicates)}")

    if k > 0 and config.rounds > 1:
        reasons.append(
            f"rounds={config.rounds} only applies to a full round robin (matches_per_team=0)"
        )

    if config.duration_mode == DurationMode.fixed and not config.duration_minutes:
        reasons.append("duration_minutes is required when duration_mode is 'fixed'")

    group_reasons = partition_reasons(teams, config.total_groups)
    if group_reasons:
        reasons.extend(group_reasons)
        return reasons

    for group, size in sorted(_planned_group_sizes(teams, config).items(), key=lambda item: item[0] or 0):
        label = _group_label(group)
        if k > 0:
            reasons.extend(check_k_regular(size, k, label=label))
        elif size < 2:
            prefix = f"{label}: " if label else ""
            reasons.append(f"{prefix}at least 2 teams are required, got {size}")

    return reasons


def _match_id(group: Optional[int], round_num: int, seq: int) -> str:
    if group is None:
        return f"r{round_num}-m{seq}"
    return f"g{group}-r{round_num}-m{seq}"


def verify_schedule(matches: Sequence[Match], teams: Sequence[Team], matches_per_team: int, legs: int = 1) -> List[str]:
    """
    Post-generation invariants:
    - no self-pairing
    - no team twice in the same round
    - every team plays exactly k matches (k-regular) or n-1 per leg (round robin)
    - no opponent repeated more than once per leg
    """
    violations: List[str] = []
    grouped = teams_by_group(teams)
    played: Counter = Counter()
    pair_counts: Counter = Counter()
    round_teams: Dict[tuple, set] = {}

    for m in matches:
        if m.team1_id == m.team2_id:
            violations.append(f"match {m.id} pairs a team with itself")
        key = (m.group_number, m.round)
        busy = round_teams.setdefault(key, set())
        for tid in m.team_ids:
            if tid in busy:
                violations.append(f"team {tid} plays twice in round {m.round}")
            busy.add(tid)
            played[tid] += 1
        pair_counts[frozenset(m.team_ids)] += 1

    for group, members in grouped.items():
        expected = matches_per_team if matches_per_team > 0 else (len(members) - 1) * legs
        for team in members:
            if played[team.id] != expected:
                violations.append(
                    f"team {team.id} has {played[team.id]} matches, expected {expected}"
                )

    max_repeat = 1 if matches_per_team > 0 else legs
    for pair, count in pair_counts.items():
        if count > max_repeat:
            violations.append(f"pairing {sorted(pair)} repeated {count} times")

    return violations


def generate_schedule(
    teams: Sequence[Team],
    config: ScheduleConfig,
    seed: Optional[int] = None,
    existing_matches: Sequence[Match] = (),
) -> List[Match]:
    """
    Generate the group-phase schedule.

    Args:
        teams: Teams in roster order (the order drives pairing when no seed is given)
        config: Schedule configuration
        seed: Optional seed; shuffles group assignment and pairing order reproducibly
        existing_matches: Matches already stored; completed ones block regeneration

    Returns:
        Pending group-phase matches with round, group, court and slot assigned

    Raises:
        InfeasibleScheduleError: itemized reasons, nothing generated
        PreconditionError: results already recorded for this competition
    """
    completed = [m.id for m in existing_matches if m.status == MatchStatus.completed]
    if completed:
        raise PreconditionError(
            f"Cannot regenerate schedule: {len(completed)} match(es) already completed"
        )

    reasons = check_schedule_feasibility(teams, config)
    if reasons:
        logger.warning("Schedule rejected for %d teams: %s", len(teams), "; ".join(reasons))
        raise InfeasibleScheduleError(reasons)

    k = config.matches_per_team
    grouped_teams = assign_groups(teams, config.total_groups, seed)
    if config.total_groups <= 1:
        cohorts: Dict[Optional[int], List[Team]] = {None: list(grouped_teams)}
    else:
        cohorts = teams_by_group(grouped_teams)

    rng = random.Random(seed) if seed is not None else None
    matches: List[Match] = []
    for group in sorted(cohorts, key=lambda g: g or 0):
        members = list(cohorts[group])
        if rng is not None:
            rng.shuffle(members)

        n = len(members)
        if k == 0:
            pairings = rr_pairings_for_legs(n, config.rounds)
        else:
            pairings = k_regular_pairings(n, k)

        logger.debug(
            "Group %s: %d teams, %d matches over %d rounds",
            group,
            n,
            len(pairings),
            max((p[0] for p in pairings), default=0),
        )

        for round_num, seq, idx_a, idx_b in pairings:
            matches.append(Match(
                id=_match_id(group, round_num, seq),
                team1_id=members[idx_a].id,
                team2_id=members[idx_b].id,
                round=round_num,
                phase=MatchPhase.group,
                round_type=RoundType.group,
                group_number=group,
            ))

        if len(pairings) != expected_match_count(n, k, config.rounds):
            raise InfeasibleScheduleError([
                f"{_group_label(group) or 'Schedule'}: generated {len(pairings)} matches, "
                f"expected {expected_match_count(n, k, config.rounds)}"
            ])

    matches.sort(key=lambda m: (m.round, m.group_number or 0, m.id))
    duration = config.duration_minutes if config.duration_mode == DurationMode.fixed else None
    matches = assign_courts(matches, config.courts, config.court_names, duration)

    if config.total_groups > 1:
        scheduled_teams = grouped_teams
    else:
        scheduled_teams = [t.model_copy(update={"group_number": None}) for t in grouped_teams]
    violations = verify_schedule(matches, scheduled_teams, k, config.rounds)
    if violations:
        raise InfeasibleScheduleError(violations)

    logger.info(
        "Generated %d matches for %d teams in %d group(s) (matches_per_team=%d, courts=%d)",
        len(matches),
        len(teams),
        len(cohorts),
        k,
        config.courts,
    )
    return matches
