"""
Group Partitioning: split teams into group cohorts before scheduling.

Two modes:
- Stable: every team already carries a group_number set by the caller
- Dealt: teams are (optionally seeded-shuffled) and dealt round-robin into groups,
  so group sizes differ by at most one
"""

import random
from collections import defaultdict
from math import floor
from typing import Dict, List, Optional, Sequence

from league_engine.exceptions import InfeasibleScheduleError, PreconditionError
from league_engine.models.match import Match
from league_engine.models.team import Team

MIN_TEAMS_PER_GROUP = 2


def compute_group_capacities(team_count: int, groups_count: int) -> List[int]:
    """
    Compute capacity (size) for each group.

    Algorithm:
    - base_size = floor(team_count / groups_count)
    - remainder = team_count % groups_count
    - First `remainder` groups have size (base_size + 1)
    - Remaining groups have size base_size
    """
    if groups_count <= 0:
        return []

    base_size = floor(team_count / groups_count)
    remainder = team_count % groups_count
    return [base_size + 1 if i < remainder else base_size for i in range(groups_count)]


def partition_reasons(teams: Sequence[Team], total_groups: int) -> List[str]:
    """Itemized reasons why teams cannot be split into total_groups groups (empty if fine)."""
    reasons: List[str] = []
    if total_groups <= 1:
        return reasons

    preassigned = [t for t in teams if t.group_number is not None]
    if preassigned and len(preassigned) != len(teams):
        missing = [t.id for t in teams if t.group_number is None]
        reasons.append(
            f"group numbers are partially assigned; teams without a group: {', '.join(missing)}"
        )
        return reasons

    if preassigned:
        out_of_range = sorted({t.group_number for t in preassigned if t.group_number > total_groups})
        if out_of_range:
            reasons.append(
                f"group numbers {out_of_range} exceed total_groups={total_groups}"
            )
        return reasons

    if len(teams) < total_groups * MIN_TEAMS_PER_GROUP:
        reasons.append(
            f"not enough teams for {total_groups} groups "
            f"(min {MIN_TEAMS_PER_GROUP} per group, got {len(teams)} teams)"
        )
    return reasons


def assign_groups(teams: Sequence[Team], total_groups: int, seed: Optional[int] = None) -> List[Team]:
    """
    Return copies of teams with group_number set.

    - total_groups == 1: teams returned unchanged (ungrouped competition)
    - every team pre-assigned: kept as given (stable)
    - no team pre-assigned: shuffled with random.Random(seed) when a seed is
      given (Fisher-Yates), otherwise dealt in roster order; team i goes to
      group (i % total_groups) + 1

    Raises InfeasibleScheduleError with itemized reasons.
    """
    if total_groups <= 1:
        return list(teams)

    reasons = partition_reasons(teams, total_groups)
    if reasons:
        raise InfeasibleScheduleError(reasons)

    if all(t.group_number is not None for t in teams):
        return list(teams)

    order = list(teams)
    if seed is not None:
        random.Random(seed).shuffle(order)

    assigned: Dict[str, int] = {}
    for index, team in enumerate(order):
        assigned[team.id] = (index % total_groups) + 1

    return [t.model_copy(update={"group_number": assigned[t.id]}) for t in teams]


def teams_by_group(teams: Sequence[Team]) -> Dict[Optional[int], List[Team]]:
    """Group teams by group_number, preserving roster order inside each group."""
    grouped: Dict[Optional[int], List[Team]] = defaultdict(list)
    for team in teams:
        grouped[team.group_number].append(team)
    return dict(grouped)


def reassign_group(team: Team, group_number: int, matches: Sequence[Match]) -> Team:
    """Move a team to another group; refused once the team has been scheduled."""
    if any(m.involves(team.id) for m in matches):
        raise PreconditionError(
            f"Team {team.id} already has scheduled matches; its group can no longer change"
        )
    return team.model_copy(update={"group_number": group_number})
