"""
Write Guards for Match Results

Reusable guards for the write-once result rule:
- Completed matches are terminal (no second write)
- Optional optimistic version check for concurrent submissions
- Both team slots must be real teams before a result is accepted
"""

from typing import Optional

from league_engine.exceptions import ConcurrentWriteError, PreconditionError
from league_engine.models.match import Match, MatchStatus


def require_open_match(match: Match, expected_version: Optional[int] = None) -> Match:
    """
    Require that a match can still accept a result.

    Args:
        match: Match the result is submitted against
        expected_version: Version the submitter last read (optional)

    Returns:
        The same match if writable

    Raises:
        ConcurrentWriteError: Match already completed, or version moved on
    """
    if match.status == MatchStatus.completed:
        raise ConcurrentWriteError(
            match.id,
            f"MATCH_ALREADY_COMPLETED: Match {match.id} already has a result "
            f"(winner {match.winner_id or 'draw'}). Completed results cannot be overwritten.",
        )

    if expected_version is not None and expected_version != match.version:
        raise ConcurrentWriteError(
            match.id,
            f"STALE_MATCH_VERSION: Match {match.id} is at version {match.version}, "
            f"submission expected version {expected_version}.",
        )

    return match


def require_teams_known(match: Match) -> Match:
    """Require both team slots to hold real team ids."""
    if not match.team1_id or not match.team2_id:
        raise PreconditionError(f"Match {match.id} does not have both teams assigned yet")
    return match
