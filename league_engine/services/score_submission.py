"""
Score submission: the only entry point that turns a pending match into a completed one.

Completing a match is a terminal transition. A second submission against a
completed match (or against a stale version) is rejected with
ConcurrentWriteError instead of overwriting the stored result.
"""

import logging
from typing import Optional, Sequence

from league_engine.exceptions import ConcurrentWriteError, PreconditionError
from league_engine.models.match import Match, MatchSet, MatchStatus
from league_engine.models.schedule_config import ScoringConfig
from league_engine.services.score_validator import require_valid_score
from league_engine.utils.version_guards import require_open_match, require_teams_known

logger = logging.getLogger(__name__)


def start_match(match: Match, expected_version: Optional[int] = None) -> Match:
    """pending -> in_progress. Returns a new Match."""
    require_open_match(match, expected_version)
    if match.status == MatchStatus.in_progress:
        return match
    return match.model_copy(update={"status": MatchStatus.in_progress, "version": match.version + 1})


def record_match_result(
    match: Match,
    sets: Sequence[MatchSet],
    scoring: Optional[ScoringConfig] = None,
    expected_version: Optional[int] = None,
) -> Match:
    """
    Validate sets and return a completed copy of the match.

    Raises:
        ConcurrentWriteError: match already completed or version mismatch
        PreconditionError: team slots not yet known
        InvalidScoreError: sets violate the scoring rules
    """
    try:
        require_open_match(match, expected_version)
    except ConcurrentWriteError:
        logger.warning("Rejected result for match %s: already written", match.id)
        raise
    require_teams_known(match)

    result = require_valid_score(sets, scoring)

    winner_id = None
    if result.winner_side == 1:
        winner_id = match.team1_id
    elif result.winner_side == 2:
        winner_id = match.team2_id

    completed = match.model_copy(
        update={
            "sets": [s.model_copy() for s in sets],
            "winner_id": winner_id,
            "is_draw": result.is_draw,
            "status": MatchStatus.completed,
            "version": match.version + 1,
        }
    )
    logger.info(
        "Match %s completed: winner=%s sets=%d-%d",
        match.id,
        winner_id or "draw",
        result.team1_sets,
        result.team2_sets,
    )
    return completed


def record_match_winner(match: Match, winner_id: str, expected_version: Optional[int] = None) -> Match:
    """Record a walkover/adjudicated winner without set scores."""
    require_open_match(match, expected_version)
    require_teams_known(match)
    if winner_id not in match.team_ids:
        raise PreconditionError(f"Team {winner_id} is not playing in match {match.id}")
    return match.model_copy(
        update={
            "winner_id": winner_id,
            "is_draw": False,
            "status": MatchStatus.completed,
            "version": match.version + 1,
        }
    )
