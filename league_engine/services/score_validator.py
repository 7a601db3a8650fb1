"""
Score Validator: set/game/tiebreak rules for a proposed match result.

Every violated rule yields its own ScoreIssue (set index, code, message) so the
caller can point at the exact set that is wrong. Nothing here mutates a match;
score_submission applies a validated result.

Per-set rules:
  - games cannot be negative, and no side may exceed 7 games
  - tied games are only possible at 6-6
  - the set winner must reach at least 6 games
  - 7-6 requires a tiebreak score; 6-6 requires one unless ties are allowed
  - strict mode enforces win-by-two (6-5 unfinished, 7 only as 7-5 / 7-6)
  - a tiebreak must reach tiebreak_points with a 2-point difference
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from league_engine.exceptions import InvalidScoreError
from league_engine.models.match import MatchSet, TiebreakScore
from league_engine.models.schedule_config import ScoringConfig, ScoringMode

MAX_GAMES_PER_SET = 7
MIN_GAMES_TO_WIN_SET = 6


@dataclass
class ScoreIssue:
    set_index: Optional[int]  # 0-based; None for match-level problems
    code: str
    message: str


@dataclass
class ScoreValidation:
    valid: bool
    winner_side: Optional[int] = None  # 1 | 2
    is_draw: bool = False
    team1_sets: int = 0
    team2_sets: int = 0
    issues: List[ScoreIssue] = field(default_factory=list)

    @property
    def reasons(self) -> List[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "winner_side": self.winner_side,
            "is_draw": self.is_draw,
            "sets_won": [self.team1_sets, self.team2_sets],
            "reasons": self.reasons,
        }


def _check_tiebreak(
    index: int,
    tiebreak: TiebreakScore,
    scoring: ScoringConfig,
    expected_side: Optional[int],
) -> List[ScoreIssue]:
    label = f"Set {index + 1}"
    p1, p2 = tiebreak.team1_points, tiebreak.team2_points
    if p1 < 0 or p2 < 0:
        return [ScoreIssue(index, "TIEBREAK_NEGATIVE", f"{label}: Tie-break points cannot be negative")]

    issues: List[ScoreIssue] = []
    high, low = max(p1, p2), min(p1, p2)
    if high < scoring.tiebreak_points or high - low < 2:
        issues.append(ScoreIssue(
            index,
            "TIEBREAK_INCOMPLETE",
            f"{label}: Tie-break must reach at least {scoring.tiebreak_points} points "
            f"with 2-point difference (got {p1}-{p2})",
        ))
    elif expected_side is not None:
        tb_side = 1 if p1 > p2 else 2
        if tb_side != expected_side:
            issues.append(ScoreIssue(
                index,
                "TIEBREAK_MISMATCH",
                f"{label}: Tie-break winner must be the team that took the set 7-6",
            ))
    return issues


def validate_set(index: int, match_set: MatchSet, scoring: ScoringConfig) -> List[ScoreIssue]:
    """Check one set against the scoring rules. Returns an empty list when the set is valid."""
    label = f"Set {index + 1}"
    g1, g2 = match_set.team1_games, match_set.team2_games

    if g1 < 0 or g2 < 0:
        return [ScoreIssue(index, "NEGATIVE_GAMES", f"{label}: Games cannot be negative")]

    if max(g1, g2) > MAX_GAMES_PER_SET:
        return [ScoreIssue(
            index,
            "TOO_MANY_GAMES",
            f"{label}: No side may exceed {MAX_GAMES_PER_SET} games (got {g1}-{g2})",
        )]

    high, low = max(g1, g2), min(g1, g2)

    if g1 == g2:
        if g1 != MIN_GAMES_TO_WIN_SET:
            return [ScoreIssue(
                index,
                "TIED_GAMES",
                f"{label}: Tied score {g1}-{g2} is only possible at 6-6",
            )]
        if match_set.tiebreak is None:
            if scoring.ties_allowed:
                return []
            return [ScoreIssue(
                index,
                "TIEBREAK_REQUIRED",
                f"{label}: At 6-6 a tie-break score is required",
            )]
        return _check_tiebreak(index, match_set.tiebreak, scoring, expected_side=None)

    if high < MIN_GAMES_TO_WIN_SET:
        return [ScoreIssue(
            index,
            "WINNER_BELOW_MINIMUM",
            f"{label}: Winner must have at least {MIN_GAMES_TO_WIN_SET} games (got {g1}-{g2})",
        )]

    leader = 1 if g1 > g2 else 2

    if high == 7 and low == 6:
        if match_set.tiebreak is None:
            return [ScoreIssue(
                index,
                "TIEBREAK_REQUIRED",
                f"{label}: Tie-break score required for 7-6 or 6-7 result",
            )]
        return _check_tiebreak(index, match_set.tiebreak, scoring, expected_side=leader)

    issues: List[ScoreIssue] = []
    if match_set.tiebreak is not None:
        issues.append(ScoreIssue(
            index,
            "UNEXPECTED_TIEBREAK",
            f"{label}: Tie-break score only applies to 6-6 or 7-6 sets (got {g1}-{g2})",
        ))

    if scoring.mode == ScoringMode.strict:
        if high == 6 and high - low < 2:
            issues.append(ScoreIssue(
                index,
                "WIN_BY_TWO",
                f"{label}: Must win by at least 2 games at 6 (got {g1}-{g2})",
            ))
        elif high == 7 and low < 5:
            issues.append(ScoreIssue(
                index,
                "INVALID_SEVEN",
                f"{label}: Seven games is only valid as 7-5 or 7-6 (got {g1}-{g2})",
            ))

    return issues


def validate_score(sets: Sequence[MatchSet], scoring: Optional[ScoringConfig] = None) -> ScoreValidation:
    """
    Validate a proposed set-by-set result and compute the winner.

    A result is invalid when neither side reaches scoring.sets_to_win, unless
    flexible scoring with allow_ties accepts a level set count as a draw.
    """
    scoring = scoring or ScoringConfig()
    issues: List[ScoreIssue] = []

    if not sets:
        issues.append(ScoreIssue(None, "NO_SETS", "A match must have at least one set"))
        return ScoreValidation(valid=False, issues=issues)

    if len(sets) > scoring.max_sets:
        issues.append(ScoreIssue(
            None,
            "TOO_MANY_SETS",
            f"A match must have 1 to {scoring.max_sets} sets (got {len(sets)})",
        ))

    t1_sets = 0
    t2_sets = 0
    for index, match_set in enumerate(sets):
        if t1_sets >= scoring.sets_to_win or t2_sets >= scoring.sets_to_win:
            issues.append(ScoreIssue(
                index,
                "SET_AFTER_DECIDED",
                f"Set {index + 1}: Played after the match was already decided",
            ))
        issues.extend(validate_set(index, match_set, scoring))

        side = match_set.winner_side()
        if side == 1:
            t1_sets += 1
        elif side == 2:
            t2_sets += 1

    result = ScoreValidation(valid=False, team1_sets=t1_sets, team2_sets=t2_sets, issues=issues)
    if issues:
        return result

    if t1_sets >= scoring.sets_to_win and t1_sets > t2_sets:
        result.winner_side = 1
    elif t2_sets >= scoring.sets_to_win and t2_sets > t1_sets:
        result.winner_side = 2
    elif t1_sets == t2_sets and scoring.ties_allowed:
        result.is_draw = True
    else:
        issues.append(ScoreIssue(
            None,
            "NO_WINNER",
            f"Cannot determine match winner: neither team reached {scoring.sets_to_win} sets "
            f"(sets {t1_sets}-{t2_sets})",
        ))
        return result

    result.valid = True
    return result


def require_valid_score(sets: Sequence[MatchSet], scoring: Optional[ScoringConfig] = None) -> ScoreValidation:
    """validate_score, raising InvalidScoreError on the first offending set."""
    result = validate_score(sets, scoring)
    if not result.valid:
        first = result.issues[0]
        raise InvalidScoreError(first.set_index, first.message, result.issues)
    return result
