"""
League engine: fixtures, score validation, standings, tie-breakers and
elimination brackets for paired-team racquet competitions.
"""

from league_engine.config import EngineSettings, load_engine_settings
from league_engine.exceptions import (
    ConcurrentWriteError,
    InfeasibleScheduleError,
    InvalidScoreError,
    LeagueEngineError,
    PreconditionError,
)
from league_engine.services.bracket_engine import (
    CohortSpec,
    Qualifier,
    advance_bracket,
    bracket_matches,
    bracket_rounds,
    bracket_state,
    build_bracket,
    derive_elimination,
    final_placements,
    promotion_relegation,
    select_qualifiers,
)
from league_engine.services.bracket_pairing import SeedingStrategy
from league_engine.services.competition_status import (
    is_competition_complete,
    is_group_phase_complete,
    suggest_next_match,
)
from league_engine.services.fixture_generator import check_schedule_feasibility, generate_schedule
from league_engine.services.score_parser import parse_score
from league_engine.services.score_submission import record_match_result, record_match_winner, start_match
from league_engine.services.score_validator import require_valid_score, validate_score
from league_engine.services.standings import compute_group_standings, compute_standings
from league_engine.services.tie_breakers import find_cutoff_ties, generate_tie_breakers, unresolved_ties

__all__ = [
    "LeagueEngineError",
    "InfeasibleScheduleError",
    "InvalidScoreError",
    "PreconditionError",
    "ConcurrentWriteError",
    "EngineSettings",
    "load_engine_settings",
    "generate_schedule",
    "check_schedule_feasibility",
    "validate_score",
    "require_valid_score",
    "parse_score",
    "start_match",
    "record_match_result",
    "record_match_winner",
    "compute_standings",
    "compute_group_standings",
    "find_cutoff_ties",
    "generate_tie_breakers",
    "unresolved_ties",
    "CohortSpec",
    "Qualifier",
    "SeedingStrategy",
    "select_qualifiers",
    "build_bracket",
    "advance_bracket",
    "bracket_state",
    "bracket_rounds",
    "bracket_matches",
    "final_placements",
    "derive_elimination",
    "promotion_relegation",
    "suggest_next_match",
    "is_group_phase_complete",
    "is_competition_complete",
]
