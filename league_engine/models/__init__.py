from league_engine.models.bracket import BracketNode
from league_engine.models.match import (
    CupTier,
    Match,
    MatchPhase,
    MatchSet,
    MatchStatus,
    RoundType,
    TiebreakScore,
)
from league_engine.models.schedule_config import (
    DurationMode,
    PointsConfig,
    ScheduleConfig,
    ScoringConfig,
    ScoringMode,
)
from league_engine.models.standing import Standing
from league_engine.models.team import Team

__all__ = [
    "Team",
    "Match",
    "MatchSet",
    "TiebreakScore",
    "MatchStatus",
    "MatchPhase",
    "CupTier",
    "RoundType",
    "Standing",
    "BracketNode",
    "ScheduleConfig",
    "ScoringConfig",
    "PointsConfig",
    "ScoringMode",
    "DurationMode",
]
