"""
Engine defaults read from the environment (.env supported).

Engine operations never read these themselves; the service layer loads the
settings once and passes the resulting configs into each call.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from league_engine.models.schedule_config import PointsConfig, ScheduleConfig, ScoringConfig, ScoringMode

load_dotenv()

_TRUTHY = ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class EngineSettings:
    points_for_win: int = 3
    points_for_draw: int = 2
    points_for_loss: int = 1
    scoring_mode: ScoringMode = ScoringMode.flexible
    allow_ties: bool = True
    sets_to_win: int = 2
    tiebreak_points: int = 7
    default_courts: int = 1

    def points_config(self) -> PointsConfig:
        return PointsConfig(
            points_win=self.points_for_win,
            points_draw=self.points_for_draw,
            points_loss=self.points_for_loss,
        )

    def scoring_config(self) -> ScoringConfig:
        return ScoringConfig(
            mode=self.scoring_mode,
            allow_ties=self.allow_ties,
            sets_to_win=self.sets_to_win,
            tiebreak_points=self.tiebreak_points,
        )

    def schedule_config(self, **overrides) -> ScheduleConfig:
        """Schedule defaults (courts and scoring); per-competition fields come in as overrides."""
        values = {"courts": self.default_courts, "scoring": self.scoring_config()}
        values.update(overrides)
        return ScheduleConfig(**values)


def load_engine_settings() -> EngineSettings:
    """Build settings from LEAGUE_* environment variables, falling back to defaults."""
    mode = os.getenv("LEAGUE_SCORING_MODE", ScoringMode.flexible.value).strip().lower()
    try:
        scoring_mode = ScoringMode(mode)
    except ValueError:
        raise ValueError(f"LEAGUE_SCORING_MODE must be 'strict' or 'flexible', got {mode!r}")

    return EngineSettings(
        points_for_win=_env_int("LEAGUE_POINTS_FOR_WIN", 3),
        points_for_draw=_env_int("LEAGUE_POINTS_FOR_DRAW", 2),
        points_for_loss=_env_int("LEAGUE_POINTS_FOR_LOSS", 1),
        scoring_mode=scoring_mode,
        allow_ties=os.getenv("LEAGUE_ALLOW_TIES", "true").lower() in _TRUTHY,
        sets_to_win=_env_int("LEAGUE_SETS_TO_WIN", 2),
        tiebreak_points=_env_int("LEAGUE_TIEBREAK_POINTS", 7),
        default_courts=_env_int("LEAGUE_DEFAULT_COURTS", 1),
    )
