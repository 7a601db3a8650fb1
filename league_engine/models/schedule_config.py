from enum import Enum
from typing import List, Optional

from sqlmodel import Field, SQLModel


class ScoringMode(str, Enum):
    strict = "strict"
    flexible = "flexible"


class DurationMode(str, Enum):
    fixed = "fixed"
    free = "free"


class ScoringConfig(SQLModel):
    mode: ScoringMode = Field(default=ScoringMode.strict)
    # Flexible mode only: a 6-6 set without tiebreak, and a level set count, are accepted as draws
    allow_ties: bool = Field(default=False)
    sets_to_win: int = Field(default=2, ge=1)
    tiebreak_points: int = Field(default=7, ge=1)

    @property
    def max_sets(self) -> int:
        return 2 * self.sets_to_win - 1

    @property
    def ties_allowed(self) -> bool:
        return self.mode == ScoringMode.flexible and self.allow_ties


class PointsConfig(SQLModel):
    points_win: int = 3
    points_draw: int = 2
    points_loss: int = 1


class ScheduleConfig(SQLModel):
    courts: int = Field(default=1, ge=1)
    court_names: Optional[List[str]] = Field(default=None)
    matches_per_team: int = Field(default=0, ge=0)  # 0 = full round robin
    total_groups: int = Field(default=1, ge=1)
    rounds: int = Field(default=1, ge=1)  # Round robin multiplier (legs)
    duration_mode: DurationMode = Field(default=DurationMode.free)
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
