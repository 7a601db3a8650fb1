from enum import Enum
from typing import List, Optional, Tuple

from pydantic import model_validator
from sqlmodel import Field, SQLModel


class MatchStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class MatchPhase(str, Enum):
    group = "group"
    elimination = "elimination"


class CupTier(str, Enum):
    gold = "gold"
    silver = "silver"
    bronze = "bronze"
    relegation = "relegation"
    none = "none"


class RoundType(str, Enum):
    group = "group"
    round_of_64 = "round_of_64"
    round_of_32 = "round_of_32"
    round_of_16 = "round_of_16"
    quarterfinal = "quarterfinal"
    semifinal = "semifinal"
    final = "final"
    third_place = "third_place"
    tie_break = "tie_break"


class TiebreakScore(SQLModel):
    team1_points: int
    team2_points: int


class MatchSet(SQLModel):
    team1_games: int
    team2_games: int
    tiebreak: Optional[TiebreakScore] = None

    def winner_side(self) -> Optional[int]:
        """1 or 2 for the side that took the set, None for a drawn set."""
        if self.team1_games > self.team2_games:
            return 1
        if self.team2_games > self.team1_games:
            return 2
        if self.tiebreak is not None:
            if self.tiebreak.team1_points > self.tiebreak.team2_points:
                return 1
            if self.tiebreak.team2_points > self.tiebreak.team1_points:
                return 2
        return None


class Match(SQLModel):
    id: str
    team1_id: str
    team2_id: str
    sets: List[MatchSet] = Field(default_factory=list)
    status: MatchStatus = Field(default=MatchStatus.pending)
    round: int = Field(default=1, ge=1)
    phase: MatchPhase = Field(default=MatchPhase.group)
    round_type: RoundType = Field(default=RoundType.group)
    tier: Optional[CupTier] = Field(default=None)
    tie_break: bool = Field(default=False)
    tie_break_batch: Optional[str] = Field(default=None)  # Matches generated together for one tied block

    group_number: Optional[int] = Field(default=None, ge=1)
    court_number: Optional[int] = Field(default=None, ge=1)
    court_label: Optional[str] = Field(default=None)
    slot: Optional[int] = Field(default=None, ge=1)  # Sub-slot within the round
    offset_minutes: Optional[int] = Field(default=None, ge=0)  # Fixed duration mode only

    winner_id: Optional[str] = Field(default=None)
    is_draw: bool = Field(default=False)
    version: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _distinct_teams(self) -> "Match":
        if self.team1_id == self.team2_id:
            raise ValueError(f"Match {self.id} pairs team {self.team1_id} against itself")
        return self

    @property
    def team_ids(self) -> Tuple[str, str]:
        return (self.team1_id, self.team2_id)

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.completed

    def involves(self, team_id: str) -> bool:
        return team_id in (self.team1_id, self.team2_id)

    def loser_id(self) -> Optional[str]:
        if self.winner_id is None:
            return None
        return self.team2_id if self.winner_id == self.team1_id else self.team1_id
