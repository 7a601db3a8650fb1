from typing import Optional

from sqlmodel import Field, SQLModel


class Standing(SQLModel):
    """Derived ranking row; always recomputed from the match list, never stored as truth."""

    team_id: str
    group_number: Optional[int] = Field(default=None)
    matches_played: int = 0
    matches_won: int = 0
    matches_drawn: int = 0
    matches_lost: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    games_won: int = 0
    games_lost: int = 0
    points: int = 0
    position: int = 0

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def game_difference(self) -> int:
        return self.games_won - self.games_lost
