from typing import Optional

from sqlmodel import Field, SQLModel


class Team(SQLModel):
    """A pair of players entered in a competition."""

    id: str
    player1_id: str
    player2_id: str
    name: Optional[str] = None
    # Group cohort (1-based); reassignable only before the team is scheduled
    group_number: Optional[int] = Field(default=None, ge=1)

    @property
    def label(self) -> str:
        return self.name or self.id
