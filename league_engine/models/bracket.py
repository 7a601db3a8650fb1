from typing import Optional

from sqlmodel import Field, SQLModel

from league_engine.models.match import CupTier, Match, RoundType


class BracketNode(SQLModel):
    """
    One position of an elimination bracket.

    Nodes live in a flat list and point at their parent by key
    (feeds_into / loser_feeds_into), never by object reference.
    Team ids stay None until the feeding node is decided.
    """

    id: str
    tier: CupTier = Field(default=CupTier.none)
    round_type: RoundType
    round_number: int = Field(ge=1)
    slot: int = Field(ge=1)

    team1_id: Optional[str] = None
    team2_id: Optional[str] = None
    seed1: Optional[int] = None
    seed2: Optional[int] = None

    match: Optional[Match] = None
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    is_bye: bool = False

    feeds_into: Optional[str] = None
    feeds_slot: Optional[int] = None  # 1 -> team1, 2 -> team2
    loser_feeds_into: Optional[str] = None
    loser_feeds_slot: Optional[int] = None

    @property
    def is_decided(self) -> bool:
        return self.winner_id is not None

    @property
    def status(self) -> str:
        """completed | ready | pending"""
        if self.winner_id is not None:
            return "completed"
        if self.match is not None:
            return "ready"
        return "pending"
