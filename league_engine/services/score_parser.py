"""
Score parser for set-by-set racquet scores.

Supports formats like:
  "6-4"                 → 1 set
  "6-3 4-6 7-6(7-4)"    → 3 sets, last one decided by a tiebreak
  "6-3, 4-6, 6-6(5-7)"  → comma-separated variant
  {"display": "6-4"}    → extracts display string first
  {"sets": [{"a": 6, "b": 4, "tiebreak": {"a": 7, "b": 5}}]} → structured sets

Returns None on parse failure (non-fatal). Rule checking lives in score_validator.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from league_engine.models.match import MatchSet, TiebreakScore

_SET_PATTERN = re.compile(r"^(\d+)-(\d+)(?:\((\d+)-(\d+)\))?$")


@dataclass
class SetTotals:
    team1_sets_won: int
    team2_sets_won: int
    team1_games: int
    team2_games: int


def summarize_sets(sets: Sequence[MatchSet]) -> SetTotals:
    """Count sets won and games per side. Drawn sets count for neither side."""
    t1_sets = 0
    t2_sets = 0
    t1_games = 0
    t2_games = 0
    for s in sets:
        t1_games += s.team1_games
        t2_games += s.team2_games
        side = s.winner_side()
        if side == 1:
            t1_sets += 1
        elif side == 2:
            t2_sets += 1
    return SetTotals(
        team1_sets_won=t1_sets,
        team2_sets_won=t2_sets,
        team1_games=t1_games,
        team2_games=t2_games,
    )


def parse_score(score: Any) -> Optional[List[MatchSet]]:
    """Parse a score string or blob into MatchSet records.

    Returns None if the score cannot be parsed.
    """
    if not score:
        return None

    raw: Optional[str] = None
    if isinstance(score, str):
        raw = score
    elif isinstance(score, dict):
        if "sets" in score and isinstance(score["sets"], list):
            return _parse_structured_sets(score["sets"])
        raw = str(score.get("display") or score.get("score") or "")
    if not raw or not raw.strip():
        return None

    return _parse_score_string(raw.strip())


def _parse_structured_sets(sets_list: list) -> Optional[List[MatchSet]]:
    sets: List[MatchSet] = []
    for s in sets_list:
        if not isinstance(s, dict):
            return None
        try:
            a = int(s.get("a", s.get("team1_games", 0)))
            b = int(s.get("b", s.get("team2_games", 0)))
            tiebreak = None
            tb = s.get("tiebreak")
            if tb:
                tiebreak = TiebreakScore(
                    team1_points=int(tb.get("a", tb.get("team1_points", 0))),
                    team2_points=int(tb.get("b", tb.get("team2_points", 0))),
                )
        except (TypeError, ValueError):
            return None
        sets.append(MatchSet(team1_games=a, team2_games=b, tiebreak=tiebreak))
    return sets or None


def _parse_score_string(raw: str) -> Optional[List[MatchSet]]:
    """Parse strings like '6-4', '6-3 4-6 7-6(7-4)', '6-3, 4-6, 6-2'."""
    normalized = raw.replace(",", " ").strip()
    parts = normalized.split()

    sets: List[MatchSet] = []
    for part in parts:
        m = _SET_PATTERN.match(part)
        if not m:
            return None
        tiebreak = None
        if m.group(3) is not None:
            tiebreak = TiebreakScore(team1_points=int(m.group(3)), team2_points=int(m.group(4)))
        sets.append(MatchSet(team1_games=int(m.group(1)), team2_games=int(m.group(2)), tiebreak=tiebreak))

    return sets or None
