"""
Court assignment and canonical court-name parsing.

Within a round, matches are placed first-fit into sequential sub-slots: a
sub-slot holds at most `courts` matches and never two matches for the same
team. Courts are numbered 1..courts in each sub-slot.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Union

from league_engine.models.match import Match


def court_label_for_index(court_names: Optional[Union[str, List[str]]], court_number: int) -> str:
    """
    Return the scalar court label for a given court index (1-based).
    Falls back to the number itself when no name is configured.
    """
    labels = parse_court_names(court_names)
    if labels and 1 <= court_number <= len(labels):
        return str(labels[court_number - 1])
    return str(court_number)


def parse_court_names(court_names: Optional[Union[str, List[str]]]) -> List[str]:
    """
    Normalize court_names to a list of non-empty strings.

    - None or "" -> []
    - String (e.g. "1,5,6") -> split on commas, strip whitespace, drop empties -> ["1","5","6"]
    - List (e.g. ["1","5","6"]) -> coerce each to str(x).strip(), drop empties
    """
    if court_names is None:
        return []
    if isinstance(court_names, str):
        s = court_names.strip()
        if not s:
            return []
        return [x.strip() for x in s.split(",") if x.strip()]
    if isinstance(court_names, list):
        return [str(x).strip() for x in court_names if str(x).strip()]
    return []


def assign_courts(
    matches: Sequence[Match],
    courts: int,
    court_names: Optional[Union[str, List[str]]] = None,
    duration_minutes: Optional[int] = None,
) -> List[Match]:
    """
    Assign court_number / court_label / slot (and offset_minutes when a fixed
    duration is given) to every match. Returns new Match objects in input order.

    Rounds are processed in ascending order; sub-slots of a later round start
    after the last sub-slot of the previous round.
    """
    if courts < 1:
        raise ValueError(f"courts must be >= 1, got {courts}")

    by_round: Dict[int, List[int]] = defaultdict(list)
    for index, match in enumerate(matches):
        by_round[match.round].append(index)

    placed: Dict[int, Match] = {}
    slots_before = 0
    for round_num in sorted(by_round):
        slot_teams: List[Set[str]] = []
        slot_counts: List[int] = []
        for index in by_round[round_num]:
            match = matches[index]
            slot_index = 0
            while True:
                if slot_index == len(slot_teams):
                    slot_teams.append(set())
                    slot_counts.append(0)
                busy = slot_teams[slot_index]
                if slot_counts[slot_index] < courts and not (set(match.team_ids) & busy):
                    break
                slot_index += 1

            slot_teams[slot_index].update(match.team_ids)
            slot_counts[slot_index] += 1
            court_number = slot_counts[slot_index]

            update = {
                "court_number": court_number,
                "court_label": court_label_for_index(court_names, court_number),
                "slot": slot_index + 1,
            }
            if duration_minutes:
                update["offset_minutes"] = (slots_before + slot_index) * duration_minutes
            placed[index] = match.model_copy(update=update)

        slots_before += len(slot_teams)

    return [placed[i] for i in range(len(matches))]
