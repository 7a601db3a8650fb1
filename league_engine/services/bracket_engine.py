"""
Bracket Engine: elimination brackets derived from group standings.

Flow:
1. select_qualifiers: cohorts of group positions (gold / silver / bronze ...)
   become seeded qualifier lists; ties at a cohort boundary are refused
2. build_bracket: one power-of-two bracket per tier, byes to the top seeds,
   round-1 matches materialized, later rounds kept as placeholder nodes
3. advance_bracket: a completed match fills the next node's slot; matches of
   a round are only created once the whole previous round of that tier is done

Nodes are kept in a flat list. A node points at the node it feeds by key
(feeds_into / loser_feeds_into). Every operation returns new node copies;
inputs are never mutated, so a refused call leaves the bracket untouched.
"""

import logging
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from league_engine.exceptions import ConcurrentWriteError, PreconditionError
from league_engine.models.bracket import BracketNode
from league_engine.models.match import CupTier, Match, MatchPhase, MatchStatus, RoundType
from league_engine.models.schedule_config import PointsConfig
from league_engine.models.standing import Standing
from league_engine.models.team import Team
from league_engine.services.bracket_pairing import (
    MAX_BRACKET_SIZE,
    SeedingStrategy,
    first_round_pairs,
    next_power_of_two,
    round_type_for,
)
from league_engine.services.standings import compute_group_standings, compute_standings, is_tied

logger = logging.getLogger(__name__)

TIER_ORDER = [CupTier.gold, CupTier.silver, CupTier.bronze, CupTier.relegation, CupTier.none]


@dataclass
class CohortSpec:
    """Group positions first_position..last_position (inclusive) qualify for `tier`."""

    tier: CupTier
    first_position: int
    last_position: int


@dataclass
class Qualifier:
    team_id: str
    seed: int
    tier: CupTier = CupTier.none
    group_number: Optional[int] = None
    group_position: Optional[int] = None


@dataclass
class BracketState:
    status: str  # not_started | in_progress | completed
    current_round: Optional[int] = None

    @property
    def label(self) -> str:
        if self.status == "in_progress":
            return f"in_progress(round{self.current_round})"
        return self.status


@dataclass
class BracketRound:
    round_number: int
    round_type: RoundType
    nodes: List[BracketNode] = field(default_factory=list)

    @property
    def status(self) -> str:
        """pending (no match yet) | ready | completed"""
        playable = [n for n in self.nodes if not n.is_bye]
        if playable and all(n.is_decided for n in playable):
            return "completed"
        if any(n.match is not None for n in playable):
            return "ready"
        return "pending"


@dataclass
class PromotionZones:
    promoted: List[str]
    stay: List[str]
    relegated: List[str]


# =============================================================================
# Qualifier selection
# =============================================================================

def _boundary_ties(rows: Sequence[Standing], cohorts: Sequence[CohortSpec]) -> List[str]:
    ranked = sorted(rows, key=lambda s: s.position)
    boundaries = set()
    for cohort in cohorts:
        boundaries.add(cohort.first_position - 1)
        boundaries.add(cohort.last_position)

    problems = []
    for cutoff in sorted(boundaries):
        if cutoff < 1 or cutoff >= len(ranked):
            continue
        if is_tied(ranked[cutoff - 1], ranked[cutoff]):
            problems.append(
                f"{ranked[cutoff - 1].team_id} and {ranked[cutoff].team_id} are tied "
                f"at the position {cutoff}/{cutoff + 1} cutoff"
            )
    return problems


def select_qualifiers(
    standings: Union[Sequence[Standing], Mapping[Optional[int], Sequence[Standing]]],
    cohorts: Sequence[CohortSpec],
) -> "OrderedDict[CupTier, List[Qualifier]]":
    """
    Take the configured positions per cohort from each group's standings.

    Seeds inside a cohort: every group's best placed team (in group order),
    then every group's next placed team, and so on.

    Raises:
        PreconditionError: a cohort boundary is tied (run the tie-breakers first)
    """
    if isinstance(standings, Mapping):
        by_group = dict(standings)
    else:
        by_group = {None: list(standings)}

    problems: List[str] = []
    for group in sorted(by_group, key=lambda g: g or 0):
        for problem in _boundary_ties(by_group[group], cohorts):
            prefix = f"Group {group}: " if group is not None else ""
            problems.append(prefix + problem)
    if problems:
        raise PreconditionError(
            "Cannot select qualifiers while standings are tied at a cutoff: " + "; ".join(problems)
        )

    result: "OrderedDict[CupTier, List[Qualifier]]" = OrderedDict()
    for cohort in cohorts:
        qualifiers = result.setdefault(cohort.tier, [])
        for position in range(cohort.first_position, cohort.last_position + 1):
            for group in sorted(by_group, key=lambda g: g or 0):
                ranked = sorted(by_group[group], key=lambda s: s.position)
                if position > len(ranked):
                    continue
                qualifiers.append(Qualifier(
                    team_id=ranked[position - 1].team_id,
                    seed=len(qualifiers) + 1,
                    tier=cohort.tier,
                    group_number=group,
                    group_position=position,
                ))
    return result


# =============================================================================
# Bracket construction
# =============================================================================

def _node_id(tier: CupTier, round_num: int, slot: int) -> str:
    prefix = tier.value if tier != CupTier.none else "ko"
    return f"{prefix}-r{round_num}-{slot}"


def _third_place_id(tier: CupTier) -> str:
    prefix = tier.value if tier != CupTier.none else "ko"
    return f"{prefix}-3rd"


def _entrant_ids(entrants: Sequence[Union[Qualifier, str]]) -> List[str]:
    if entrants and isinstance(entrants[0], Qualifier):
        return [q.team_id for q in sorted(entrants, key=lambda q: q.seed)]
    return [str(e) for e in entrants]


def _make_match(node: BracketNode) -> Match:
    return Match(
        id=node.id,
        team1_id=node.team1_id,
        team2_id=node.team2_id,
        round=node.round_number,
        phase=MatchPhase.elimination,
        round_type=node.round_type,
        tier=node.tier,
    )


def _place(nodes_by_id: Dict[str, BracketNode], target_id: Optional[str], slot: Optional[int], team_id: str):
    if target_id is None:
        return
    target = nodes_by_id[target_id]
    current = target.team1_id if slot == 1 else target.team2_id
    if current is not None and current != team_id:
        raise ConcurrentWriteError(
            target.id,
            f"Bracket slot {target.id}/{slot} already holds {current}, cannot place {team_id}",
        )
    if slot == 1:
        target.team1_id = team_id
    else:
        target.team2_id = team_id


def _materialize_ready(nodes: List[BracketNode], tier: CupTier) -> int:
    """Create matches for nodes whose prerequisite round is complete. Returns matches created."""
    tier_nodes = [n for n in nodes if n.tier == tier]
    rounds: Dict[int, List[BracketNode]] = defaultdict(list)
    third_place: List[BracketNode] = []
    for node in tier_nodes:
        if node.round_type == RoundType.third_place:
            third_place.append(node)
        else:
            rounds[node.round_number].append(node)

    created = 0
    for round_num in sorted(rounds):
        if round_num > 1 and not all(n.is_decided for n in rounds[round_num - 1]):
            break
        for node in rounds[round_num]:
            if node.match is None and not node.is_decided and node.team1_id and node.team2_id:
                node.match = _make_match(node)
                created += 1

    semifinals = [n for n in tier_nodes if n.round_type == RoundType.semifinal]
    for node in third_place:
        if node.match is None and semifinals and all(n.is_decided for n in semifinals):
            if node.team1_id and node.team2_id:
                node.match = _make_match(node)
                created += 1
    return created


def _build_tier(
    tier: CupTier,
    team_ids: List[str],
    seeding: SeedingStrategy,
    third_place: bool,
) -> List[BracketNode]:
    entrants = len(team_ids)
    if entrants < 2:
        raise PreconditionError(f"Tier {tier.value}: at least 2 qualifiers are required, got {entrants}")
    size = next_power_of_two(entrants)
    if size > MAX_BRACKET_SIZE:
        raise PreconditionError(
            f"Tier {tier.value}: {entrants} qualifiers exceed the {MAX_BRACKET_SIZE}-team bracket limit"
        )

    total_rounds = size.bit_length() - 1
    nodes: List[BracketNode] = []
    for round_num in range(1, total_rounds + 1):
        count = size >> round_num
        for slot in range(1, count + 1):
            feeds_into = feeds_slot = None
            if round_num < total_rounds:
                feeds_into = _node_id(tier, round_num + 1, (slot + 1) // 2)
                feeds_slot = 1 if slot % 2 == 1 else 2
            nodes.append(BracketNode(
                id=_node_id(tier, round_num, slot),
                tier=tier,
                round_type=round_type_for(count),
                round_number=round_num,
                slot=slot,
                feeds_into=feeds_into,
                feeds_slot=feeds_slot,
            ))

    by_id = {n.id: n for n in nodes}
    for slot, (seed_a, seed_b) in enumerate(first_round_pairs(entrants, seeding), start=1):
        node = by_id[_node_id(tier, 1, slot)]
        node.team1_id, node.seed1 = team_ids[seed_a - 1], seed_a
        if seed_b is None:
            node.is_bye = True
            node.winner_id = node.team1_id
            _place(by_id, node.feeds_into, node.feeds_slot, node.winner_id)
        else:
            node.team2_id, node.seed2 = team_ids[seed_b - 1], seed_b

    semifinals = [n for n in nodes if n.round_type == RoundType.semifinal]
    if third_place and semifinals and not any(n.is_bye for n in semifinals):
        third = BracketNode(
            id=_third_place_id(tier),
            tier=tier,
            round_type=RoundType.third_place,
            round_number=total_rounds,
            slot=2,
        )
        for node in semifinals:
            node.loser_feeds_into = third.id
            node.loser_feeds_slot = node.slot
        nodes.append(third)

    _materialize_ready(nodes, tier)
    return nodes


def build_bracket(
    qualifiers: Union[Sequence[Union[Qualifier, str]], Mapping[CupTier, Sequence[Union[Qualifier, str]]]],
    tiers: Optional[Sequence[CupTier]] = None,
    seeding: SeedingStrategy = SeedingStrategy.standard,
    third_place: bool = False,
) -> List[BracketNode]:
    """
    Build one elimination bracket per tier.

    Args:
        qualifiers: Seed-ordered team ids (or Qualifier records), either a flat
            list for a single bracket or a mapping tier -> qualifiers
        tiers: Tiers to build, in order. For a flat list the first entry names
            the bracket's tier (default CupTier.none)
        seeding: STANDARD (bracket fold) or SEQUENTIAL placement
        third_place: Add a third-place node fed by the semifinal losers

    Returns:
        Flat list of nodes; first-round matches are materialized

    Raises:
        PreconditionError: fewer than 2 or more than 64 qualifiers in a tier
    """
    if isinstance(qualifiers, Mapping):
        selected = list(tiers) if tiers else [t for t in TIER_ORDER if t in qualifiers]
        per_tier = [(tier, _entrant_ids(qualifiers.get(tier, []))) for tier in selected]
    else:
        tier = tiers[0] if tiers else CupTier.none
        per_tier = [(tier, _entrant_ids(qualifiers))]

    nodes: List[BracketNode] = []
    for tier, team_ids in per_tier:
        tier_nodes = _build_tier(tier, team_ids, seeding, third_place)
        logger.info(
            "Built %s bracket: %d qualifiers, %d byes, %d round-1 matches",
            tier.value,
            len(team_ids),
            sum(1 for n in tier_nodes if n.is_bye),
            sum(1 for n in tier_nodes if n.match is not None),
        )
        nodes.extend(tier_nodes)
    return nodes


# =============================================================================
# Advancement
# =============================================================================

def advance_bracket(nodes: Sequence[BracketNode], completed_match: Match) -> List[BracketNode]:
    """
    Feed a completed match into the bracket.

    Returns a new node list: the node is decided, its winner fills the next
    node's slot, its loser fills the third-place slot, and next-round matches
    are created once the whole previous round of the tier is decided.

    Raises:
        PreconditionError: match not completed, drawn, or not part of the bracket
        ConcurrentWriteError: node already decided with a different winner
    """
    if completed_match.status != MatchStatus.completed:
        raise PreconditionError(
            f"Match {completed_match.id} is {completed_match.status.value}; only completed matches advance a bracket"
        )
    if completed_match.winner_id is None:
        raise PreconditionError(f"Match {completed_match.id} has no winner; elimination matches cannot be drawn")

    updated = [n.model_copy(deep=True) for n in nodes]
    by_id = {n.id: n for n in updated}

    node = next((n for n in updated if n.match is not None and n.match.id == completed_match.id), None)
    if node is None:
        raise PreconditionError(f"Match {completed_match.id} is not an active match of this bracket")

    if node.is_decided:
        if node.winner_id == completed_match.winner_id:
            return updated
        raise ConcurrentWriteError(
            completed_match.id,
            f"Bracket node {node.id} was already decided for {node.winner_id}",
        )

    if set(completed_match.team_ids) != {node.team1_id, node.team2_id}:
        raise PreconditionError(
            f"Match {completed_match.id} teams do not match bracket node {node.id}"
        )

    node.match = completed_match
    node.winner_id = completed_match.winner_id
    node.loser_id = completed_match.loser_id()
    _place(by_id, node.feeds_into, node.feeds_slot, node.winner_id)
    _place(by_id, node.loser_feeds_into, node.loser_feeds_slot, node.loser_id)

    created = _materialize_ready(updated, node.tier)
    logger.info(
        "Advanced %s: %s wins %s, %d new match(es)",
        node.tier.value,
        node.winner_id,
        node.id,
        created,
    )
    return updated


# =============================================================================
# Read helpers
# =============================================================================

def bracket_state(nodes: Sequence[BracketNode], tier: CupTier) -> BracketState:
    """not_started -> in_progress(roundN) -> completed"""
    tier_nodes = [n for n in nodes if n.tier == tier]
    if not tier_nodes:
        return BracketState(status="not_started")

    final = next((n for n in tier_nodes if n.round_type == RoundType.final), None)
    third = next((n for n in tier_nodes if n.round_type == RoundType.third_place), None)
    if final is not None and final.is_decided and (third is None or third.is_decided):
        return BracketState(status="completed")

    playable = [n for n in tier_nodes if not n.is_bye]
    started = any(
        n.is_decided or (n.match is not None and n.match.status != MatchStatus.pending)
        for n in playable
    )
    open_rounds = [n.round_number for n in playable if not n.is_decided]
    current = min(open_rounds) if open_rounds else None
    if not started:
        return BracketState(status="not_started", current_round=current)
    return BracketState(status="in_progress", current_round=current)


def bracket_rounds(nodes: Sequence[BracketNode], tier: CupTier) -> List[BracketRound]:
    """Rounds of a tier in play order; rounds without matches report status 'pending'."""
    rounds: "OrderedDict[tuple, BracketRound]" = OrderedDict()
    ordered = sorted(
        (n for n in nodes if n.tier == tier),
        key=lambda n: (n.round_number, n.round_type == RoundType.third_place, n.slot),
    )
    for node in ordered:
        key = (node.round_number, node.round_type)
        if key not in rounds:
            rounds[key] = BracketRound(round_number=node.round_number, round_type=node.round_type)
        rounds[key].nodes.append(node)
    return list(rounds.values())


def bracket_matches(nodes: Sequence[BracketNode]) -> List[Match]:
    """All materialized matches, ordered by tier, round and slot."""
    ordered = sorted(
        (n for n in nodes if n.match is not None),
        key=lambda n: (TIER_ORDER.index(n.tier), n.round_number, n.round_type == RoundType.third_place, n.slot),
    )
    return [n.match for n in ordered]


def final_placements(nodes: Sequence[BracketNode], tier: CupTier) -> Dict[str, Optional[str]]:
    """Champion, runner-up and third place of a tier (None while undecided)."""
    tier_nodes = [n for n in nodes if n.tier == tier]
    final = next((n for n in tier_nodes if n.round_type == RoundType.final), None)
    third = next((n for n in tier_nodes if n.round_type == RoundType.third_place), None)
    return {
        "champion": final.winner_id if final else None,
        "runner_up": final.loser_id if final else None,
        "third": third.winner_id if third else None,
    }


# =============================================================================
# Derivation from the group phase
# =============================================================================

def derive_elimination(
    matches: Sequence[Match],
    points: Optional[PointsConfig],
    cohorts: Sequence[CohortSpec],
    teams: Optional[Sequence[Team]] = None,
    seeding: SeedingStrategy = SeedingStrategy.standard,
    third_place: bool = False,
) -> List[BracketNode]:
    """
    Group phase -> elimination brackets.

    Preconditions (PreconditionError otherwise):
    - at least one group-phase match, and all of them completed
    - no elimination match exists yet
    - no tie at any cohort boundary
    """
    group_matches = [m for m in matches if m.phase == MatchPhase.group]
    if not group_matches:
        raise PreconditionError("No group-phase matches to derive an elimination phase from")

    pending = [m.id for m in group_matches if not m.is_completed]
    if pending:
        raise PreconditionError(
            f"Group phase not finished: {len(pending)} match(es) pending ({', '.join(pending[:5])})"
        )

    if any(m.phase == MatchPhase.elimination for m in matches):
        raise PreconditionError("Elimination phase has already been derived")

    by_group = compute_group_standings(matches, points, phase=MatchPhase.group, teams=teams)
    if not by_group:
        by_group = {None: compute_standings(matches, points, phase=MatchPhase.group, teams=teams)}

    qualifiers = select_qualifiers(by_group, cohorts)
    nodes = build_bracket(qualifiers, seeding=seeding, third_place=third_place)
    logger.info(
        "Derived elimination phase: %d group(s), tiers %s",
        len(by_group),
        ", ".join(t.value for t in qualifiers),
    )
    return nodes


def promotion_relegation(standings: Sequence[Standing], promoted: int, relegated: int) -> PromotionZones:
    """
    Split a final table into promotion, stay and relegation zones.

    Raises:
        PreconditionError: zones overlap, or a zone boundary is tied
    """
    ranked = sorted(standings, key=lambda s: s.position)
    if promoted < 0 or relegated < 0 or promoted + relegated > len(ranked):
        raise PreconditionError(
            f"Cannot promote {promoted} and relegate {relegated} from {len(ranked)} teams"
        )

    boundaries = [promoted, len(ranked) - relegated]
    tied = [
        c for c in boundaries
        if 0 < c < len(ranked) and is_tied(ranked[c - 1], ranked[c])
    ]
    if tied:
        raise PreconditionError(
            f"Standings are tied at the promotion/relegation cutoff(s) {sorted(set(tied))}"
        )

    ids = [s.team_id for s in ranked]
    return PromotionZones(
        promoted=ids[:promoted],
        stay=ids[promoted:len(ids) - relegated],
        relegated=ids[len(ids) - relegated:],
    )
