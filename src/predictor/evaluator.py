"""
Bracket evaluation shared by the official bracket and per-user speculative brackets.

There is exactly one algorithm, ``evaluate_bracket``. What differs between the
two modes is only where results and fixed occupants come from, supplied as a
result source:

- ``OfficialResults``: recorded scores, stored team references and admin pins.
- ``PredictedResults``: one user's predictions; knockout occupants are derived
  from those predictions alone, never from the official bracket.
"""
from typing import Dict, List, Optional

from .models import HOME, AWAY, SIDES, Match, MatchResult, Prediction
from .placeholders import parse_bracket_slots, resolve_slot
from .qualifiers import select_qualifiers
from .scoring import advancing_side
from .standings import calculate_group_standings, group_is_complete, matches_by_group


class OfficialResults:
    """Result source backed by the persisted official state."""

    def result(self, match: Match) -> Optional[MatchResult]:
        return match.result()

    def assigned(self, match: Match, side: str) -> Optional[str]:
        return match.team(side)

    def pinned(self, match: Match, side: str) -> bool:
        return side in match.pinned


class PredictedResults:
    """Result source backed by a single user's predictions."""

    def __init__(self, predictions: List[Prediction]):
        self.by_match = {p.match_number: p for p in predictions}

    def result(self, match: Match) -> Optional[MatchResult]:
        prediction = self.by_match.get(match.number)
        if prediction is None:
            return None
        return prediction.as_result()

    def assigned(self, match: Match, side: str) -> Optional[str]:
        # Only fixture teams (no placeholder) count; cascaded official teams do not.
        if match.placeholder(side):
            return None
        return match.team(side)

    def pinned(self, match: Match, side: str) -> bool:
        return False


class BracketState:
    def __init__(self, standings, complete, qualifiers, slots):
        self.standings = standings
        self.complete = complete
        self.qualifiers = qualifiers
        self.slots = slots

    def team(self, match_number: int, side: str) -> Optional[str]:
        return self.slots.get(match_number, {}).get(side)

    def winner(self, match_number: int) -> Optional[str]:
        return self.slots.get(match_number, {}).get('winner')

    def loser(self, match_number: int) -> Optional[str]:
        return self.slots.get(match_number, {}).get('loser')

    def __eq__(self, other):
        if not isinstance(other, BracketState):
            return NotImplemented
        return (self.standings == other.standings and self.complete == other.complete
                and self.qualifiers == other.qualifiers and self.slots == other.slots)

    def __repr__(self):
        return f"BracketState(groups={len(self.standings)}, knockout_matches={len(self.slots)})"


def evaluate_bracket(matches: List[Match], teams: Dict, source, slots: Optional[Dict] = None) -> BracketState:
    """
    Resolve the whole bracket from scratch against ``source``.

    Steps:
    1. Standings for every group, using only results the source provides.
    2. Group completeness and qualifiers.
    3. Knockout matches in ascending number: each side is a pinned or fixed
       occupant, or its placeholder resolved against the qualifiers and the
       winners/losers already decided earlier in this pass. A placeholder that
       cannot be resolved yet falls back to the source's assigned team.
    4. The source's result for the match decides winner and loser.

    ``slots`` is the output of ``parse_bracket_slots``; parsed here if omitted.
    """
    if slots is None:
        slots = parse_bracket_slots(m for m in matches if not m.is_group)

    standings = {}
    complete = {}
    for group, group_matches in sorted(matches_by_group(matches).items()):
        standings[group] = calculate_group_standings(group_matches, teams, source.result)
        complete[group] = group_is_complete(group_matches, source.result)

    qualifiers = select_qualifiers(standings, complete)

    winners = {}
    losers = {}
    resolved = {}
    for match in sorted((m for m in matches if not m.is_group), key=lambda m: m.number):
        occupants = {}
        for side in SIDES:
            slot = slots.get((match.number, side))
            team = None
            if slot is not None and not source.pinned(match, side):
                team = resolve_slot(slot, qualifiers, winners, losers)
            if team is None:
                team = source.assigned(match, side)
            occupants[side] = team

        winner = loser = None
        result = source.result(match)
        if result is not None and occupants[HOME] and occupants[AWAY]:
            side = advancing_side(result.home_score, result.away_score, result.winner_side)
            if side is not None:
                winner = occupants[side]
                loser = occupants[AWAY if side == HOME else HOME]

        winners[match.number] = winner
        losers[match.number] = loser
        resolved[match.number] = {
            HOME: occupants[HOME],
            AWAY: occupants[AWAY],
            'winner': winner,
            'loser': loser,
        }

    return BracketState(standings, complete, qualifiers, resolved)


def official_bracket(matches: List[Match], teams: Dict, slots: Optional[Dict] = None) -> BracketState:
    return evaluate_bracket(matches, teams, OfficialResults(), slots)


def speculative_bracket(matches: List[Match], teams: Dict, predictions: List[Prediction],
                        slots: Optional[Dict] = None) -> BracketState:
    """Bracket implied by one user's predictions. Never written back anywhere."""
    return evaluate_bracket(matches, teams, PredictedResults(predictions), slots)
