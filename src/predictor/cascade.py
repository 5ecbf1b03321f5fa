"""
Official bracket propagation.

``advance_winner`` pushes one decided knockout match into the next round;
``recompute_bracket`` rebuilds every knockout occupant from the official
results and writes the outcome back onto the stored matches.
"""
import logging
from typing import Dict, List, Optional, Tuple

from .addressing import next_slot, loser_slot
from .errors import MatchNotFoundError
from .evaluator import BracketState, official_bracket
from .models import SIDES, Match
from .scoring import advancing_side

logger = logging.getLogger(__name__)


def _write_slot(matches_by_number: Dict[int, Match], number: int, side: str,
                team_id: str, writes: List[Tuple[int, str, str]]):
    target = matches_by_number.get(number)
    if target is None:
        raise MatchNotFoundError(number)
    if side in target.pinned or target.team(side) == team_id:
        return
    previous = target.team(side)
    target.set_team(side, team_id)
    writes.append((number, side, team_id))
    if previous is not None:
        logger.info('Match %s %s corrected: %s -> %s', number, side, previous, team_id)
    else:
        logger.debug('Match %s %s set to %s', number, side, team_id)


def advance_winner(matches_by_number: Dict[int, Match], match_number: int,
                   winner_team: str) -> List[Tuple[int, str, str]]:
    """
    Write the winner of ``match_number`` into its next-round slot.

    Semifinals also send their loser to the third-place match, on the side
    given by the same parity rule. Writing the team already stored is a no-op;
    a different team overwrites it.

    Returns: list of (match_number, side, team_id) writes actually made.
    """
    match = matches_by_number.get(match_number)
    if match is None:
        raise MatchNotFoundError(match_number)

    writes = []
    destination = next_slot(match_number)
    if destination:
        _write_slot(matches_by_number, destination[0], destination[1], winner_team, writes)

    third = loser_slot(match_number)
    if third:
        if winner_team == match.home_team:
            loser = match.away_team
        elif winner_team == match.away_team:
            loser = match.home_team
        else:
            loser = None
        if loser is not None:
            _write_slot(matches_by_number, third[0], third[1], loser, writes)

    return writes


def recompute_bracket(matches: List[Match], teams: Dict, after: Optional[int] = None,
                      slots: Optional[Dict] = None) -> Tuple[BracketState, List[Tuple[int, str, str]]]:
    """
    Full rebuild of the official bracket.

    Standings and qualifiers are recomputed from scratch, then every knockout
    side that resolves to a team is written back. Sides that do not resolve
    keep whatever team they hold, and pinned sides are left alone. With
    ``after`` only matches numbered above it are written.

    Running it again without new results makes no further writes.

    Returns: (state, writes)
    """
    state = official_bracket(matches, teams, slots)
    by_number = {m.number: m for m in matches}

    writes = []
    for number in sorted(state.slots):
        if after is not None and number <= after:
            continue
        for side in SIDES:
            team_id = state.team(number, side)
            if team_id is not None:
                _write_slot(by_number, number, side, team_id, writes)

    if writes:
        logger.info('Bracket recompute wrote %d slot(s)', len(writes))
    return state, writes


def winner_of(match: Match) -> Optional[str]:
    """Team that advances from a played knockout match with known occupants."""
    result = match.result()
    if result is None or match.home_team is None or match.away_team is None:
        return None
    side = advancing_side(result.home_score, result.away_score, result.winner_side)
    return match.team(side) if side else None
