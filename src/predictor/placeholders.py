"""
Bracket slot placeholders.

Knockout fixtures are created before their occupants are known, so each side
carries a textual placeholder such as "Winner A", "3rd C/D/E" or
"Winner R32 M3". These are parsed once, when matches are loaded, into small
tagged values and resolved against qualifiers and earlier results on every
recomputation pass.
"""
import re
from collections import namedtuple
from typing import Dict, Optional, Tuple

from .addressing import absolute_match_number
from .errors import PlaceholderError
from .models import HOME, AWAY, ROUND32, ROUND16, QUARTER, SEMI

GroupWinner = namedtuple('GroupWinner', ['group'])
GroupRunnerUp = namedtuple('GroupRunnerUp', ['group'])
BestThird = namedtuple('BestThird', ['slot_index'])
StageWinner = namedtuple('StageWinner', ['stage', 'index'])
StageLoser = namedtuple('StageLoser', ['stage', 'index'])

# Placeholder stage codes -> stage tags
STAGE_CODES = {
    'R32': ROUND32,
    'R16': ROUND16,
    'QF': QUARTER,
    'SF': SEMI,
}

_GROUP_WINNER_RE = re.compile(r'^Winner ([A-Z])$')
_GROUP_RUNNER_UP_RE = re.compile(r'^Runner-up ([A-Z])$')
_THIRD_RE = re.compile(r'^3rd [A-Z](/[A-Z])*$')
_STAGE_RE = re.compile(r'^(Winner|Loser) (R32|R16|QF|SF) M(\d+)$')


def parse_placeholder(text: str, third_index: Optional[int] = None):
    """
    Parse one placeholder string.

    ``third_index`` is the slot's position among all third-place slots; it
    must be given for "3rd ..." placeholders since the listed groups do not
    decide which qualifier fills the slot.
    """
    text = text.strip()

    m = _GROUP_WINNER_RE.match(text)
    if m:
        return GroupWinner(m.group(1))

    m = _GROUP_RUNNER_UP_RE.match(text)
    if m:
        return GroupRunnerUp(m.group(1))

    if _THIRD_RE.match(text):
        if third_index is None:
            raise PlaceholderError(f'No third-place slot index for placeholder "{text}"')
        return BestThird(third_index)

    m = _STAGE_RE.match(text)
    if m:
        kind, code, index = m.group(1), m.group(2), int(m.group(3))
        if index < 1:
            raise PlaceholderError(f'Invalid match index in placeholder "{text}"')
        if kind == 'Winner':
            return StageWinner(STAGE_CODES[code], index)
        return StageLoser(STAGE_CODES[code], index)

    raise PlaceholderError(f'Unrecognised placeholder "{text}"')


def is_third_placeholder(text: Optional[str]) -> bool:
    return bool(text) and _THIRD_RE.match(text.strip()) is not None


def parse_bracket_slots(matches) -> Dict[Tuple[int, str], object]:
    """
    Parse every placeholder of the given matches.

    Third-place slots are numbered in ascending match-number order, home side
    before away side.

    Returns: {(match_number, side): slot}
    """
    slots = {}
    third_index = 0
    for match in sorted(matches, key=lambda m: m.number):
        for side in (HOME, AWAY):
            text = match.placeholder(side)
            if not text:
                continue
            if is_third_placeholder(text):
                slots[(match.number, side)] = parse_placeholder(text, third_index)
                third_index += 1
            else:
                slots[(match.number, side)] = parse_placeholder(text)
    return slots


def resolve_slot(slot, qualifiers: Dict, winners: Dict[int, Optional[str]],
                 losers: Dict[int, Optional[str]]) -> Optional[str]:
    """
    Resolve a parsed slot to a team id.

    Returns None while the dependency (a group or an earlier match) is not
    decided yet.
    """
    if isinstance(slot, GroupWinner):
        return qualifiers['winners'].get(slot.group)
    if isinstance(slot, GroupRunnerUp):
        return qualifiers['runners_up'].get(slot.group)
    if isinstance(slot, BestThird):
        best_thirds = qualifiers['best_thirds']
        if slot.slot_index < len(best_thirds):
            return best_thirds[slot.slot_index][0]
        return None
    if isinstance(slot, StageWinner):
        return winners.get(absolute_match_number(slot.stage, slot.index))
    if isinstance(slot, StageLoser):
        return losers.get(absolute_match_number(slot.stage, slot.index))
    return None

