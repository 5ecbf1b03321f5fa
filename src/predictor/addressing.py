"""
Match-number addressing for the 48-team / 104-match bracket.

Match numbers double as bracket positions: 1-72 group stage, 73-88 round of
32, 89-96 round of 16, 97-100 quarterfinals, 101-102 semifinals, 103 third
place, 104 final. Pairs of consecutive matches in one round feed one match of
the next round; the even-offset match sends its winner to the home side.
"""
from typing import Optional, Tuple

from .models import HOME, AWAY, GROUP, ROUND32, ROUND16, QUARTER, SEMI, THIRD, FINAL

GROUP_MATCH_COUNT = 72
TOTAL_MATCHES = 104

STAGE_BASES = {
    GROUP: 1,
    ROUND32: 73,
    ROUND16: 89,
    QUARTER: 97,
    SEMI: 101,
    THIRD: 103,
    FINAL: 104,
}

STAGE_SIZES = {
    GROUP: GROUP_MATCH_COUNT,
    ROUND32: 16,
    ROUND16: 8,
    QUARTER: 4,
    SEMI: 2,
    THIRD: 1,
    FINAL: 1,
}

NEXT_STAGE = {
    ROUND32: ROUND16,
    ROUND16: QUARTER,
    QUARTER: SEMI,
    SEMI: FINAL,
}


def stage_for_number(number: int) -> Optional[str]:
    """Stage a match number belongs to, or None if outside 1..104."""
    for stage, base in STAGE_BASES.items():
        if base <= number < base + STAGE_SIZES[stage]:
            return stage
    return None


def absolute_match_number(stage: str, index: int) -> int:
    """Convert a 1-based position within a stage ("R16 M3") to a match number."""
    return STAGE_BASES[stage] + index - 1


def _side_for_offset(offset: int) -> str:
    return HOME if offset % 2 == 0 else AWAY


def next_slot(number: int) -> Optional[Tuple[int, str]]:
    """
    Where the winner of a knockout match goes.

    Returns (destination_match_number, side), or None for matches whose
    winner goes nowhere (group stage, third place, final).
    """
    stage = stage_for_number(number)
    if stage not in NEXT_STAGE:
        return None
    offset = number - STAGE_BASES[stage]
    destination = STAGE_BASES[NEXT_STAGE[stage]] + offset // 2
    return destination, _side_for_offset(offset)


def loser_slot(number: int) -> Optional[Tuple[int, str]]:
    """Where the loser goes: only semifinal losers move on, to the third-place match."""
    if stage_for_number(number) != SEMI:
        return None
    return STAGE_BASES[THIRD], _side_for_offset(number - STAGE_BASES[SEMI])
