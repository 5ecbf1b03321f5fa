"""
Qualifier selection: group winners, runners-up and the best third-placed teams.
"""
from typing import Dict, List

from .standings import rank_key

BEST_THIRD_COUNT = 8


def select_qualifiers(standings: Dict[str, List[Dict]], complete: Dict[str, bool]) -> Dict:
    """
    Pick the teams advancing out of the group stage.

    Only groups flagged complete contribute. Each complete group gives its
    rank-1 and rank-2 teams; its rank-3 team joins a cross-group pool that is
    ranked with the same comparator as the group tables, and the top
    BEST_THIRD_COUNT of that pool qualify. Fewer complete groups simply means
    fewer qualifiers.

    Returns dict with:
    - 'winners': {group: team_id}
    - 'runners_up': {group: team_id}
    - 'best_thirds': [(team_id, group), ...] in qualifying order
    """
    winners = {}
    runners_up = {}
    thirds = []

    for group in sorted(standings.keys()):
        if not complete.get(group):
            continue
        table = standings[group]
        if len(table) > 0:
            winners[group] = table[0]['team']
        if len(table) > 1:
            runners_up[group] = table[1]['team']
        if len(table) > 2:
            thirds.append((table[2], group))

    thirds.sort(key=lambda entry: rank_key(entry[0]))
    best_thirds = [(row['team'], group) for row, group in thirds[:BEST_THIRD_COUNT]]

    return {
        'winners': winners,
        'runners_up': runners_up,
        'best_thirds': best_thirds,
    }
