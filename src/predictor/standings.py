"""
Group standings built from match results.
"""
from typing import Callable, Dict, List, Optional

from .models import Match, MatchResult

WIN_POINTS = 3
DRAW_POINTS = 1


def rank_key(row: Dict):
    """Sort key for standings rows.

    Points, goal difference and goals scored all descending, then the team's
    display name ascending so equal records always order the same way.
    """
    return (-row['points'], -row['goal_difference'], -row['goals_for'], row['name'])


def _empty_row(team_id, name) -> Dict:
    return {
        'team': team_id,
        'name': name,
        'played': 0,
        'won': 0,
        'drawn': 0,
        'lost': 0,
        'goals_for': 0,
        'goals_against': 0,
        'goal_difference': 0,
        'points': 0,
    }


def calculate_group_standings(group_matches: List[Match], teams: Dict,
                              result_of: Callable[[Match], Optional[MatchResult]]) -> List[Dict]:
    """
    Calculate the table for one group.

    Every team appearing as home or away gets a row, even with nothing played.
    Matches for which ``result_of`` returns None are skipped entirely.

    Returns: list of row dicts sorted with ``rank_key``.
    """
    rows = {}
    for match in group_matches:
        for team_id in (match.home_team, match.away_team):
            if team_id is not None and team_id not in rows:
                team = teams.get(team_id)
                rows[team_id] = _empty_row(team_id, team.name if team else str(team_id))

    for match in group_matches:
        result = result_of(match)
        if result is None or match.home_team is None or match.away_team is None:
            continue

        home = rows[match.home_team]
        away = rows[match.away_team]
        home_goals, away_goals = result.home_score, result.away_score

        home['played'] += 1
        away['played'] += 1
        home['goals_for'] += home_goals
        home['goals_against'] += away_goals
        away['goals_for'] += away_goals
        away['goals_against'] += home_goals

        if home_goals > away_goals:
            home['won'] += 1
            home['points'] += WIN_POINTS
            away['lost'] += 1
        elif home_goals < away_goals:
            away['won'] += 1
            away['points'] += WIN_POINTS
            home['lost'] += 1
        else:
            home['drawn'] += 1
            away['drawn'] += 1
            home['points'] += DRAW_POINTS
            away['points'] += DRAW_POINTS

    for row in rows.values():
        row['goal_difference'] = row['goals_for'] - row['goals_against']

    return sorted(rows.values(), key=rank_key)


def group_is_complete(group_matches: List[Match],
                      result_of: Callable[[Match], Optional[MatchResult]]) -> bool:
    """A group is complete once every one of its matches has a result."""
    return bool(group_matches) and all(result_of(m) is not None for m in group_matches)


def matches_by_group(matches: List[Match]) -> Dict[str, List[Match]]:
    grouped = {}
    for match in matches:
        if match.is_group and match.group:
            grouped.setdefault(match.group, []).append(match)
    return grouped
