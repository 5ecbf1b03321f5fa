"""
Leaderboard totals built from awarded prediction points.
"""
from typing import Dict, List

from .models import Match, Prediction
from .scoring import outcome


def _empty_entry(user: str) -> Dict:
    return {
        'user': user,
        'total_points': 0,
        'group_points': 0,
        'knockout_points': 0,
        'bonus_match_points': 0,
        'bonus_match_exact': 0,
        'exact_scores': 0,
        'correct_results': 0,
        'predicted_count': 0,
    }


def build_leaderboard(predictions: List[Prediction], matches: List[Match]) -> List[Dict]:
    """
    Aggregate every user's points.

    Ranked by total points, then exact scores (both descending), then user
    name. Each entry also carries a 1-based 'rank'; users level on points and
    exact scores share a rank.

    'exact_scores' and 'correct_results' count played matches only; a correct
    result is a right outcome without the exact score.
    """
    by_number = {m.number: m for m in matches}
    entries = {}

    for prediction in predictions:
        entry = entries.get(prediction.user)
        if entry is None:
            entry = entries[prediction.user] = _empty_entry(prediction.user)
        entry['predicted_count'] += 1

        match = by_number.get(prediction.match_number)
        if match is None:
            continue

        points = prediction.points
        entry['total_points'] += points
        if match.is_group:
            entry['group_points'] += points
        else:
            entry['knockout_points'] += points
        if match.is_bonus:
            entry['bonus_match_points'] += points

        result = match.result()
        if result is None:
            continue
        if (prediction.home_score, prediction.away_score) == (result.home_score, result.away_score):
            entry['exact_scores'] += 1
            if match.is_bonus:
                entry['bonus_match_exact'] += 1
        elif outcome(prediction.home_score, prediction.away_score) == outcome(result.home_score, result.away_score):
            entry['correct_results'] += 1

    ranked = sorted(entries.values(), key=lambda e: (-e['total_points'], -e['exact_scores'], e['user']))

    previous = None
    for position, entry in enumerate(ranked, start=1):
        current = (entry['total_points'], entry['exact_scores'])
        if previous is None or current != previous[0]:
            previous = (current, position)
        entry['rank'] = previous[1]
    return ranked
