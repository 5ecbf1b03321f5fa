"""
Points awarded to predictions once a match has been played.

- exact score: 3 points
- otherwise right outcome (home win / away win / draw): 1 point
- knockout matches only: +1 when the predicted advancing side actually went through
"""
import logging
from typing import List, Optional

from .models import HOME, AWAY, Match, MatchResult, Prediction

logger = logging.getLogger(__name__)

EXACT_SCORE_POINTS = 3
CORRECT_OUTCOME_POINTS = 1
KNOCKOUT_BONUS_POINTS = 1

DRAW = 'draw'


def outcome(home_score: int, away_score: int) -> str:
    """Three-way outcome of a score pair: 'home', 'away' or 'draw'."""
    if home_score > away_score:
        return HOME
    if home_score < away_score:
        return AWAY
    return DRAW


def advancing_side(home_score: int, away_score: int, declared: Optional[str]) -> Optional[str]:
    """Side that goes through: decided by the score, or by the declared winner when level."""
    result = outcome(home_score, away_score)
    if result != DRAW:
        return result
    if declared in (HOME, AWAY):
        return declared
    return None


def calculate_points(match: Match, result: MatchResult, prediction: Prediction) -> int:
    """Points for one prediction against one result."""
    points = 0
    if (prediction.home_score, prediction.away_score) == (result.home_score, result.away_score):
        points = EXACT_SCORE_POINTS
    elif outcome(prediction.home_score, prediction.away_score) == outcome(result.home_score, result.away_score):
        points = CORRECT_OUTCOME_POINTS

    if not match.is_group:
        actual = advancing_side(result.home_score, result.away_score, result.winner_side)
        predicted = advancing_side(prediction.home_score, prediction.away_score, prediction.winner_side)
        if actual is not None and predicted == actual:
            points += KNOCKOUT_BONUS_POINTS

    return points


def rescore_match(match: Match, predictions: List[Prediction]) -> int:
    """
    Replace the awarded points of every prediction on ``match``.

    Always a full replace: unplayed matches reset every prediction to 0.
    Returns the number of predictions whose points changed.
    """
    result = match.result()
    changed = 0
    for prediction in predictions:
        if prediction.match_number != match.number:
            continue
        points = calculate_points(match, result, prediction) if result else 0
        if points != prediction.points:
            changed += 1
        prediction.points = points
    logger.debug('Rescored match %s: %d prediction(s) changed', match.number, changed)
    return changed
