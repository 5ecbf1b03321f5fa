"""
Operations exposed to the web layer and the CLI.

Every write loads the current records, validates the whole request, applies
it in memory and saves under the store lock, so a rejected call leaves the
stored tournament untouched.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from .cascade import advance_winner, recompute_bracket, winner_of
from .errors import (
    BonusLimitError,
    InvalidDeadlineError,
    InvalidScoreError,
    MatchNotFoundError,
    PredictionLockedError,
    TeamNotFoundError,
    TournamentError,
    WinnerRequiredError,
)
from .evaluator import BracketState, official_bracket, speculative_bracket
from .leaderboard import build_leaderboard
from .models import HOME, AWAY, KNOCKOUT_STAGES, SIDES, MatchResult, Prediction
from .scoring import calculate_points, rescore_match
from .store import TournamentStore, parse_deadline

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 20
MAX_BONUS_MATCHES = 5


def _validate_score(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScoreError(f'{label} must be an integer')
    if value < MIN_SCORE or value > MAX_SCORE:
        raise InvalidScoreError(f'Scores must be between {MIN_SCORE} and {MAX_SCORE}')
    return value


def _validate_side(side: Optional[str]) -> Optional[str]:
    if side is None or side == '':
        return None
    if side not in SIDES:
        raise TournamentError(f'Winner side must be "{HOME}" or "{AWAY}"')
    return side


def _declared_winner(match, home_score: int, away_score: int, winner_side: Optional[str]) -> Optional[str]:
    """Keep the declared side only where it decides something: level knockout scores."""
    if match.is_group or home_score != away_score:
        return None
    if winner_side is None:
        raise WinnerRequiredError(match.number)
    return winner_side


def submit_result(store: TournamentStore, match_number: int, home_score: int, away_score: int,
                  winner_side: Optional[str] = None) -> Dict:
    """
    Record (or correct) the official result of a match.

    Group matches trigger a full bracket recompute; knockout matches advance
    their winner and re-resolve every later match. Points of every prediction
    on the match are then replaced.

    Predictions are saved before matches. If the second write fails the
    match still shows its old result, and resubmitting it or running
    recompute_all brings points back in line.

    Returns dict with:
    - 'match_number'
    - 'changed': False when the exact same result was already recorded
    - 'cascaded': list of [match_number, side, team_id] slot writes
    - 'predictions_updated': number of predictions on the match
    """
    home_score = _validate_score(home_score, 'Home score')
    away_score = _validate_score(away_score, 'Away score')
    winner_side = _validate_side(winner_side)

    with store.lock:
        teams = store.load_teams()
        matches = store.load_matches()
        by_number = {m.number: m for m in matches}
        match = by_number.get(match_number)
        if match is None:
            raise MatchNotFoundError(match_number)

        winner_side = _declared_winner(match, home_score, away_score, winner_side)
        new_result = MatchResult(home_score, away_score, winner_side)
        predictions = store.load_predictions()
        on_match = [p for p in predictions if p.match_number == match_number]

        if match.result() == new_result:
            logger.info('Match %s already has result %s-%s, nothing to do', match_number, home_score, away_score)
            return {
                'match_number': match_number,
                'changed': False,
                'cascaded': [],
                'predictions_updated': len(on_match),
            }

        correction = match.has_result
        match.home_score = home_score
        match.away_score = away_score
        match.winner_side = winner_side

        if match.is_group:
            _, writes = recompute_bracket(matches, teams)
        else:
            writes = []
            winner = winner_of(match)
            if winner is not None:
                writes.extend(advance_winner(by_number, match_number, winner))
            _, later = recompute_bracket(matches, teams, after=match_number)
            writes.extend(later)

        rescore_match(match, on_match)

        store.save_predictions(predictions)
        store.save_matches(matches)

    logger.info('%s result for match %s: %s-%s (%d slot write(s), %d prediction(s) scored)',
                'Corrected' if correction else 'Recorded', match_number, home_score, away_score,
                len(writes), len(on_match))
    return {
        'match_number': match_number,
        'changed': True,
        'cascaded': [list(w) for w in writes],
        'predictions_updated': len(on_match),
    }


def submit_bulk_results(store: TournamentStore, items: List[Dict]) -> List[Dict]:
    """
    Apply several results in ascending match-number order.

    A failing item is reported and does not stop the items after it.

    Returns: one outcome dict per item with 'match_number', 'success' and
    either the submit_result summary or 'error'.
    """
    def order(item):
        number = item.get('match_number')
        return number if isinstance(number, int) else float('inf')

    outcomes = []
    for item in sorted(items, key=order):
        number = item.get('match_number')
        try:
            if not isinstance(number, int) or isinstance(number, bool):
                raise MatchNotFoundError(number)
            summary = submit_result(store, number, item.get('home_score'), item.get('away_score'),
                                    item.get('winner_side'))
        except TournamentError as e:
            logger.warning('Bulk result for match %s rejected: %s', number, e)
            outcomes.append({'match_number': number, 'success': False, 'error': str(e)})
            continue
        outcome = {'success': True}
        outcome.update(summary)
        outcomes.append(outcome)
    return outcomes


def upsert_prediction(store: TournamentStore, user: str, match_number: int, home_score: int,
                      away_score: int, winner_side: Optional[str] = None,
                      now: Optional[datetime] = None) -> Prediction:
    """
    Create or replace ``user``'s prediction for a match.

    Rejected once the tournament's prediction deadline has passed, and also
    while a configured deadline cannot be read. When the match already has an
    official result the prediction is scored at once.
    """
    home_score = _validate_score(home_score, 'Home score')
    away_score = _validate_score(away_score, 'Away score')
    winner_side = _validate_side(winner_side)

    with store.lock:
        try:
            deadline = store.prediction_deadline()
        except InvalidDeadlineError as e:
            logger.error('Rejecting prediction from %s: %s', user, e)
            raise PredictionLockedError('Predictions are locked: the prediction deadline is misconfigured.') from e
        if deadline is not None:
            current = now or datetime.now(deadline.tzinfo)
            if current > deadline:
                raise PredictionLockedError('Predictions are locked. Deadline has passed.')

        match = next((m for m in store.load_matches() if m.number == match_number), None)
        if match is None:
            raise MatchNotFoundError(match_number)
        winner_side = _declared_winner(match, home_score, away_score, winner_side)

        prediction = Prediction(user, match_number, home_score, away_score, winner_side)
        result = match.result()
        if result is not None:
            prediction.points = calculate_points(match, result, prediction)

        predictions = [p for p in store.load_predictions() if p.key != prediction.key]
        predictions.append(prediction)
        store.save_predictions(predictions)

    logger.debug('Saved prediction %r', prediction)
    return prediction


def override_slot(store: TournamentStore, match_number: int, side: str, team_id: str) -> Dict:
    """
    Place a team in a knockout slot by hand.

    The side is pinned so later recomputation keeps it; matches after it are
    re-resolved straight away.
    """
    if side not in SIDES:
        raise TournamentError(f'Invalid slot "{side}"')

    with store.lock:
        teams = store.load_teams()
        if team_id not in teams:
            raise TeamNotFoundError(team_id)
        matches = store.load_matches()
        match = next((m for m in matches if m.number == match_number), None)
        if match is None:
            raise MatchNotFoundError(match_number)
        if match.is_group:
            raise TournamentError(f'Match {match_number} is a group match; only knockout slots can be overridden')

        match.set_team(side, team_id)
        if side not in match.pinned:
            match.pinned.append(side)
        _, writes = recompute_bracket(matches, teams, after=match_number)
        store.save_matches(matches)

    logger.info('Match %s %s overridden with %s', match_number, side, team_id)
    return {'match_number': match_number, 'side': side, 'team': team_id,
            'cascaded': [list(w) for w in writes]}


def set_bonus_match(store: TournamentStore, match_number: int, is_bonus: bool) -> Dict:
    """Flag or unflag a bonus match; at most MAX_BONUS_MATCHES may be flagged."""
    with store.lock:
        matches = store.load_matches()
        match = next((m for m in matches if m.number == match_number), None)
        if match is None:
            raise MatchNotFoundError(match_number)
        flagged = sum(1 for m in matches if m.is_bonus and m.number != match_number)
        if is_bonus and flagged >= MAX_BONUS_MATCHES:
            raise BonusLimitError(f'Maximum {MAX_BONUS_MATCHES} bonus matches allowed')
        match.is_bonus = bool(is_bonus)
        store.save_matches(matches)
    return {'match_number': match_number, 'is_bonus': bool(is_bonus)}


def set_prediction_deadline(store: TournamentStore, deadline) -> Dict:
    """
    Change the tournament's prediction deadline.

    ``deadline`` is an ISO 8601 string or a datetime; it is stored in ISO form.
    """
    if deadline is None or deadline == '':
        raise TournamentError('Deadline is required')
    value = parse_deadline(deadline).isoformat()

    with store.lock:
        settings = store.load_settings()
        previous = settings.get('prediction_deadline')
        settings['prediction_deadline'] = value
        store.save_settings(settings)

    logger.info('Prediction deadline changed: %s -> %s', previous, value)
    return {'prediction_deadline': value}


def recompute_all(store: TournamentStore) -> Dict:
    """Rebuild the official bracket and rescore every played match."""
    with store.lock:
        teams = store.load_teams()
        matches = store.load_matches()
        predictions = store.load_predictions()
        _, writes = recompute_bracket(matches, teams)
        rescored = 0
        for match in matches:
            rescored += rescore_match(match, predictions)
        store.save_predictions(predictions)
        store.save_matches(matches)
    logger.info('Full recompute: %d slot write(s), %d prediction(s) rescored', len(writes), rescored)
    return {'cascaded': [list(w) for w in writes], 'predictions_rescored': rescored}


def get_official_bracket(store: TournamentStore) -> Dict:
    """Resolved official bracket, read-only."""
    teams = store.load_teams()
    matches = store.load_matches()
    return serialize_bracket(official_bracket(matches, teams), matches, teams)


def get_speculative_bracket(store: TournamentStore, user: str) -> Dict:
    """Bracket implied by ``user``'s own predictions, read-only."""
    teams = store.load_teams()
    matches = store.load_matches()
    predictions = store.load_predictions(user)
    state = speculative_bracket(matches, teams, predictions)
    return serialize_bracket(state, matches, teams)


def get_leaderboard(store: TournamentStore) -> List[Dict]:
    return build_leaderboard(store.load_predictions(), store.load_matches())


def _team_info(teams: Dict, team_id: Optional[str]) -> Optional[Dict]:
    if team_id is None:
        return None
    team = teams.get(team_id)
    if team is None:
        return {'id': team_id, 'name': str(team_id), 'code': None}
    return {'id': team.team_id, 'name': team.name, 'code': team.code}


def serialize_bracket(state: BracketState, matches, teams: Dict) -> Dict:
    """Plain dict/list form of a bracket state, suitable for JSON."""
    qualifiers = state.qualifiers
    knockout = []
    for match in matches:
        if match.stage not in KNOCKOUT_STAGES:
            continue
        resolved = state.slots.get(match.number, {})
        knockout.append({
            'number': match.number,
            'stage': match.stage,
            'home': _team_info(teams, resolved.get(HOME)),
            'away': _team_info(teams, resolved.get(AWAY)),
            'home_placeholder': match.home_placeholder,
            'away_placeholder': match.away_placeholder,
            'winner': _team_info(teams, resolved.get('winner')),
            'loser': _team_info(teams, resolved.get('loser')),
        })
    return {
        'standings': state.standings,
        'complete': state.complete,
        'qualifiers': {
            'winners': {g: _team_info(teams, t) for g, t in qualifiers['winners'].items()},
            'runners_up': {g: _team_info(teams, t) for g, t in qualifiers['runners_up'].items()},
            'best_thirds': [{'team': _team_info(teams, t), 'group': g} for t, g in qualifiers['best_thirds']],
        },
        'matches': knockout,
    }
