"""
Flask web application for the tournament prediction competition.
"""
import os
import logging
from datetime import timedelta
from functools import wraps
from flask import Flask, request, jsonify, session
from predictor.errors import TournamentError, MatchNotFoundError, TeamNotFoundError, PredictionLockedError
from predictor.service import (
    submit_result,
    submit_bulk_results,
    upsert_prediction,
    override_slot,
    set_bonus_match,
    set_prediction_deadline,
    get_official_bracket,
    get_speculative_bracket,
    get_leaderboard,
)
from predictor.store import TournamentStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('PREDICTOR_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def _get_or_create_secret_key() -> bytes:
    """Get SECRET_KEY from env, or generate and persist to file."""
    env_key = os.environ.get('SECRET_KEY')
    if env_key:
        return env_key.encode() if isinstance(env_key, str) else env_key
    key_file = os.path.join(DATA_DIR, '.secret_key')
    if os.path.exists(key_file):
        with open(key_file, 'rb') as f:
            return f.read()
    key = os.urandom(24)
    os.makedirs(os.path.dirname(key_file), exist_ok=True)
    with open(key_file, 'wb') as f:
        f.write(key)
    return key


def _load_admins() -> set:
    raw = os.environ.get('PREDICTOR_ADMINS', 'admin')
    return {name.strip().lower() for name in raw.split(',') if name.strip()}


app.secret_key = _get_or_create_secret_key()
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=3650)

ADMIN_USERS = _load_admins()

if not app.debug:
    app.logger.setLevel(logging.INFO)
logging.getLogger('predictor').setLevel(logging.INFO)


def get_store() -> TournamentStore:
    """Data store for the configured tournament directory."""
    return TournamentStore(DATA_DIR)


def current_user():
    return session.get('user')


def login_required(f):
    """Reject the request if no user is logged in."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user' not in session:
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Reject the request unless the logged-in user is an administrator."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if session.get('user', '').lower() not in ADMIN_USERS:
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function


@app.errorhandler(TournamentError)
def handle_tournament_error(error):
    """Map engine failures to JSON error responses."""
    if isinstance(error, (MatchNotFoundError, TeamNotFoundError)):
        status = 404
    elif isinstance(error, PredictionLockedError):
        status = 403
    else:
        status = 400
    app.logger.warning(f'{request.method} {request.path} rejected: {error}')
    return jsonify({'success': False, 'error': str(error)}), status


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@app.route('/api/results', methods=['POST'])
@admin_required
def api_submit_result():
    """Record or correct the official result of one match.

    Requires: match_number, home_score, away_score in JSON body;
    winner_side ('home'/'away') when a knockout match ends level.
    """
    data = _json_body()
    if not data:
        return jsonify({'success': False, 'error': 'No data provided'}), 400
    if data.get('match_number') is None or data.get('home_score') is None or data.get('away_score') is None:
        return jsonify({'success': False, 'error': 'Match number and scores are required'}), 400

    summary = submit_result(get_store(), data['match_number'], data['home_score'],
                            data['away_score'], data.get('winner_side'))
    app.logger.info(f"Result for match {data['match_number']} submitted by {current_user()}")
    return jsonify({'success': True, **summary})


@app.route('/api/results/bulk', methods=['POST'])
@admin_required
def api_submit_bulk_results():
    """Record several results; reports success or failure per item."""
    data = _json_body()
    results = data.get('results') if data else None
    if not isinstance(results, list) or not results:
        return jsonify({'success': False, 'error': 'Results array is required'}), 400
    if not all(isinstance(item, dict) for item in results):
        return jsonify({'success': False, 'error': 'Each result must be an object'}), 400

    outcomes = submit_bulk_results(get_store(), results)
    return jsonify({
        'success': all(o['success'] for o in outcomes),
        'results': outcomes,
    })


@app.route('/api/predictions', methods=['GET'])
@login_required
def api_get_predictions():
    """The current user's predictions."""
    predictions = get_store().load_predictions(current_user())
    return jsonify([p.to_dict() for p in predictions])


@app.route('/api/predictions', methods=['POST'])
@login_required
def api_upsert_prediction():
    """Create or update the current user's prediction for one match."""
    data = _json_body()
    if not data:
        return jsonify({'success': False, 'error': 'No data provided'}), 400
    if data.get('match_number') is None or data.get('home_score') is None or data.get('away_score') is None:
        return jsonify({'success': False, 'error': 'Match number and scores are required'}), 400

    prediction = upsert_prediction(get_store(), current_user(), data['match_number'],
                                   data['home_score'], data['away_score'], data.get('winner_side'))
    return jsonify({'success': True, 'prediction': prediction.to_dict()})


@app.route('/api/bracket', methods=['GET'])
@login_required
def api_official_bracket():
    """Official standings, qualifiers and knockout occupants."""
    return jsonify(get_official_bracket(get_store()))


@app.route('/api/bracket/speculative', methods=['GET'])
@login_required
def api_speculative_bracket():
    """Bracket implied by the current user's own predictions."""
    return jsonify(get_speculative_bracket(get_store(), current_user()))


@app.route('/api/standings', methods=['GET'])
@login_required
def api_standings():
    """Official group standings only."""
    bracket = get_official_bracket(get_store())
    return jsonify({'standings': bracket['standings'], 'complete': bracket['complete']})


@app.route('/api/leaderboard', methods=['GET'])
@login_required
def api_leaderboard():
    return jsonify(get_leaderboard(get_store()))


@app.route('/api/admin/override', methods=['POST'])
@admin_required
def api_override_slot():
    """Place a team into a knockout slot by hand."""
    data = _json_body()
    if not data or data.get('match_number') is None or not data.get('team_id') or not data.get('side'):
        return jsonify({'success': False, 'error': 'Missing required fields'}), 400

    summary = override_slot(get_store(), data['match_number'], data['side'], data['team_id'])
    return jsonify({'success': True, **summary})


@app.route('/api/admin/bonus-match', methods=['POST'])
@admin_required
def api_bonus_match():
    """Flag or unflag a bonus match."""
    data = _json_body()
    if not data or data.get('match_number') is None:
        return jsonify({'success': False, 'error': 'Match number is required'}), 400

    summary = set_bonus_match(get_store(), data['match_number'], bool(data.get('is_bonus')))
    return jsonify({'success': True, **summary})


@app.route('/api/admin/deadline', methods=['POST'])
@admin_required
def api_prediction_deadline():
    """Change the prediction deadline (ISO 8601)."""
    data = _json_body()
    if not data or not data.get('deadline'):
        return jsonify({'success': False, 'error': 'Deadline is required'}), 400

    summary = set_prediction_deadline(get_store(), data['deadline'])
    app.logger.info(f"Prediction deadline set to {summary['prediction_deadline']} by {current_user()}")
    return jsonify({'success': True, **summary})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
