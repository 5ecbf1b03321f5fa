"""
YAML-backed tournament data store.

One directory per tournament holding teams.yaml, matches.yaml,
predictions.yaml and tournament.yaml. Writers take the directory's file lock
so concurrent requests see whole files only.
"""
import os
from datetime import date, datetime
from typing import Dict, List, Optional

import yaml
from filelock import FileLock

from .errors import InvalidDeadlineError
from .models import Match, Prediction, Team

LOCK_TIMEOUT = 10


def parse_deadline(value) -> Optional[datetime]:
    """
    Read a prediction deadline: an ISO 8601 string, a datetime or a date.

    Empty values mean no deadline. Anything else raises InvalidDeadlineError.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    # fromisoformat only accepts a trailing Z from Python 3.11
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDeadlineError(value) from None


class TournamentStore:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        self.lock = FileLock(os.path.join(data_dir, '.lock'), timeout=LOCK_TIMEOUT)

    def _file_path(self, filename: str) -> str:
        return os.path.join(self.data_dir, filename)

    def _load_yaml(self, filename: str):
        path = self._file_path(filename)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def _save_yaml(self, filename: str, data):
        with open(self._file_path(filename), 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def load_teams(self) -> Dict[str, Team]:
        """Load teams keyed by id."""
        data = self._load_yaml('teams.yaml') or {}
        teams = {}
        for entry in data.get('teams', []):
            team = Team.from_dict(entry)
            teams[team.team_id] = team
        return teams

    def save_teams(self, teams: Dict[str, Team]):
        self._save_yaml('teams.yaml', {'teams': [t.to_dict() for t in teams.values()]})

    def load_matches(self) -> List[Match]:
        """Load matches ordered by match number."""
        data = self._load_yaml('matches.yaml') or {}
        matches = [Match.from_dict(entry) for entry in data.get('matches', [])]
        return sorted(matches, key=lambda m: m.number)

    def save_matches(self, matches: List[Match]):
        ordered = sorted(matches, key=lambda m: m.number)
        self._save_yaml('matches.yaml', {'matches': [m.to_dict() for m in ordered]})

    def load_predictions(self, user: Optional[str] = None) -> List[Prediction]:
        """Load all predictions, or only those of ``user``."""
        data = self._load_yaml('predictions.yaml') or {}
        predictions = [Prediction.from_dict(entry) for entry in data.get('predictions', [])]
        if user is not None:
            predictions = [p for p in predictions if p.user == user]
        return predictions

    def save_predictions(self, predictions: List[Prediction]):
        # Keep one row per (user, match); later entries win.
        unique = {}
        for prediction in predictions:
            unique[prediction.key] = prediction
        ordered = sorted(unique.values(), key=lambda p: (p.user, p.match_number))
        self._save_yaml('predictions.yaml', {'predictions': [p.to_dict() for p in ordered]})

    def load_settings(self) -> Dict:
        """Tournament name and prediction deadline."""
        data = self._load_yaml('tournament.yaml') or {}
        return {
            'name': data.get('name', 'Tournament'),
            'prediction_deadline': data.get('prediction_deadline'),
        }

    def save_settings(self, settings: Dict):
        self._save_yaml('tournament.yaml', settings)

    def prediction_deadline(self) -> Optional[datetime]:
        """Configured deadline, None when unset; InvalidDeadlineError when unreadable."""
        return parse_deadline(self.load_settings().get('prediction_deadline'))
