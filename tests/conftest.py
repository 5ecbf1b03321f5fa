"""
Shared pytest fixtures for tournament predictor tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from predictor.models import Team
from predictor.store import TournamentStore
from generate_matches import build_tournament

GROUPS = 'ABCDEFGHIJKL'

# Scores for a group's six matches (1v2, 3v4, 1v3, 2v4, 1v4, 2v3) that rank
# the teams in their listed order: 9, 6, 3 and 0 points.
ORDERED_GROUP_SCORES = [(1, 0), (1, 0), (1, 0), (1, 0), (1, 0), (1, 0)]


def group_match_numbers(group):
    """Match numbers of a group's six fixtures."""
    first = GROUPS.index(group) * 6 + 1
    return list(range(first, first + 6))


def play_group(matches, group, scores):
    """Set official scores on a group's matches, in fixture order."""
    by_number = {m.number: m for m in matches}
    for number, (home, away) in zip(group_match_numbers(group), scores):
        by_number[number].home_score = home
        by_number[number].away_score = away


def play_all_groups(matches, overrides=None):
    """Play every group in listed order; ``overrides`` maps group -> scores."""
    overrides = overrides or {}
    for group in GROUPS:
        play_group(matches, group, overrides.get(group, ORDERED_GROUP_SCORES))


@pytest.fixture
def sample_teams():
    """48 teams, four per group, ids like 'A1'."""
    teams = []
    for group in GROUPS:
        for position in range(1, 5):
            code = f"{group}{position}"
            teams.append(Team(team_id=code, name=f"Team {code}", code=code, group=group))
    return teams


@pytest.fixture
def tournament(sample_teams):
    """(teams_by_id, matches) for a fresh 104-match tournament."""
    return build_tournament(sample_teams)


@pytest.fixture
def teams(tournament):
    return tournament[0]


@pytest.fixture
def matches(tournament):
    return tournament[1]


@pytest.fixture
def store(tmp_path, tournament):
    """Data store in a temporary directory seeded with a fresh tournament."""
    teams_by_id, fixture_matches = tournament
    data_store = TournamentStore(str(tmp_path / "tournament"))
    data_store.save_teams(teams_by_id)
    data_store.save_matches(fixture_matches)
    data_store.save_predictions([])
    data_store.save_settings({'name': 'Test Cup'})
    return data_store


@pytest.fixture
def completed_groups_store(store):
    """Store whose 72 group matches are all played in listed order."""
    fixture_matches = store.load_matches()
    play_all_groups(fixture_matches)
    store.save_matches(fixture_matches)
    from predictor.service import recompute_all
    recompute_all(store)
    return store


@pytest.fixture
def client(store, monkeypatch):
    """Create a test client logged in as a regular user."""
    import app as app_module
    monkeypatch.setattr(app_module, 'DATA_DIR', store.data_dir)
    monkeypatch.setattr(app_module, 'ADMIN_USERS', {'admin'})
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        with client.session_transaction() as sess:
            sess['user'] = 'alice'
        yield client


@pytest.fixture
def admin_client(store, monkeypatch):
    """Create a test client logged in as an administrator."""
    import app as app_module
    monkeypatch.setattr(app_module, 'DATA_DIR', store.data_dir)
    monkeypatch.setattr(app_module, 'ADMIN_USERS', {'admin'})
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        with client.session_transaction() as sess:
            sess['user'] = 'admin'
        yield client
