"""
Tests for the command line entry point.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from main import main
from predictor.store import TournamentStore

GROUPS_FILE = os.path.join(os.path.dirname(__file__), '..', 'data', 'groups.yaml')


class TestInit:
    """Tests for the init command."""

    def test_creates_tournament(self, tmp_path, capsys):
        data_dir = str(tmp_path / 'cup')
        assert main(['--data-dir', data_dir, 'init', GROUPS_FILE, '--deadline', '2026-06-11T18:00:00']) == 0
        assert 'Created 48 teams and 104 matches' in capsys.readouterr().out
        store = TournamentStore(data_dir)
        assert len(store.load_matches()) == 104
        assert store.load_settings()['name'] == 'World Cup 2026'
        assert store.prediction_deadline() is not None

    def test_refuses_to_overwrite(self, tmp_path, capsys):
        data_dir = str(tmp_path / 'cup')
        main(['--data-dir', data_dir, 'init', GROUPS_FILE])
        assert main(['--data-dir', data_dir, 'init', GROUPS_FILE]) == 1
        assert '--force' in capsys.readouterr().out
        assert main(['--data-dir', data_dir, 'init', GROUPS_FILE, '--force']) == 0

    def test_unreadable_deadline_rejected(self, tmp_path, capsys):
        data_dir = str(tmp_path / 'cup')
        assert main(['--data-dir', data_dir, 'init', GROUPS_FILE, '--deadline', 'next tuesday']) == 1
        assert 'Invalid prediction deadline' in capsys.readouterr().err
        assert not os.path.exists(os.path.join(data_dir, 'matches.yaml'))


class TestReports:
    """Tests for the read-only report commands."""

    def test_standings(self, completed_groups_store, capsys):
        assert main(['--data-dir', completed_groups_store.data_dir, 'standings']) == 0
        out = capsys.readouterr().out
        assert 'Group A (complete)' in out
        assert 'Team A1' in out

    def test_bracket(self, completed_groups_store, capsys):
        assert main(['--data-dir', completed_groups_store.data_dir, 'bracket']) == 0
        out = capsys.readouterr().out
        assert 'Official bracket' in out
        assert 'M73: Team A1 vs Team A3' in out
        assert 'M89: Winner R32 M1 vs Winner R32 M2' in out

    def test_speculative_bracket_for_user(self, completed_groups_store, capsys):
        assert main(['--data-dir', completed_groups_store.data_dir, 'bracket', '--user', 'alice']) == 0
        out = capsys.readouterr().out
        assert 'Speculative bracket for alice' in out
        assert 'M73: Winner A vs 3rd C/D/E' in out

    def test_recompute(self, completed_groups_store, capsys):
        assert main(['--data-dir', completed_groups_store.data_dir, 'recompute']) == 0
        assert 'Bracket slots written: 0' in capsys.readouterr().out

    def test_empty_leaderboard(self, store, capsys):
        assert main(['--data-dir', store.data_dir, 'leaderboard']) == 0
        assert 'No predictions yet.' in capsys.readouterr().out
