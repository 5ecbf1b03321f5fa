"""
Unit tests for the data models (Team, Match, Prediction).
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from predictor.models import Team, Match, Prediction, MatchResult, HOME, AWAY, GROUP, ROUND32


class TestTeam:
    """Tests for the Team model."""

    def test_team_creation(self):
        team = Team('A1', 'Mexico', code='MEX', group='A')
        assert team.team_id == 'A1'
        assert team.code == 'MEX'
        assert team.group == 'A'

    def test_team_dict_round_trip(self):
        team = Team('A1', 'Mexico', code='MEX', group='A')
        restored = Team.from_dict(team.to_dict())
        assert (restored.team_id, restored.name, restored.code, restored.group) == ('A1', 'Mexico', 'MEX', 'A')

    def test_team_repr(self):
        assert 'Mexico' in repr(Team('A1', 'Mexico'))


class TestMatch:
    """Tests for the Match model."""

    def test_group_match(self):
        match = Match(1, GROUP, group='A', home_team='A1', away_team='A2')
        assert match.is_group
        assert not match.has_result
        assert match.result() is None

    def test_knockout_match_starts_from_placeholders(self):
        match = Match(73, ROUND32, home_placeholder='Winner A', away_placeholder='3rd C/D/E')
        assert not match.is_group
        assert match.team(HOME) is None
        assert match.placeholder(AWAY) == '3rd C/D/E'
        assert match.pinned == []

    def test_result(self):
        match = Match(73, ROUND32, home_score=1, away_score=1, winner_side=AWAY)
        assert match.has_result
        assert match.result() == MatchResult(1, 1, AWAY)

    def test_zero_zero_is_a_result(self):
        match = Match(1, GROUP, home_score=0, away_score=0)
        assert match.has_result

    def test_set_team(self):
        match = Match(89, 'round16')
        match.set_team(AWAY, 'B1')
        assert match.away_team == 'B1'
        assert match.team(AWAY) == 'B1'
        assert match.team(HOME) is None

    def test_dict_round_trip(self):
        match = Match(74, ROUND32, home_team='C2', home_placeholder='Runner-up C',
                      away_placeholder='Runner-up D', is_bonus=True, pinned=[HOME])
        restored = Match.from_dict(match.to_dict())
        assert restored.to_dict() == match.to_dict()

    def test_from_minimal_dict(self):
        match = Match.from_dict({'number': 5, 'stage': GROUP})
        assert match.is_bonus is False
        assert match.pinned == []

    def test_match_repr_shows_placeholder(self):
        assert 'Winner A' in repr(Match(73, ROUND32, home_placeholder='Winner A'))


class TestPrediction:
    """Tests for the Prediction model."""

    def test_key(self):
        assert Prediction('alice', 12, 1, 0).key == ('alice', 12)

    def test_as_result(self):
        assert Prediction('alice', 73, 2, 2, HOME).as_result() == MatchResult(2, 2, HOME)

    def test_points_default_to_zero(self):
        assert Prediction.from_dict({'user': 'bob', 'match_number': 1, 'home_score': 0, 'away_score': 0}).points == 0
