"""
Record types shared by the bracket engine, the scorer and the data store.
"""
from collections import namedtuple

GROUP = 'group'
ROUND32 = 'round32'
ROUND16 = 'round16'
QUARTER = 'quarter'
SEMI = 'semi'
THIRD = 'third'
FINAL = 'final'

KNOCKOUT_STAGES = (ROUND32, ROUND16, QUARTER, SEMI, THIRD, FINAL)

HOME = 'home'
AWAY = 'away'
SIDES = (HOME, AWAY)

# Score pair plus the declared shootout winner for level knockout games.
MatchResult = namedtuple('MatchResult', ['home_score', 'away_score', 'winner_side'])


class Team:
    def __init__(self, team_id, name, code=None, group=None):
        self.team_id = team_id
        self.name = name
        self.code = code
        self.group = group

    def to_dict(self):
        return {'id': self.team_id, 'name': self.name, 'code': self.code, 'group': self.group}

    @classmethod
    def from_dict(cls, data):
        return cls(data['id'], data['name'], data.get('code'), data.get('group'))

    def __repr__(self):
        return f"Team(id={self.team_id}, name={self.name}, group={self.group})"


class Match:
    def __init__(self, number, stage, group=None, home_team=None, away_team=None,
                 home_placeholder=None, away_placeholder=None, home_score=None,
                 away_score=None, winner_side=None, is_bonus=False, pinned=None):
        self.number = number
        self.stage = stage
        self.group = group
        self.home_team = home_team
        self.away_team = away_team
        self.home_placeholder = home_placeholder
        self.away_placeholder = away_placeholder
        self.home_score = home_score
        self.away_score = away_score
        self.winner_side = winner_side
        self.is_bonus = is_bonus
        self.pinned = list(pinned) if pinned else []

    @property
    def is_group(self):
        return self.stage == GROUP

    @property
    def has_result(self):
        return self.home_score is not None and self.away_score is not None

    def result(self):
        """Return the recorded official result, or None if not played yet."""
        if not self.has_result:
            return None
        return MatchResult(self.home_score, self.away_score, self.winner_side)

    def team(self, side):
        return self.home_team if side == HOME else self.away_team

    def set_team(self, side, team_id):
        if side == HOME:
            self.home_team = team_id
        else:
            self.away_team = team_id

    def placeholder(self, side):
        return self.home_placeholder if side == HOME else self.away_placeholder

    def to_dict(self):
        return {
            'number': self.number,
            'stage': self.stage,
            'group': self.group,
            'home_team': self.home_team,
            'away_team': self.away_team,
            'home_placeholder': self.home_placeholder,
            'away_placeholder': self.away_placeholder,
            'home_score': self.home_score,
            'away_score': self.away_score,
            'winner_side': self.winner_side,
            'is_bonus': self.is_bonus,
            'pinned': list(self.pinned),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data['number'],
            data['stage'],
            group=data.get('group'),
            home_team=data.get('home_team'),
            away_team=data.get('away_team'),
            home_placeholder=data.get('home_placeholder'),
            away_placeholder=data.get('away_placeholder'),
            home_score=data.get('home_score'),
            away_score=data.get('away_score'),
            winner_side=data.get('winner_side'),
            is_bonus=data.get('is_bonus', False),
            pinned=data.get('pinned'),
        )

    def __repr__(self):
        return (f"Match(number={self.number}, stage={self.stage}, "
                f"home={self.home_team or self.home_placeholder}, "
                f"away={self.away_team or self.away_placeholder})")


class Prediction:
    def __init__(self, user, match_number, home_score, away_score, winner_side=None, points=0):
        self.user = user
        self.match_number = match_number
        self.home_score = home_score
        self.away_score = away_score
        self.winner_side = winner_side
        self.points = points

    @property
    def key(self):
        return (self.user, self.match_number)

    def as_result(self):
        """View this prediction as the result it forecasts."""
        return MatchResult(self.home_score, self.away_score, self.winner_side)

    def to_dict(self):
        return {
            'user': self.user,
            'match_number': self.match_number,
            'home_score': self.home_score,
            'away_score': self.away_score,
            'winner_side': self.winner_side,
            'points': self.points,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data['user'],
            data['match_number'],
            data['home_score'],
            data['away_score'],
            data.get('winner_side'),
            data.get('points', 0),
        )

    def __repr__(self):
        return (f"Prediction(user={self.user}, match={self.match_number}, "
                f"score={self.home_score}-{self.away_score}, points={self.points})")
