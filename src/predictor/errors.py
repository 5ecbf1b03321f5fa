"""
Failures raised by the prediction engine and its service layer.
"""


class TournamentError(Exception):
    """Base class for every rejected tournament operation."""


class MatchNotFoundError(TournamentError):
    def __init__(self, match_number):
        super().__init__(f'Match {match_number} not found')
        self.match_number = match_number


class TeamNotFoundError(TournamentError):
    def __init__(self, team_id):
        super().__init__(f'Team {team_id} not found')
        self.team_id = team_id


class WinnerRequiredError(TournamentError):
    def __init__(self, match_number):
        super().__init__(f'Match {match_number} ended level: a winner (home/away) is required')
        self.match_number = match_number


class InvalidScoreError(TournamentError):
    pass


class PredictionLockedError(TournamentError):
    pass


class BonusLimitError(TournamentError):
    pass


class PlaceholderError(TournamentError):
    pass


class InvalidDeadlineError(TournamentError):
    def __init__(self, value):
        super().__init__(f'Invalid prediction deadline {value!r}: expected ISO 8601, e.g. 2026-06-11T18:00:00')
        self.value = value
