"""
Unit tests for fixture generation.
"""
import sys
import os
from collections import Counter

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from predictor.models import GROUP, ROUND32, THIRD, FINAL
from predictor.placeholders import parse_bracket_slots
from generate_matches import (
    GROUP_MATCHUPS,
    ROUND32_PLACEHOLDERS,
    build_tournament,
    generate_group_matches,
    generate_knockout_matches,
    load_teams,
)


class TestGroupMatches:
    """Tests for group-stage generation."""

    def test_every_pair_plays_once(self, sample_teams):
        matches = generate_group_matches(sample_teams)
        assert len(matches) == 72
        group_a = [m for m in matches if m.group == 'A']
        pairs = {frozenset((m.home_team, m.away_team)) for m in group_a}
        assert len(pairs) == 6

    def test_fixed_round_robin_order(self, sample_teams):
        matches = generate_group_matches(sample_teams)
        assert [(m.home_team, m.away_team) for m in matches[:6]] == [
            ('A1', 'A2'), ('A3', 'A4'), ('A1', 'A3'), ('A2', 'A4'), ('A1', 'A4'), ('A2', 'A3'),
        ]
        assert len(GROUP_MATCHUPS) == 6

    def test_numbered_by_group_label(self, sample_teams):
        matches = generate_group_matches(list(reversed(sample_teams)))
        assert matches[0].number == 1
        assert matches[0].group == 'A'
        assert matches[-1].number == 72
        assert matches[-1].group == 'L'

    def test_incomplete_group_skipped(self, sample_teams, capsys):
        teams = [t for t in sample_teams if t.team_id != 'B4']
        matches = generate_group_matches(teams)
        assert len(matches) == 66
        assert 'Group B has 3 teams' in capsys.readouterr().out


class TestKnockoutMatches:
    """Tests for knockout generation."""

    def test_numbers_and_stages(self):
        matches = generate_knockout_matches()
        assert [m.number for m in matches] == list(range(73, 105))
        stages = Counter(m.stage for m in matches)
        assert stages[ROUND32] == 16
        assert stages[THIRD] == 1
        assert stages[FINAL] == 1

    def test_round_of_32_covers_all_qualifiers(self):
        """Every group winner and runner-up appears once, plus eight third slots."""
        sides = [text for row in ROUND32_PLACEHOLDERS for text in row]
        winners = sorted(t for t in sides if t.startswith('Winner '))
        runners_up = sorted(t for t in sides if t.startswith('Runner-up '))
        thirds = [t for t in sides if t.startswith('3rd ')]
        assert winners == [f'Winner {g}' for g in 'ABCDEFGHIJKL']
        assert runners_up == [f'Runner-up {g}' for g in 'ABCDEFGHIJKL']
        assert len(thirds) == 8

    def test_all_placeholders_parse(self):
        slots = parse_bracket_slots(generate_knockout_matches())
        assert len(slots) == 64

    def test_third_place_and_final(self):
        matches = {m.number: m for m in generate_knockout_matches()}
        assert (matches[103].home_placeholder, matches[103].away_placeholder) == ('Loser SF M1', 'Loser SF M2')
        assert (matches[104].home_placeholder, matches[104].away_placeholder) == ('Winner SF M1', 'Winner SF M2')


class TestLoadTeams:
    """Tests for reading a groups file."""

    def test_names_and_mappings(self, tmp_path):
        groups_file = tmp_path / 'groups.yaml'
        groups_file.write_text(
            "A:\n"
            "  - Mexico\n"
            "  - name: South Africa\n"
            "    code: RSA\n"
            "  - Uruguay\n"
            "  - France\n"
        )
        teams = load_teams(str(groups_file))
        assert [t.team_id for t in teams] == ['A1', 'RSA', 'A3', 'A4']
        assert teams[1].name == 'South Africa'
        assert all(t.group == 'A' for t in teams)

    def test_empty_file(self, tmp_path):
        groups_file = tmp_path / 'groups.yaml'
        groups_file.write_text('')
        assert load_teams(str(groups_file)) == []

    def test_bundled_groups_file(self):
        path = os.path.join(os.path.dirname(__file__), '..', 'data', 'groups.yaml')
        teams = load_teams(path)
        assert len(teams) == 48


class TestBuildTournament:
    """Tests for build_tournament."""

    def test_full_tournament(self, sample_teams):
        teams, matches = build_tournament(sample_teams)
        assert len(teams) == 48
        assert len(matches) == 104
        assert sum(1 for m in matches if m.stage == GROUP) == 72
        assert [m.number for m in matches] == list(range(1, 105))
