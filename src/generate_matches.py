import os
import sys
import yaml
from predictor.addressing import STAGE_BASES
from predictor.models import Team, Match, GROUP, ROUND32, ROUND16, QUARTER, SEMI, THIRD, FINAL

# Round-robin order inside a group of four (0-based positions): 1v2, 3v4, 1v3, 2v4, 1v4, 2v3
GROUP_MATCHUPS = [(0, 1), (2, 3), (0, 2), (1, 3), (0, 3), (1, 2)]

ROUND32_PLACEHOLDERS = [
    ('Winner A', '3rd C/D/E'),
    ('Runner-up C', 'Runner-up D'),
    ('Winner B', '3rd A/B/F'),
    ('Runner-up A', 'Runner-up B'),
    ('Winner E', '3rd C/D/E'),
    ('Runner-up G', 'Runner-up H'),
    ('Winner F', '3rd A/B/F'),
    ('Runner-up E', 'Runner-up F'),
    ('Winner C', '3rd G/H/I'),
    ('Runner-up I', 'Runner-up J'),
    ('Winner D', '3rd G/H/I'),
    ('Runner-up K', 'Runner-up L'),
    ('Winner G', '3rd J/K/L'),
    ('Winner I', 'Winner J'),
    ('Winner H', '3rd J/K/L'),
    ('Winner K', 'Winner L'),
]

# (stage, placeholder code of the feeding round, number of matches)
LATER_ROUNDS = [
    (ROUND16, 'R32', 8),
    (QUARTER, 'R16', 4),
    (SEMI, 'QF', 2),
]


def load_teams(file_path):
    """
    Read a groups file: {group: [team, ...]}.

    A team is either a name, or a mapping with 'name' and optional 'code'.
    Teams without a code get "<group><position>", which also serves as id.
    """
    teams = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        groups_data = yaml.safe_load(file) or {}
    for group, entries in groups_data.items():
        for position, entry in enumerate(entries, start=1):
            if isinstance(entry, dict):
                name = entry['name']
                code = entry.get('code') or f"{group}{position}"
            else:
                name = str(entry)
                code = f"{group}{position}"
            teams.append(Team(team_id=code, name=name, code=code, group=str(group)))
    return teams


def generate_group_matches(teams, first_number=1):
    matches = []
    groups = {}

    # Group teams by group label, keeping file order
    for team in teams:
        if team.group is None:
            continue
        groups.setdefault(team.group, []).append(team.team_id)

    number = first_number
    for group in sorted(groups):
        team_ids = groups[group]
        if len(team_ids) != 4:
            print(f"Warning: Group {group} has {len(team_ids)} teams, expected 4. Skipping match generation.")
            continue
        for home_idx, away_idx in GROUP_MATCHUPS:
            matches.append(Match(number, GROUP, group=group,
                                 home_team=team_ids[home_idx], away_team=team_ids[away_idx]))
            number += 1
    return matches


def generate_knockout_matches():
    matches = []
    number = STAGE_BASES[ROUND32]
    for home, away in ROUND32_PLACEHOLDERS:
        matches.append(Match(number, ROUND32, home_placeholder=home, away_placeholder=away))
        number += 1

    for stage, feeder, count in LATER_ROUNDS:
        number = STAGE_BASES[stage]
        for i in range(count):
            matches.append(Match(number, stage,
                                 home_placeholder=f"Winner {feeder} M{2 * i + 1}",
                                 away_placeholder=f"Winner {feeder} M{2 * i + 2}"))
            number += 1

    matches.append(Match(STAGE_BASES[THIRD], THIRD, home_placeholder='Loser SF M1', away_placeholder='Loser SF M2'))
    matches.append(Match(STAGE_BASES[FINAL], FINAL, home_placeholder='Winner SF M1', away_placeholder='Winner SF M2'))
    return matches


def build_tournament(teams):
    """Return (teams_by_id, matches) for a fresh 104-match tournament."""
    matches = generate_group_matches(teams) + generate_knockout_matches()
    return {team.team_id: team for team in teams}, matches


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    # Use command line argument if provided, otherwise use default path
    groups_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(base_dir, 'data', 'groups.yaml')

    teams = load_teams(groups_file)

    if not teams:
        return

    _, matches = build_tournament(teams)

    current_stage = None
    for match in matches:
        if match.stage != current_stage:
            if current_stage is not None:
                print()
            print(f"# {match.stage}")
            current_stage = match.stage
        home = match.home_team or match.home_placeholder
        away = match.away_team or match.away_placeholder
        label = f" (Group {match.group})" if match.group else ""
        print(f"M{match.number}: {home} vs {away}{label}")


if __name__ == '__main__':
    main()
