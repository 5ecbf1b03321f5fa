# Command line entry point for the prediction tournament

import argparse
import logging
import os
import sys
from generate_matches import load_teams, build_tournament
from predictor.errors import TournamentError
from predictor.evaluator import official_bracket, speculative_bracket
from predictor.models import KNOCKOUT_STAGES
from predictor.service import get_leaderboard, recompute_all
from predictor.store import TournamentStore, parse_deadline

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_DATA_DIR = os.environ.get('PREDICTOR_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def team_label(teams, team_id, fallback=None):
    if team_id is None:
        return fallback or 'TBD'
    team = teams.get(team_id)
    return team.name if team else team_id


def cmd_init(store, args):
    if os.path.exists(os.path.join(store.data_dir, 'matches.yaml')) and not args.force:
        print(f"Tournament already exists in {store.data_dir}. Use --force to overwrite.")
        return 1

    deadline = parse_deadline(args.deadline)

    teams = load_teams(args.groups_file)
    if not teams:
        print(f"No teams loaded. Check {args.groups_file}")
        return 1

    teams_by_id, matches = build_tournament(teams)
    with store.lock:
        store.save_teams(teams_by_id)
        store.save_matches(matches)
        store.save_predictions([])
        settings = {'name': args.name}
        if deadline is not None:
            settings['prediction_deadline'] = deadline.isoformat()
        store.save_settings(settings)
    print(f"Created {len(teams_by_id)} teams and {len(matches)} matches in {store.data_dir}")
    return 0


def print_standings(state, teams):
    for group, table in state.standings.items():
        status = "complete" if state.complete.get(group) else "in progress"
        print(f"\nGroup {group} ({status})")
        print(f"  {'Team':<24} {'P':>2} {'W':>2} {'D':>2} {'L':>2} {'GF':>3} {'GA':>3} {'GD':>4} {'Pts':>4}")
        for row in table:
            print(f"  {row['name']:<24} {row['played']:>2} {row['won']:>2} {row['drawn']:>2} {row['lost']:>2} "
                  f"{row['goals_for']:>3} {row['goals_against']:>3} {row['goal_difference']:>+4} {row['points']:>4}")


def print_bracket(state, matches, teams):
    qualifiers = state.qualifiers
    if qualifiers['best_thirds']:
        print("\nBest third-placed teams:")
        for position, (team_id, group) in enumerate(qualifiers['best_thirds'], start=1):
            print(f"  {position}. {team_label(teams, team_id)} (Group {group})")

    current_stage = None
    for match in matches:
        if match.stage not in KNOCKOUT_STAGES:
            continue
        if match.stage != current_stage:
            print(f"\n# {match.stage}")
            current_stage = match.stage
        resolved = state.slots.get(match.number, {})
        home = team_label(teams, resolved.get('home'), match.home_placeholder)
        away = team_label(teams, resolved.get('away'), match.away_placeholder)
        line = f"  M{match.number}: {home} vs {away}"
        if resolved.get('winner'):
            line += f"  -> {team_label(teams, resolved['winner'])}"
        print(line)


def cmd_standings(store, args):
    teams = store.load_teams()
    matches = store.load_matches()
    print_standings(official_bracket(matches, teams), teams)
    return 0


def cmd_bracket(store, args):
    teams = store.load_teams()
    matches = store.load_matches()
    if args.user:
        state = speculative_bracket(matches, teams, store.load_predictions(args.user))
        print(f"Speculative bracket for {args.user}")
    else:
        state = official_bracket(matches, teams)
        print("Official bracket")
    print_bracket(state, matches, teams)
    return 0


def cmd_recompute(store, args):
    summary = recompute_all(store)
    print(f"Bracket slots written: {len(summary['cascaded'])}")
    print(f"Predictions rescored: {summary['predictions_rescored']}")
    return 0


def cmd_leaderboard(store, args):
    rows = get_leaderboard(store)
    if not rows:
        print("No predictions yet.")
        return 0
    print(f"{'#':>3} {'User':<20} {'Pts':>4} {'Grp':>4} {'KO':>4} {'Exact':>5} {'Right':>5}")
    for row in rows:
        print(f"{row['rank']:>3} {row['user']:<20} {row['total_points']:>4} {row['group_points']:>4} "
              f"{row['knockout_points']:>4} {row['exact_scores']:>5} {row['correct_results']:>5}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description='Tournament prediction competition tools')
    parser.add_argument('--data-dir', default=DEFAULT_DATA_DIR, help='Tournament data directory')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    init_parser = subparsers.add_parser('init', help='Create a fresh tournament from a groups file')
    init_parser.add_argument('groups_file', help='YAML file mapping group labels to team names')
    init_parser.add_argument('--name', default='World Cup 2026', help='Tournament name')
    init_parser.add_argument('--deadline', help='Prediction deadline (ISO 8601)')
    init_parser.add_argument('--force', action='store_true', help='Overwrite an existing tournament')
    init_parser.set_defaults(func=cmd_init)

    subparsers.add_parser('standings', help='Show official group standings').set_defaults(func=cmd_standings)

    bracket_parser = subparsers.add_parser('bracket', help='Show the resolved knockout bracket')
    bracket_parser.add_argument('--user', help='Show the bracket implied by this user\'s predictions')
    bracket_parser.set_defaults(func=cmd_bracket)

    subparsers.add_parser('recompute', help='Rebuild the bracket and rescore all predictions').set_defaults(func=cmd_recompute)
    subparsers.add_parser('leaderboard', help='Show the leaderboard').set_defaults(func=cmd_leaderboard)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    store = TournamentStore(args.data_dir)
    try:
        return args.func(store, args)
    except TournamentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
