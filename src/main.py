# Command line front end for bracket generation and result entry

import argparse
import sys
import yaml
from api_client import ApiClient, ApiError
from bracket_service import BracketManager
from core import engine
from core.elimination import get_round_name, matches_by_round
from core.errors import BracketError, PersistenceFailure
from core.formats import BracketFormat, parse_format
from core.models import Bracket
from core.schedule import VIEW_MODES, derive_events, filter_events, group_events_by_date


def load_participants(file_path):
    """
    Load participants from YAML: a list of names or records, or a mapping
    with 'participants' (and optionally 'format').
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    fmt = None
    if isinstance(data, dict):
        fmt = data.get('format')
        data = data.get('participants') or []
    participants = []
    for entry in data:
        if isinstance(entry, dict):
            participants.append(entry)
        else:
            participants.append({'_id': str(entry), 'teamName': str(entry)})
    return participants, fmt


def load_bracket_file(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        return Bracket.from_dict(yaml.safe_load(file) or {})


def save_bracket_file(bracket, file_path):
    with open(file_path, mode='w', encoding='utf-8') as file:
        yaml.dump(bracket.to_dict(), file, default_flow_style=False, sort_keys=False)


def _team_label(team):
    return f"{team.name} (#{team.seed})" if team else "TBD"


def print_bracket(bracket):
    print(f"Format: {bracket.format}  Rounds: {bracket.rounds}  Matches: {len(bracket.matches)}")
    single = parse_format(bracket.format) == BracketFormat.SINGLE_ELIMINATION
    for round_number, matches in matches_by_round(bracket.matches).items():
        title = get_round_name(round_number, bracket.rounds) if single else f"Round {round_number}"
        print(f"\n# {title}")
        for match in matches:
            line = f"  Match {match.match_id}: {_team_label(match.team1)} vs {_team_label(match.team2)}"
            line += f" [{engine.get_status_text(match.status)}]"
            if match.winner is not None and match.status == 'completed':
                line += f" winner: {match.team_for(match.winner).name}"
            print(line)
    winner = engine.champion(bracket)
    if winner:
        print(f"\nChampion: {winner.name}")


def cmd_generate(args):
    participants, file_format = load_participants(args.participants)
    fmt = parse_format(args.format, strict=True) if args.format else parse_format(file_format)
    bracket = engine.generate(fmt, participants)
    if args.resolve_byes:
        bracket = engine.resolve_byes(bracket)
    if args.output:
        save_bracket_file(bracket, args.output)
        print(f"Bracket written to {args.output}")
    print_bracket(bracket)
    return 0


def cmd_result(args):
    bracket = load_bracket_file(args.bracket)
    bracket = engine.record_result(bracket, args.match_id, args.winner_id, args.notes)
    if args.resolve_byes:
        bracket = engine.resolve_byes(bracket)
    save_bracket_file(bracket, args.bracket)
    print_bracket(bracket)
    return 0


def cmd_show(args):
    print_bracket(load_bracket_file(args.bracket))
    return 0


def cmd_schedule(args):
    with open(args.tournaments, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}
    tournaments = data.get('tournaments', []) if isinstance(data, dict) else data
    events = filter_events(derive_events(tournaments), args.view)
    if not events:
        print("No events found.")
        return 0
    first_day = True
    for day, day_events in group_events_by_date(events).items():
        if not first_day:
            print()
        print(f"# {day.strftime('%A, %B %d, %Y')}")
        for event in day_events:
            print(f"  {event.date.strftime('%H:%M')} {event.title} - {event.tournament_title} ({event.status()})")
        first_day = False
    return 0


def cmd_push(args):
    manager = BracketManager(ApiClient(base_url=args.api_url))
    try:
        tournament, participants = manager.load_tournament(args.tournament_id)
        bracket = manager.generate_brackets(tournament, participants)
    except (ApiError, PersistenceFailure) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    print_bracket(bracket)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description='Generate and manage tournament brackets')
    subparsers = parser.add_subparsers(dest='command', required=True)

    generate = subparsers.add_parser('generate', help='Generate a bracket from a participants file')
    generate.add_argument('participants', help='YAML file with the ordered participant list')
    generate.add_argument('--format', help='single-elimination, round-robin or double-elimination')
    generate.add_argument('--output', help='Write the bracket to this YAML file')
    generate.add_argument('--resolve-byes', action='store_true', help='Advance bye winners right away')
    generate.set_defaults(func=cmd_generate)

    result = subparsers.add_parser('result', help='Enter a match result into a bracket file')
    result.add_argument('bracket', help='Bracket YAML file (updated in place)')
    result.add_argument('match_id', type=int)
    result.add_argument('winner_id')
    result.add_argument('--notes', default='')
    result.add_argument('--resolve-byes', action='store_true', help='Advance bye winners after the result')
    result.set_defaults(func=cmd_result)

    show = subparsers.add_parser('show', help='Print a bracket file')
    show.add_argument('bracket')
    show.set_defaults(func=cmd_show)

    schedule = subparsers.add_parser('schedule', help='Print tournament events by day')
    schedule.add_argument('tournaments', help='YAML file with tournament records')
    schedule.add_argument('--view', choices=VIEW_MODES, default='upcoming')
    schedule.set_defaults(func=cmd_schedule)

    push = subparsers.add_parser('push', help='Generate and save a bracket on the backend')
    push.add_argument('tournament_id')
    push.add_argument('--api-url', help='Backend base URL (default: $BRACKET_API_URL)')
    push.set_defaults(func=cmd_push)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except BracketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
