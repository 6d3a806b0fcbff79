"""
Flask JSON API for tournament brackets.

Tournaments (with their registered participants) live in tournaments.yaml;
each tournament's bracket is stored in brackets/<tournament_id>.yaml.
"""
import os
import hmac
import yaml
from functools import wraps
from filelock import FileLock
from flask import Flask, request, jsonify
from core import engine
from core.errors import (
    BracketError,
    EmptyParticipants,
    FormatNotSupported,
    InvalidBracket,
    InvalidFormat,
    MatchNotEligible,
    MatchNotFound,
)
from core.formats import parse_format
from core.models import Bracket
from core.schedule import VIEW_MODES, derive_events, filter_events, group_events_by_date

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
BRACKETS_DIR = os.path.join(DATA_DIR, 'brackets')
LOCK_TIMEOUT = 10

ERROR_STATUS = {
    EmptyParticipants: 400,
    InvalidBracket: 400,
    InvalidFormat: 400,
    FormatNotSupported: 501,
    MatchNotFound: 404,
    MatchNotEligible: 409,
}


def _data_lock() -> FileLock:
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=LOCK_TIMEOUT)


def require_host_key(f):
    """Require HOST_API_KEY as a bearer token when it is configured."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected_key = os.environ.get('HOST_API_KEY')
        if not expected_key:
            return f(*args, **kwargs)

        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return jsonify({'success': False, 'message': 'Missing or invalid Authorization header'}), 401

        provided_key = auth_header[7:]
        if not hmac.compare_digest(expected_key, provided_key):
            return jsonify({'success': False, 'message': 'Invalid API key'}), 401

        return f(*args, **kwargs)
    return decorated_function


def load_tournaments() -> list:
    """Load tournament records from YAML."""
    if not os.path.exists(TOURNAMENTS_FILE):
        return []
    try:
        with open(TOURNAMENTS_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {TOURNAMENTS_FILE}: {e}')
        return []
    return (data or {}).get('tournaments', []) or []


def save_tournaments(tournaments: list):
    os.makedirs(os.path.dirname(TOURNAMENTS_FILE), exist_ok=True)
    with open(TOURNAMENTS_FILE, 'w', encoding='utf-8') as f:
        yaml.dump({'tournaments': tournaments}, f, default_flow_style=False, sort_keys=False)


def find_tournament(tournament_id):
    for tournament in load_tournaments():
        if str(tournament.get('_id')) == str(tournament_id):
            return tournament
    return None


def _bracket_path(tournament_id) -> str:
    return os.path.join(BRACKETS_DIR, f'{tournament_id}.yaml')


def load_bracket(tournament_id):
    """Load a stored bracket, or None if the tournament has none yet."""
    path = _bracket_path(tournament_id)
    if not os.path.exists(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return Bracket.from_dict(data) if data else None


def save_bracket(tournament_id, bracket: Bracket):
    os.makedirs(BRACKETS_DIR, exist_ok=True)
    with open(_bracket_path(tournament_id), 'w', encoding='utf-8') as f:
        yaml.dump(bracket.to_dict(), f, default_flow_style=False, sort_keys=False)


def _ok(data, status=200):
    return jsonify({'success': True, 'data': data}), status


def _error(message, status):
    return jsonify({'success': False, 'message': message}), status


def _tournament_not_found(tournament_id):
    return _error(f'Tournament {tournament_id} not found', 404)


@app.errorhandler(BracketError)
def handle_bracket_error(error):
    status = 400
    for error_type, code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            status = code
            break
    app.logger.info(f'{request.method} {request.path} rejected: {error}')
    return _error(str(error), status)


@app.route('/api/tournaments', methods=['GET'])
def api_tournaments():
    """List tournaments, optionally filtered by a comma separated status list."""
    tournaments = load_tournaments()
    statuses = [s for s in request.args.get('status', '').split(',') if s]
    if statuses:
        tournaments = [t for t in tournaments if t.get('status') in statuses]
    limit = request.args.get('limit', type=int)
    if limit:
        tournaments = tournaments[:limit]
    return _ok({'tournaments': tournaments})


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_tournament(tournament_id):
    tournament = find_tournament(tournament_id)
    if tournament is None:
        return _tournament_not_found(tournament_id)
    return _ok(tournament)


@app.route('/api/tournaments/<tournament_id>/participants', methods=['GET'])
def api_tournament_participants(tournament_id):
    tournament = find_tournament(tournament_id)
    if tournament is None:
        return _tournament_not_found(tournament_id)
    return _ok({'participants': tournament.get('participants') or []})


@app.route('/api/tournaments/<tournament_id>/brackets', methods=['GET'])
def api_get_brackets(tournament_id):
    bracket = load_bracket(tournament_id)
    if bracket is None:
        return _error('No brackets generated for this tournament', 404)
    return _ok(bracket.to_dict())


@app.route('/api/tournaments/<tournament_id>/brackets', methods=['POST'])
@require_host_key
def api_create_brackets(tournament_id):
    """
    Store a bracket, replacing any previous one.

    A body carrying 'matches' is a bracket generated by the client and is
    stored once it passes engine.bracket_from_dict. Otherwise the server
    generates one from the registered participants, using the body's
    'format' or the tournament's own.
    """
    tournament = find_tournament(tournament_id)
    if tournament is None:
        return _tournament_not_found(tournament_id)
    data = request.get_json(silent=True) or {}

    if 'matches' in data:
        fmt = parse_format(data.get('format'), strict=True)
        if fmt.value == 'double-elimination':
            raise FormatNotSupported(fmt.value)
        bracket = engine.bracket_from_dict(dict(data, format=fmt.value))
    else:
        if data.get('format'):
            fmt = parse_format(data['format'], strict=True)
        else:
            fmt = parse_format(tournament.get('format'))
        bracket = engine.generate(fmt, tournament.get('participants') or [])

    with _data_lock():
        save_bracket(tournament_id, bracket)
    app.logger.info(f'Saved {bracket.format} bracket for {tournament_id}: {len(bracket.matches)} matches')
    return _ok(bracket.to_dict(), 201)


@app.route('/api/tournaments/<tournament_id>/brackets/resolve-byes', methods=['POST'])
@require_host_key
def api_resolve_byes(tournament_id):
    with _data_lock():
        bracket = load_bracket(tournament_id)
        if bracket is None:
            return _error('No brackets generated for this tournament', 404)
        bracket = engine.resolve_byes(bracket)
        save_bracket(tournament_id, bracket)
    return _ok(bracket.to_dict())


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>', methods=['PUT', 'PATCH'])
@require_host_key
def api_update_match(tournament_id, match_id):
    """Record a match result and advance the winner."""
    data = request.get_json(silent=True) or {}
    winner = data.get('winner')
    if winner is None or winner == '':
        return _error('Please select a winner', 400)

    with _data_lock():
        bracket = load_bracket(tournament_id)
        if bracket is None:
            return _error('No brackets generated for this tournament', 404)
        bracket = engine.record_result(bracket, match_id, winner, data.get('notes', ''))
        if data.get('resolveByes'):
            bracket = engine.resolve_byes(bracket)
        save_bracket(tournament_id, bracket)

    match = engine.get_match(bracket, match_id)
    return _ok({'match': match.to_dict(), 'bracket': bracket.to_dict()})


@app.route('/api/tournaments/<tournament_id>/brackets/display', methods=['GET'])
def api_bracket_display(tournament_id):
    bracket = load_bracket(tournament_id)
    if bracket is None:
        return _error('No brackets generated for this tournament', 404)
    return _ok(engine.get_bracket_display(bracket))


@app.route('/api/schedule', methods=['GET'])
def api_schedule():
    """Tournament events grouped by day."""
    view_mode = request.args.get('view', 'upcoming')
    if view_mode not in VIEW_MODES:
        return _error(f'Unknown view mode: {view_mode}', 400)

    events = filter_events(derive_events(load_tournaments()), view_mode)
    days = [
        {'date': day.isoformat(), 'events': [e.to_dict() for e in day_events]}
        for day, day_events in group_events_by_date(events).items()
    ]
    return _ok({'days': days, 'total': len(events)})


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1', port=int(os.environ.get('PORT', 8000)))
