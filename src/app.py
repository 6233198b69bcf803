"""
Flask web application for single elimination tournaments.

JSON API over the bracket engine. Reads are public; creating tournaments
and recording results require the admin API key.
"""
import os
import hmac
from functools import wraps

from filelock import Timeout
from flask import Flask, request, jsonify
from brackets.elimination import get_bracket_display, get_champion
from brackets.errors import (
    BracketError,
    InvalidInputError,
    InvalidParticipantError,
    MatchNotFoundError,
    AlreadyDecidedError,
    TournamentNotFoundError,
)
from brackets.storage import TournamentStore, participants_from_entries

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

# Error class -> HTTP status
ERROR_STATUS_CODES = (
    (InvalidInputError, 400),
    (InvalidParticipantError, 400),
    (MatchNotFoundError, 404),
    (TournamentNotFoundError, 404),
    (AlreadyDecidedError, 409),
)


def get_store() -> TournamentStore:
    return TournamentStore(DATA_DIR)


def _error_response(error: BracketError):
    status = next((code for cls, code in ERROR_STATUS_CODES if isinstance(error, cls)), 400)
    return jsonify({'success': False, 'error': str(error)}), status


def require_admin_key(f):
    """Require valid BRACKET_ADMIN_KEY in Authorization header."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected_key = os.environ.get('BRACKET_ADMIN_KEY')
        if not expected_key:
            return jsonify({'success': False, 'error': 'Server not configured for admin operations'}), 500

        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return jsonify({'success': False, 'error': 'Missing or invalid Authorization header'}), 401

        provided_key = auth_header[7:]  # Strip "Bearer "
        if not hmac.compare_digest(expected_key, provided_key):
            app.logger.warning(f'Rejected admin request from {request.remote_addr}')
            return jsonify({'success': False, 'error': 'Invalid API key'}), 401

        return f(*args, **kwargs)
    return decorated_function


def _tournament_payload(tournament) -> dict:
    payload = tournament.to_dict()
    payload['display'] = get_bracket_display(tournament)
    return payload


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    return jsonify({'tournaments': get_store().list_tournaments()})


@app.route('/api/tournaments', methods=['POST'])
@require_admin_key
def api_create_tournament():
    """Create a tournament and its bracket.

    Requires: name and participants (list of names or {id, name}) in JSON body.
    Participants are seeded by their position in the list.
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'success': False, 'error': 'No data provided'}), 400

    name = data.get('name')
    if not isinstance(name, str):
        return jsonify({'success': False, 'error': 'Name must be a string'}), 400

    entries = data.get('participants')
    if not isinstance(entries, list):
        return jsonify({'success': False, 'error': 'Participants must be a list'}), 400

    try:
        participants = participants_from_entries(entries)
        tournament = get_store().create(
            name=name,
            participants=participants,
            date=data.get('date'),
            participant_type=data.get('participant_type', 'team'),
        )
    except BracketError as e:
        return _error_response(e)
    except Timeout:
        app.logger.warning(f'Timed out waiting for lock creating {name}')
        return jsonify({'success': False, 'error': 'Tournament is busy, try again'}), 503

    app.logger.info(f'Created tournament {tournament.slug}')
    return jsonify({'success': True, 'tournament': _tournament_payload(tournament)}), 201


@app.route('/api/tournaments/<slug>', methods=['GET'])
def api_tournament_detail(slug):
    try:
        tournament = get_store().load(slug)
    except BracketError as e:
        return _error_response(e)
    return jsonify({'tournament': _tournament_payload(tournament)})


@app.route('/api/tournaments/<slug>/result', methods=['POST'])
@require_admin_key
def api_record_result(slug):
    """Record the winner of a bracket match.

    Requires: match_index and winner_id in JSON body.
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'success': False, 'error': 'No data provided'}), 400

    match_index = data.get('match_index')
    winner_id = data.get('winner_id')
    if match_index is None or not winner_id:
        return jsonify({'success': False, 'error': 'Missing required fields'}), 400

    try:
        tournament = get_store().record_result(slug, match_index, winner_id)
    except BracketError as e:
        return _error_response(e)
    except Timeout:
        app.logger.warning(f'Timed out waiting for lock on {slug}')
        return jsonify({'success': False, 'error': 'Tournament is busy, try again'}), 503

    app.logger.info(f'Recorded result for match {match_index} in {slug}')
    return jsonify({'success': True, 'tournament': _tournament_payload(tournament)})


@app.route('/api/tournaments/<slug>/champion', methods=['GET'])
def api_champion(slug):
    try:
        tournament = get_store().load(slug)
    except BracketError as e:
        return _error_response(e)
    champion = get_champion(tournament)
    return jsonify({'champion': champion.to_dict() if champion else None})


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
