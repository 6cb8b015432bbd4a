from flask import Blueprint, current_app, jsonify, request
from datetime import datetime, timezone

main = Blueprint('main', __name__)


def _coordinator():
    return current_app.extensions['arena']


@main.route('/health')
def health():
    coordinator = _coordinator()
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'activeGames': coordinator.active_games,
        'activeUsers': coordinator.active_users,
    })


@main.route('/games')
def list_games():
    return jsonify(_coordinator().lobby.snapshot())


@main.route('/games/<string:match_id>')
def get_game(match_id):
    match = _coordinator().get_match(match_id)
    if not match:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(match.to_dict())


@main.route('/stats/<string:username>')
def get_stats(username):
    username = username.strip()
    if not username:
        return jsonify({'error': 'username is required'}), 400
    return jsonify(_coordinator().ledger.get(username).to_dict())


@main.route('/stats/<string:username>/history')
def get_history(username):
    try:
        limit = int(request.args.get('limit', 20))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400
    limit = max(1, min(limit, 100))
    records = _coordinator().ledger.history(username.strip(), limit)
    return jsonify([r.to_dict() for r in records])


@main.route('/leaderboard')
def leaderboard():
    try:
        limit = int(request.args.get('limit', current_app.config.get('LEADERBOARD_LIMIT', 10)))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400
    limit = max(1, min(limit, 100))
    return jsonify([r.to_dict() for r in _coordinator().ledger.leaderboard(limit)])
