from flask import Blueprint, jsonify, request
from promptparty import get_controller


games = Blueprint('games', __name__)


@games.route('/create', methods=['POST'])
def create_game():
    session = get_controller().create_session()
    return jsonify({
        'message': 'New game created!',
        'game_code': session.id
    }), 201


@games.route('/<string:game_code>/join', methods=['POST'])
def join_game(game_code):
    data = request.get_json(silent=True) or {}
    player_id = data.get('player_id')
    leader = get_controller().join_session(game_code, player_id)
    return jsonify({'player_id': player_id, 'leader': leader}), 201


@games.route('/<string:game_code>/start', methods=['POST'])
def start_game(game_code):
    rnd = get_controller().start_game(game_code)
    return jsonify({'id': rnd.id, 'prompt': rnd.prompt})


@games.route('/<string:game_code>/advance', methods=['POST'])
def advance_game(game_code):
    rnd = get_controller().advance_game(game_code)
    if rnd is None:
        return jsonify({'end': True, 'id': game_code.lower()})
    return jsonify({'id': rnd.id, 'prompt': rnd.prompt})


@games.route('/<string:game_code>/response', methods=['POST'])
def submit_response(game_code):
    data = request.get_json(silent=True) or {}
    count = get_controller().submit_response(
        game_code,
        data.get('prompt_id'),
        data.get('player_id'),
        data.get('response'),
    )
    return jsonify({'message': 'Response submitted', 'responses': count})


@games.route('/<string:game_code>/vote', methods=['POST'])
def submit_vote(game_code):
    data = request.get_json(silent=True) or {}
    total = get_controller().submit_vote(game_code, data.get('prompt_id'), data.get('vote'))
    return jsonify({'message': 'Vote submitted', 'votes': total})


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    return jsonify(get_controller().state(game_code))


@games.route('/<string:game_code>/scores', methods=['GET'])
def get_scores(game_code):
    return jsonify({'game_code': game_code.lower(), 'scores': get_controller().scores(game_code)})
