from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from bigbrain.errors import Permission
from bigbrain.services.quiz import players, results, sessions
from bigbrain.services.quiz.repository import games


admin = Blueprint('admin', __name__)


def _owned_game(game_id):
    game = games.get(game_id)
    if game.owner_id != current_user.id:
        current_app.logger.info(f"[permission] user={current_user.id} game={game_id}")
        raise Permission()
    return game


def _owned_session(session_id):
    session = sessions.get(session_id)
    _owned_game(session.game_id)
    return session


def _owner_status(session_id):
    payload = sessions.status(session_id, reveal=True)
    payload['players'] = [p.name for p in players.in_join_order(session_id)]
    return payload


@admin.route('/games', methods=['GET'])
@login_required
def list_games():
    return jsonify([g.to_dict() for g in games.for_owner(current_user.id)])


@admin.route('/game/<int:game_id>/start', methods=['POST'])
@login_required
def start_game(game_id):
    _owned_game(game_id)
    session_id = sessions.start(game_id)
    return jsonify({'session_id': session_id}), 201


@admin.route('/game/<int:game_id>/sessions', methods=['GET'])
@login_required
def session_history(game_id):
    _owned_game(game_id)
    return jsonify({'sessions': sessions.history(game_id)})


@admin.route('/session/<string:session_id>/advance', methods=['POST'])
@login_required
def advance_session(session_id):
    _owned_session(session_id)
    sessions.advance(session_id)
    return jsonify(_owner_status(session_id))


@admin.route('/session/<string:session_id>/end', methods=['POST'])
@login_required
def end_session(session_id):
    _owned_session(session_id)
    sessions.end(session_id)
    return jsonify(_owner_status(session_id))


@admin.route('/session/<string:session_id>/status', methods=['GET'])
@login_required
def session_status(session_id):
    _owned_session(session_id)
    return jsonify(_owner_status(session_id))


@admin.route('/session/<string:session_id>/results', methods=['GET'])
@login_required
def session_results(session_id):
    _owned_session(session_id)
    top = request.args.get('top', type=int)
    if top is None:
        top = current_app.config.get('RESULTS_TOP_N', 5)
    # top=0 asks for every player
    return jsonify(results.session_results(session_id, top=top or None))


@admin.route('/session/<string:session_id>/questions/<int:question_index>/stats', methods=['GET'])
@login_required
def question_stats(session_id, question_index):
    _owned_session(session_id)
    return jsonify(results.question_stats(session_id, question_index))
