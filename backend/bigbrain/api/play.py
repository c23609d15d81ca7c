from flask import Blueprint, jsonify, request

from bigbrain.errors import BadRequest, NotActive
from bigbrain.services.quiz import clock, ledger, players, results, sessions


play = Blueprint('play', __name__)


@play.route('/join/<string:session_id>', methods=['POST'])
def join_session(session_id):
    data = request.get_json(silent=True) or {}
    player_id = players.join(session_id, data.get('name'))
    return jsonify({'player_id': player_id}), 201


@play.route('/<int:player_id>/status', methods=['GET'])
def player_status(player_id):
    player = players.get(player_id)
    payload = sessions.status(player.session_id)
    payload['player'] = player.to_dict()
    question = payload.get('current_question')
    entry = ledger.entry_for(player.session_id, player.id, question['id']) if question else None
    payload['answered'] = entry is not None
    payload['answer_ids'] = sorted(entry.selected) if entry else []
    return jsonify(payload)


@play.route('/<int:player_id>/answer', methods=['PUT'])
def submit_answer(player_id):
    data = request.get_json(silent=True) or {}
    question_id = data.get('question_id')
    if isinstance(question_id, bool) or not isinstance(question_id, int):
        raise BadRequest('question_id must be an integer')
    if 'answer_ids' not in data:
        raise BadRequest('answer_ids is required')
    player = players.get(player_id)
    entry = ledger.submit(player.session_id, player.id, question_id, data['answer_ids'])
    return jsonify(entry.to_dict())


@play.route('/<int:player_id>/answer', methods=['GET'])
def current_answer(player_id):
    player = players.get(player_id)
    session = player.session
    question = session.current_question()
    if question is None:
        raise NotActive('There is no current question')
    entry = ledger.entry_for(session.id, player.id, question.id)
    closed = session.is_ended or not clock.is_open(session.question_started_at, question.duration, clock.now())
    return jsonify({
        'question_id': question.id,
        'answer_ids': sorted(entry.selected) if entry else [],
        'correct_answer_ids': sorted(question.correct_indices) if closed else None,
    })


@play.route('/<int:player_id>/results', methods=['GET'])
def player_results(player_id):
    player = players.get(player_id)
    return jsonify({
        'player': player.to_dict(),
        'results': results.player_results(player_id),
    })
