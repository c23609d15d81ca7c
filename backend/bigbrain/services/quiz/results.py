"""Read-only results derived from the answer ledger.

Everything is recomputed from the stored answers and the question
definitions on each call; there are no counters to drift or double count.
"""

from bigbrain.errors import NotFound
from . import clock, ledger, players, scoring, sessions


def _entries_by_key(session_id: str) -> dict:
    return {(e.player_id, e.question_id): e for e in ledger.for_session(session_id)}


def leaderboard(session_id: str, limit: int | None = None) -> list:
    """Players by total score, highest first; ties go to the earlier joiner."""
    session = sessions.get(session_id)
    questions = session.game.questions
    starts = session.start_history()
    entries = _entries_by_key(session_id)
    rows = []
    for player in players.in_join_order(session_id):
        total = 0
        for i, question in enumerate(questions):
            started = starts[i] if i < len(starts) else None
            total += scoring.score(question, entries.get((player.id, question.id)), started)
        rows.append({'player_id': player.id, 'name': player.name, 'score': total})
    # sorted() is stable, so join order survives among equal totals
    ranked = sorted(rows, key=lambda row: -row['score'])
    return ranked[:limit] if limit is not None else ranked


def question_stats(session_id: str, question_index: int) -> dict:
    session = sessions.get(session_id)
    questions = session.game.questions
    if not 0 <= question_index < len(questions):
        raise NotFound(f'Question {question_index} not found in session {session_id}')
    return _stats_for(session, question_index, questions[question_index])


def all_question_stats(session_id: str) -> list:
    session = sessions.get(session_id)
    return [_stats_for(session, i, q) for i, q in enumerate(session.game.questions)]


def _stats_for(session, index, question) -> dict:
    started = session.started_at_for(index)
    entries = ledger.for_question(session.id, question.id)
    total = len(entries)
    correct = sum(1 for e in entries if scoring.is_correct(question, e))
    if total and started is not None:
        average = sum(e.submitted_at - started for e in entries) / total
    else:
        average = 0.0
    return {
        'question_index': index,
        'question_id': question.id,
        'submissions': total,
        'correct': correct,
        'correct_rate': correct / total if total else 0.0,
        'average_response_seconds': average,
    }


def player_results(player_id: int, now: float | None = None) -> list:
    """Per-question breakdown for one player over the questions shown so far.

    Correctness and score stay hidden for a question that is still open.
    """
    at = clock.now() if now is None else now
    player = players.get(player_id)
    session = player.session
    questions = session.game.questions
    starts = session.start_history()
    mine = {e.question_id: e for e in ledger.for_player(player_id)}
    breakdown = []
    for i, question in enumerate(questions[:len(starts)]):
        entry = mine.get(question.id)
        still_open = (
            not session.is_ended
            and i == session.position
            and clock.is_open(starts[i], question.duration, at)
        )
        row = {
            'question_index': i,
            'question_id': question.id,
            'answer_ids': sorted(entry.selected) if entry else [],
            'answered_at': entry.submitted_at if entry else None,
            'time_taken': entry.submitted_at - starts[i] if entry else None,
            'points': question.points,
        }
        if still_open:
            row['correct'] = None
            row['score'] = None
        else:
            row['correct'] = scoring.is_correct(question, entry)
            row['score'] = scoring.score(question, entry, starts[i])
        breakdown.append(row)
    return breakdown


def session_results(session_id: str, top: int | None = None) -> dict:
    session = sessions.get(session_id)
    return {
        'session_id': session.id,
        'game_id': session.game_id,
        'state': session.state,
        'leaderboard': leaderboard(session_id, limit=top),
        'questions': all_question_stats(session_id),
    }
