"""Answer ledger: one stored answer per (session, player, question).

The ledger is the only record of what players chose. Correctness and score
are never written here; results recompute them from the question on read.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from bigbrain import db
from bigbrain.errors import (
    InvalidSelection,
    LateSubmission,
    NotActive,
    NotFound,
    QuizError,
    SessionEnded,
    StaleQuestion,
)
from bigbrain.models import ACTIVE, ENDED, Player, QuizSession, SubmittedAnswer
from . import clock
from .locks import answer_locks, session_locks


def _normalize_selection(selected_indices) -> frozenset:
    if isinstance(selected_indices, (str, bytes)) or not hasattr(selected_indices, '__iter__'):
        raise InvalidSelection('Answer ids must be a list of integers')
    picked = set()
    for idx in selected_indices:
        if isinstance(idx, bool) or not isinstance(idx, int):
            raise InvalidSelection('Answer ids must be a list of integers')
        picked.add(idx)
    return frozenset(picked)


def _validate(session_id, player_id, question_id, selected_indices, at) -> frozenset:
    session = db.session.get(QuizSession, session_id, populate_existing=True)
    if session is None:
        raise NotFound(f'Session {session_id} not found')
    if session.state == ENDED:
        raise SessionEnded('Session has ended')
    if session.state != ACTIVE:
        raise NotActive('Session has not started a question yet')
    player = db.session.get(Player, player_id)
    if player is None or player.session_id != session_id:
        raise NotFound(f'Player {player_id} not found in session {session_id}')
    question = session.current_question()
    if question is None or question.id != question_id:
        raise StaleQuestion(f'Question {question_id} is not the current question')
    if not clock.is_open(session.question_started_at, question.duration, at):
        raise LateSubmission()
    selected = _normalize_selection(selected_indices)
    question.question_type.check_selection(selected, len(question.answers))
    return selected


def submit(session_id: str, player_id: int, question_id: int, selected_indices, now: float | None = None) -> SubmittedAnswer:
    """Validate and store a player's answer, replacing any earlier one in full.

    Checks run in order: session active, player in session, question current,
    time remaining, selection well formed and legal for the question type.
    Nothing is written unless all pass.
    """
    at = clock.now() if now is None else now
    key = (session_id, player_id, question_id)
    try:
        # advance/end hold the session lock exclusively, so the question cannot
        # move between validation and the write; other keys proceed in parallel
        with session_locks.shared(session_id), answer_locks.hold(key):
            selected = _validate(session_id, player_id, question_id, selected_indices, at)
            entry = _upsert(key, selected, at)
    except QuizError as exc:
        current_app.logger.debug(
            f"[answer-rejected] session={session_id} player={player_id} question={question_id} kind={exc.kind}"
        )
        raise

    current_app.logger.info(
        f"[answer] session={session_id} player={player_id} question={question_id} selected={sorted(selected)}"
    )
    return entry


def _upsert(key, selected, at) -> SubmittedAnswer:
    session_id, player_id, question_id = key
    entry = entry_for(session_id, player_id, question_id)
    if entry is None:
        entry = SubmittedAnswer(session_id=session_id, player_id=player_id, question_id=question_id)
        db.session.add(entry)
    entry.selected = selected
    entry.submitted_at = at
    try:
        db.session.commit()
    except IntegrityError:
        # Another process inserted the key first; overwrite its row instead.
        db.session.rollback()
        entry = entry_for(session_id, player_id, question_id)
        entry.selected = selected
        entry.submitted_at = at
        db.session.commit()
    return entry


def entry_for(session_id: str, player_id: int, question_id: int) -> SubmittedAnswer | None:
    return (
        SubmittedAnswer.query
        .filter_by(session_id=session_id, player_id=player_id, question_id=question_id)
        .populate_existing()
        .first()
    )


def for_question(session_id: str, question_id: int) -> list:
    return SubmittedAnswer.query.filter_by(session_id=session_id, question_id=question_id).all()


def for_session(session_id: str) -> list:
    return SubmittedAnswer.query.filter_by(session_id=session_id).all()


def for_player(player_id: int) -> list:
    return SubmittedAnswer.query.filter_by(player_id=player_id).all()
