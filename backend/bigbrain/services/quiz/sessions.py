"""Session state machine: lobby -> active -> ended.

Only this module changes a session's state or position. Start/advance/end
for one session run under that session's lock; touching a game's ``active``
pointer additionally takes the game's lock (session lock first).
"""

from flask import current_app

from bigbrain import db
from bigbrain.errors import AlreadyActive, NotFound, SessionEnded
from bigbrain.models import ACTIVE, ENDED, LOBBY, QuizSession, generate_session_id
from . import clock
from .locks import game_locks, session_locks
from .repository import games


def get(session_id: str, lock: bool = False) -> QuizSession:
    session = db.session.get(QuizSession, session_id, populate_existing=lock, with_for_update=lock or None)
    if session is None:
        raise NotFound(f'Session {session_id} not found')
    return session


def start(game_id: int, now: float | None = None) -> str:
    """Open a new lobby for ``game_id`` and point the game at it."""
    at = clock.now() if now is None else now
    with game_locks.hold(game_id):
        game = games.get(game_id, lock=True)
        if game.active is not None:
            running = db.session.get(QuizSession, game.active)
            if running is not None and not running.is_ended:
                raise AlreadyActive(f'Game {game_id} already has running session {game.active}')
        session = QuizSession(
            id=generate_session_id(current_app.config.get('SESSION_CODE_LENGTH', 6)),
            game_id=game.id,
            state=LOBBY,
            position=-1,
            created_at=at,
            last_activity_at=at,
        )
        db.session.add(session)
        db.session.flush()
        game.active = session.id
        games.save(game)
        db.session.commit()
    current_app.logger.info(f"[start] game={game_id} session={session.id}")
    return session.id


def advance(session_id: str, now: float | None = None) -> QuizSession:
    """Move to the next question, or end the session after the last one."""
    at = clock.now() if now is None else now
    with session_locks.hold(session_id):
        session = get(session_id, lock=True)
        if session.is_ended:
            raise SessionEnded(f'Session {session_id} has ended')
        prev = session.position
        session.position = prev + 1
        session.last_activity_at = at
        if session.position >= len(session.game.questions):
            _finish(session, at)
            current_app.logger.info(f"[finish] session={session_id} finished after position={prev}")
        else:
            session.state = ACTIVE
            session.record_question_start(at)
            db.session.commit()
            current_app.logger.info(f"[advance] session={session_id} position {prev} -> {session.position}")
    return session


def end(session_id: str, now: float | None = None) -> QuizSession:
    """Force a session to end. Ending twice is an error, not a no-op."""
    at = clock.now() if now is None else now
    with session_locks.hold(session_id):
        session = get(session_id, lock=True)
        if session.is_ended:
            raise SessionEnded(f'Session {session_id} has already ended')
        session.last_activity_at = at
        _finish(session, at)
    current_app.logger.info(f"[end] session={session_id} ended at position={session.position}")
    return session


def _finish(session: QuizSession, at: float) -> None:
    session.state = ENDED
    session.ended_at = at
    with game_locks.hold(session.game_id):
        game = games.get(session.game_id, lock=True)
        if game.active == session.id:
            game.active = None
            games.save(game)
        db.session.add(session)
        db.session.commit()


def status(session_id: str, now: float | None = None, reveal: bool = False) -> dict:
    """Snapshot for pollers. Correct answers are revealed only once the
    question window has closed, unless ``reveal`` is set for the owner."""
    at = clock.now() if now is None else now
    session = get(session_id)
    question = session.current_question()
    if session.is_ended or question is None or session.question_started_at is None:
        remaining = 0.0
    else:
        remaining = clock.remaining(session.question_started_at, question.duration, at)
    payload = {
        'session_id': session.id,
        'game_id': session.game_id,
        'state': session.state,
        'position': session.position,
        'question_count': len(session.game.questions),
        'remaining_seconds': remaining,
        'question_started_at': session.question_started_at,
        'poll_interval': current_app.config.get('POLL_INTERVAL_SEC', 1),
    }
    if question is not None:
        payload['current_question'] = question.to_dict(reveal=reveal or remaining <= 0)
    return payload


def history(game_id: int) -> list:
    game = games.get(game_id)
    return [s.to_dict() for s in game.sessions.order_by(QuizSession.created_at.desc(), QuizSession.id)]


def idle_sessions(older_than: float, now: float | None = None) -> list:
    """Sessions not yet ended whose last start/advance is older than
    ``older_than`` seconds. Listing only; nothing is ended here."""
    at = clock.now() if now is None else now
    return (
        QuizSession.query
        .filter(QuizSession.state != ENDED)
        .filter(QuizSession.last_activity_at < at - older_than)
        .order_by(QuizSession.last_activity_at)
        .all()
    )
