from flask import current_app
from sqlalchemy.exc import IntegrityError

from bigbrain import db
from bigbrain.errors import BadRequest, DuplicateName, NotFound, SessionEnded
from bigbrain.models import Player, QuizSession
from . import clock
from .locks import join_locks, session_locks

MAX_NAME_LENGTH = 64


def _check_name(name) -> None:
    if not isinstance(name, str) or not name.strip():
        raise BadRequest('Player name is required')
    if len(name) > MAX_NAME_LENGTH:
        raise BadRequest(f'Player name is limited to {MAX_NAME_LENGTH} characters')


def join(session_id: str, name: str, now: float | None = None) -> int:
    """Register a player in a lobby or running session and return the new id.

    Names are stored as given and are unique per session by exact,
    case-sensitive match, so "Alex" and "Alex " are different players. Blank
    names are refused. Late joiners are allowed; they score zero on questions
    that already closed.
    """
    at = clock.now() if now is None else now

    with session_locks.shared(session_id), join_locks.hold(session_id):
        session = db.session.get(QuizSession, session_id, populate_existing=True)
        if session is None:
            raise NotFound(f'Session {session_id} not found')
        if session.is_ended:
            raise SessionEnded('Cannot join a session that has ended')
        _check_name(name)
        if Player.query.filter_by(session_id=session_id, name=name).first() is not None:
            raise DuplicateName(f'The name {name!r} is already taken in this session')
        player = Player(session_id=session_id, name=name, joined_at=at)
        db.session.add(player)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateName(f'The name {name!r} is already taken in this session') from None

    current_app.logger.info(f"[join] session={session_id} player={player.id} name={name!r}")
    return player.id


def get(player_id) -> Player:
    player = db.session.get(Player, player_id)
    if player is None:
        raise NotFound(f'Player {player_id} not found')
    return player


def in_join_order(session_id: str) -> list:
    return Player.query.filter_by(session_id=session_id).order_by(Player.id).all()
