import pytest

from bigbrain.errors import BadRequest, DuplicateName, NotFound, SessionEnded
from bigbrain.services.quiz import players, sessions


@pytest.fixture()
def session_id(game, fake_clock):
    return sessions.start(game.id)


def test_join_assigns_unique_ids(session_id):
    alex = players.join(session_id, 'Alex')
    sam = players.join(session_id, 'Sam')
    assert alex != sam
    assert players.get(alex).name == 'Alex'
    assert players.get(sam).session_id == session_id


def test_duplicate_name_is_refused(session_id):
    players.join(session_id, 'Alex')
    with pytest.raises(DuplicateName):
        players.join(session_id, 'Alex')
    assert [p.name for p in players.in_join_order(session_id)] == ['Alex']


def test_names_are_case_sensitive(session_id):
    players.join(session_id, 'Alex')
    players.join(session_id, 'alex')
    assert [p.name for p in players.in_join_order(session_id)] == ['Alex', 'alex']


def test_same_name_in_another_session(game, session_id):
    players.join(session_id, 'Alex')
    sessions.end(session_id)
    other = sessions.start(game.id)
    assert players.join(other, 'Alex')


def test_late_join_while_active(session_id):
    sessions.advance(session_id)
    player_id = players.join(session_id, 'Latecomer')
    assert players.get(player_id).session_id == session_id


def test_join_ended_session(session_id):
    sessions.end(session_id)
    with pytest.raises(SessionEnded):
        players.join(session_id, 'Alex')


def test_join_unknown_session(flask_app):
    with pytest.raises(NotFound):
        players.join('999999', 'Alex')


@pytest.mark.parametrize('name', ['', '   ', None, 'x' * 65])
def test_join_rejects_bad_names(session_id, name):
    with pytest.raises(BadRequest):
        players.join(session_id, name)


def test_get_unknown_player(flask_app):
    with pytest.raises(NotFound):
        players.get(12345)


def test_names_compare_exactly_as_given(session_id):
    players.join(session_id, 'Alex')
    players.join(session_id, 'Alex ')
    assert [p.name for p in players.in_join_order(session_id)] == ['Alex', 'Alex ']


def test_session_state_is_checked_before_name(session_id):
    sessions.end(session_id)
    with pytest.raises(SessionEnded):
        players.join(session_id, '')
    with pytest.raises(NotFound):
        players.join('999999', '')
