"""Game store interface.

Authoring lives outside the engine; the engine only loads a game by id for
the duration of one operation and saves the ``active`` session pointer back.
``add`` exists for seeding and tests.
"""

from bigbrain import db
from bigbrain.errors import NotFound
from bigbrain.models import Game, Question, AnswerOption, QuestionType


class GameRepository:

    def get(self, game_id, lock=False) -> Game:
        game = db.session.get(Game, game_id, populate_existing=lock, with_for_update=lock or None)
        if game is None:
            raise NotFound(f'Game {game_id} not found')
        return game

    def save(self, game: Game) -> None:
        db.session.add(game)

    def for_owner(self, owner_id: int) -> list:
        return Game.query.filter_by(owner_id=owner_id).order_by(Game.id).all()

    def add(self, owner_id: int, name: str, questions: list) -> Game:
        """Create a game from plain dicts, validating every question."""
        game = Game(owner_id=owner_id, name=name)
        for position, spec in enumerate(questions):
            game.questions.append(build_question(position, spec))
        db.session.add(game)
        db.session.commit()
        return game


def build_question(position: int, spec: dict) -> Question:
    try:
        kind = QuestionType(spec.get('type', 'single'))
    except ValueError:
        raise ValueError(f"Unknown question type {spec.get('type')!r}") from None
    duration = int(spec.get('duration', 0))
    points = int(spec.get('points', 0))
    if duration <= 0 or points <= 0:
        raise ValueError('Question duration and points must be positive')
    pairs = [(a['text'], bool(a.get('correct'))) for a in spec.get('answers', [])]
    kind.validate_answers(pairs)
    question = Question(
        position=position,
        text=spec['text'],
        question_type=kind,
        duration=duration,
        points=points,
        media=spec.get('media'),
    )
    for i, (text, correct) in enumerate(pairs):
        question.answers.append(AnswerOption(position=i, text=text, is_correct=correct))
    return question


games = GameRepository()
