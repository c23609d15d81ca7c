from bigbrain import db, bcrypt
from bigbrain.errors import InvalidSelection
from flask_login import UserMixin
import enum
import json
import string
import random

# Session states
LOBBY = 'lobby'
ACTIVE = 'active'
ENDED = 'ended'


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    games = db.relationship('Game', back_populates='owner')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class QuestionType(enum.Enum):
    """Closed set of question kinds, each with its own answer rules."""

    SINGLE = 'single'
    MULTIPLE = 'multiple'
    JUDGEMENT = 'judgement'

    def validate_answers(self, answers) -> None:
        """Raise ValueError unless ``answers`` (text, correct) pairs fit this type."""
        correct = sum(1 for _, is_correct in answers if is_correct)
        if self is QuestionType.SINGLE:
            if len(answers) < 2 or correct != 1:
                raise ValueError('Single choice questions need at least two answers and exactly one correct')
        elif self is QuestionType.MULTIPLE:
            if correct < 2 or correct == len(answers):
                raise ValueError('Multiple choice questions need at least two correct answers and one incorrect')
        elif self is QuestionType.JUDGEMENT:
            texts = [text for text, _ in answers]
            if sorted(texts) != ['False', 'True'] or correct != 1:
                raise ValueError('Judgement questions have exactly the answers "True" and "False", one correct')
        else:
            raise AssertionError(f'unhandled question type {self!r}')

    def check_selection(self, selected: frozenset, option_count: int) -> None:
        """Raise InvalidSelection unless ``selected`` is a legal pick for this type."""
        if any(not 0 <= idx < option_count for idx in selected):
            raise InvalidSelection('Selected answer index out of range')
        if self is QuestionType.SINGLE or self is QuestionType.JUDGEMENT:
            if len(selected) != 1:
                raise InvalidSelection('Select exactly one answer')
        elif self is QuestionType.MULTIPLE:
            if not selected:
                raise InvalidSelection('Select at least one answer')
            if len(selected) == option_count:
                raise InvalidSelection('Selecting every answer is not allowed')
        else:
            raise AssertionError(f'unhandled question type {self!r}')


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    # Id of the running session, if any
    active = db.Column(db.String(16), db.ForeignKey('quiz_session.id', name='fk_game_active_session', use_alter=True), nullable=True)
    owner = db.relationship('User', back_populates='games')
    questions = db.relationship('Question', back_populates='game', order_by='Question.position', cascade='all, delete-orphan')
    sessions = db.relationship('QuizSession', foreign_keys='QuizSession.game_id', back_populates='game', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'name': self.name,
            'active': self.active,
            'question_count': len(self.questions),
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    text = db.Column(db.Text, nullable=False)
    question_type = db.Column(
        db.Enum(QuestionType, name='question_type', values_callable=lambda kinds: [k.value for k in kinds]),
        nullable=False,
    )
    duration = db.Column(db.Integer, nullable=False)  # seconds
    points = db.Column(db.Integer, nullable=False)
    media = db.Column(db.String(512), nullable=True)
    game = db.relationship('Game', back_populates='questions')
    answers = db.relationship('AnswerOption', back_populates='question', order_by='AnswerOption.position', cascade='all, delete-orphan')

    @property
    def correct_indices(self) -> frozenset:
        return frozenset(i for i, a in enumerate(self.answers) if a.is_correct)

    def to_dict(self, reveal=False):
        answers = []
        for i, a in enumerate(self.answers):
            item = {'id': i, 'text': a.text}
            if reveal:
                item['correct'] = bool(a.is_correct)
            answers.append(item)
        return {
            'id': self.id,
            'position': self.position,
            'text': self.text,
            'type': self.question_type.value,
            'duration': self.duration,
            'points': self.points,
            'media': self.media,
            'answers': answers,
        }


class AnswerOption(db.Model):
    __tablename__ = 'answer_option'
    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    text = db.Column(db.String(256), nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)
    question = db.relationship('Question', back_populates='answers')


def generate_session_id(length=6):
    """Generate a unique numeric session code."""
    while True:
        code = ''.join(random.choices(string.digits, k=length))
        if code[0] != '0' and db.session.get(QuizSession, code) is None:
            return code


class QuizSession(db.Model):
    __tablename__ = 'quiz_session'
    id = db.Column(db.String(16), primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    state = db.Column(db.String(16), nullable=False, default=LOBBY)  # lobby, active, ended
    position = db.Column(db.Integer, nullable=False, default=-1)
    question_started_at = db.Column(db.Float, nullable=True)
    question_starts = db.Column(db.Text, nullable=True)  # JSON-encoded list of start timestamps by position
    created_at = db.Column(db.Float, nullable=False)
    last_activity_at = db.Column(db.Float, nullable=False)
    ended_at = db.Column(db.Float, nullable=True)
    game = db.relationship('Game', foreign_keys=[game_id], back_populates='sessions')
    players = db.relationship('Player', back_populates='session', order_by='Player.id')

    @property
    def is_ended(self):
        return self.state == ENDED

    def start_history(self) -> list:
        return json.loads(self.question_starts) if self.question_starts else []

    def record_question_start(self, started_at: float) -> None:
        history = self.start_history()
        history.append(started_at)
        self.question_starts = json.dumps(history)
        self.question_started_at = started_at

    def started_at_for(self, position: int):
        history = self.start_history()
        return history[position] if 0 <= position < len(history) else None

    def current_question(self):
        questions = self.game.questions
        if 0 <= self.position < len(questions):
            return questions[self.position]
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'state': self.state,
            'position': self.position,
            'question_count': len(self.game.questions),
            'player_count': len(self.players),
            'created_at': self.created_at,
            'ended_at': self.ended_at,
        }


class Player(db.Model):
    __tablename__ = 'player'
    __table_args__ = (db.UniqueConstraint('session_id', 'name', name='uq_player_session_name'),)
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(16), db.ForeignKey('quiz_session.id'), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    joined_at = db.Column(db.Float, nullable=False)
    session = db.relationship('QuizSession', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'session_id': self.session_id,
            'joined_at': self.joined_at,
        }


class SubmittedAnswer(db.Model):
    __tablename__ = 'submitted_answer'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'player_id', 'question_id', name='uq_submitted_answer_key'),
    )
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(16), db.ForeignKey('quiz_session.id'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)
    selected_indices = db.Column(db.Text, nullable=False)  # JSON-encoded sorted list
    submitted_at = db.Column(db.Float, nullable=False)

    @property
    def selected(self) -> frozenset:
        return frozenset(json.loads(self.selected_indices))

    @selected.setter
    def selected(self, indices) -> None:
        self.selected_indices = json.dumps(sorted(indices))

    def to_dict(self):
        return {
            'session_id': self.session_id,
            'player_id': self.player_id,
            'question_id': self.question_id,
            'answer_ids': sorted(self.selected),
            'submitted_at': self.submitted_at,
        }
