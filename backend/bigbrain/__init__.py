from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from bigbrain.config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()

DEMO_QUESTIONS = [
    {
        'text': 'What is 2 + 2?',
        'type': 'single',
        'duration': 30,
        'points': 10,
        'answers': [{'text': '4', 'correct': True}, {'text': '5'}, {'text': '22'}],
    },
    {
        'text': 'Which of these are prime numbers?',
        'type': 'multiple',
        'duration': 45,
        'points': 20,
        'answers': [{'text': '2', 'correct': True}, {'text': '4'}, {'text': '7', 'correct': True}, {'text': '9'}],
    },
    {
        'text': 'The Earth orbits the Sun.',
        'type': 'judgement',
        'duration': 15,
        'points': 5,
        'answers': [{'text': 'True', 'correct': True}, {'text': 'False'}],
    },
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    from bigbrain.main import main
    flask_app.register_blueprint(main)

    from bigbrain.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/admin')

    from bigbrain.api.play import play
    flask_app.register_blueprint(play, url_prefix='/play')

    from bigbrain.errors import QuizError

    @flask_app.errorhandler(QuizError)
    def handle_quiz_error(exc):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    from bigbrain.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required', 'kind': 'unauthorized'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from bigbrain.services.quiz.repository import games
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)
            db.session.commit()

            owner = User.query.filter_by(username='testuser1').first()
            game = games.add(owner.id, 'Demo quiz', DEMO_QUESTIONS)
            print(f'Database has been reset and seeded! Demo game id={game.id} owned by testuser1')

    @click.command('end-idle-sessions')
    @click.option('--older-than', type=int, default=None,
                  help='Idle threshold in seconds (defaults to SESSION_IDLE_TIMEOUT_SEC).')
    @click.option('--dry-run', is_flag=True, help='List idle sessions without ending them.')
    def end_idle_sessions_command(older_than, dry_run):
        """Ends sessions with no start/advance activity for a while."""
        from bigbrain.errors import SessionEnded
        from bigbrain.services.quiz import sessions
        threshold = older_than if older_than is not None else flask_app.config.get('SESSION_IDLE_TIMEOUT_SEC', 0)
        if not threshold or threshold <= 0:
            raise click.UsageError('No idle threshold: pass --older-than or set SESSION_IDLE_TIMEOUT_SEC')
        with flask_app.app_context():
            idle = sessions.idle_sessions(threshold)
            for s in idle:
                if dry_run:
                    click.echo(f'{s.id} game={s.game_id} state={s.state} position={s.position}')
                    continue
                try:
                    sessions.end(s.id)
                except SessionEnded:
                    flask_app.logger.info(f"[idle-skip] session={s.id} ended concurrently")
                    continue
                click.echo(f'Ended {s.id}')
            click.echo(f'{len(idle)} idle session(s) older than {threshold}s')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(end_idle_sessions_command)

    return flask_app
