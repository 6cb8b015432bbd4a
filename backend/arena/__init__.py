from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Models must be imported before create_all / migrations see the tables
    from arena import models  # noqa: F401
    if flask_app.config.get('AUTO_CREATE_TABLES'):
        with flask_app.app_context():
            db.create_all()

    # One coordinator per app owns every live identity and match
    from arena.services import SessionCoordinator, SocketIOTransport
    from arena.services.stats import StatsLedger
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    flask_app.extensions['arena'] = SessionCoordinator(
        SocketIOTransport(socketio, namespace),
        StatsLedger(),
        min_name_length=flask_app.config.get('MIN_NAME_LENGTH', 2),
        max_name_length=flask_app.config.get('MAX_NAME_LENGTH', 32),
        chat_max_length=flask_app.config.get('CHAT_MAX_LENGTH', 500),
        leaderboard_limit=flask_app.config.get('LEADERBOARD_LIMIT', 10),
    )

    from arena.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from arena.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the stats tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('leaderboard')
    @click.option('--limit', default=10, show_default=True, help='Number of players to show.')
    def leaderboard_command(limit):
        """Prints the top players by win rate."""
        with flask_app.app_context():
            rows = flask_app.extensions['arena'].ledger.leaderboard(limit)
            if not rows:
                print('No finished games yet.')
            for rank, row in enumerate(rows, start=1):
                print(f"{rank:>3}. {row.username:<32} {row.wins}W {row.losses}L {row.draws}D  {row.win_rate:.2f}%")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(leaderboard_command)

    return flask_app
