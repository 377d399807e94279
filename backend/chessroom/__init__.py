from flask import Flask, g, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One live session coordinator per app; handlers look it up through app.extensions
    from chessroom.identity import IdentityVerifier
    from chessroom.realtime import SessionCoordinator, SessionRegistry, SocketIORelay
    from chessroom.store import GameStore
    verifier = IdentityVerifier(
        flask_app.config['SECRET_KEY'],
        max_age=flask_app.config.get('TOKEN_MAX_AGE_SEC'),
    )
    flask_app.extensions['identity'] = verifier
    flask_app.extensions['coordinator'] = SessionCoordinator(
        registry=SessionRegistry(),
        store=GameStore(),
        relay=SocketIORelay(socketio, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')),
        verifier=verifier,
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from chessroom.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from chessroom.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from chessroom.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    from chessroom.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Register Socket.IO event handlers
    from chessroom.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    # Flask-Login resolves the user from the bearer credential on every request
    from chessroom.models import User

    @login_manager.request_loader
    def load_user_from_request(request):
        header = request.headers.get('Authorization', '')
        if not header.startswith('Bearer '):
            return None
        user_id = verifier.verify(header[len('Bearer '):].strip())
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    @flask_app.before_request
    def reset_loaded_user():
        # Identity comes from this request's bearer credential only
        g.pop('_login_user', None)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Access token required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u, email=f'{u}@example.com')
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
