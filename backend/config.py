import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'chessroom-secret-key'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///chessroom.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Bearer credentials expire after this many seconds (default 7 days)
    TOKEN_MAX_AGE_SEC = int(os.environ.get('TOKEN_MAX_AGE_SEC', str(7 * 24 * 3600)))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    STARTING_RATING = int(os.environ.get('STARTING_RATING', '1200'))
    MIN_PASSWORD_LENGTH = int(os.environ.get('MIN_PASSWORD_LENGTH', '6'))
    # List endpoint limits
    LEADERBOARD_DEFAULT_LIMIT = int(os.environ.get('LEADERBOARD_DEFAULT_LIMIT', '10'))
    AVAILABLE_GAMES_LIMIT = int(os.environ.get('AVAILABLE_GAMES_LIMIT', '20'))
    USER_GAMES_LIMIT = int(os.environ.get('USER_GAMES_LIMIT', '10'))
