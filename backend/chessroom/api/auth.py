from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError
from chessroom import db
from chessroom.models import User

auth = Blueprint('auth', __name__)


def _issue_token(user):
    return current_app.extensions['identity'].issue(user.id)


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    return None


@auth.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    if not all([username, email, password]):
        return jsonify({'error': 'All fields are required'}), 400

    min_length = int(current_app.config.get('MIN_PASSWORD_LENGTH', 6))
    if len(password) < min_length:
        return jsonify({'error': f'Password must be at least {min_length} characters'}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({'error': 'Email already exists'}), 400

    user = User(username=username, email=email,
                rating=int(current_app.config.get('STARTING_RATING', 1200)))
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same name or email
        db.session.rollback()
        return jsonify({'error': 'Username or email already exists'}), 400

    current_app.logger.info(f"[register] user={user.id} username={user.username}")
    return jsonify({
        'message': 'User created successfully',
        'token': _issue_token(user),
        'user': user.to_dict(include_email=True),
    }), 201


@auth.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not username or not password:
        return jsonify({'error': 'Username and password are required'}), 400

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        return jsonify({'error': 'Invalid credentials'}), 401

    return jsonify({
        'message': 'Login successful',
        'token': _issue_token(user),
        'user': user.to_dict(include_email=True),
    })


@auth.route('/verify', methods=['GET'])
def verify():
    token = _bearer_token()
    if not token:
        return jsonify({'error': 'No token provided'}), 401
    user_id = current_app.extensions['identity'].verify(token)
    if user_id is None:
        return jsonify({'error': 'Invalid token'}), 401
    return jsonify({'valid': True, 'userId': user_id})
