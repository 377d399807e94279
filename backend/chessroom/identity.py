from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from typing import Optional


class IdentityVerifier:
    """Issues and checks signed bearer credentials.

    A credential is a timestamped, signed ``{'user_id': <int>}`` payload.
    ``verify`` never raises: anything that does not check out maps to None.
    """

    salt = 'chessroom-auth'

    def __init__(self, secret_key: str, max_age: Optional[int] = None):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=self.salt)
        self.max_age = max_age

    def issue(self, participant_id: int) -> str:
        return self._serializer.dumps({'user_id': int(participant_id)})

    def verify(self, token) -> Optional[int]:
        if not token or not isinstance(token, str):
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            return None
        except BadSignature:
            return None
        user_id = data.get('user_id') if isinstance(data, dict) else None
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            return None
        return user_id
