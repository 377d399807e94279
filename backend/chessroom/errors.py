"""Error taxonomy for live session operations.

Every error carries a stable ``code`` that clients can switch on and a
human readable ``message``. They are reported to the originating
connection only and never close it.
"""


class SessionError(Exception):
    code = 'error'
    message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class NotAuthenticated(SessionError):
    code = 'not_authenticated'
    message = 'Not authenticated'


class NotFound(SessionError):
    code = 'not_found'
    message = 'Game not found'


class NotAuthorized(SessionError):
    code = 'not_authorized'
    message = 'You are not a player in this game'


class OutOfTurn(SessionError):
    code = 'out_of_turn'
    message = 'Not your turn'


class Conflict(SessionError):
    code = 'conflict'
    message = 'Game changed while your request was in flight, please retry'


class PersistenceFailure(SessionError):
    code = 'persistence_failure'
    message = 'Failed to update game'


class InvalidRequest(SessionError):
    code = 'invalid_request'
    message = 'Invalid request'
