"""Error kinds raised by the quiz engine.

Every error is reported synchronously to the caller. The HTTP layer renders
them as ``{"error": <message>, "kind": <kind>}`` with ``status_code``.
"""


class QuizError(Exception):
    kind = 'error'
    status_code = 400
    default_message = 'Quiz operation failed'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {'error': self.message, 'kind': self.kind}


class BadRequest(QuizError):
    kind = 'bad_request'
    status_code = 400
    default_message = 'Malformed request'


class NotFound(QuizError):
    kind = 'not_found'
    status_code = 404
    default_message = 'Not found'


class AlreadyActive(QuizError):
    kind = 'already_active'
    status_code = 409
    default_message = 'Game already has a running session'


class SessionEnded(QuizError):
    kind = 'session_ended'
    status_code = 409
    default_message = 'Session has ended'


class NotActive(QuizError):
    kind = 'not_active'
    status_code = 409
    default_message = 'Session is not accepting answers'


class StaleQuestion(QuizError):
    kind = 'stale_question'
    status_code = 409
    default_message = 'Answer is not for the current question'


class LateSubmission(QuizError):
    kind = 'late_submission'
    status_code = 409
    default_message = 'Time limit for this question has passed'


class InvalidSelection(QuizError):
    kind = 'invalid_selection'
    status_code = 400
    default_message = 'Invalid answer selection'


class DuplicateName(QuizError):
    kind = 'duplicate_name'
    status_code = 409
    default_message = 'Name already taken in this session'


class Permission(QuizError):
    kind = 'permission'
    status_code = 403
    default_message = 'Only the game owner may do that'
