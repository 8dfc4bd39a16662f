# gpt_habits/core/errors.py
from __future__ import annotations


class LiveQuizError(Exception):
    """Base de los errores de dominio; cada subclase fija su status HTTP y su código."""

    status_code = 400
    code = "error"
    message = "Unexpected error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class NoActiveSession(LiveQuizError):
    status_code = 409
    code = "no_active_session"
    message = "No active session"


class TimeExpired(LiveQuizError):
    status_code = 409
    code = "time_expired"
    message = "Time is up! Answers are no longer accepted."


class InappropriateContent(LiveQuizError):
    status_code = 422
    code = "inappropriate_content"
    message = "Please use appropriate language."


class NotFound(LiveQuizError):
    status_code = 404
    code = "not_found"
    message = "Answer not found"
