"""
Типизированные ошибки движка дуэлей.

Все ошибки локальные и синхронные: это ошибка клиента или проигранная гонка,
а не временный сбой, поэтому повторять запрос бессмысленно. Наследуются от
HTTPException, чтобы роутеры отдавали их как есть.
"""
from fastapi import HTTPException
from starlette import status


class DuelError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Duel operation rejected"

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers={"X-Error-Code": self.code},
        )

    @property
    def code(self) -> str:
        return type(self).__name__


class UnknownUser(DuelError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"


class NotFound(DuelError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Forbidden(DuelError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Action not allowed for this user"


class DuplicateChallenge(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Duel request already sent"


class AlreadyResolved(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Duel request already answered"


class NotActive(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Duel is not active"


class AlreadyCompleted(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Duel already completed"


class DuplicateMove(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Move already submitted"


class InvalidMove(DuelError):
    status_code = 422
    default_detail = "Invalid move data"


class AlreadyDestroyed(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Post already destroyed"


class AlreadyUsed(DuelError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Hijack post privilege already used"


class InvalidDecision(DuelError):
    status_code = 422
    default_detail = "Decision must be accepted or declined"
