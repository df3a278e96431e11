from typing import Literal

from pydantic import BaseModel

from .user import UserRead


class TokenResponse(BaseModel):
    """
    Ответ при успешной регистрации.
    """
    access_token: str
    token_type: Literal["bearer"]
    expires_in_ms: int
    user: UserRead
