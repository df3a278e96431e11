from datetime import datetime

from pydantic import BaseModel, Field


class UserRegister(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, description="Уникальное имя пользователя")


class UserRead(BaseModel):
    id: int
    username: str
    rating: int = Field(..., description="ELO-рейтинг")
    wins: int
    losses: int
    created_at: datetime

    class Config:
        from_attributes = True
