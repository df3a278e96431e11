"""
Реестр живых вызовов на дуэль.

Реестр владеет картой id -> DuelRequest и никогда её не отдаёт наружу.
Все изменения одной дуэли идут под её локом (registry.lock(request_id)),
разные дуэли друг друга не ждут.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncContextManager, Dict, Iterator, List, Optional

from core.errors import NotFound
from core.id_generator import generate_random_id
from core.locks import KeyedLock
from schemas.duel import (
    CanvasMove,
    DuelMode,
    DuelRequestRead,
    DuelStatus,
    Point,
    ResolutionState,
    ScalarMove,
)

MoveValue = ScalarMove | CanvasMove


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DuelRequest:
    id: int
    challenger_id: int
    challenger_name: str
    challenger_rating: int
    defender_id: int
    defender_name: str
    defender_rating: int
    content_id: int
    mode: DuelMode
    scoring_target: Optional[Point]
    status: DuelStatus = DuelStatus.PENDING
    resolution_state: ResolutionState = ResolutionState.AWAITING_MOVES
    challenger_move: Optional[MoveValue] = None
    defender_move: Optional[MoveValue] = None
    created_at: datetime = field(default_factory=_utcnow)
    responded_at: Optional[datetime] = None

    def __setattr__(self, name, value):
        # Цель фиксируется при создании: новая цель выдала бы информацию игрокам
        if name == "scoring_target" and "scoring_target" in self.__dict__:
            raise AttributeError("scoring_target is immutable")
        super().__setattr__(name, value)

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.challenger_id, self.defender_id)

    def is_challenger(self, user_id: int) -> bool:
        return user_id == self.challenger_id

    def move_of(self, user_id: int) -> Optional[MoveValue]:
        return self.challenger_move if self.is_challenger(user_id) else self.defender_move

    @property
    def is_active(self) -> bool:
        return self.status in (DuelStatus.PENDING, DuelStatus.ACCEPTED)

    @property
    def has_all_moves(self) -> bool:
        return self.challenger_move is not None and self.defender_move is not None

    def to_read(self) -> DuelRequestRead:
        return DuelRequestRead(
            id=self.id,
            challenger_id=self.challenger_id,
            challenger_name=self.challenger_name,
            challenger_rating=self.challenger_rating,
            defender_id=self.defender_id,
            defender_name=self.defender_name,
            defender_rating=self.defender_rating,
            content_id=self.content_id,
            mode=self.mode,
            status=self.status,
            resolution_state=self.resolution_state,
            scoring_target=self.scoring_target,
            challenger_moved=self.challenger_move is not None,
            defender_moved=self.defender_move is not None,
            created_at=self.created_at,
        )


class DuelRegistry:

    def __init__(self):
        self._requests: Dict[int, DuelRequest] = {}
        self._locks = KeyedLock()

    def lock(self, request_id: int) -> AsyncContextManager[None]:
        return self._locks.hold(request_id)

    def new_id(self) -> int:
        request_id = generate_random_id("duel_requests")
        while request_id in self._requests:
            request_id = generate_random_id("duel_requests")
        return request_id

    def add(self, request: DuelRequest) -> None:
        self._requests[request.id] = request

    def get(self, request_id: int) -> DuelRequest:
        request = self._requests.get(request_id)
        if request is None:
            raise NotFound("Invalid duel request")
        return request

    def remove(self, request_id: int) -> None:
        self._requests.pop(request_id, None)

    def find_active(self, challenger_id: int, defender_id: int, content_id: int) -> Optional[DuelRequest]:
        for request in self._requests.values():
            if (
                request.is_active
                and request.challenger_id == challenger_id
                and request.defender_id == defender_id
                and request.content_id == content_id
            ):
                return request
        return None

    def for_user(self, user_id: int) -> List[DuelRequest]:
        """Живые вызовы пользователя, новые первыми."""
        requests = [r for r in self._requests.values() if r.is_participant(user_id)]
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    def __iter__(self) -> Iterator[DuelRequest]:
        return iter(list(self._requests.values()))

    def __contains__(self, request_id: int) -> bool:
        return request_id in self._requests

    def __len__(self) -> int:
        return len(self._requests)
