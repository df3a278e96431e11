# routers/duel.py
from typing import List

from fastapi import APIRouter, Depends, status

from core.security import get_current_user
from models.user import User
from schemas.duel import (
    AvailableActions,
    DuelHistoryRead,
    DuelRequestCreate,
    DuelRequestRead,
    DuelRespond,
    MoveResult,
    MoveSubmit,
    PostOnBehalfCreate,
)
from schemas.post import PostRead
from services.duel_engine import DuelCompleted, DuelEngine, get_duel_engine
from utils.duel_helpers import to_history_read, to_history_reads
from utils.user_helpers import to_post_read

router = APIRouter(prefix="/duels", tags=["duels"])


@router.post(
    "",
    response_model=DuelRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Вызвать пользователя на дуэль из-за поста",
)
async def create_challenge(
    data: DuelRequestCreate,
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> DuelRequestRead:
    request = await engine.create_challenge(
        current_user.id, data.defender_id, data.content_id, data.mode
    )
    return request.to_read()


@router.get("", response_model=List[DuelRequestRead], summary="Мои активные вызовы")
async def list_requests(
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> List[DuelRequestRead]:
    return [request.to_read() for request in engine.list_requests(current_user.id)]


@router.post(
    "/{request_id}/respond",
    response_model=DuelRequestRead,
    summary="Принять или отклонить вызов",
)
async def respond_to_challenge(
    request_id: int,
    data: DuelRespond,
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> DuelRequestRead:
    request = await engine.respond(request_id, current_user.id, data.decision)
    return request.to_read()


@router.post(
    "/{request_id}/moves",
    response_model=MoveResult,
    summary="Сделать ход; когда оба хода получены, дуэль разрешается",
)
async def submit_move(
    request_id: int,
    data: MoveSubmit,
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> MoveResult:
    outcome = await engine.submit_move(request_id, current_user.id, data.move)
    if isinstance(outcome, DuelCompleted):
        return MoveResult(completed=True, history=to_history_read(outcome.history))
    return MoveResult(completed=False, request=outcome.request.to_read())


@router.get(
    "/history",
    response_model=List[DuelHistoryRead],
    summary="История дуэлей, новые первыми",
)
async def get_history(
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> List[DuelHistoryRead]:
    return to_history_reads(await engine.get_history(current_user.id))


@router.get(
    "/history/{entry_id}/actions",
    response_model=AvailableActions,
    summary="Какие ставки доступны по итогам дуэли",
)
async def get_available_actions(
    entry_id: int,
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> AvailableActions:
    return await engine.available_actions(entry_id, current_user.id)


@router.post(
    "/history/{entry_id}/destroy",
    response_model=DuelHistoryRead,
    summary="Удалить пост (только победивший претендент, один раз)",
)
async def destroy_content(
    entry_id: int,
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> DuelHistoryRead:
    entry = await engine.destroy_content(entry_id, current_user.id)
    return to_history_read(entry)


@router.post(
    "/history/{entry_id}/post-on-behalf",
    response_model=PostRead,
    status_code=status.HTTP_201_CREATED,
    summary="Опубликовать пост от имени проигравшего претендента (один раз)",
)
async def post_on_behalf(
    entry_id: int,
    data: PostOnBehalfCreate,
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> PostRead:
    _, post = await engine.post_on_behalf(entry_id, current_user.id, data.content)
    return to_post_read(post)
