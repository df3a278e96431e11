"""
Движок дуэлей.

Жизненный цикл вызова: pending -> accepted | declined (отвечает только
защитник), затем awaiting_moves -> completed, как только получены оба хода.
Запись хода, проверка дубля и разрешение дуэли выполняются под локом
дуэли, поэтому разрешение срабатывает ровно один раз даже при
одновременных ходах. Уведомления отправляются после выхода из лока.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import settings
from core.database import AsyncSessionLocal
from core.errors import (
    AlreadyCompleted,
    AlreadyResolved,
    InvalidDecision,
    DuplicateChallenge,
    DuplicateMove,
    Forbidden,
    NotActive,
    NotFound,
    UnknownUser,
)
from models.duel_history import DuelHistory
from models.post import Post
from models.user import User
from schemas.duel import AvailableActions, DuelMode, DuelStatus, ResolutionState
from services import duel_ledger, duel_stakes
from services.duel_registry import DuelRegistry, DuelRequest, MoveValue
from services.duel_scoring import DuelScore, Winner, score_duel
from services.elo import DRAW, LOSS, WIN, calculate_rating_change
from services.move_validation import validate_move
from services.notifier import (
    CHALLENGE_RECEIVED,
    CHALLENGE_RESPONSE,
    CHALLENGE_SENT,
    CONTENT_CREATED,
    CONTENT_DELETED,
    DUEL_COMPLETED,
    DUEL_EXPIRED,
    DUEL_HISTORY,
    DUEL_REQUESTS,
    Notifier,
)
from services.socket_server import emit_event
from utils.duel_helpers import to_history_read, to_history_reads
from utils.geometry import random_point
from utils.user_helpers import to_post_read

logger = logging.getLogger(__name__)

_OUTCOMES = {Winner.A: WIN, Winner.B: LOSS, Winner.TIE: DRAW}


@dataclass(frozen=True)
class AwaitingOpponent:
    request: DuelRequest


@dataclass(frozen=True)
class DuelCompleted:
    history: DuelHistory
    score: DuelScore


MoveOutcome = Union[AwaitingOpponent, DuelCompleted]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DuelEngine:

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Notifier,
        registry: DuelRegistry | None = None,
        rng: random.Random | None = None,
    ):
        self._session_factory = session_factory
        self.notifier = notifier
        self._registry = registry or DuelRegistry()
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Вызовы
    # ------------------------------------------------------------------

    async def create_challenge(
        self,
        challenger_id: int,
        defender_id: int,
        content_id: int,
        mode: DuelMode | str | None = None,
    ) -> DuelRequest:
        if challenger_id == defender_id:
            raise Forbidden("You cannot challenge yourself")
        mode = DuelMode(mode or settings.DEFAULT_DUEL_MODE)

        async with self._session_factory() as db:
            challenger = await db.get(User, challenger_id)
            defender = await db.get(User, defender_id)
            if challenger is None or defender is None:
                raise UnknownUser("Target user not found")
            post = await db.get(Post, content_id)
            if post is None or post.is_deleted:
                raise NotFound("Post not found")

        # Проверка дубля и добавление идут без await между ними
        if self._registry.find_active(challenger_id, defender_id, content_id):
            raise DuplicateChallenge()

        target = None
        if mode is DuelMode.CANVAS:
            target = random_point(settings.CANVAS_WIDTH, settings.CANVAS_HEIGHT, self._rng)

        request = DuelRequest(
            id=self._registry.new_id(),
            challenger_id=challenger.id,
            challenger_name=challenger.username,
            challenger_rating=challenger.rating,
            defender_id=defender.id,
            defender_name=defender.username,
            defender_rating=defender.rating,
            content_id=content_id,
            mode=mode,
            scoring_target=target,
        )
        self._registry.add(request)
        logger.info(
            "Duel request %s: %s challenged %s over post %s (%s)",
            request.id, challenger.username, defender.username, content_id, mode.value,
        )

        payload = request.to_read().model_dump(mode="json")
        self.notifier.publish(challenger_id, CHALLENGE_SENT, payload)
        self.notifier.publish(defender_id, CHALLENGE_RECEIVED, payload)
        return request

    async def respond(self, request_id: int, user_id: int, decision: DuelStatus | str) -> DuelRequest:
        try:
            decision = DuelStatus(decision)
        except ValueError:
            raise InvalidDecision()
        if decision is DuelStatus.PENDING:
            raise InvalidDecision()

        async with self._registry.lock(request_id):
            request = self._registry.get(request_id)
            if request.defender_id != user_id:
                raise Forbidden("Only the challenged user can respond")
            if request.status is not DuelStatus.PENDING:
                raise AlreadyResolved()
            request.status = decision
            request.responded_at = _utcnow()

        logger.info("Duel request %s %s by %s", request_id, decision.value, request.defender_name)
        self.notifier.publish(
            request.challenger_id,
            CHALLENGE_RESPONSE,
            {
                "request_id": request.id,
                "decision": decision.value,
                "responder_name": request.defender_name,
            },
        )
        self._publish_requests(request.challenger_id, request.defender_id)
        return request

    def list_requests(self, user_id: int) -> List[DuelRequest]:
        return self._registry.for_user(user_id)

    def live_count(self) -> int:
        return len(self._registry)

    # ------------------------------------------------------------------
    # Ходы
    # ------------------------------------------------------------------

    async def submit_move(self, request_id: int, user_id: int, payload) -> MoveOutcome:
        async with self._registry.lock(request_id):
            request = self._registry.get(request_id)
            if request.status is not DuelStatus.ACCEPTED:
                raise NotActive()
            if request.resolution_state is ResolutionState.COMPLETED:
                raise AlreadyCompleted()
            if not request.is_participant(user_id):
                raise Forbidden("You are not a participant of this duel")

            move = validate_move(payload, request.mode)

            if request.move_of(user_id) is not None:
                raise DuplicateMove()

            is_challenger = request.is_challenger(user_id)
            challenger_move = move if is_challenger else request.challenger_move
            defender_move = request.defender_move if is_challenger else move

            if challenger_move is None or defender_move is None:
                self._record_move(request, is_challenger, move)
                outcome: MoveOutcome = AwaitingOpponent(request)
            else:
                # Сначала журнал и рейтинги, потом изменение заявки:
                # если БД упадёт, дуэль останется как была
                history, score = await self._resolve(request, challenger_move, defender_move)
                self._record_move(request, is_challenger, move)
                request.resolution_state = ResolutionState.COMPLETED
                self._registry.remove(request.id)
                outcome = DuelCompleted(history, score)

        if isinstance(outcome, DuelCompleted):
            history_payload = to_history_read(outcome.history).model_dump(mode="json")
            for participant in (request.challenger_id, request.defender_id):
                self.notifier.publish(participant, DUEL_COMPLETED, {"history": history_payload})
        self._publish_requests(request.challenger_id, request.defender_id)
        return outcome

    @staticmethod
    def _record_move(request: DuelRequest, is_challenger: bool, move: MoveValue) -> None:
        if is_challenger:
            request.challenger_move = move
        else:
            request.defender_move = move
        logger.info(
            "Duel %s: move recorded for %s",
            request.id, request.challenger_name if is_challenger else request.defender_name,
        )

    async def _resolve(
        self,
        request: DuelRequest,
        challenger_move: MoveValue,
        defender_move: MoveValue,
    ) -> tuple[DuelHistory, DuelScore]:
        score = score_duel(challenger_move, defender_move, request.scoring_target)
        # Дельты считаются от рейтингов на момент вызова
        change = calculate_rating_change(
            request.challenger_rating,
            request.defender_rating,
            _OUTCOMES[score.winner],
        )

        async with self._session_factory() as db:
            entry = await duel_ledger.append_entry(
                db, request, challenger_move, defender_move, score, change
            )
            await duel_ledger.apply_result(db, request, score.winner, change)
            await db.commit()
            await db.refresh(entry)

        logger.info(
            "Duel %s resolved: winner=%s scores=%.6f/%.6f deltas=%+d/%+d",
            request.id, entry.winner_name, score.score_a, score.score_b,
            change.player_delta, change.opponent_delta,
        )
        return entry, score

    # ------------------------------------------------------------------
    # Истечение
    # ------------------------------------------------------------------

    def _expiry_reason(self, request: DuelRequest, now: datetime) -> Optional[str]:
        pending_ttl = timedelta(minutes=settings.PENDING_DUEL_TTL_MINUTES)
        accepted_ttl = timedelta(minutes=settings.ACCEPTED_DUEL_TTL_MINUTES)

        if request.status is DuelStatus.PENDING and now - request.created_at >= pending_ttl:
            return "not_answered"
        if request.status is DuelStatus.DECLINED:
            declined_at = request.responded_at or request.created_at
            if now - declined_at >= pending_ttl:
                return "declined"
        if request.status is DuelStatus.ACCEPTED and not request.has_all_moves:
            accepted_at = request.responded_at or request.created_at
            if now - accepted_at >= accepted_ttl:
                return "moves_timeout"
        return None

    async def expire_stale(self, now: datetime | None = None) -> List[DuelRequest]:
        """
        Убирает зависшие вызовы. Рейтинги и журнал не меняются.
        Каждая дуэль проверяется под своим локом, поэтому истечение
        не может пересечься с её разрешением.
        """
        now = now or _utcnow()
        expired: list[tuple[DuelRequest, str]] = []

        for request in self._registry:
            async with self._registry.lock(request.id):
                if request.id not in self._registry:
                    continue
                reason = self._expiry_reason(request, now)
                if reason is None:
                    continue
                self._registry.remove(request.id)
                expired.append((request, reason))
            logger.info("Duel request %s expired (%s)", request.id, reason)

        for request, reason in expired:
            for participant in (request.challenger_id, request.defender_id):
                self.notifier.publish(
                    participant, DUEL_EXPIRED, {"request_id": request.id, "reason": reason}
                )
            self._publish_requests(request.challenger_id, request.defender_id)
        return [request for request, _ in expired]

    # ------------------------------------------------------------------
    # История и ставки
    # ------------------------------------------------------------------

    async def get_history(self, user_id: int) -> List[DuelHistory]:
        async with self._session_factory() as db:
            return await duel_ledger.history_for_user(db, user_id)

    async def available_actions(self, entry_id: int, user_id: int) -> AvailableActions:
        async with self._session_factory() as db:
            entry = await duel_stakes.get_entry(db, entry_id)
            return duel_stakes.available_actions(entry, user_id)

    async def destroy_content(self, entry_id: int, user_id: int) -> DuelHistory:
        async with self._session_factory() as db:
            entry = await duel_stakes.destroy_content(db, entry_id, user_id)

        self.notifier.broadcast(CONTENT_DELETED, {"post_id": entry.content_id})
        await self._publish_history(entry)
        return entry

    async def post_on_behalf(self, entry_id: int, user_id: int, content: str) -> tuple[DuelHistory, Post]:
        async with self._session_factory() as db:
            entry, post = await duel_stakes.post_on_behalf(db, entry_id, user_id, content)

        self.notifier.broadcast(CONTENT_CREATED, to_post_read(post).model_dump(mode="json"))
        await self._publish_history(entry)
        return entry, post

    # ------------------------------------------------------------------
    # Уведомления
    # ------------------------------------------------------------------

    def _publish_requests(self, *user_ids: int) -> None:
        for user_id in user_ids:
            payload = [r.to_read().model_dump(mode="json") for r in self._registry.for_user(user_id)]
            self.notifier.publish(user_id, DUEL_REQUESTS, payload)

    async def _publish_history(self, entry: DuelHistory) -> None:
        for participant in (entry.challenger_id, entry.defender_id):
            entries = await self.get_history(participant)
            payload = [item.model_dump(mode="json") for item in to_history_reads(entries)]
            self.notifier.publish(participant, DUEL_HISTORY, payload)


async def run_expiry_loop(engine: DuelEngine, interval: float | None = None) -> None:
    """Фоновая задача: периодически снимает зависшие вызовы."""
    interval = interval or settings.EXPIRY_SWEEP_INTERVAL_SECONDS
    while True:
        await asyncio.sleep(interval)
        try:
            await engine.expire_stale()
        except Exception:
            logger.exception("Duel expiry sweep failed")


notifier = Notifier(emit_event)
duel_engine = DuelEngine(AsyncSessionLocal, notifier)


def get_duel_engine() -> DuelEngine:
    return duel_engine
