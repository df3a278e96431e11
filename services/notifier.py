"""
Доставка событий пользователям.

publish() не ждёт доставки: событие кладётся в очередь комнаты получателя,
очередь разбирает отдельная задача. Внутри одной комнаты порядок событий
сохраняется, ошибки доставки только логируются.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

CHALLENGE_SENT = "challengeSent"
CHALLENGE_RECEIVED = "challengeReceived"
CHALLENGE_RESPONSE = "challengeResponse"
DUEL_REQUESTS = "duelRequests"
DUEL_COMPLETED = "duelCompleted"
DUEL_EXPIRED = "duelExpired"
DUEL_HISTORY = "duelHistory"
CONTENT_CREATED = "contentCreated"
CONTENT_DELETED = "contentDeleted"

EmitFunc = Callable[[str, Any, Optional[str]], Awaitable[None]]


def user_room(user_id: int) -> str:
    return f"user:{user_id}"


class Notifier:

    def __init__(self, emit: EmitFunc):
        self._emit = emit
        # None: комната "все подключённые"
        self._queues: Dict[Optional[str], asyncio.Queue] = {}
        self._workers: Dict[Optional[str], asyncio.Task] = {}

    def publish(self, user_id: int, event: str, payload: Any) -> None:
        self._enqueue(user_room(user_id), event, payload)

    def broadcast(self, event: str, payload: Any) -> None:
        self._enqueue(None, event, payload)

    async def flush(self) -> None:
        """Ждёт, пока все поставленные события будут отправлены."""
        while self._queues:
            await asyncio.gather(*(queue.join() for queue in list(self._queues.values())))
            await asyncio.sleep(0)

    def _enqueue(self, room: Optional[str], event: str, payload: Any) -> None:
        queue = self._queues.get(room)
        if queue is None:
            queue = asyncio.Queue()
            self._queues[room] = queue
            self._workers[room] = asyncio.create_task(self._drain(room, queue))
        queue.put_nowait((event, payload))

    async def _drain(self, room: Optional[str], queue: asyncio.Queue) -> None:
        while True:
            event, payload = await queue.get()
            try:
                await self._emit(event, payload, room)
            except Exception:
                logger.warning("Failed to deliver %s to %s", event, room or "everyone", exc_info=True)
            finally:
                queue.task_done()

            # Между проверкой и удалением нет await, так что новое событие
            # либо уже в этой очереди, либо создаст новую
            if queue.empty():
                del self._queues[room]
                del self._workers[room]
                return
