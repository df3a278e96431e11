"""
Socket.IO для push-уведомлений.

Клиент подключается с auth={"token": <JWT>} и попадает в комнату user:<id>.
Без валидного токена соединение отклоняется.
"""
import logging
from typing import Any, Optional

import socketio
from fastapi import HTTPException

from core.config import settings
from core.security import decode_access_token
from services.notifier import user_room

logger = logging.getLogger(__name__)

_origins = settings.cors_origins()

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*" if _origins == ["*"] else _origins,
)


@sio.event
async def connect(sid: str, environ: dict, auth: Optional[dict] = None):
    token = (auth or {}).get("token")
    if not token:
        raise socketio.exceptions.ConnectionRefusedError("Not authenticated")
    try:
        user_id = decode_access_token(token)
    except HTTPException:
        raise socketio.exceptions.ConnectionRefusedError("Not authenticated")

    await sio.save_session(sid, {"user_id": user_id})
    await sio.enter_room(sid, user_room(user_id))
    logger.info("Socket %s connected as user %s", sid, user_id)


@sio.event
async def disconnect(sid: str):
    logger.info("Socket %s disconnected", sid)


async def emit_event(event: str, payload: Any, room: Optional[str]) -> None:
    await sio.emit(event, payload, room=room)


def create_socket_app(app) -> socketio.ASGIApp:
    """Оборачивает FastAPI-приложение, чтобы socket.io и HTTP жили на одном порту."""
    return socketio.ASGIApp(sio, other_asgi_app=app)
