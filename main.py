import asyncio
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.database import create_tables, engine

from routers.user import router as user_router
from routers.post import router as post_router
from routers.duel import router as duel_router
from routers.health import router as health_router

from services.duel_engine import duel_engine, notifier, run_expiry_loop
from services.socket_server import create_socket_app

app = FastAPI(
    title="Duels Backend",
    version="0.1.0",
    description="Дуэли за посты: вызов, скрытые ходы, ELO и ставки победителя",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")

_background_tasks: set[asyncio.Task] = set()


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response

app.include_router(user_router)
app.include_router(post_router)
app.include_router(duel_router)
app.include_router(health_router)


@app.on_event("startup")
async def on_startup():

    # Сначала создаём все таблицы
    await create_tables()

    task = asyncio.create_task(run_expiry_loop(duel_engine))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


@app.get("/")
async def root():
    return {"message": "Duels Backend"}


@app.on_event("shutdown")
async def shutdown():
    for task in list(_background_tasks):
        task.cancel()
    await notifier.flush()
    # Закрываем все соединения пула
    await engine.dispose()


# Точка входа для uvicorn: socket.io поверх FastAPI
asgi_app = create_socket_app(app)
