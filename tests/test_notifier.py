import asyncio
import logging

from services.notifier import Notifier, user_room


async def test_events_keep_order_within_room(recorder):
    notifier = Notifier(recorder)
    for i in range(5):
        notifier.publish(1, "tick", i)
    await notifier.flush()

    assert [payload for _, payload in recorder.for_user(1, "tick")] == [0, 1, 2, 3, 4]


async def test_publish_does_not_wait_for_delivery():
    delivered = []
    gate = asyncio.Event()

    async def slow_emit(event, payload, room):
        await gate.wait()
        delivered.append((room, event))

    notifier = Notifier(slow_emit)
    notifier.publish(7, "hello", {})
    assert delivered == []

    gate.set()
    await notifier.flush()
    assert delivered == [(user_room(7), "hello")]


async def test_slow_room_does_not_block_others():
    delivered = []
    gate = asyncio.Event()

    async def emit(event, payload, room):
        if room == user_room(1):
            await gate.wait()
        delivered.append(room)

    notifier = Notifier(emit)
    notifier.publish(1, "first", {})
    notifier.publish(2, "second", {})
    for _ in range(3):
        await asyncio.sleep(0)

    assert delivered == [user_room(2)]
    gate.set()
    await notifier.flush()
    assert delivered == [user_room(2), user_room(1)]


async def test_delivery_failure_is_logged_not_raised(caplog):
    delivered = []

    async def flaky_emit(event, payload, room):
        if event == "broken":
            raise ConnectionError("socket gone")
        delivered.append(event)

    notifier = Notifier(flaky_emit)
    with caplog.at_level(logging.WARNING, logger="services.notifier"):
        notifier.publish(3, "broken", {})
        notifier.publish(3, "fine", {})
        await notifier.flush()

    assert delivered == ["fine"]
    assert "Failed to deliver broken" in caplog.text


async def test_broadcast_goes_to_everyone(recorder):
    notifier = Notifier(recorder)
    notifier.broadcast("contentDeleted", {"post_id": 5})
    await notifier.flush()

    assert recorder.broadcasts() == [("contentDeleted", {"post_id": 5})]
