import asyncio

import pytest

from tuca.runtime.session_lock import TurnLock, TurnLockTimeout, lock_key


def test_lock_key_is_per_user() -> None:
    assert lock_key("whatsapp:5511") == "tuca:lock:user:whatsapp:5511"


async def test_turns_for_one_user_never_overlap(fake_redis) -> None:
    lock = TurnLock(fake_redis, ttl_seconds=30)
    events: list[str] = []

    async def turn(name: str) -> None:
        async with lock.acquire("u1", timeout=1.0):
            events.append(f"{name}:start")
            await asyncio.sleep(0.01)
            events.append(f"{name}:end")

    await asyncio.gather(turn("a"), turn("b"))

    assert events in (
        ["a:start", "a:end", "b:start", "b:end"],
        ["b:start", "b:end", "a:start", "a:end"],
    )
    assert fake_redis.locks == set()


async def test_lock_held_elsewhere_times_out(fake_redis) -> None:
    fake_redis.locks.add(lock_key("u1"))
    lock = TurnLock(fake_redis)

    with pytest.raises(TurnLockTimeout):
        async with lock.acquire("u1", timeout=0.05):
            pass

    # the local lock was released on the way out
    fake_redis.locks.clear()
    async with lock.acquire("u1", timeout=0.05):
        pass


async def test_redis_outage_falls_back_to_local_lock(fake_redis) -> None:
    fake_redis.down = True
    lock = TurnLock(fake_redis)
    entered = False

    async with lock.acquire("u1", timeout=0.05):
        entered = True

    assert entered


async def test_idle_users_do_not_accumulate_local_locks(fake_redis) -> None:
    lock = TurnLock(fake_redis)

    for n in range(20):
        async with lock.acquire(f"u{n}", timeout=0.05):
            assert f"u{n}" in lock._local

    assert lock._local == {}


async def test_local_lock_kept_while_a_turn_waits(fake_redis) -> None:
    lock = TurnLock(fake_redis)
    release = asyncio.Event()

    async def first() -> None:
        async with lock.acquire("u1", timeout=1.0):
            await release.wait()

    async def second() -> None:
        async with lock.acquire("u1", timeout=1.0):
            pass

    holder = asyncio.create_task(first())
    await asyncio.sleep(0)
    waiter = asyncio.create_task(second())
    await asyncio.sleep(0)

    assert "u1" in lock._local
    assert lock._users["u1"] == 2

    release.set()
    await asyncio.gather(holder, waiter)

    assert lock._local == {}
