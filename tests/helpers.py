"""Shared fixtures for the test suite."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

from auth.config import AuthConfig
from auth.security import PasswordHasher

TEST_SECRET = "test-secret"


def fast_config(**overrides) -> AuthConfig:
    # Minimal Argon2 cost keeps the suite quick
    values = dict(
        jwt_secret=TEST_SECRET,
        auth_store="memory",
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
    )
    values.update(overrides)
    return AuthConfig(**values)


def fast_hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


def race_in_threads(count: int, make_coro) -> list:
    """
    Run ``make_coro(i)`` in ``count`` threads, each with its own event loop,
    released together. Returns results and raised exceptions in thread order.
    """
    barrier = threading.Barrier(count)

    def worker(index: int):
        barrier.wait()
        try:
            return asyncio.run(make_coro(index))
        except Exception as exc:
            return exc

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))
