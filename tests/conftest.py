import asyncio
import os
import sys
from pathlib import Path

import pytest

# Ensure project root is importable during pytest collection
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Environment defaults must be in place before config.settings is imported
os.environ.setdefault('DATABASE_URL', 'sqlite://:memory:')
os.environ.setdefault('AVATAR_FETCH_TIMEOUT', '5')

TEST_DB_URL = 'sqlite://:memory:'


@pytest.fixture
def run_db():
    """Run a coroutine function against a fresh in-memory database.

    Tortoise connections are bound to the event loop that opened them, so
    setup, the test body and teardown all share one ``asyncio.run`` call.
    """
    from config.db import close_db, init_db

    def _run(fn):
        async def _main():
            await init_db(TEST_DB_URL)
            try:
                return await fn()
            finally:
                await close_db()

        return asyncio.run(_main())

    return _run
