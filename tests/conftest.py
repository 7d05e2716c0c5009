# =============================================================================
# Shared Test Fixtures
# =============================================================================
#
# Environment is pinned BEFORE any `app` import: settings are read once at
# import time. Rate limiting is off so tests never reach for Redis, and the
# in-memory store is selected so nothing touches PostgreSQL.
# =============================================================================

import asyncio
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("RECORD_STORE_TYPE", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from app.services.record_store import InMemoryRecordStore, Record  # noqa: E402

GENDERS = ["Female", "Male", "Non-binary"]


def run(coro):
    """Run a coroutine to completion from a sync test."""
    return asyncio.run(coro)


def make_records(count: int) -> list[Record]:
    """Records with ids 1..count and predictable, non-overlapping text."""
    return [
        Record(
            id=i,
            first_name=f"First{i:04d}",
            last_name=f"Last{i:04d}",
            email=f"user{i:04d}@example.org",
            gender=GENDERS[i % len(GENDERS)],
            ip_address=f"10.0.{i // 256}.{i % 256}",
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def records_25() -> list[Record]:
    return make_records(25)


@pytest.fixture
def store_25(records_25) -> InMemoryRecordStore:
    return InMemoryRecordStore(records_25)


@pytest.fixture
def mixed_records() -> list[Record]:
    """A handful of realistic rows for search tests."""
    return [
        Record(1, "Jane", "Doe", "Jane@Test.com", "Female", "192.168.0.1"),
        Record(2, "Carlos", "Mendez", "cmendez@gmail.com", "Male", "10.1.1.1"),
        Record(3, "Aiko", "Tanaka", "aiko.t@GMAIL.com", "Female", "172.16.4.20"),
        Record(4, "Bram", "Jansen", "bram@outlook.com", "Male", "8.8.8.8"),
        Record(5, "Robin", "Okafor", "rokafor@yahoo.com", "Non-binary", "192.168.10.7"),
        Record(6, "Ann", "Smith", "ann.smith@example.org", "Female", "10.0.0.42"),
    ]
