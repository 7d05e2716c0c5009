#!/usr/bin/env python3
"""
Generate synthetic personal records for local development.

Rows are deterministic for a given --seed, so two developers seeding with
the same arguments get identical tables.

Usage:
    python -m scripts.seed_records --rows 1000                 # insert into DATABASE_URL
    python -m scripts.seed_records --rows 1000 --json data/personal_data.json
                                                               # write a file for the memory store
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from pathlib import Path

from sqlalchemy import delete

from app.config import settings
from app.db.engine import async_engine, async_session_factory
from app.db.models import Base, PersonalData
from app.log import configure_logging
from app.services.record_store import Record

logger = logging.getLogger("seed_records")

FIRST_NAMES = [
    "Jane", "John", "Amara", "Liam", "Sofia", "Noah", "Mei", "Omar",
    "Priya", "Lucas", "Ingrid", "Mateo", "Aiko", "Kwame", "Elena", "Tomasz",
]
LAST_NAMES = [
    "Smith", "Okafor", "Garcia", "Nguyen", "Kowalski", "Haddad", "Silva",
    "Johansson", "Tanaka", "Mensah", "Rossi", "Patel", "Dubois", "Murphy",
]
GENDERS = ["Female", "Male", "Non-binary", "Genderfluid", "Agender", "Bigender"]
DOMAINS = ["gmail.com", "yahoo.com", "example.org", "mail.net", "outlook.com"]


def generate_records(rows: int, seed: int) -> list[Record]:
    rng = random.Random(seed)
    records = []
    for record_id in range(1, rows + 1):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        records.append(
            Record(
                id=record_id,
                first_name=first,
                last_name=last,
                email=f"{first[0].lower()}{last.lower()}{record_id}@{rng.choice(DOMAINS)}",
                gender=rng.choice(GENDERS),
                ip_address=".".join(str(rng.randint(1, 254)) for _ in range(4)),
            )
        )
    return records


async def load_into_database(records: list[Record], truncate: bool) -> None:
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        if truncate:
            await session.execute(delete(PersonalData))
        session.add_all(PersonalData(**r.to_dict()) for r in records)
        await session.commit()

    await async_engine.dispose()
    logger.info("Inserted %d records into %s", len(records), PersonalData.__tablename__)


def write_json(records: list[Record], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump([r.to_dict() for r in records], fh, indent=2)
    logger.info("Wrote %d records to %s", len(records), path)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--rows", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--json", type=Path, default=None,
        help="Write records to this JSON file instead of the database",
    )
    parser.add_argument(
        "--truncate", action="store_true",
        help="Delete existing rows before inserting",
    )
    args = parser.parse_args()

    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    records = generate_records(args.rows, args.seed)

    if args.json is not None:
        write_json(records, args.json)
    else:
        asyncio.run(load_into_database(records, truncate=args.truncate))


if __name__ == "__main__":
    main()
