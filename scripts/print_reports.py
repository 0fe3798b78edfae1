"""
Run every report and print it as JSON.

Usage
-----

    python -m scripts.print_reports                     # read DATABASE_URL
    python -m scripts.print_reports --demo              # built-in demo rows
    python -m scripts.print_reports --as-of 2024-01-01 --user 1
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import date
from typing import Any

from config import settings
from core import reports
from core.reports import ProgressDataset, plain
from scripts.demo_data import demo_dataset
from services import db as store


async def _load() -> ProgressDataset:
    eng = await store.engine()
    async with store.session_scope(eng) as db:
        ds = await store.load_dataset(db)
    await eng.dispose()
    return ds


def _render(results: dict[str, reports.ReportResult]) -> dict[str, Any]:
    return {
        name: {
            "rows": plain(r.rows),
            "errors": [vars(e) for e in r.errors],
            "summary": plain(r.summary),
        }
        for name, r in results.items()
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--demo", action="store_true", help="use the bundled demo rows")
    parser.add_argument("--as-of", type=date.fromisoformat, default=date.today())
    parser.add_argument("--user", type=int, help="also print weight trend + meals for this user")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    ds = demo_dataset() if args.demo else asyncio.run(_load())

    results = reports.run_all(ds, args.as_of, settings)
    if args.user is not None:
        for r in (reports.weight_trend(ds, args.user), reports.meal_breakdown(ds, args.user)):
            results[r.name] = r

    print(json.dumps(_render(results), indent=2, default=str))


if __name__ == "__main__":
    main()
