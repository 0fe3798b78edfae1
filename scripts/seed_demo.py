"""
Create the tables and load the demo rows.

Usage
-----

    DATABASE_URL=sqlite+aiosqlite:///./progress.db python -m scripts.seed_demo

    # wipe every table first
    python -m scripts.seed_demo --reset
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.reports import ProgressDataset
from scripts.demo_data import demo_dataset
from services import db as store

_LOG = logging.getLogger(__name__)


def _stages(ds: ProgressDataset) -> list[list[store.Base]]:
    """Core models → ORM rows, grouped so parents are flushed before children."""
    reference = (
        [store.User(**u.model_dump()) for u in ds.users]
        + [store.ExerciseType(**t.model_dump()) for t in ds.exercise_types]
        + [store.FoodItem(**f.model_dump()) for f in ds.food_items]
    )
    owned = (
        [store.Biometric(**b.model_dump()) for b in ds.biometrics]
        + [store.Workout(**w.model_dump(exclude={"exercises"})) for w in ds.workouts]
        + [store.Meal(**m.model_dump(exclude={"foods"})) for m in ds.meals]
        + [store.Goal(**g.model_dump()) for g in ds.goals]
    )
    children = (
        [store.WorkoutExercise(**ex.model_dump()) for w in ds.workouts for ex in w.exercises]
        + [store.MealFood(**mf.model_dump()) for m in ds.meals for mf in m.foods]
    )
    return [reference, owned, children]


async def insert_dataset(db: AsyncSession, ds: ProgressDataset) -> int:
    count = 0
    for stage in _stages(ds):
        db.add_all(stage)
        await db.flush()
        count += len(stage)
    await db.commit()
    return count


async def _seed(reset: bool) -> None:
    eng = await store.engine()
    if reset:
        async with eng.begin() as conn:
            await conn.run_sync(store.Base.metadata.drop_all)
    await store.create_tables(eng)

    async with store.session_scope(eng) as db:
        count = await insert_dataset(db, demo_dataset())
    await eng.dispose()
    print(f"✓ inserted {count} rows")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="drop every table first")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    asyncio.run(_seed(args.reset))


if __name__ == "__main__":
    main()
