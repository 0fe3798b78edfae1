# api/v1/deps.py
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.reports import ProgressDataset
from services.db import get_session, load_dataset


async def get_dataset(db: AsyncSession = Depends(get_session)) -> ProgressDataset:
    return await load_dataset(db)


async def get_user_dataset(
    user_id: int,
    db: AsyncSession = Depends(get_session),
) -> ProgressDataset:
    return await load_dataset(db, user_id=user_id)
