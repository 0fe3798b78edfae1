from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    id: int
    username: str
    birth_date: date | None = None
    gender: str | None = None
    height_cm: Decimal | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)
