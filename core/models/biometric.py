from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class BiometricRecord(BaseModel):
    """One measurement day for a user; (user_id, record_date) is unique."""

    id: int
    user_id: int
    record_date: date
    weight_kg: Decimal | None = None
    body_fat_percent: Decimal | None = None
    muscle_mass_kg: Decimal | None = None
    resting_heart_rate: Decimal | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def order_key(self) -> tuple[date, int]:
        return self.record_date, self.id
