from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from core.errors import InvalidDate

WEIGHT_LOSS = "Weight Loss"
MUSCLE_GAIN = "Muscle Gain"
ENDURANCE = "Endurance"


class Goal(BaseModel):
    id: int
    user_id: int
    goal_type: str             # Weight Loss / Muscle Gain / Endurance / free text
    target_value: Decimal | None = None
    target_date: date
    current_value: Decimal | None = None
    start_date: date
    is_completed: bool | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def active(self) -> bool:
        return not self.is_completed

    def check_dates(self) -> None:
        """Raise `InvalidDate` unless start_date <= target_date."""
        if self.start_date > self.target_date:
            raise InvalidDate(
                f"goal {self.id}: start_date {self.start_date} is after "
                f"target_date {self.target_date}"
            )
