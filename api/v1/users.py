from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from core.biometrics_calc import compute_age, compute_bmi, latest_record
from core.common import is_undefined
from core.errors import MetricsError
from core.reports import ProgressDataset
from api.v1.deps import get_user_dataset
from api.v1.schemas import UserOut

router = APIRouter()


# ───────────────────────── fetch one ────────────────────────
@router.get("/{user_id}", response_model=UserOut)
async def fetch_user(
    user_id: int,
    as_of: date | None = None,
    ds: ProgressDataset = Depends(get_user_dataset),
) -> UserOut:
    usr = ds.users_by_id.get(user_id)
    if usr is None:
        raise HTTPException(status_code=404, detail="User not found")

    latest = latest_record(ds.biometrics_by_user.get(user_id, []))
    try:
        age = compute_age(usr.birth_date, as_of or date.today()) if usr.birth_date else None
        bmi = compute_bmi(usr.height_cm, latest.weight_kg if latest else None)
    except MetricsError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return UserOut(
        id=usr.id,
        username=usr.username,
        gender=usr.gender,
        birth_date=usr.birth_date,
        height_cm=usr.height_cm,
        age=age,
        latest_weight_kg=latest.weight_kg if latest else None,
        bmi=None if is_undefined(bmi) else bmi,
    )
