from __future__ import annotations

from fastapi import APIRouter, HTTPException

from backend.core.process_data import DEFAULT_TYPE, InvalidDataError
from backend.infrastructure import DataProcessorError, get_data_processor

router = APIRouter(tags=["processing"])


@router.post("/process-data")
async def process_records(payload: dict) -> dict:
    data_type = payload.get("type") or DEFAULT_TYPE
    if not isinstance(data_type, str):
        raise HTTPException(status_code=400, detail="type must be a string")

    try:
        return await get_data_processor().process(payload.get("data"), data_type)
    except InvalidDataError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DataProcessorError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
