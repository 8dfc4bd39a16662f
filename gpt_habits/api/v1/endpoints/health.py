# gpt_habits/api/v1/endpoints/health.py
from fastapi import APIRouter, HTTPException

from gpt_habits.db.session import check_db_connection

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/health/db")
def health_db():
    if not check_db_connection():
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"db": "ok"}
