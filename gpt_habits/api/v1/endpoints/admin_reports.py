# gpt_habits/api/v1/endpoints/admin_reports.py
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from gpt_habits.api.deps.admin import require_admin
from gpt_habits.core.config import settings
from gpt_habits.db.session import get_db
from gpt_habits.schemas.survey import StatsOut, SurveyResponseOut
from gpt_habits.services import exports, stats, survey

router = APIRouter(prefix="/reports", tags=["admin-reports"])


def _zone_or_422(tz: Optional[str]) -> str:
    key = tz or settings.STATS_TIMEZONE
    try:
        ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=422, detail=f"Unknown time zone: {key}")
    return key


@router.get("/stats", response_model=StatsOut)
def get_stats(db: Session = Depends(get_db), _admin=Depends(require_admin)):
    return stats.get_stats(db)


@router.get("/recent", response_model=list[SurveyResponseOut])
def get_recent(db: Session = Depends(get_db), _admin=Depends(require_admin)):
    return survey.get_recent(db)


@router.get("/exports/responses.csv")
def export_responses_csv(
    tz: Optional[str] = Query(None, description="Zona horaria para las fechas (por defecto STATS_TIMEZONE)"),
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    # Se materializa dentro del request: get_db cierra la sesión antes del streaming
    chunks = list(exports.iter_responses_csv(db, _zone_or_422(tz)))
    return StreamingResponse(iter(chunks), media_type="text/csv",
                             headers={"Content-Disposition": 'attachment; filename="gpt-habits-responses.csv"'})


@router.get("/exports/gpt-habits.xlsx")
def export_xlsx(
    tz: Optional[str] = Query(None, description="Zona horaria para las fechas (por defecto STATS_TIMEZONE)"),
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    data = exports.build_workbook(db, _zone_or_422(tz))
    return StreamingResponse(iter([data]), media_type=exports.XLSX_MEDIA_TYPE,
                             headers={"Content-Disposition": 'attachment; filename="gpt-habits.xlsx"'})
