# gpt_habits/api/v1/endpoints/surveys.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from gpt_habits.api.deps.admin import require_admin
from gpt_habits.db.session import get_db
from gpt_habits.schemas.common import OkOut
from gpt_habits.schemas.survey import SurveySubmitIn
from gpt_habits.services import survey
from gpt_habits.services.audit import audit_log

router = APIRouter(tags=["surveys"])


@router.post("/surveys/responses", response_model=OkOut, status_code=status.HTTP_201_CREATED)
def submit_survey(payload: SurveySubmitIn, db: Session = Depends(get_db)):
    survey.submit_survey(db, payload)
    return OkOut()


@router.post("/admin/clear")
def clear_all(request: Request, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    """Borra respuestas estáticas y en vivo (favoritas incluidas) y apaga la sesión."""
    deleted = survey.clear_all(db)
    audit_log(db, accion="data.clear_all", payload=deleted, request=request)
    return {"ok": True, "deleted": deleted}
