# gpt_habits/api/v1/endpoints/admin_live.py
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from gpt_habits.api.deps.admin import require_admin
from gpt_habits.db.session import get_db
from gpt_habits.schemas.common import OkOut
from gpt_habits.schemas.live import DeleteAnswerOut, FavoriteOut
from gpt_habits.services import live_session
from gpt_habits.services.audit import audit_log

router = APIRouter(prefix="/live", tags=["admin-live"])


@router.post("/answers/{answer_id}/favorite", response_model=FavoriteOut)
def toggle_favorite(
    request: Request,
    answer_id: UUID = Path(..., description="ID de la respuesta en vivo"),
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    a = live_session.toggle_favorite(db, answer_id)
    audit_log(db, accion="live.answer.favorite", payload={"id": str(answer_id), "is_favorited": a.is_favorited}, request=request)
    return FavoriteOut(id=a.id, is_favorited=a.is_favorited)


@router.delete("/answers/{answer_id}", response_model=DeleteAnswerOut)
def delete_answer(
    request: Request,
    answer_id: UUID = Path(..., description="ID de la respuesta en vivo"),
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    """Idempotente: borrar un id que no existe devuelve deleted=false, no 404."""
    deleted = live_session.delete_answer(db, answer_id)
    if deleted:
        audit_log(db, accion="live.answer.delete", payload={"id": str(answer_id)}, request=request)
    return DeleteAnswerOut(id=answer_id, deleted=deleted)


@router.post("/reset", response_model=OkOut)
def reset_game(request: Request, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    s = live_session.reset_game(db)
    audit_log(db, accion="live.reset", payload={"session_id": str(s.id)}, request=request)
    return OkOut()
