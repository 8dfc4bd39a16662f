# gpt_habits/api/v1/endpoints/auth.py
import logging

from fastapi import APIRouter, HTTPException

from gpt_habits.core.security import check_passphrase, create_admin_token
from gpt_habits.schemas.auth import AdminLoginIn, TokenOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth/admin/login", response_model=TokenOut)
def admin_login(data: AdminLoginIn):
    if not check_passphrase(data.passphrase):
        logger.warning("Failed admin login")
        raise HTTPException(status_code=401, detail="Incorrect password")
    return TokenOut(access_token=create_admin_token())
