# gpt_habits/api/deps/admin.py
import logging

from fastapi import Depends, HTTPException

from gpt_habits.core.security import claims_are_admin, get_current_claims

logger = logging.getLogger(__name__)


def require_admin(claims=Depends(get_current_claims)):
    """
    Exige un token emitido por /auth/admin/login (rol 'admin' en los claims).
    """
    if not claims_are_admin(claims):
        logger.warning("Admin endpoint called with a non-admin token (sub=%s)", claims.get("sub"))
        raise HTTPException(status_code=403, detail="Admins only")
    return claims
