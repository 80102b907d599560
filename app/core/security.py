import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException

from app.core.config import Config

logger = logging.getLogger(__name__)


def require_admin(x_admin_key: Optional[str] = Header(default=None, alias="X-Admin-Key")) -> None:
    """Admin gate. Stands in for the auth middleware that issues admin identities."""
    if not x_admin_key:
        raise HTTPException(status_code=401, detail="Admin credentials required")
    if not hmac.compare_digest(x_admin_key, Config.ADMIN_API_KEY):
        logger.warning("Rejected admin request with invalid key")
        raise HTTPException(status_code=401, detail="Invalid admin credentials")


def is_admin(x_admin_key: Optional[str] = Header(default=None, alias="X-Admin-Key")) -> bool:
    """Like ``require_admin`` but for routes that anonymous callers may also use."""
    return bool(x_admin_key) and hmac.compare_digest(x_admin_key, Config.ADMIN_API_KEY)
