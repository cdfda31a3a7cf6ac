# backend/owner_admin/services/otp_service.py
from __future__ import annotations

import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..config import settings
from ..models import OTP_PURPOSES, OtpToken
from .auth_service import hash_otp_code
from .entity_store import EntityStore
from .notifier import Notifier

log = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def send_otp(
    db: Session,
    *,
    email: str,
    purpose: str,
    notifier: Notifier,
    now: Optional[datetime] = None,
) -> bool:
    """
    Issue a fresh code for `email` (replacing any previous one) and deliver it.
    Returns False when delivery fails; the stored code stays valid until expiry.
    """
    if purpose not in OTP_PURPOSES:
        raise ValueError(f"unknown otp purpose: {purpose}")

    email = email.strip().lower()
    code = generate_otp()
    expires_at = (now or _now()) + timedelta(minutes=int(settings.otp_ttl_minutes))

    store = EntityStore(db, OtpToken)
    row = store.find_one(email=email)
    if row is None:
        store.create(email=email, code_hash=hash_otp_code(email, code), purpose=purpose, expires_at=expires_at)
    else:
        store.update_by_id(
            row.id,
            {"code_hash": hash_otp_code(email, code), "purpose": purpose, "expires_at": expires_at, "created_at": _now()},
        )

    try:
        sent = bool(notifier.send_otp(email, code, purpose))
    except Exception:
        log.warning("otp delivery raised", exc_info=True, extra={"email": email})
        sent = False

    if not sent:
        log.warning("otp not delivered", extra={"email": email})
    return sent


def verify_otp(db: Session, *, email: str, code: str, now: Optional[datetime] = None) -> bool:
    """Single use: a matching or expired code is removed."""
    email = email.strip().lower()
    store = EntityStore(db, OtpToken)
    row = store.find_one(email=email)
    if row is None:
        log.info("no otp on file", extra={"email": email})
        return False

    if (now or _now()) > row.expires_at:
        log.info("otp expired", extra={"email": email})
        store.delete_by_id(row.id)
        return False

    if not hmac.compare_digest(row.code_hash, hash_otp_code(email, str(code).strip())):
        log.info("otp mismatch", extra={"email": email})
        return False

    store.delete_by_id(row.id)
    return True


def cleanup_expired_otps(db: Session, *, now: Optional[datetime] = None) -> int:
    cutoff = now or _now()
    res = db.execute(delete(OtpToken).where(OtpToken.expires_at < cutoff))
    db.commit()
    n = int(res.rowcount or 0)
    if n:
        log.info("swept %s expired otp codes", n)
    return n
