# backend/owner_admin/workers/otp_tasks.py
from __future__ import annotations

from ..db import SessionLocal
from ..services.otp_service import cleanup_expired_otps
from .celery_app import celery_app


@celery_app.task(name="owner_admin.workers.otp_tasks.sweep_expired_otps")
def sweep_expired_otps() -> dict:
    """Deletes OTP codes past their expiry. Safe to run concurrently."""
    db = SessionLocal()
    try:
        n = cleanup_expired_otps(db)
        return {"ok": True, "deleted": n}
    finally:
        db.close()
