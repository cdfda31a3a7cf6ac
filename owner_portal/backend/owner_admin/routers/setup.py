# backend/owner_admin/routers/setup.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import FirstAdminCreate, OtpResend, OtpVerify
from ..services import admin_ops
from ..services.notifier import Notifier, get_notifier

router = APIRouter(prefix="/setup", tags=["setup"])


@router.get("/check-admin")
def check_admin(db: Session = Depends(get_db)):
    return {"success": True, "adminExists": admin_ops.admin_exists(db)}


@router.post("/create-first-admin", status_code=201)
def create_first_admin(
    payload: FirstAdminCreate, db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)
):
    res = admin_ops.create_first_admin(db, payload=payload, notifier=notifier)
    return res.body(success=True, message="Admin created. Check your email for the verification code.")


@router.post("/verify-admin")
def verify_admin(payload: OtpVerify, db: Session = Depends(get_db)):
    res = admin_ops.verify_first_admin(db, email=payload.email, code=payload.otp)
    return res.body(success=True, message="Admin email verified")


@router.post("/resend-otp")
def resend_otp(payload: OtpResend, db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)):
    res = admin_ops.resend_admin_otp(db, email=payload.email, notifier=notifier)
    return res.body(success=True, message="Verification code sent")
