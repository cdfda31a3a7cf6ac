# backend/owner_admin/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "2026-10-18.v1"
    database_url: str = "sqlite:///./owner_portal.db"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Owner statement ----
    portal_commission_rate: float = 0.15
    cleaning_fee_per_invoice: float = 75.0
    management_commission_rate: float = 0.25

    # ---- Notifier (welcome-email relay) ----
    email_service_url: str | None = None
    email_timeout_seconds: float = 10.0
    portal_url: str = "https://www.smarthoster.io/"

    # ---- OTP ----
    otp_ttl_minutes: int = 10
    otp_pepper: str = "dev-otp-pepper-change-me"
    otp_sweep_interval_seconds: int = 300

    # ---- Invoice source (Hostkit) ----
    hostkit_base_url: str = "https://app.hostkit.pt/api"
    hostkit_timeout_seconds: float = 20.0

    # ---- Passwords ----
    password_pbkdf2_iters: int = 210_000

    # ---- Celery ----
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            if self.otp_pepper == "dev-otp-pepper-change-me":
                raise ValueError("SECURITY: otp_pepper must be set in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
