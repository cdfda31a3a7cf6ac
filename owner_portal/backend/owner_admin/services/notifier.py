# backend/owner_admin/services/notifier.py
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Optional, Protocol

import httpx

from ..config import settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WelcomeEmail:
    name: str
    email: str
    password: str  # plain text, only ever forwarded to the relay
    portal_url: str

    def payload(self) -> dict[str, str]:
        d = asdict(self)
        return {"name": d["name"], "email": d["email"], "password": d["password"], "portalUrl": d["portal_url"]}


class Notifier(Protocol):
    """Fire-and-forget delivery. Implementations return False instead of raising."""

    def send_owner_welcome(self, msg: WelcomeEmail) -> bool: ...

    def send_accountant_welcome(self, msg: WelcomeEmail) -> bool: ...

    def send_otp(self, email: str, code: str, purpose: str) -> bool: ...


class HttpNotifier:
    """
    Posts to the email relay service:

      POST {email_service_url}/welcome-email/send-owner-welcome
      POST {email_service_url}/welcome-email/send-accountant-welcome
      POST {email_service_url}/otp/send
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.base = (base_url if base_url is not None else settings.email_service_url or "").rstrip("/")
        self.timeout = float(timeout if timeout is not None else settings.email_timeout_seconds)

    def enabled(self) -> bool:
        return bool(self.base)

    def _post(self, path: str, payload: dict[str, str], *, email: str) -> bool:
        if not self.enabled():
            log.info("email relay not configured; skipped %s", path, extra={"email": email})
            return False

        url = f"{self.base}{path}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(url, json=payload)
                r.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning(
                "email relay rejected %s: %s %s",
                path,
                e.response.status_code,
                e.response.text[:200],
                extra={"email": email},
            )
            return False
        except httpx.HTTPError as e:
            log.warning("email relay unreachable for %s: %s", path, e, extra={"email": email})
            return False

        log.info("email sent via %s", path, extra={"email": email})
        return True

    def send_owner_welcome(self, msg: WelcomeEmail) -> bool:
        return self._post("/welcome-email/send-owner-welcome", msg.payload(), email=msg.email)

    def send_accountant_welcome(self, msg: WelcomeEmail) -> bool:
        return self._post("/welcome-email/send-accountant-welcome", msg.payload(), email=msg.email)

    def send_otp(self, email: str, code: str, purpose: str) -> bool:
        return self._post("/otp/send", {"email": email, "otp": code, "purpose": purpose}, email=email)


def get_notifier() -> Notifier:
    return HttpNotifier()
