# backend/owner_admin/clients/hostkit.py
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from ..config import settings
from ..domain.statement import Invoice

log = logging.getLogger(__name__)


class InvoiceSourceError(RuntimeError):
    pass


class InvoiceSource(Protocol):
    def get_invoices(
        self, property_external_id: int, start_date: str, end_date: str, *, api_key: Optional[str] = None
    ) -> list[Invoice]: ...


def _to_invoice(raw: dict[str, Any]) -> Invoice:
    return Invoice(
        id=raw.get("id"),
        name=str(raw.get("name") or ""),
        value=raw.get("value"),
        date=raw.get("date"),
        series=raw.get("series"),
    )


class HostkitInvoiceClient:
    """Read-only invoice feed: GET {hostkit_base_url}/getInvoices."""

    def __init__(self) -> None:
        self.base = settings.hostkit_base_url.rstrip("/")
        self.timeout = float(settings.hostkit_timeout_seconds)

    def get_invoices(
        self, property_external_id: int, start_date: str, end_date: str, *, api_key: Optional[str] = None
    ) -> list[Invoice]:
        url = f"{self.base}/getInvoices"
        params: dict[str, Any] = {
            "property_id": int(property_external_id),
            "date_start": start_date,
            "date_end": end_date,
        }
        if api_key:
            params["APIKEY"] = api_key

        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.get(url, params=params)
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("invoice fetch failed: %s", e, extra={"property_id": property_external_id})
            raise InvoiceSourceError(f"invoice source unavailable: {e}") from e

        if isinstance(data, dict):
            data = data.get("invoices") or data.get("data") or []
        if not isinstance(data, list):
            return []
        return [_to_invoice(x) for x in data if isinstance(x, dict)]


def get_invoice_source() -> InvoiceSource:
    return HostkitInvoiceClient()
