# backend/tests/test_http_collaborators.py
from __future__ import annotations

import httpx
import pytest

from owner_admin.clients.hostkit import HostkitInvoiceClient, InvoiceSourceError
from owner_admin.services.notifier import HttpNotifier, WelcomeEmail


def _mock_transport(monkeypatch, handler):
    real_client = httpx.Client
    monkeypatch.setattr(httpx, "Client", lambda **kw: real_client(transport=httpx.MockTransport(handler), **kw))


def test_hostkit_client_sends_property_window_and_key(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{"id": 7, "name": "FT 1/7", "value": "120.50"}, "junk"])

    _mock_transport(monkeypatch, handler)

    out = HostkitInvoiceClient().get_invoices(1001, "2026-01-01", "2026-01-31", api_key="k")

    assert seen["path"].endswith("/getInvoices")
    assert seen["params"] == {"property_id": "1001", "date_start": "2026-01-01", "date_end": "2026-01-31", "APIKEY": "k"}
    assert [(i.id, i.value) for i in out] == [(7, "120.50")]


def test_hostkit_client_accepts_wrapped_payload(monkeypatch):
    _mock_transport(monkeypatch, lambda r: httpx.Response(200, json={"invoices": [{"id": 1, "value": "5"}]}))
    assert len(HostkitInvoiceClient().get_invoices(1, "2026-01-01", "2026-01-02")) == 1


def test_hostkit_client_wraps_upstream_errors(monkeypatch):
    _mock_transport(monkeypatch, lambda r: httpx.Response(503, text="maintenance"))
    with pytest.raises(InvoiceSourceError):
        HostkitInvoiceClient().get_invoices(1, "2026-01-01", "2026-01-02")


def test_notifier_posts_welcome_payload(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(200, json={"ok": True})

    _mock_transport(monkeypatch, handler)

    msg = WelcomeEmail(name="Olga", email="o@x.test", password="pw", portal_url="https://portal.test/")
    assert HttpNotifier(base_url="https://mail.test").send_owner_welcome(msg) is True
    assert seen["path"] == "/welcome-email/send-owner-welcome"
    assert b'"portalUrl"' in seen["body"]


def test_notifier_reports_failure_instead_of_raising(monkeypatch):
    _mock_transport(monkeypatch, lambda r: httpx.Response(500, text="boom"))
    assert HttpNotifier(base_url="https://mail.test").send_otp("o@x.test", "123456", "login") is False


def test_unconfigured_notifier_skips_delivery():
    assert HttpNotifier(base_url="").send_otp("o@x.test", "123456", "login") is False
