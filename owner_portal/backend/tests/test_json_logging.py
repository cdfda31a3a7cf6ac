# backend/tests/test_json_logging.py
from __future__ import annotations

import json
import logging

from owner_admin.logging_config import JsonFormatter
from owner_admin.middleware.request_id import request_id_ctx
from owner_admin.schemas import UserCreate


def _record(**extra) -> logging.LogRecord:
    rec = logging.LogRecord("owner_admin.test", logging.INFO, __file__, 1, "owner %s deleted", ("Olga",), None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_entity_ids_and_request_id_are_emitted():
    token = request_id_ctx.set("rid-1")
    try:
        line = JsonFormatter().format(_record(owner_id="a" * 24, email="o@x.test", unrelated="x"))
    finally:
        request_id_ctx.reset(token)

    out = json.loads(line)
    assert out["message"] == "owner Olga deleted"
    assert out["request_id"] == "rid-1"
    assert out["owner_id"] == "a" * 24
    assert out["email"] == "o@x.test"
    assert "unrelated" not in out


def test_absent_fields_are_omitted():
    out = json.loads(JsonFormatter(entity_fields=["property_id"]).format(_record(email="o@x.test")))
    assert "request_id" not in out
    assert "email" not in out


def test_create_payload_only_reads_the_api_id_and_key_pair():
    p = UserCreate.model_validate({"hostkitApiId": "i", "hostkitApiKey": "k", "hostkitApiSecret": "ignored"})
    assert (p.hostkit_api_id, p.hostkit_api_key) == ("i", "k")
    assert "hostkit_api_secret" not in p.model_dump()
