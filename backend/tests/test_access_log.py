"""
EventSnap Backend — Access Log Tests
======================================

What we test:
    ✅ One access line per /api/process request, level chosen by status
    ✅ The message carries no request id (the log filter adds it once)
    ✅ /health is not logged
    ✅ RequestIDFilter stamps the current id, "-" outside a request
"""

import logging

import pytest

from eventsnap.main import RequestIDFilter
from eventsnap.middleware.logging import level_for_status
from eventsnap.middleware.request_id import request_id_var

ACCESS_LOGGER = "eventsnap.access"


def access_records(caplog):
    return [r for r in caplog.records if r.name == ACCESS_LOGGER]


class TestAccessLine:

    @pytest.mark.asyncio
    async def test_success_logged_at_info(self, make_client, stub_upstream, sample_image_b64, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        client = await make_client(stub_upstream)
        await client.post("/api/process", json={"image": sample_image_b64})

        records = access_records(caplog)
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        message = records[0].getMessage()
        assert message.startswith("POST /api/process → 200 in ")
        assert "body=" in message
        assert sample_image_b64 not in message

    @pytest.mark.asyncio
    async def test_missing_image_logged_at_warning(self, make_client, stub_upstream, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        client = await make_client(stub_upstream)
        await client.post("/api/process", json={})

        records = access_records(caplog)
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "→ 400" in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_request_id_left_to_the_filter(self, make_client, stub_upstream, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        client = await make_client(stub_upstream)
        await client.post("/api/process", json={}, headers={"X-Request-ID": "rid-access-1"})

        (record,) = access_records(caplog)
        assert "rid-access-1" not in record.getMessage()

    @pytest.mark.asyncio
    async def test_health_not_logged(self, make_client, stub_upstream, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
        client = await make_client(stub_upstream)
        await client.get("/health")

        assert access_records(caplog) == []

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (405, logging.WARNING), (400, logging.WARNING), (502, logging.ERROR)],
    )
    def test_level_for_status(self, status, level):
        assert level_for_status(status) == level


class TestRequestIDFilter:

    def _record(self):
        return logging.LogRecord(ACCESS_LOGGER, logging.INFO, __file__, 1, "msg", None, None)

    def test_stamps_current_id(self):
        token = request_id_var.set("abc12345")
        try:
            record = self._record()
            assert RequestIDFilter().filter(record) is True
            assert record.request_id == "abc12345"
        finally:
            request_id_var.reset(token)

    def test_dash_outside_request(self):
        record = self._record()
        RequestIDFilter().filter(record)
        assert record.request_id == "-"
