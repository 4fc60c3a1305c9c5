"""
EventSnap Backend — Health Route and Settings Tests
=====================================================

What we test:
    ✅ /health reports healthy/degraded from the API key alone
    ✅ Settings validation (log level, base URL, production check)
"""

import pytest
from pydantic import ValidationError

from eventsnap.config import Settings

from tests.conftest import StubUpstream, make_settings


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_with_key(self, make_client):
        upstream = StubUpstream()
        client = await make_client(upstream)
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["upstream"] == "configured"
        assert body["model"] == "qwen-vl-plus"
        assert upstream.call_count == 0

    @pytest.mark.asyncio
    async def test_degraded_without_key(self, make_client):
        client = await make_client(StubUpstream(), api_key="")
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["upstream"] == "unconfigured"


class TestSettings:

    def test_defaults(self):
        s = Settings(_env_file=None, aliyun_api_key="k")
        assert s.dashscope_base_url == "https://dashscope.aliyuncs.com"
        assert s.dashscope_model == "qwen-vl-plus"
        assert s.dashscope_async is True

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_base_url_trailing_slash_stripped(self):
        s = Settings(_env_file=None, dashscope_base_url="https://dashscope-intl.aliyuncs.com/")
        assert s.dashscope_base_url == "https://dashscope-intl.aliyuncs.com"

    def test_reads_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("ALIYUN_API_KEY", "sk-from-env")
        assert Settings(_env_file=None).aliyun_api_key == "sk-from-env"

    @pytest.mark.parametrize("key", ["", "your_aliyun_api_key_here"])
    def test_production_check_fails_without_key(self, key):
        s = make_settings(api_key=key)
        assert s.api_key_configured is False
        with pytest.raises(ValueError, match="ALIYUN_API_KEY"):
            s.validate_required_for_production()

    def test_production_check_passes_with_key(self):
        make_settings(api_key="sk-real").validate_required_for_production()
