"""
Top.gg Client - Settings Tests
==============================

What we test:
    ✅ Defaults work with nothing configured
    ✅ TOPGG_-prefixed environment variables are read
    ✅ Validators normalize or reject bad values
"""

import pytest
from pydantic import ValidationError

from topgg.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TOPGG_LOG_LEVEL", raising=False)
        config = Settings(_env_file=None)

        assert config.token == ""
        assert config.api_base_url == "https://top.gg/api"
        assert config.webhook_authorization is None
        assert config.webhook_path == "/webhooks/topgg"
        assert config.webhook_assign_key == "topgg_payload"
        assert config.log_level == "INFO"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("TOPGG_WEBHOOK_AUTHORIZATION", "from-env")
        monkeypatch.setenv("TOPGG_REQUEST_TIMEOUT", "30")

        config = Settings(_env_file=None)

        assert config.webhook_authorization == "from-env"
        assert config.request_timeout == 30.0

    def test_base_url_trailing_slash_stripped(self):
        assert Settings(api_base_url="https://top.gg/api/").api_base_url == "https://top.gg/api"

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_webhook_path_must_be_absolute(self):
        with pytest.raises(ValidationError):
            Settings(webhook_path="webhooks/topgg")

    @pytest.mark.parametrize("timeout", [0.5, 500])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ValidationError):
            Settings(request_timeout=timeout)
