"""配置常量与环境变量覆盖测试"""

import pytest
from plancob.core import config


class TestConstants:
    def test_type_name(self):
        assert config.TYPE_NAME == "me.hdh.plan"

    def test_short_id_length(self):
        assert config.SHORT_ID_LENGTH == 7


class TestMinIdPrefix:
    """PLANCOB_MIN_ID_PREFIX"""

    def test_default(self):
        assert config.get_min_id_prefix_length() == 7

    def test_override(self, monkeypatch):
        monkeypatch.setenv("PLANCOB_MIN_ID_PREFIX", "10")
        assert config.get_min_id_prefix_length() == 10

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
    def test_invalid_falls_back(self, monkeypatch, captured_logs, raw):
        """非法值记录警告并回退到 7"""
        monkeypatch.setenv("PLANCOB_MIN_ID_PREFIX", raw)
        assert config.get_min_id_prefix_length() == 7

        warnings = [e for e in captured_logs if e["event"] == "invalid_min_id_prefix_config"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["value"] == raw


class TestLogSettings:
    """PLANCOB_LOG_FORMAT / PLANCOB_LOG_LEVEL"""

    def test_defaults(self):
        assert config.get_log_format() == "dev"
        assert config.get_log_level() == "INFO"

    def test_override(self, monkeypatch):
        monkeypatch.setenv("PLANCOB_LOG_FORMAT", "json")
        monkeypatch.setenv("PLANCOB_LOG_LEVEL", "DEBUG")
        assert config.get_log_format() == "json"
        assert config.get_log_level() == "DEBUG"
