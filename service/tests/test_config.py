"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from cryptoverifier.config import Settings, get_settings


class TestSettings:
    def test_missing_required_values(self, monkeypatch):
        monkeypatch.delenv("WORKSPACE_ID", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_non_numeric_workspace(self, monkeypatch):
        monkeypatch.setenv("WORKSPACE_ID", "not-a-number")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_default_agent_ids(self):
        agents = Settings(_env_file=None).agents
        assert agents.coordinator == 280
        assert agents.web_search == 171
        assert agents.content_reader == 172
        assert agents.deep_research == 386
        assert agents.report_writer == 41
        assert agents.contract_scanner == 167
        assert agents.json_analyzer == 65

    def test_agent_override(self, monkeypatch):
        monkeypatch.setenv("EXA_AGENT_ID", "999")
        assert Settings(_env_file=None).agents.deep_research == 999

    def test_cached(self):
        assert get_settings() is get_settings()
