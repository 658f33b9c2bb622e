"""Tests for configuration and thresholds."""

import json

from risksnap.classifier import classify_risk
from risksnap.config import Config, RiskThresholds


class TestRiskThresholds:
    """Test cases for RiskThresholds."""

    def test_defaults(self):
        thresholds = RiskThresholds()

        assert thresholds.scripts_high == 25
        assert thresholds.scripts_moderate == 15
        assert thresholds.title_min == 30
        assert thresholds.title_max == 70
        assert thresholds.html_size_kb_moderate == 200.0
        assert thresholds.max_issues == 10

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RISKSNAP_THRESHOLD_SCRIPTS_HIGH", "30")
        monkeypatch.setenv("RISKSNAP_THRESHOLD_HTML_SIZE_KB_MODERATE", "150.5")
        monkeypatch.setenv("RISKSNAP_THRESHOLD_MAX_ISSUES", "not-a-number")

        thresholds = RiskThresholds.from_env()

        assert thresholds.scripts_high == 30
        assert thresholds.html_size_kb_moderate == 150.5
        assert thresholds.max_issues == 10

    def test_save_and_load_file(self, tmp_path):
        path = tmp_path / "thresholds.json"
        RiskThresholds(scripts_high=40, missing_alt_high=20).save_to_file(str(path))

        with open(path) as f:
            assert json.load(f)["thresholds"]["scripts_high"] == 40

        loaded = RiskThresholds.from_file(str(path))
        assert loaded.scripts_high == 40
        assert loaded.missing_alt_high == 20
        assert loaded.stylesheets_moderate == 6

    def test_from_flat_file(self, tmp_path):
        path = tmp_path / "flat.json"
        path.write_text(json.dumps({"title_min": 20, "unknown_key": 1}))

        loaded = RiskThresholds.from_file(str(path))
        assert loaded.title_min == 20
        assert not hasattr(loaded, "unknown_key")

    def test_file_values_are_coerced(self, tmp_path):
        path = tmp_path / "strings.json"
        path.write_text(json.dumps({"thresholds": {
            "scripts_high": "30",
            "title_max": 80.0,
            "html_size_kb_moderate": "150",
            "missing_alt_high": "lots",
            "missing_alt_moderate": 2.5,
            "max_issues": None,
        }}))

        loaded = RiskThresholds.from_file(str(path))

        assert loaded.scripts_high == 30 and isinstance(loaded.scripts_high, int)
        assert loaded.title_max == 80 and isinstance(loaded.title_max, int)
        assert loaded.html_size_kb_moderate == 150.0
        assert loaded.missing_alt_high == 10
        assert loaded.missing_alt_moderate == 3
        assert loaded.max_issues == 10

    def test_string_thresholds_classify_without_error(self, tmp_path):
        path = tmp_path / "strings.json"
        path.write_text(json.dumps({"scripts_high": "5"}))
        thresholds = RiskThresholds.from_file(str(path))

        result = classify_risk({"totalScripts": 6}, "https://example.com/", thresholds=thresholds)
        assert result.risk_breakdown["performance"].level == "high"

    def test_missing_file_gives_defaults(self, tmp_path):
        loaded = RiskThresholds.from_file(str(tmp_path / "absent.json"))
        assert loaded.to_dict() == RiskThresholds().to_dict()


class TestConfig:
    """Test cases for Config."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("USER_AGENT", "TestBot/1.0")
        monkeypatch.setenv("FETCH_TIMEOUT", "4")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///custom.db")

        config = Config.from_env()

        assert config.user_agent == "TestBot/1.0"
        assert config.timeout == 4
        assert config.database_url == "sqlite:///custom.db"

    def test_from_env_defaults(self, monkeypatch):
        for key in ("USER_AGENT", "FETCH_TIMEOUT", "FETCH_MAX_RETRIES", "DATABASE_URL", "RISKSNAP_THRESHOLDS_FILE"):
            monkeypatch.delenv(key, raising=False)

        config = Config.from_env()

        assert config.timeout == 10
        assert config.max_retries == 1
        assert config.thresholds_file is None
        assert "RiskSnapshotBot" in config.user_agent
