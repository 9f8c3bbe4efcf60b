"""
Tests for order configuration loading and settings resolution.
"""
from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs

from order_pipeline.config import Settings, get_settings
from order_pipeline.core.config_loader import load_order_config, resolve_config_path
from order_pipeline.core.models import OrderConfig


class TestLoadOrderConfig:
    """Test suite for load_order_config."""

    @pytest.mark.unit
    def test_reads_camel_case_keys(self, test_settings: Settings, write_config: Any) -> None:
        path = write_config(
            {
                "offlineMode": True,
                "auditPath": "/var/log/orders/audit.log",
                "defaultAmount": 12.5,
                "completionDelayMs": 1000,
                "somethingElse": "ignored",
            }
        )

        config = load_order_config(path, test_settings)

        assert config == OrderConfig(
            offline_mode=True,
            audit_path="/var/log/orders/audit.log",
            default_amount=12.5,
            completion_delay_ms=1000,
        )

    @pytest.mark.unit
    def test_absent_keys_stay_unset(self, test_settings: Settings, write_config: Any) -> None:
        """Call sites supply their own defaults for missing keys."""
        config = load_order_config(write_config({}), test_settings)

        assert config.offline_mode is False
        assert config.audit_path is None
        assert config.default_amount is None
        assert config.completion_delay_ms is None

    @pytest.mark.unit
    def test_missing_file_falls_back_with_warning(
        self, test_settings: Settings, tmp_path: Path
    ) -> None:
        missing = tmp_path / "missing.json"

        with capture_logs() as logs:
            config = load_order_config(str(missing), test_settings)

        assert config.offline_mode is False
        assert config.audit_path == test_settings.default_audit_path
        assert len(logs) == 1
        assert logs[0]["event"] == "order_config_fallback"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["path"] == str(missing)
        assert logs[0]["reason"]

    @pytest.mark.unit
    def test_malformed_json_falls_back(self, test_settings: Settings, tmp_path: Path) -> None:
        broken = tmp_path / "broken.json"
        broken.write_text("{offlineMode: yes", encoding="utf-8")

        config = load_order_config(str(broken), test_settings)

        assert config.audit_path == test_settings.default_audit_path

    @pytest.mark.unit
    def test_non_object_document_falls_back(
        self, test_settings: Settings, tmp_path: Path
    ) -> None:
        listing = tmp_path / "list.json"
        listing.write_text("[1, 2, 3]", encoding="utf-8")

        config = load_order_config(str(listing), test_settings)

        assert config.audit_path == test_settings.default_audit_path

    @pytest.mark.unit
    def test_fallback_honours_force_offline(
        self, test_settings: Settings, tmp_path: Path
    ) -> None:
        settings = test_settings.model_copy(update={"force_offline": True})

        config = load_order_config(str(tmp_path / "missing.json"), settings)

        assert config.offline_mode is True

    @pytest.mark.unit
    def test_path_with_nul_byte_falls_back(self, test_settings: Settings) -> None:
        with capture_logs() as logs:
            config = load_order_config("bad\x00path.json", test_settings)

        assert config.audit_path == test_settings.default_audit_path
        assert logs[0]["event"] == "order_config_fallback"

    @pytest.mark.unit
    def test_wrongly_typed_value_keeps_other_keys(
        self, test_settings: Settings, write_config: Any, tmp_path: Path
    ) -> None:
        """A readable file is used even when one of its values is unusable."""
        settings = test_settings.model_copy(update={"force_offline": True})
        custom_audit = str(tmp_path / "custom.log")
        path = write_config(
            {
                "auditPath": custom_audit,
                "offlineMode": None,
                "defaultAmount": "ten",
                "completionDelayMs": 75,
            }
        )

        with capture_logs() as logs:
            config = load_order_config(path, settings)

        assert not config.offline_mode
        assert config.audit_path == custom_audit
        assert config.default_amount is None
        assert config.completion_delay_ms == 75
        assert logs == []


class TestResolveConfigPath:
    """Path priority: explicit, environment, default."""

    @pytest.mark.unit
    def test_explicit_path_wins(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"order_config_path": "/etc/env.json"})

        assert resolve_config_path("/tmp/explicit.json", settings) == Path("/tmp/explicit.json")

    @pytest.mark.unit
    def test_environment_path_before_default(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"order_config_path": "/etc/env.json"})

        assert resolve_config_path(None, settings) == Path("/etc/env.json")

    @pytest.mark.unit
    def test_default_path_last(self, test_settings: Settings) -> None:
        assert resolve_config_path(None, test_settings) == Path(test_settings.default_config_path)


class TestSettings:
    """Environment variables recognised by Settings."""

    @pytest.mark.unit
    def test_legacy_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEGACY_ORDER_CONFIG", "/srv/orders/config.json")
        monkeypatch.setenv("FORCE_OFFLINE", "1")
        monkeypatch.setenv("USER", "deploy-bot")

        settings = Settings(_env_file=None)

        assert settings.order_config_path == "/srv/orders/config.json"
        assert settings.force_offline is True
        assert settings.default_actor == "deploy-bot"

    @pytest.mark.unit
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("LEGACY_ORDER_CONFIG", "FORCE_OFFLINE", "USER", "DEFAULT_ACTOR"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.order_config_path is None
        assert settings.force_offline is False
        assert settings.default_actor == "unknown"
        assert settings.default_completion_delay_ms == 200

    @pytest.mark.unit
    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            Settings(_env_file=None, log_level="LOUD")

    @pytest.mark.unit
    def test_get_settings_reads_environment_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment changes apply after get_settings.cache_clear(), not per order."""
        monkeypatch.setenv("FORCE_OFFLINE", "0")
        first = get_settings()

        monkeypatch.setenv("FORCE_OFFLINE", "1")
        assert get_settings() is first
        assert get_settings().force_offline is False

        get_settings.cache_clear()
        assert get_settings().force_offline is True
