"""Tests for structured logging."""

import pytest

from cloudbot.observability.logging import SecretRedactor, get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        setup_logging(level="INFO", format="json", redact_secrets=False)
        get_logger("test").info("test_message")

    def test_setup_console_format(self) -> None:
        setup_logging(level="DEBUG", format="console")
        get_logger("test").debug("test_message")

    def test_redacted_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", format="json", redact_secrets=True)
        get_logger("redaction").info("engine_env", secret_key="sk-live", region="cn-beijing")

        err = capsys.readouterr().err
        assert "sk-live" not in err
        assert "cn-beijing" in err


class TestSecretRedactor:
    """Tests for SecretRedactor processor."""

    @pytest.fixture
    def redactor(self) -> SecretRedactor:
        return SecretRedactor()

    def test_masks_sensitive_keys(self, redactor: SecretRedactor) -> None:
        event = {"event": "x", "access_key": "AKID", "Secret_Key": "sk", "region": "r"}

        result = redactor(None, "info", event)

        assert result["access_key"] == "[REDACTED]"
        assert result["Secret_Key"] == "[REDACTED]"
        assert result["region"] == "r"

    def test_masks_whole_environment(self, redactor: SecretRedactor) -> None:
        result = redactor(None, "info", {"event": "x", "env": {"ALICLOUD_ACCESS_KEY": "a"}})
        assert result["env"] == "[REDACTED]"

    def test_masks_assignments_in_strings(self, redactor: SecretRedactor) -> None:
        result = redactor(
            None,
            "info",
            {"event": "x", "command": "terraform apply -var TF_VAR_secret_key=abc123 -var n=1"},
        )

        assert result["command"] == (
            "terraform apply -var TF_VAR_secret_key=[REDACTED] -var n=1"
        )

    def test_recurses_into_nested_values(self, redactor: SecretRedactor) -> None:
        event = {
            "event": "x",
            "request": {"token": "t", "name": "n"},
            "args": ["API_KEY=xyz", 3],
        }

        result = redactor(None, "info", event)

        assert result["request"] == {"token": "[REDACTED]", "name": "n"}
        assert result["args"] == ["API_KEY=[REDACTED]", 3]
