"""
Tests for Settings.from_env() and the service health endpoints.
"""

import os
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from conftest import make_settings
from mailgate.config import DEFAULT_BLOCKED_SUBJECTS, Settings
from mailgate.main import create_app

_ALL_VARS = [
    "ACTION_ENDPOINT_URL",
    "ACTION_SECRET",
    "ACTION_TIMEOUT_SECONDS",
    "MAX_MESSAGE_SIZE",
    "BLOCKED_SUBJECTS",
    "ACTION_TOKEN_SECRET",
    "JWT_SECRET",
    "ACTION_TOKEN_LEEWAY_SECONDS",
    "EXPOSE_TOKEN_ERROR_DETAILS",
    "INBOUND_WEBHOOK_SECRET",
]


def _from_env(values: dict) -> Settings:
    env = {k: v for k, v in os.environ.items() if k not in _ALL_VARS}
    env.update(values)
    with patch.dict(os.environ, env, clear=True), \
         patch("mailgate.config.load_dotenv"):
        return Settings.from_env()


class TestSettingsFromEnv:

    def test_defaults(self):
        settings = _from_env({})
        assert settings.action_endpoint_url is None
        assert settings.action_secret is None
        assert settings.action_timeout_seconds == 10.0
        assert settings.max_message_size == 256 * 1024
        assert settings.blocked_subjects == DEFAULT_BLOCKED_SUBJECTS
        assert settings.token_secret is None
        assert settings.token_leeway_seconds == 0
        assert settings.expose_token_error_details is False
        assert settings.dispatch_configured is False

    def test_reads_all_variables(self):
        settings = _from_env(
            {
                "ACTION_ENDPOINT_URL": "https://example.test/hook",
                "ACTION_SECRET": "s3cret",
                "ACTION_TIMEOUT_SECONDS": "2.5",
                "MAX_MESSAGE_SIZE": "1024",
                "BLOCKED_SUBJECTS": "Vacation, Auto Reply ,",
                "ACTION_TOKEN_SECRET": "tok",
                "ACTION_TOKEN_LEEWAY_SECONDS": "5",
                "EXPOSE_TOKEN_ERROR_DETAILS": "true",
                "INBOUND_WEBHOOK_SECRET": "hook",
            }
        )
        assert settings.action_endpoint_url == "https://example.test/hook"
        assert settings.action_secret == "s3cret"
        assert settings.action_timeout_seconds == 2.5
        assert settings.max_message_size == 1024
        assert settings.blocked_subjects == ("vacation", "auto reply")
        assert settings.token_secret == "tok"
        assert settings.token_leeway_seconds == 5
        assert settings.expose_token_error_details is True
        assert settings.inbound_webhook_secret == "hook"
        assert settings.dispatch_configured is True

    def test_blank_values_count_as_unset(self):
        settings = _from_env({"ACTION_ENDPOINT_URL": "  ", "ACTION_SECRET": ""})
        assert settings.action_endpoint_url is None
        assert settings.action_secret is None

    def test_legacy_jwt_secret_fallback(self):
        assert _from_env({"JWT_SECRET": "legacy"}).token_secret == "legacy"
        assert _from_env(
            {"JWT_SECRET": "legacy", "ACTION_TOKEN_SECRET": "new"}
        ).token_secret == "new"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("MAX_MESSAGE_SIZE", "-1"),
            ("ACTION_TOKEN_LEEWAY_SECONDS", "-5"),
            ("ACTION_TIMEOUT_SECONDS", "0"),
            ("ACTION_TIMEOUT_SECONDS", "-2.5"),
        ],
    )
    def test_out_of_range_number_names_the_variable(self, name, value):
        with pytest.raises(ValueError) as exc_info:
            _from_env({name: value})
        assert name in str(exc_info.value)

    def test_zero_size_and_leeway_are_allowed(self):
        settings = _from_env({"MAX_MESSAGE_SIZE": "0", "ACTION_TOKEN_LEEWAY_SECONDS": "0"})
        assert settings.max_message_size == 0
        assert settings.token_leeway_seconds == 0

    def test_invalid_number_names_the_variable(self):
        with pytest.raises(ValueError) as exc_info:
            _from_env({"MAX_MESSAGE_SIZE": "big"})
        assert "MAX_MESSAGE_SIZE" in str(exc_info.value)


class TestHealthEndpoints:

    def test_health(self):
        response = TestClient(create_app(settings=make_settings())).get("/health")
        assert response.json() == {"status": "ok"}

    def test_config_health_all_present(self):
        response = TestClient(create_app(settings=make_settings())).get("/health/config")
        assert response.status_code == 200
        assert all(response.json()["configured"].values())

    def test_config_health_reports_missing_without_values(self):
        app = create_app(settings=make_settings(token_secret=None))
        response = TestClient(app).get("/health/config")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "misconfigured"
        assert body["configured"]["ACTION_TOKEN_SECRET"] is False
        assert "test-action-secret" not in response.text
