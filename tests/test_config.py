"""Tests for settings loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from scaffoldkit.config import ENV_VARS, REQUIRED_ENV_VARS, Settings, load_settings
from scaffoldkit.errors import ConfigError


class TestLoadSettings:
    """Tests for load_settings."""

    def test_parses_all_fields(self, settings_env):
        settings = load_settings(
            {
                **settings_env,
                "SCAFFOLD_HTTP_TIMEOUT": "12.5",
                "SCAFFOLD_MAX_ID_ATTEMPTS": "3",
                "GCLOUD_APP_LOCATION": "europe-west1",
            }
        )

        assert settings.github_token == "ghp_test"
        assert settings.github_org == "test-org"
        assert settings.mongo_project_id == "atlas-project"
        assert settings.http_timeout == 12.5
        assert settings.max_id_attempts == 3
        assert settings.gcloud_app_location == "europe-west1"

    def test_defaults(self, settings_env):
        env = {k: v for k, v in settings_env.items() if k != "GITHUB_ORG"}

        settings = load_settings(env)

        assert settings.github_org == "mindful-studio"
        assert settings.http_timeout == 30.0
        assert settings.max_id_attempts == 5
        assert settings.gcloud_app_location == "asia-south1"

    def test_missing_variables_listed(self, settings_env):
        env = {k: v for k, v in settings_env.items() if k not in ("NPM_TOKEN", "MONGO_USER_ID")}
        env["VERCEL_TOKEN"] = ""

        with pytest.raises(ConfigError) as exc_info:
            load_settings(env)

        assert exc_info.value.missing == ["NPM_TOKEN", "VERCEL_TOKEN", "MONGO_USER_ID"]

    def test_invalid_number_raises_config_error(self, settings_env):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings({**settings_env, "SCAFFOLD_HTTP_TIMEOUT": "soon"})

    def test_attempts_must_be_positive(self, settings_env):
        with pytest.raises(ConfigError):
            load_settings({**settings_env, "SCAFFOLD_MAX_ID_ATTEMPTS": "0"})

    def test_missing_credentials_file_raises_config_error(self, settings_env, tmp_path: Path):
        missing = tmp_path / "nope.json"

        with pytest.raises(ConfigError, match="service account key file not found"):
            load_settings({**settings_env, "GOOGLE_APPLICATION_CREDENTIALS": str(missing)})

    def test_credentials_directory_rejected(self, settings_env, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_settings({**settings_env, "GOOGLE_APPLICATION_CREDENTIALS": str(tmp_path)})

    def test_reads_dotenv_from_working_directory(self, tmp_path: Path, monkeypatch, settings_env):
        for var in ENV_VARS.values():
            monkeypatch.delenv(var, raising=False)
        lines = [f"{k}={v}" for k, v in settings_env.items()]
        (tmp_path / ".env").write_text("\n".join(lines) + "\n")
        monkeypatch.chdir(tmp_path)

        try:
            settings = load_settings()
        finally:
            for var in ENV_VARS.values():
                os.environ.pop(var, None)

        assert settings.vercel_org_id == "team_test"


class TestEnvVars:
    """Tests for the variable name tables."""

    def test_every_field_has_a_variable(self):
        assert set(ENV_VARS) == set(Settings.model_fields)

    def test_required_variables_are_known(self):
        assert set(REQUIRED_ENV_VARS) <= set(ENV_VARS.values())
