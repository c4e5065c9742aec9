"""
PromptShelf Backend: Settings Tests
=====================================

What:  Tests for environment parsing and validate_required().
"""

import pytest

from promptshelf.config import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": "s3cret",
        "github_repo": "octocat/prompt-images",
        "github_token": "ghp_token",
        "database_url": "postgresql+asyncpg://u:p@localhost/prompts",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_port_defaults_to_5000(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        assert make_settings().port == 5000

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("GITHUB_BRANCH", "images")
        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.github_branch == "images"

    def test_blank_branch_means_default_branch(self):
        assert make_settings(github_branch="").github_branch is None

    def test_log_level_is_normalized(self):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_is_rejected(self):
        with pytest.raises(ValueError):
            make_settings(log_level="LOUD")

    def test_api_url_trailing_slash_is_stripped(self):
        assert make_settings(github_api_url="https://ghe.example.com/api/v3/").github_api_url == (
            "https://ghe.example.com/api/v3"
        )

    def test_cors_origins_list(self):
        settings = make_settings(cors_origins="https://a.example, https://b.example,")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


class TestValidateRequired:
    def test_complete_configuration_passes(self):
        make_settings().validate_required()

    def test_reports_every_missing_value(self):
        settings = make_settings(secret_key="", github_token="", database_url="")

        with pytest.raises(ValueError) as exc_info:
            settings.validate_required()

        message = str(exc_info.value)
        assert "SECRET_KEY" in message
        assert "GITHUB_TOKEN" in message
        assert "DATABASE_URL" in message
        assert "GITHUB_REPO" not in message

    def test_repo_must_be_owner_slash_name(self):
        with pytest.raises(ValueError, match="owner/name"):
            make_settings(github_repo="prompt-images").validate_required()
