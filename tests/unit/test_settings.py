"""
Tests for settings loading from the environment.
"""

import pytest

from gitcloud.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GITHUB_TOKEN", "GITHUB_USER", "MAX_REPO_SIZE_BYTES", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_reads_credentials_from_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        monkeypatch.setenv("GITHUB_USER", "octocat")
        monkeypatch.setenv("MAX_REPO_SIZE_BYTES", "104857600")

        settings = Settings(_env_file=None)

        assert settings.github_token == "ghp_env"
        assert settings.github_user == "octocat"
        assert settings.max_repo_size_bytes == 104857600
        assert settings.validate_required_fields() == []

    def test_missing_credentials_are_reported(self):
        settings = Settings(_env_file=None)

        assert settings.validate_required_fields() == ["GITHUB_TOKEN", "GITHUB_USER"]
        assert not settings.has_github_credentials

    def test_unset_threshold_means_unlimited(self):
        assert Settings(_env_file=None).max_repo_size_bytes == 0

    def test_blank_threshold_means_unlimited(self, monkeypatch):
        monkeypatch.setenv("MAX_REPO_SIZE_BYTES", "")

        assert Settings(_env_file=None).max_repo_size_bytes == 0

    def test_negative_threshold_is_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, max_repo_size_bytes=-5)

    def test_upload_config_carries_storage_settings(self):
        settings = Settings(
            _env_file=None,
            github_token="t",
            github_user="octocat",
            max_repo_size_bytes=2048,
            repo_prefix="pics",
        )

        config = settings.upload_config()

        assert config.owner == "octocat"
        assert config.max_repo_size_bytes == 2048
        assert config.repo_prefix == "pics"
        assert config.commit_message == "Uploaded image"

    def test_cors_origins_are_split(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        settings = Settings(_env_file=None)

        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_unparseable_threshold_disables_rotation(self, monkeypatch, caplog):
        monkeypatch.setenv("MAX_REPO_SIZE_BYTES", "abc")

        with caplog.at_level("WARNING", logger="gitcloud.config.settings"):
            settings = Settings(_env_file=None)

        assert settings.max_repo_size_bytes == 0
        assert not settings.upload_config().rotation_enabled
        assert "Invalid MAX_REPO_SIZE_BYTES" in caplog.text

    def test_padded_threshold_is_parsed(self, monkeypatch):
        monkeypatch.setenv("MAX_REPO_SIZE_BYTES", " 2048 ")

        assert Settings(_env_file=None).max_repo_size_bytes == 2048

    def test_negative_threshold_from_environment_is_rejected(self, monkeypatch):
        monkeypatch.setenv("MAX_REPO_SIZE_BYTES", "-1")

        with pytest.raises(ValueError):
            Settings(_env_file=None)
