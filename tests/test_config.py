"""
Tests for VaultConfig.from_env.
"""

import pytest

from gistvault.backends.gist import DEFAULT_API_URL, REQUEST_TIMEOUT_SEC
from gistvault.core.config import VaultConfig


class TestFromEnv:
    def test_defaults(self):
        config = VaultConfig.from_env({})
        assert config.username == ""
        assert config.api_url == DEFAULT_API_URL
        assert config.timeout == REQUEST_TIMEOUT_SEC
        assert config.skip_corrupt is True
        assert not config.has_credentials

    def test_reads_all_variables(self):
        config = VaultConfig.from_env({
            "GISTVAULT_USERNAME": "octocat",
            "GISTVAULT_TOKEN": "ghp_x",
            "GISTVAULT_KEY": "abc",
            "GISTVAULT_API_URL": "https://ghe.example.com/api/v3",
            "GISTVAULT_TIMEOUT": "5.5",
            "GISTVAULT_SKIP_CORRUPT": "no",
        })
        assert config.has_credentials
        assert config.key == "abc"
        assert config.api_url == "https://ghe.example.com/api/v3"
        assert config.timeout == 5.5
        assert config.skip_corrupt is False

    def test_empty_api_url_falls_back(self):
        config = VaultConfig.from_env({"GISTVAULT_API_URL": ""})
        assert config.api_url == DEFAULT_API_URL

    @pytest.mark.parametrize("value, expected", [
        ("1", True), ("TRUE", True), ("on", True),
        ("0", False), ("False", False), ("off", False),
        ("  ", True),
    ])
    def test_bool_parsing(self, value, expected):
        config = VaultConfig.from_env({"GISTVAULT_SKIP_CORRUPT": value})
        assert config.skip_corrupt is expected

    def test_bad_bool(self):
        with pytest.raises(ValueError, match="GISTVAULT_SKIP_CORRUPT"):
            VaultConfig.from_env({"GISTVAULT_SKIP_CORRUPT": "maybe"})

    @pytest.mark.parametrize("value", ["soon", "0", "-3"])
    def test_bad_timeout(self, value):
        with pytest.raises(ValueError, match="GISTVAULT_TIMEOUT"):
            VaultConfig.from_env({"GISTVAULT_TIMEOUT": value})

    def test_reads_os_environ_and_dotenv(self, monkeypatch, tmp_path):
        for name in ("GISTVAULT_USERNAME", "GISTVAULT_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text(
            "GISTVAULT_USERNAME=from-dotenv\nGISTVAULT_TOKEN=t\n", encoding="utf-8"
        )
        monkeypatch.setenv("GISTVAULT_USERNAME", "from-env")

        config = VaultConfig.from_env()

        # Existing environment variables win over .env entries
        assert config.username == "from-env"
        assert config.token == "t"
