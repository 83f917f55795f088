"""
Tests for the gistvault command line.

GistBackend is replaced by one shared InMemoryBackend so the commands
run end to end without network access.
"""

import json

import pytest

import gistvault.__main__ as cli
from gistvault.backends import InMemoryBackend
from gistvault.exceptions import BackendAuthError
from gistvault.vault import key_from_token, key_to_token

ENV_VARS = (
    "GISTVAULT_USERNAME",
    "GISTVAULT_TOKEN",
    "GISTVAULT_KEY",
    "GISTVAULT_API_URL",
    "GISTVAULT_TIMEOUT",
    "GISTVAULT_SKIP_CORRUPT",
)


class RejectingBackend(InMemoryBackend):
    async def list_collections(self):
        raise BackendAuthError("Bad credentials", status_code=401)


@pytest.fixture
def shared_backend():
    return InMemoryBackend()


@pytest.fixture
def cli_env(monkeypatch, tmp_path, shared_backend, key):
    """Credentials in the environment, GistBackend swapped for memory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GISTVAULT_USERNAME", "octocat")
    monkeypatch.setenv("GISTVAULT_TOKEN", "ghp_token")
    monkeypatch.setenv("GISTVAULT_KEY", key_to_token(key))

    created = []

    def fake_backend(username, password, **kwargs):
        created.append((username, password, kwargs))
        return shared_backend

    monkeypatch.setattr(cli, "GistBackend", fake_backend)
    return created


def _prompt(monkeypatch, answer):
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt="": answer)


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


class TestKeygen:
    def test_prints_valid_key(self, capsys):
        assert cli.main(["keygen"]) == cli.EXIT_OK
        token = capsys.readouterr().out.strip()
        assert len(key_from_token(token)) == 32


class TestCommands:
    def test_settings_creates_vault(self, cli_env, shared_backend, capsys):
        assert cli.main(["settings"]) == cli.EXIT_OK
        out = _json_out(capsys)
        assert out["created"] is True
        assert out["collection_id"] in shared_backend.collection_ids

        username, password, kwargs = cli_env[0]
        assert (username, password) == ("octocat", "ghp_token")
        assert kwargs["hooks"] is None

    def test_password_round_trip(self, cli_env, monkeypatch, capsys):
        _prompt(monkeypatch, "hunter2")
        assert cli.main(["set-password", "https://example.com/login", "alice"]) == cli.EXIT_OK

        assert cli.main(["get-passwords", "example.com", "alice"]) == cli.EXIT_OK
        out = _json_out(capsys)
        assert out[0]["secret"] == "hunter2"
        assert out[0]["tags"][:2] == ["example.com", "alice"]

    def test_min_matches_filters(self, cli_env, monkeypatch, capsys):
        _prompt(monkeypatch, "hunter2")
        cli.main(["set-password", "https://example.com/login", "alice"])

        cli.main(["get-passwords", "example.com", "bob", "--min-matches", "50"])
        assert _json_out(capsys) == []

    def test_unknown_site_prints_empty_list(self, cli_env, capsys):
        assert cli.main(["get-passwords", "nowhere.org"]) == cli.EXIT_OK
        assert _json_out(capsys) == []

    def test_note_round_trip(self, cli_env, monkeypatch, capsys):
        _prompt(monkeypatch, "1234")
        assert cli.main(["set-note", "bank", "pin"]) == cli.EXIT_OK

        assert cli.main(["get-notes", "bank"]) == cli.EXIT_OK
        out = _json_out(capsys)
        assert out[0]["secret"] == "1234"
        assert out[0]["tags"] == ["__", "bank", "pin"]

    def test_empty_secret_rejected(self, cli_env, monkeypatch, shared_backend):
        _prompt(monkeypatch, "")
        assert cli.main(["set-password", "example.com", "alice"]) == cli.EXIT_ERROR
        assert "update_collection" not in shared_backend.calls

    def test_flags_override_environment(self, cli_env, capsys):
        cli.main(["--username", "hubot", "--api-url", "https://ghe.local/api/v3", "settings"])
        username, _, kwargs = cli_env[0]
        assert username == "hubot"
        assert kwargs["api_url"] == "https://ghe.local/api/v3"

    def test_verbose_installs_logging_hooks(self, cli_env):
        cli.main(["-v", "settings"])
        assert isinstance(cli_env[0][2]["hooks"], cli.LoggingHooks)


class TestFailures:
    def test_missing_credentials(self, cli_env, monkeypatch, capsys):
        monkeypatch.delenv("GISTVAULT_TOKEN")
        assert cli.main(["settings"]) == cli.EXIT_AUTH
        assert "required" in capsys.readouterr().err

    def test_invalid_key(self, cli_env, capsys):
        assert cli.main(["--key", "0OIl", "settings"]) == cli.EXIT_AUTH
        assert "Invalid vault key" in capsys.readouterr().err

    def test_generates_key_when_missing(self, cli_env, monkeypatch, capsys):
        monkeypatch.delenv("GISTVAULT_KEY")
        assert cli.main(["settings"]) == cli.EXIT_OK
        assert "Generated a new vault key" in capsys.readouterr().err

    def test_bad_timeout(self, cli_env, monkeypatch, capsys):
        monkeypatch.setenv("GISTVAULT_TIMEOUT", "never")
        assert cli.main(["settings"]) == cli.EXIT_ERROR
        assert "Invalid configuration" in capsys.readouterr().err

    def test_rejected_credentials(self, cli_env, monkeypatch, capsys):
        monkeypatch.setattr(cli, "GistBackend", lambda *a, **kw: RejectingBackend())
        assert cli.main(["settings"]) == cli.EXIT_AUTH
        assert "Could not open vault" in capsys.readouterr().err

    def test_note_without_tags_is_usage_error(self, cli_env):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["set-note"])
        assert exc_info.value.code == 2
