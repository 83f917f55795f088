# Core - Configuration
#
# Runtime settings come from environment variables, optionally loaded
# from a .env file in the working directory (python-dotenv).
#
#   GISTVAULT_USERNAME     GitHub account name
#   GISTVAULT_TOKEN        Account password or personal access token
#   GISTVAULT_KEY          Base-58 vault key token
#   GISTVAULT_API_URL      API base URL (default https://api.github.com)
#   GISTVAULT_TIMEOUT      Request timeout in seconds (default 30)
#   GISTVAULT_SKIP_CORRUPT Skip undecryptable shard entries (default true)
#   GISTVAULT_AUDIT_DIR    Audit log directory (read by AuditLogger)

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from ..backends.gist import DEFAULT_API_URL, REQUEST_TIMEOUT_SEC

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_float(name: str, value: Optional[str], default: float) -> float:
    if value is None or value.strip() == "":
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return parsed


@dataclass
class VaultConfig:
    """Settings needed to open a vault."""
    username: str = ""
    token: str = ""
    key: str = ""
    api_url: str = DEFAULT_API_URL
    timeout: float = REQUEST_TIMEOUT_SEC
    skip_corrupt: bool = True

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.token)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "VaultConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            dotenv: Load ./.env into os.environ first (ignored when
                    environ is given)

        Raises:
            ValueError: A numeric or boolean variable does not parse
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        return cls(
            username=environ.get("GISTVAULT_USERNAME", ""),
            token=environ.get("GISTVAULT_TOKEN", ""),
            key=environ.get("GISTVAULT_KEY", ""),
            api_url=environ.get("GISTVAULT_API_URL", "") or DEFAULT_API_URL,
            timeout=_parse_float(
                "GISTVAULT_TIMEOUT", environ.get("GISTVAULT_TIMEOUT"), REQUEST_TIMEOUT_SEC
            ),
            skip_corrupt=_parse_bool(
                "GISTVAULT_SKIP_CORRUPT", environ.get("GISTVAULT_SKIP_CORRUPT"), True
            ),
        )
