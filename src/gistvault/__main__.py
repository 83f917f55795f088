# Main Entry Point - Command Line
#
# Credentials and the vault key come from flags or the environment
# (see core/config.py). Secrets are prompted for with getpass and are
# never accepted as command-line arguments.
#
#   gistvault keygen
#   gistvault settings
#   gistvault set-password https://example.com/login alice
#   gistvault get-passwords example.com alice
#   gistvault set-note bank pin
#   gistvault get-notes bank

import argparse
import asyncio
import getpass
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .backends import GistBackend, LoggingHooks
from .core.config import VaultConfig
from .exceptions import BootstrapError, InvalidKeyError, VaultError
from .vault import SecretStore, key_from_token, key_to_token, load_or_create_key

logger = logging.getLogger("gistvault")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_AUTH = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gistvault",
        description="Encrypted secret vault stored in private GitHub gists",
    )
    parser.add_argument("--username", help="GitHub username (default: $GISTVAULT_USERNAME)")
    parser.add_argument("--token", help="GitHub password or token (default: $GISTVAULT_TOKEN)")
    parser.add_argument("--key", help="Base-58 vault key (default: $GISTVAULT_KEY)")
    parser.add_argument("--api-url", help="GitHub API URL (default: $GISTVAULT_API_URL)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail reads on corrupt entries instead of skipping them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP traffic")
    parser.add_argument("--version", action="version", version=f"gistvault {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("keygen", help="Print a new vault key")
    sub.add_parser("settings", help="Open (or create) the vault and show where it lives")

    p = sub.add_parser("set-password", help="Store a site password")
    p.add_argument("url")
    p.add_argument("account", help="Site username")

    p = sub.add_parser("get-passwords", help="Look up site passwords")
    p.add_argument("url")
    p.add_argument("account", nargs="?", default="", help="Site username")
    p.add_argument("--min-matches", type=int, default=0)

    p = sub.add_parser("set-note", help="Store a secure note")
    p.add_argument("tags", nargs="+")

    p = sub.add_parser("get-notes", help="Look up secure notes")
    p.add_argument("tags", nargs="+")
    p.add_argument("--min-matches", type=int, default=0)

    return parser


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_matches(results, min_matches: int) -> None:
    if results is None:
        _print_json([])
        return
    _print_json([m.to_dict() for m in results if m.matches >= min_matches])


def _resolve_config(args: argparse.Namespace) -> VaultConfig:
    config = VaultConfig.from_env()
    if args.username:
        config.username = args.username
    if args.token:
        config.token = args.token
    if args.key:
        config.key = args.key
    if args.api_url:
        config.api_url = args.api_url
    if args.strict:
        config.skip_corrupt = False
    return config


async def _run(args: argparse.Namespace, config: VaultConfig, key: bytes) -> int:
    hooks = LoggingHooks() if args.verbose else None
    async with GistBackend(
        config.username,
        config.token,
        api_url=config.api_url,
        timeout=config.timeout,
        hooks=hooks,
    ) as backend:
        store = SecretStore(
            backend, key, config.username, skip_corrupt=config.skip_corrupt
        )

        if args.command == "settings":
            settings = await store.ready()
            _print_json({
                "collection_id": settings.collection_id,
                "created": settings.created,
            })

        elif args.command == "set-password":
            password = getpass.getpass(f"Password for {args.account} at {args.url}: ")
            if not password:
                print("No password entered", file=sys.stderr)
                return EXIT_ERROR
            await store.set_password(args.url, args.account, password)

        elif args.command == "get-passwords":
            results = await store.get_passwords(args.url, args.account)
            _print_matches(results, args.min_matches)

        elif args.command == "set-note":
            note = getpass.getpass(f"Secure note for [{' '.join(args.tags)}]: ")
            if not note:
                print("No note entered", file=sys.stderr)
                return EXIT_ERROR
            await store.set_note(note, args.tags)

        elif args.command == "get-notes":
            results = await store.get_notes(args.tags)
            _print_matches(results, args.min_matches)

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the gistvault command."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "keygen":
        key, _ = load_or_create_key()
        print(key_to_token(key))
        return EXIT_OK

    try:
        config = _resolve_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not config.has_credentials:
        print("GitHub username and token are required", file=sys.stderr)
        return EXIT_AUTH

    if config.key:
        try:
            key = key_from_token(config.key)
        except InvalidKeyError as e:
            print(f"Invalid vault key: {e}", file=sys.stderr)
            return EXIT_AUTH
    else:
        key, _ = load_or_create_key()
        print(
            f"Generated a new vault key, keep it safe: {key_to_token(key)}",
            file=sys.stderr,
        )

    try:
        return asyncio.run(_run(args, config, key))
    except BootstrapError as e:
        print(f"Could not open vault: {e}", file=sys.stderr)
        return EXIT_AUTH
    except VaultError as e:
        print(f"Vault error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
