"""Command-line front end for the translation gateway.

Loads ``gateway.ini``, builds a ``TransManager`` and runs one sub-command:

    translate   Translate text through the provider chain.
    status      Show provider health.
    test        Translate a fixed phrase with a single provider.
    languages   List the supported language codes.

Credentials are read from environment variables (``<PROVIDER>_API_OAUTH``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, NoReturn

from config.loader import ConfigLoader, ConfigLoaderError
from core.trans.interface import InvalidRequestError, RateLimitedError
from core.trans.manager import TransManager
from core.version import VERSION
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from models.config_models import Config

CFG_FILE: Final[str] = "gateway.ini"


def check_python_version() -> None:
    """Check if Python version is 3.13 or later.

    Raises:
        RuntimeError: If Python version is below 3.13.
    """
    if sys.version_info < (3, 13):
        msg = "Python 3.13 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Multi-provider translation gateway",
        epilog="Example: python gateway_cli.py translate 'Hello world' --to es",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--config", dest="config", metavar="FILE", default=CFG_FILE, help="Configuration file")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True, parser_class=_ArgumentParser)

    translate_parser = subparsers.add_parser("translate", help="Translate text")
    translate_parser.add_argument("text", help="Text to translate")
    translate_parser.add_argument("--to", dest="tgt_lang", metavar="LANG", required=True, help="Target language")
    translate_parser.add_argument("--from", dest="src_lang", metavar="LANG", help="Source language (default: auto)")

    status_parser = subparsers.add_parser("status", help="Show provider health")
    status_parser.add_argument("--detailed", action="store_true", help="Include timestamps and last errors")

    test_parser = subparsers.add_parser("test", help="Test a single provider")
    test_parser.add_argument("provider", help="Provider id, e.g. 'deepl'")

    subparsers.add_parser("languages", help="List supported languages")

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    return ConfigLoader(config_filename=args.config, script_name=script_name, debug=args.debug).config


def setup_logging(config: Config) -> None:
    log_file: str = config.GENERAL.LOG_FILE
    if log_file:
        log_file = str(Path(log_file).expanduser().resolve())
    logger_utils = LoggerUtils(log_file)
    logger_utils.set_level("DEBUG" if config.GENERAL.DEBUG else "INFO")


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


async def run_translate(manager: TransManager, args: argparse.Namespace) -> int:
    try:
        result: str = await manager.translate(args.text, tgt_lang=args.tgt_lang, src_lang=args.src_lang)
    except (InvalidRequestError, RateLimitedError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    print(result)
    return 0


async def run_status(manager: TransManager, args: argparse.Namespace) -> int:
    providers: dict[str, Any]
    if args.detailed:
        providers = {pid: record.to_dict(encode_json=True) for pid, record in manager.detailed_service_status().items()}
    else:
        providers = dict(manager.service_status())
    print_json({"providers": providers, "requests": manager.request_stats().to_dict()})
    return 0


async def run_test(manager: TransManager, args: argparse.Namespace) -> int:
    result = await manager.test_provider(args.provider)
    print_json(result.to_dict())
    return 0 if result.success else 1


async def run_languages(manager: TransManager, args: argparse.Namespace) -> int:
    _ = args
    for code, name in manager.supported_languages().items():
        print(f"{code:4} {name}")
    return 0


COMMANDS: Final[dict[str, Callable[[TransManager, argparse.Namespace], Awaitable[int]]]] = {
    "translate": run_translate,
    "status": run_status,
    "test": run_test,
    "languages": run_languages,
}


async def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        int: Process exit status.
    """
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    setup_logging(config)

    async with TransManager(config) as manager:
        return await COMMANDS[args.command](manager, args)


def run() -> NoReturn:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
