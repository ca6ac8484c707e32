"""
Command-line interface for locale-sync.

Usage Examples:
    List languages with a locale directory:
        locale-sync --locales-root locales languages

    Create a new language:
        locale-sync --locales-root locales create de

    Merge keys from a JSON file without touching existing translations:
        locale-sync --locales-root locales merge de common new_keys.json

    Reload translations whenever the active language's files change:
        locale-sync --config locale-sync.yml watch --language de
"""

import argparse
import asyncio
import json
import logging
import logging.handlers
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config.manager import ConfigManager
from .config.schema import LocaleSyncConfig
from .resources.catalog import JsonResourceCatalog
from .resources.languages import create_language, get_known_languages
from .resources.store import ResourceFileStore
from .sync.service import LocaleSync
from .utils.core.exceptions import LocaleSyncError

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """
    Configure console logging and an optional rotating log file.

    Args:
        level: Console log level name
        log_file: Optional path of a rotating log file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    )
    simple_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        _ = log_file.parent.mkdir(parents=True, exist_ok=True)
        # File handler with rotation (5MB max, keep 5 backups)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    # Set specific log levels for noisy libraries
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="locale-sync",
        description="Keep on-disk translation resources in sync with a running application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s languages                         # List known languages
  %(prog)s create de                         # Create locales/de/common.json
  %(prog)s merge de common keys.json         # Add missing keys, keep existing ones
  %(prog)s watch --language de               # Reload on edits until interrupted
        """,
    )

    _ = parser.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML configuration file",
    )
    _ = parser.add_argument(
        "--locales-root",
        type=Path,
        help="Root directory holding one directory per language (overrides config)",
    )
    _ = parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    _ = parser.add_argument(
        "--log-file",
        type=Path,
        help="Write a rotating log file (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    _ = subparsers.add_parser("languages", help="List known languages")

    create_parser = subparsers.add_parser("create", help="Create a language directory")
    _ = create_parser.add_argument("code", help='Language code (e.g., "de")')

    merge_parser = subparsers.add_parser(
        "merge", help="Merge keys from a JSON file into a namespace"
    )
    _ = merge_parser.add_argument("language", help="Target language code")
    _ = merge_parser.add_argument("namespace", help="Target namespace")
    _ = merge_parser.add_argument(
        "file", type=Path, help="JSON object mapping keys to fallback values"
    )

    watch_parser = subparsers.add_parser(
        "watch", help="Reload translations whenever locale files change"
    )
    _ = watch_parser.add_argument(
        "--language", help="Language to watch (defaults to sync.language)"
    )

    return parser


def load_configuration(args: argparse.Namespace) -> LocaleSyncConfig:
    """Load the configuration file, if any, and apply command-line overrides."""
    config_path: Path | None = args.config
    if config_path is not None:
        config = ConfigManager.load_config(config_path)
    else:
        config = ConfigManager.get_default_config()

    storage_updates: dict[str, object] = {}
    logging_updates: dict[str, object] = {}
    if args.locales_root is not None:
        storage_updates["locales_root"] = args.locales_root
    if args.log_file is not None:
        logging_updates["file"] = args.log_file
    if args.verbose:
        logging_updates["level"] = "DEBUG"

    return config.model_copy(
        update={
            "storage": config.storage.model_copy(update=storage_updates),
            "logging": config.logging.model_copy(update=logging_updates),
        }
    )


def cmd_languages(config: LocaleSyncConfig) -> int:
    languages = get_known_languages(config.storage.locales_root)
    if not languages:
        logger.warning(f"No languages found in {config.storage.locales_root}")
    for code in languages:
        print(code)
    return 0


def cmd_create(config: LocaleSyncConfig, code: str) -> int:
    directory = create_language(
        config.storage.locales_root, code, config.storage.default_namespace
    )
    print(directory)
    return 0


def cmd_merge(
    config: LocaleSyncConfig, language: str, namespace: str, source: Path
) -> int:
    """Merge a JSON object of keys into a resource file."""
    try:
        raw: object = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read keys from {source}: {e}")
        return 1

    if not isinstance(raw, dict):
        logger.error(f"{source} must contain a JSON object")
        return 1

    invalid = sorted(str(key) for key, value in raw.items() if not isinstance(value, str))  # pyright: ignore[reportUnknownVariableType]
    if invalid:
        logger.error(f"{source} must map keys to strings, invalid keys: {', '.join(invalid)}")
        return 1

    pending: dict[str, str] = dict(raw)  # pyright: ignore[reportUnknownArgumentType]
    store = ResourceFileStore(indent=config.storage.indent)
    language_dir = config.storage.locales_root / language
    if not language_dir.is_dir():
        logger.error(f"Language {language} does not exist in {config.storage.locales_root}")
        return 1

    result = store.merge(language_dir, namespace, pending)
    print(f"{result.path}: added {len(result.added)} key(s)")
    return 0


async def run_watch(config: LocaleSyncConfig, language: str) -> None:
    """Run the sync service against the JSON catalog until cancelled."""
    catalog = JsonResourceCatalog(
        config.storage.locales_root,
        language,
        default_namespace=config.storage.default_namespace,
    )
    async with LocaleSync(catalog, config) as sync:
        logger.info(
            f"Watching {config.storage.locales_root / language} "
            + f"({sync.coordinator.state.value}), press Ctrl+C to stop"
        )
        _ = await asyncio.Event().wait()


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the command-line interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_configuration(args)
    except (OSError, yaml.YAMLError, ValidationError, LocaleSyncError) as e:
        setup_logging("INFO")
        logger.error(f"Failed to load configuration: {e}")
        return 1

    setup_logging(config.logging.level, config.logging.file)

    try:
        match args.command:
            case "languages":
                return cmd_languages(config)
            case "create":
                return cmd_create(config, args.code)
            case "merge":
                return cmd_merge(config, args.language, args.namespace, args.file)
            case "watch":
                asyncio.run(run_watch(config, args.language or config.sync.language))
                return 0
            case _:
                parser.error(f"Unknown command: {args.command}")

    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0
    except (OSError, LocaleSyncError) as e:
        logger.error(f"{args.command} failed: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        return 1


if __name__ == "__main__":
    sys.exit(main())
