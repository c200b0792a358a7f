"""Command line entry point for coolify-migrate."""

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .core.config_loader import HostConfig, load_config
from .core.confirmation import (
    AlwaysYes,
    ConfirmationProvider,
    InteractiveConfirmation,
    PresetConfirmation,
)
from .core.exceptions import MigrationError
from .core.logging_config import get_migration_logger, setup_logging
from .core.migration import MigrationManager
from .core.remote_script import build_remote_steps, render_script
from .core.status import StatusReporter
from .models.enums import ConfirmationKey

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="coolify-migrate",
        description=(
            "Back up this Coolify host (data directory, Docker volumes, SSH keys) "
            "and restore it onto a new server over SSH."
        ),
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--key", dest="ssh_key_path", help="SSH private key for the destination")
    parser.add_argument("--destination", dest="destination_host", help="Destination host")
    parser.add_argument("--user", dest="destination_user", help="Destination SSH user")
    parser.add_argument("--port", dest="ssh_port", type=int, help="Destination SSH port")
    parser.add_argument("--source-dir", dest="backup_source_dir", help="Directory to back up")
    parser.add_argument("--archive", dest="backup_file_name", help="Local archive file name")
    parser.add_argument(
        "--install-url", dest="install_script_url", help="Platform install script URL"
    )

    parser.add_argument("-y", "--yes", action="store_true", help="Answer yes to every question")
    parser.add_argument(
        "--stop-service",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Stop the local service before archiving (asked when omitted)",
    )
    parser.add_argument(
        "--remove-archive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove the local archive after success (asked when omitted)",
    )
    parser.add_argument(
        "--fresh-archive",
        action="store_true",
        help="Delete an existing archive instead of reusing it",
    )

    parser.add_argument(
        "--show-remote-script",
        action="store_true",
        help="Print the script run on the destination and exit",
    )
    parser.add_argument(
        "--validate-config", action="store_true", help="Validate configuration and exit"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "WARNING"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console logging level",
    )
    parser.add_argument("--log-dir", default=os.getenv("LOG_DIR"), help="Write migration.log here")

    return parser.parse_args(argv)


def build_confirmer(args: argparse.Namespace) -> ConfirmationProvider:
    """Choose the confirmation provider from the command line flags."""
    if args.yes:
        return AlwaysYes()

    answers = {}
    if args.stop_service is not None:
        answers[ConfirmationKey.STOP_SERVICE] = args.stop_service
    if args.remove_archive is not None:
        answers[ConfirmationKey.REMOVE_ARCHIVE] = args.remove_archive
    return PresetConfirmation(answers, fallback=InteractiveConfirmation())


def _config_overrides(args: argparse.Namespace) -> dict:
    keys = [
        "ssh_key_path",
        "destination_host",
        "destination_user",
        "ssh_port",
        "backup_source_dir",
        "backup_file_name",
        "install_script_url",
    ]
    return {key: getattr(args, key) for key in keys}


def run(args: argparse.Namespace, reporter: StatusReporter | None = None) -> int:
    """Run the requested action and return the process exit code."""
    reporter = reporter or StatusReporter()
    logger = get_migration_logger()

    try:
        config: HostConfig = load_config(args.config, _config_overrides(args))

        if args.validate_config:
            reporter.success(f"Configuration is valid (destination {config.destination})")
            return 0

        if args.show_remote_script:
            print(render_script(build_remote_steps(config)), end="", file=reporter.stream)
            return 0

        manager = MigrationManager(
            config,
            build_confirmer(args),
            reporter=reporter,
            fresh_archive=args.fresh_archive,
        )
        asyncio.run(manager.run())
    except MigrationError as e:
        reporter.fatal(str(e), error_type=type(e).__name__)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        reporter.warning("Interrupted by operator; the destination may be partially migrated")
        logger.warning("Migration interrupted")
        return EXIT_INTERRUPTED

    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    log_dir = Path(args.log_dir).expanduser() if args.log_dir else None
    setup_logging(log_dir=log_dir, log_level=args.log_level)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
