"""Entry point for the composer-tui CLI."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .constants import COMPOSER_HOME
from .core.policy import ImagePolicy
from .log import logger, setup_logging
from .preferences import load_preferences

DEFAULT_LOG_FILE = COMPOSER_HOME / "composer-tui.log"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chat message composer")
    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"composer-tui {__version__}",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Preferences file (default: ~/.composer-tui/preferences.yaml)",
    )
    parser.add_argument(
        "--allow-images",
        choices=[policy.value for policy in ImagePolicy],
        default=None,
        help="Override the image attachment policy",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help=f"Write logs here (default: {DEFAULT_LOG_FILE} with --debug)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at debug level",
    )
    parser.add_argument(
        "text",
        nargs="*",
        help="Initial text placed in the composer",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run composer-tui."""
    args = build_parser().parse_args(argv)

    log_file = args.log_file
    if log_file is None and args.debug:
        log_file = DEFAULT_LOG_FILE
    setup_logging(log_file, logging.DEBUG if args.debug else logging.INFO)

    prefs = load_preferences(args.config)
    if args.allow_images:
        prefs.attachments.allow_images = ImagePolicy(args.allow_images)

    initial_text = " ".join(args.text) if args.text else None

    try:
        from composer_tui.app import run_app

        run_app(prefs, initial_text=initial_text, preferences_path=args.config)
    except (KeyboardInterrupt, SystemExit):
        pass
    except Exception:
        logger.debug("Fatal error in composer-tui", exc_info=True)
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
