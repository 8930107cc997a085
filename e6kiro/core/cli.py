"""
Handles command-line interface parsing and actions.
"""
import argparse
import sys

from .. import __version__
from ..config import load_config, validate_required_env
from ..exceptions import ConfigurationError
from ..utils.logging import get_logger


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="e6kiro Discord bot")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--config-check", action="store_true", help="Validate configuration and exit.")
    parser.add_argument("--version", action="store_true", help="Show version info and exit.")
    return parser.parse_args(argv)


def show_version_info():
    """Display version and system information."""
    print(f"e6kiro - Version {__version__}")
    print(f"Python Version: {sys.version}")


def validate_configuration_only():
    """Validate configuration, print it with secrets masked, and exit on failure."""
    logger = get_logger(__name__)
    try:
        logger.info("--- Running Configuration-Only Validation ---", extra={"subsys": "core", "event": "config_check_start"})
        validate_required_env()
        config = load_config(refresh=True)
        logger.info("Configuration validation successful. Active settings:", extra={"subsys": "core", "event": "config_valid_start"})

        for key, value in config.items():
            if "TOKEN" in key:
                value = "********"
            logger.info(f"  • {key}: {value}", extra={"subsys": "core", "event": "config_valid"})

    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}", extra={"subsys": "core", "event": "config_fail"})
        sys.exit(1)
