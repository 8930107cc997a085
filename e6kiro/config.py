"""Configuration loading and environment setup."""
import os
import time
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Load environment variables from .env in the working directory, then the project root
load_dotenv(dotenv_path=Path.cwd() / ".env")
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

REQUIRED_VARS = ("DISCORD_TOKEN", "E621_TOKEN")

DEFAULT_E621_BASE_URL = "https://e621.net"
DEFAULT_E621_USERNAME = "kalka"
DEFAULT_E621_USER_AGENT = "e6kiro / made by Kalka"


def _clean_env_value(value: Optional[str]) -> Optional[str]:
    """Clean environment variable value by removing inline comments."""
    if not value:
        return value
    return value.split("#")[0].strip()


def _safe_int(value: Optional[str], default: str, var_name: str) -> int:
    """Safely convert environment variable to int, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) or default
        return int(clean_value)
    except ValueError:
        logger.warning(f"Invalid {var_name} value '{value}', using default {default}")
        return int(default)


def _safe_float(value: Optional[str], default: str, var_name: str) -> float:
    """Safely convert environment variable to float, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) or default
        return float(clean_value)
    except ValueError:
        logger.warning(f"Invalid {var_name} value '{value}', using default {default}")
        return float(default)


def validate_required_env() -> None:
    """Validate that all required secrets are present in the environment."""
    missing_vars = [var for var in REQUIRED_VARS if not _clean_env_value(os.getenv(var))]
    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )
    logger.debug(f"✅ Required variables present: {', '.join(REQUIRED_VARS)}")


# Global config cache
_config_cache: Optional[Dict[str, Any]] = None
_cache_timestamp: float = 0
CACHE_TTL = 300  # seconds


def load_config(refresh: bool = False) -> Dict[str, Any]:
    """Load configuration from environment variables with caching."""
    global _config_cache, _cache_timestamp

    current_time = time.time()
    if not refresh and _config_cache and (current_time - _cache_timestamp) < CACHE_TTL:
        return _config_cache

    config = {
        # DISCORD BOT SETTINGS
        "DISCORD_TOKEN": _clean_env_value(os.getenv("DISCORD_TOKEN")),  # never log token

        # E621 SEARCH API
        "E621_TOKEN": _clean_env_value(os.getenv("E621_TOKEN")),  # never log token
        "E621_BASE_URL": (os.getenv("E621_BASE_URL") or DEFAULT_E621_BASE_URL).rstrip("/"),
        "E621_USERNAME": os.getenv("E621_USERNAME", DEFAULT_E621_USERNAME),
        "E621_USER_AGENT": os.getenv("E621_USER_AGENT", DEFAULT_E621_USER_AGENT),
        "E621_TIMEOUT_S": _safe_float(os.getenv("E621_TIMEOUT_S"), "30.0", "E621_TIMEOUT_S"),
        "HTTP_POOL_MAX_CONNECTIONS": _safe_int(
            os.getenv("HTTP_POOL_MAX_CONNECTIONS"), "10", "HTTP_POOL_MAX_CONNECTIONS"
        ),

        # COMMANDS
        "PING_COMMAND": os.getenv("PING_COMMAND", "!ping"),
        "SEARCH_COMMAND": os.getenv("SEARCH_COMMAND", "!e6"),
        "MAX_QUANTITY": _safe_int(os.getenv("MAX_QUANTITY"), "10", "MAX_QUANTITY"),

        # LOGGING
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
        "LOG_JSONL_PATH": os.getenv("LOG_JSONL_PATH", "logs/bot.jsonl"),
    }

    _config_cache = config
    _cache_timestamp = current_time
    logger.debug(f"✅ Configuration cached for {CACHE_TTL}s")

    return config
