"""
Contains bot startup and pre-flight check logic.
"""
import hashlib
from typing import Any, Dict

import discord

from ..config import validate_required_env
from ..exceptions import ConfigurationError
from ..utils.logging import get_logger


def create_bot_intents() -> discord.Intents:
    """Guild messages, direct messages and message content."""
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.dm_messages = True
    intents.message_content = True
    return intents


def run_pre_flight_checks(config: Dict[str, Any]) -> None:
    """Fail fast on missing secrets before connecting."""
    logger = get_logger(__name__)
    logger.info("--- Running Pre-Flight Checklist ---")

    validate_required_env()

    token = config.get("DISCORD_TOKEN")
    if not token:
        raise ConfigurationError("DISCORD_TOKEN not found in environment.")
    token_hash = hashlib.sha256(token.encode()).hexdigest()[:12]
    logger.info(f"[INIT] Token hash={token_hash} validated")

    if not config.get("E621_TOKEN"):
        raise ConfigurationError("E621_TOKEN not found in environment.")
    logger.info(f"[INIT] Search API user={config['E621_USERNAME']} base={config['E621_BASE_URL']}")

    intents = create_bot_intents()
    required_intents = {
        "message_content": intents.message_content,
        "guild_messages": intents.guild_messages,
        "dm_messages": intents.dm_messages,
    }
    missing = [name for name, enabled in required_intents.items() if not enabled]
    if missing:
        logger.critical(f"Required intents disabled: {', '.join(missing)}")
    else:
        logger.info("[INIT] Intents verified")

    logger.info(f"[INIT] discord.py version: {discord.__version__}")
    logger.info("--- Pre-Flight Checklist Complete ---")
