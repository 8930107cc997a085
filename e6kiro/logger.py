import logging
from typing import Optional, Dict, Any

# Get a logger instance for this module
logger = logging.getLogger(__name__)


def message_context(message: Any) -> Dict[str, Any]:
    """Extract guild/channel/user/message ids from a discord.Message-like object."""
    guild = getattr(message, "guild", None)
    channel = getattr(message, "channel", None)
    author = getattr(message, "author", None)
    return {
        "guild_id": guild.id if guild else "DM",
        "channel_id": getattr(channel, "id", None),
        "user_id": getattr(author, "id", None),
        "msg_id": getattr(message, "id", None),
    }


def log_command(
    context: Optional[Dict[str, Any]],
    command: str,
    event: str,
    detail: Optional[Dict[str, Any]] = None,
    success: bool = True,
):
    """
    Logs a command execution with structured context.

    Args:
        context: Ids produced by `message_context`, or None outside Discord.
        command: The command verb (e.g. 'e6').
        event: A string describing the event (e.g. 'delivery.link_sent').
        detail: An optional dictionary for additional structured details.
        success: A boolean indicating if the command was successful.
    """
    context = context or {}
    guild_id = context.get("guild_id", "DM")
    user_id = context.get("user_id")

    level = logging.INFO if success else logging.ERROR
    status_icon = "✔" if success else "✖"

    log_message = f"{status_icon} CMD [guild: {guild_id}, user: {user_id}, cmd: {command}] {event}"

    if detail:
        detail_str = ", ".join([f"{k}: {v}" for k, v in detail.items()])
        log_message += f" ({detail_str})"

    extra_context = {
        "subsys": "command",
        "guild_id": guild_id,
        "channel_id": context.get("channel_id"),
        "user_id": user_id,
        "msg_id": context.get("msg_id"),
        "event": event,
        "detail": detail or {},
    }

    logger.log(level, log_message, extra=extra_context)
