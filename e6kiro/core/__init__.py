"""discord.py wiring: client, channel adapter, startup checks and CLI."""
