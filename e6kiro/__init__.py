"""
e6kiro: a Discord bot that relays e621 tag searches into chat.
"""

__version__ = "0.1.0"
