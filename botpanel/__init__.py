"""BotPanel: dashboard backend for a chat bot"""

__version__ = "1.0.0"
