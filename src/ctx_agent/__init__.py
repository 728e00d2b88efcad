"""Turn informal chat messages into Trello cards and Obsidian notes."""

__version__ = "0.1.0"
